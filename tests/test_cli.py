import io

import pandas as pd
import pytest
import yaml
from typer.testing import CliRunner

from etfdist.cli.main import (
    app,
    collect_collision_config,
    collect_timing_config,
    load_yaml_config,
)

runner = CliRunner()


@pytest.fixture
def yaml_config():
    return {
        "distribution": "ziggurat_normal",
        "distribution_params": {"width": 32},
        "min_dim": 12,
        "max_dim": 13,
        "repeat": 2,
        "seed": 5,
    }


def test_load_yaml_config(yaml_config):
    yaml_buffer = io.StringIO()
    yaml.dump(yaml_config, yaml_buffer)
    yaml_buffer.seek(0)
    assert load_yaml_config(yaml_buffer) == yaml_config


def test_load_yaml_config_rejects_lists():
    with pytest.raises(ValueError):
        load_yaml_config(io.StringIO("- 1\n- 2\n"))


def test_collect_collision_config(tmp_path, yaml_config):
    config_path = tmp_path / "collision.yaml"
    config_path.write_text(yaml.dump(yaml_config))

    config = collect_collision_config(config_path, {"repeat": 4, "seed": None})
    assert config["distribution"] == "ziggurat_normal"
    assert config["repeat"] == 4
    assert config["seed"] == 5


def test_collect_collision_config_default():
    config = collect_collision_config()
    assert config["distribution"] == "etf_normal"
    assert config["distribution_params"] == {"width": 32, "n_bits": 7}


def test_collect_timing_config():
    config = collect_timing_config(None, {"n_iter": 10})
    assert config["n_iter"] == 10
    assert "etf_normal" in config["distributions"]


def test_collision_command(tmp_path):
    output = tmp_path / "out" / "collision.csv"
    result = runner.invoke(
        app,
        ["collision", "--min-dim", "12", "--max-dim", "12", "--repeat", "2", "--output", str(output)],
    )
    assert result.exit_code == 0, result.output
    df = pd.read_csv(output)
    assert len(df) == 2
    assert set(df["distribution"]) == {"etf_normal"}


def test_collision_command_inversion(tmp_path):
    output = tmp_path / "collision.csv"
    result = runner.invoke(
        app,
        [
            "collision",
            "--distribution",
            "inversion",
            "--min-dim",
            "12",
            "--max-dim",
            "13",
            "--repeat",
            "1",
            "--output",
            str(output),
        ],
    )
    assert result.exit_code == 0, result.output
    assert pd.read_csv(output)["dim"].tolist() == [12, 13]


def test_collision_command_other_distribution(tmp_path):
    output = tmp_path / "collision.csv"
    result = runner.invoke(
        app,
        ["collision", "-d", "ziggurat_normal", "--min-dim", "12", "--max-dim", "12", "--repeat", "1", "--output", str(output)],
    )
    assert result.exit_code == 0, result.output


def test_timing_command(tmp_path):
    output = tmp_path / "timing.csv"
    result = runner.invoke(
        app,
        ["timing", "-d", "etf_normal", "-d", "ziggurat_normal", "-n", "50", "--n-runs", "1", "--output", str(output)],
    )
    assert result.exit_code == 0, result.output
    df = pd.read_csv(output)
    assert df["name"].tolist() == ["etf_normal", "ziggurat_normal"]


def test_table_command(tmp_path):
    output = tmp_path / "table.csv"
    result = runner.invoke(app, ["table", "--output", str(output)])
    assert result.exit_code == 0, result.output
    df = pd.read_csv(output)
    assert len(df) == 128
    assert list(df.columns) == ["x_left", "x_right", "scaled_fratio", "scaled_fsup", "scaled_dx"]


def test_table_command_with_parameters(tmp_path):
    params = tmp_path / "params.yaml"
    params.write_text(yaml.dump({"k": 5.0, "xtail": 16.0, "n_bits": 6}))
    result = runner.invoke(app, ["table", "-d", "etf_chi_squared", "--config-path", str(params)])
    assert result.exit_code == 0, result.output
    assert "scaled_fratio" in result.output


def test_table_command_rejects_ziggurat():
    result = runner.invoke(app, ["table", "-d", "ziggurat_normal"])
    assert result.exit_code != 0


def test_unknown_distribution():
    result = runner.invoke(app, ["table", "-d", "does_not_exist"])
    assert result.exit_code != 0
    assert isinstance(result.exception, KeyError)
