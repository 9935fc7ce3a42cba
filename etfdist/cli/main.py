#!/usr/bin/env -S uv run --script

import logging
from importlib.resources import as_file, files
from pathlib import Path
from pprint import pformat

import numpy as np
import pandas as pd
import typer
import yaml

from etfdist.config import (
    get_collision_config,
    get_distribution_registry,
    get_timing_config,
)
from etfdist.rng import BitGeneratorSource
from etfdist.sampler import EtfDistribution
from etfdist.validation import (
    normal_cdf_reals,
    run_collision_test,
    time_distributions,
    uniform_reals,
)

app = typer.Typer(add_completion=False)

logger = logging.getLogger(__name__)

INVERSION = "inversion"
"""Pseudo-distribution name selecting ideal inversion sampling in the collision test."""


def load_yaml_config(yaml_config_path) -> dict:
    """Load a configuration dictionary from a YAML file or file-like object."""
    if hasattr(yaml_config_path, "read"):
        config = yaml.safe_load(yaml_config_path)
    else:
        with open(yaml_config_path, "rb") as f:
            config = yaml.safe_load(f)
    if config is None:
        return {}
    if not isinstance(config, dict):
        raise ValueError(f"Expected a mapping at the top of {yaml_config_path}, got {type(config).__name__}.")
    return config


def collect_collision_config(config_path: Path | None = None, overrides: dict | None = None) -> dict:
    """Merge the default collision configuration, a YAML file and overrides."""
    config = get_collision_config()
    if config_path is None:
        logger.info("No config path provided, using default configuration.")
        with as_file(files("etfdist.cli") / "config_collision.yaml") as default_config:
            config.update(load_yaml_config(default_config))
    else:
        config.update(load_yaml_config(config_path))
    config.update({k: v for k, v in (overrides or {}).items() if v is not None})
    return config


def collect_timing_config(config_path: Path | None = None, overrides: dict | None = None) -> dict:
    """Merge the default timing configuration, a YAML file and overrides."""
    config = get_timing_config()
    if config_path is not None:
        config.update(load_yaml_config(config_path))
    config.update({k: v for k, v in (overrides or {}).items() if v is not None})
    return config


def _save(df: pd.DataFrame, output: Path | None) -> None:
    if output is None:
        typer.echo(df.to_string(index=False))
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(output, index=False)
    logger.info("Results saved to: %s", output)


log_level_option = typer.Option(
    "WARNING",
    "--log-level",
    "-l",
    help="Set the logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).",
    case_sensitive=False,
    show_default=True,
    rich_help_panel="Logging",
    metavar="LEVEL",
    autocompletion=lambda: ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
)


def _setup_logging(log_level: str) -> None:
    logging.basicConfig(level=log_level.upper(), format="%(asctime)s - %(levelname)s - %(message)s")


@app.command(epilog="Example: `etfdist collision --distribution etf_normal --seed 1 --output collision.csv`")
def collision(
    config_path: Path = typer.Option(None, help="Path to the YAML configuration file."),
    distribution: str = typer.Option(
        None,
        "--distribution",
        "-d",
        help=f"Registered normal distribution, or '{INVERSION}' for direct uniform reals.",
    ),
    seed: int = typer.Option(None, "--seed", "-s", help="Seed of the random source."),
    min_dim: int = typer.Option(None, "--min-dim", help="Smallest urn dimension.", min=8),
    max_dim: int = typer.Option(None, "--max-dim", help="Largest urn dimension.", min=8),
    repeat: int = typer.Option(None, "--repeat", "-r", help="Trials per dimension.", min=1),
    output: Path = typer.Option(None, help="Path to the output CSV file."),
    log_level: str = log_level_option,
):
    """
    Run the Knuth collision test on a normal sampler mapped through the normal CDF.
    """
    _setup_logging(log_level)
    config = collect_collision_config(
        config_path,
        {"distribution": distribution, "seed": seed, "min_dim": min_dim, "max_dim": max_dim, "repeat": repeat},
    )
    logger.debug("COLLISION CONFIG")
    logger.debug(pformat(config))

    rng = BitGeneratorSource(np.random.MT19937(config["seed"]))
    params = config.get("distribution_params") or {}
    if config["distribution"] == INVERSION:
        random_reals = uniform_reals(rng, width=params.get("width", 32))
    else:
        registry = get_distribution_registry()
        accepted = registry.get(config["distribution"])["params"]
        dist = registry.create(config["distribution"], **{k: v for k, v in params.items() if k in accepted})
        random_reals = normal_cdf_reals(dist, rng)

    df = run_collision_test(
        random_reals,
        config["min_dim"],
        config["max_dim"],
        config["repeat"],
        progress=True,
    )
    df.insert(0, "distribution", config["distribution"])
    _save(df, output)


@app.command()
def timing(
    config_path: Path = typer.Option(None, help="Path to the YAML configuration file."),
    distribution: list[str] = typer.Option(
        None,
        "--distribution",
        "-d",
        help="Registered distribution to time; may be repeated. Overrides the configuration.",
    ),
    seed: int = typer.Option(None, "--seed", "-s", help="Seed of the random source."),
    n_iter: int = typer.Option(None, "--n-iter", "-n", help="Draws per run.", min=1),
    n_runs: int = typer.Option(None, "--n-runs", help="Number of runs.", min=1),
    vectorized: bool = typer.Option(False, "--vectorized", help="Draw each run in a single call."),
    output: Path = typer.Option(None, help="Path to the output CSV file."),
    log_level: str = log_level_option,
):
    """
    Time registered distributions.
    """
    _setup_logging(log_level)
    config = collect_timing_config(config_path, {"seed": seed, "n_iter": n_iter, "n_runs": n_runs})
    if distribution:
        config["distributions"] = {name: {} for name in distribution}
    logger.debug("TIMING CONFIG")
    logger.debug(pformat(config))

    registry = get_distribution_registry()
    distributions = {
        name: registry.create(name, **(params or {}))
        for name, params in config["distributions"].items()
    }
    rng = BitGeneratorSource(np.random.MT19937(config["seed"]))
    df = time_distributions(
        distributions,
        rng,
        n_iter=config["n_iter"],
        n_runs=config["n_runs"],
        vectorized=vectorized,
        progress=True,
    )
    _save(df, output)


@app.command()
def table(
    distribution: str = typer.Option("etf_normal", "--distribution", "-d", help="Registered ETF distribution."),
    config_path: Path = typer.Option(
        None, help="YAML file holding the parameters of the distribution."
    ),
    output: Path = typer.Option(None, help="Path to the output CSV file."),
    log_level: str = log_level_option,
):
    """
    Build the ETF table of a registered distribution and print its contents.
    """
    _setup_logging(log_level)
    params = load_yaml_config(config_path) if config_path is not None else {}
    dist = get_distribution_registry().create(distribution, **params)
    if not isinstance(dist, EtfDistribution):
        raise typer.BadParameter(f"'{distribution}' is not sampled with an ETF table.", param_hint="--distribution")

    t = dist.table
    logger.info(
        "Table of %s: %d intervals, outer switch %d, fast path probability %.4f",
        distribution,
        t.n_intervals,
        t.outer_switch,
        t.fast_path_probability,
    )
    df = pd.DataFrame(
        {
            "x_left": t.x[:-1],
            "x_right": t.x[1:],
            "scaled_fratio": [int(v) for v in t.scaled_fratio],
            "scaled_fsup": t.scaled_fsup,
            "scaled_dx": t.scaled_dx,
        }
    )
    _save(df, output)


if __name__ == "__main__":
    app()
