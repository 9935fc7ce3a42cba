"""Pytest configuration for the etfdist test suite."""

import pytest


class SequenceSource:
    """Random source replaying a fixed sequence of raw numbers."""

    def __init__(self, values, digits, min_value=0):
        self.values = list(values)
        self.min = min_value
        self.max = (1 << digits) - 1
        self.n_calls = 0

    def __call__(self):
        value = self.values[self.n_calls % len(self.values)]
        self.n_calls += 1
        return value


@pytest.fixture
def sequence_source():
    """Factory building a `SequenceSource`."""
    return SequenceSource


def pytest_addoption(parser):
    """Add custom command line options."""
    parser.addoption(
        "--run-statistical",
        action="store_true",
        default=False,
        help="Run long statistical tests (skipped by default)",
    )


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "statistical: mark test as a long statistical test (skipped unless --run-statistical is passed)",
    )
    config.addinivalue_line(
        "markers",
        "slow: mark test as slow (large sample sizes, may take several seconds)",
    )
    config.addinivalue_line(
        "markers",
        "rng_validation: mark test as a random source validation test",
    )


def pytest_collection_modifyitems(config, items):
    """Skip statistical tests unless the corresponding flag is passed."""
    if config.getoption("--run-statistical"):
        return
    skip_statistical = pytest.mark.skip(reason="need --run-statistical option to run")
    for item in items:
        if "statistical" in item.keywords:
            item.add_marker(skip_statistical)
