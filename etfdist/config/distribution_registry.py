"""Global registry of named distribution factories.

The registry maps a name to a factory building a distribution and to the
names of the keyword parameters the factory accepts. It is used by the CLI to
build distributions from configuration files.

Examples
--------
Register a custom distribution:

>>> from etfdist.config import register_distribution
>>> from etfdist.distributions import EtfNormalDistribution
>>>
>>> def narrow_normal(width=32):
...     return EtfNormalDistribution(width=width, n_bits=5)
>>>
>>> register_distribution("narrow_normal", narrow_normal, ["width"])

List available distributions:

>>> from etfdist.config import get_distribution_registry
>>> print(get_distribution_registry().list_distributions())
"""

from typing import Any, Callable

from etfdist.distributions import (
    EtfChiSquaredDistribution,
    EtfChiSquaredLowDofDistribution,
    EtfNormalDistribution,
    ZigguratNormalDistribution,
)


class DistributionRegistry:
    """Registry of distribution factories.

    Each entry holds the factory under 'fun' and the list of accepted keyword
    parameters under 'params'.
    """

    def __init__(self):
        self._distributions: dict[str, dict[str, Any]] = {}

    def register(self, name: str, factory: Callable, params: list[str]) -> None:
        """Register a distribution factory.

        Parameters
        ----------
        name : str
            Unique name of the distribution (e.g. "etf_normal").
        factory : Callable
            Callable returning a distribution when called with keyword
            arguments taken from ``params``.
        params : list[str]
            Names of the keyword parameters the factory accepts.

        Raises
        ------
        ValueError
            If the name is already registered.
        """
        if name in self._distributions:
            raise ValueError(
                f"Distribution '{name}' is already registered. "
                f"Use a different name or unregister the existing distribution first."
            )
        self._distributions[name] = {"fun": factory, "params": list(params)}

    def unregister(self, name: str) -> None:
        """Remove a registered distribution.

        Raises
        ------
        KeyError
            If the name is not registered.
        """
        self.get(name)
        del self._distributions[name]

    def get(self, name: str) -> dict[str, Any]:
        """Get the factory configuration registered under ``name``.

        Raises
        ------
        KeyError
            If the name is not registered.
        """
        if name not in self._distributions:
            available = self.list_distributions()
            raise KeyError(
                f"Distribution '{name}' is not registered. "
                f"Available distributions: {available}"
            )
        return self._distributions[name]

    def create(self, name: str, **params):
        """Build the distribution registered under ``name``.

        Raises
        ------
        KeyError
            If the name is not registered.
        ValueError
            If a parameter is not accepted by the factory.
        """
        config = self.get(name)
        unknown = sorted(set(params) - set(config["params"]))
        if unknown:
            raise ValueError(
                f"Unknown parameters for distribution '{name}': {unknown}. "
                f"Accepted parameters: {config['params']}"
            )
        return config["fun"](**params)

    def is_registered(self, name: str) -> bool:
        return name in self._distributions

    def list_distributions(self) -> list[str]:
        """Sorted list of all registered names."""
        return sorted(self._distributions.keys())

    def __repr__(self) -> str:
        n_distributions = len(self._distributions)
        return f"DistributionRegistry({n_distributions} distributions registered)"


def _register_builtin_distributions(registry: DistributionRegistry) -> None:
    registry.register("etf_normal", EtfNormalDistribution, ["width", "n_bits", "xtail", "tol"])
    registry.register(
        "etf_chi_squared",
        EtfChiSquaredDistribution,
        ["k", "xtail", "width", "n_bits", "tol"],
    )
    registry.register(
        "etf_chi_squared_low_dof",
        EtfChiSquaredLowDofDistribution,
        ["k", "x0", "xtail", "width", "n_bits", "tol"],
    )
    registry.register("ziggurat_normal", ZigguratNormalDistribution, ["width"])


# Global singleton instance
_GLOBAL_DISTRIBUTION_REGISTRY = DistributionRegistry()
_register_builtin_distributions(_GLOBAL_DISTRIBUTION_REGISTRY)


def register_distribution(name: str, factory: Callable, params: list[str]) -> None:
    """Register a distribution factory globally.

    Once registered, the distribution can be selected by name from the CLI
    and from configuration files.

    Raises
    ------
    ValueError
        If the name is already registered.
    """
    _GLOBAL_DISTRIBUTION_REGISTRY.register(name, factory, params)


def get_distribution_registry() -> DistributionRegistry:
    """Get the global distribution registry."""
    return _GLOBAL_DISTRIBUTION_REGISTRY
