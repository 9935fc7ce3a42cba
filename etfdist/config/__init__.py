from .table_config import (
    get_collision_config,
    get_default_table_config,
    get_timing_config,
)

__all__ = [
    "get_collision_config",
    "get_default_table_config",
    "get_timing_config",
    "DistributionRegistry",
    "register_distribution",
    "get_distribution_registry",
]


def __getattr__(name):
    # The registry imports the distributions, which themselves read the table
    # configuration; it is therefore loaded on first access.
    if name in ("DistributionRegistry", "register_distribution", "get_distribution_registry"):
        from . import distribution_registry

        return getattr(distribution_registry, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
