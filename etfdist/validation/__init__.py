from .collision import (
    count_collisions,
    normal_cdf_reals,
    right_pvalue,
    run_collision_test,
    uniform_reals,
    urn_indices,
)
from .timing import TimingResult, time_distribution, time_distributions

__all__ = [
    "count_collisions",
    "normal_cdf_reals",
    "right_pvalue",
    "run_collision_test",
    "uniform_reals",
    "urn_indices",
    "TimingResult",
    "time_distribution",
    "time_distributions",
]
