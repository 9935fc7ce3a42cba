"""Helpers shared by the ready-made ETF distributions."""

import logging
from collections.abc import Callable, Iterable

import numpy as np

from etfdist.config import get_default_table_config
from etfdist.exceptions import PartitionConvergenceError
from etfdist.partition import PartitionData, newton_partition, trapezoidal_prepartition

logger = logging.getLogger(__name__)


def default_tolerance(tol_factor: float | None = None) -> float:
    """Relative area tolerance, as a multiple of the machine epsilon."""
    if tol_factor is None:
        tol_factor = get_default_table_config()["tol_factor"]
    return float(np.finfo(np.float64).eps) * tol_factor


def compute_partition(
    f: Callable[[float], float],
    df: Callable[[float], float],
    x0: float,
    x1: float,
    n_bits: int,
    extrema: Iterable[float] = (),
    tol: float | None = None,
    relax: float | None = None,
    max_iter: int | None = None,
    n_points: int | None = None,
) -> PartitionData:
    """Partition [x0, x1] into 2^n_bits equal-area intervals.

    The trapezoidal pre-partition is refined with Newton's method; defaults
    are taken from ``get_default_table_config``.

    Raises
    ------
    PartitionConvergenceError
        If Newton's method does not converge.
    """
    config = get_default_table_config()
    tol = default_tolerance() if tol is None else tol
    relax = config["relax"] if relax is None else relax
    max_iter = config["max_iter"] if max_iter is None else max_iter

    n = 1 << n_bits
    x_guess = trapezoidal_prepartition(f, x0, x1, n, n_points)
    partition = newton_partition(
        f, df, x_guess, extrema=extrema, tol=tol, relax=relax, max_iter=max_iter
    )
    if not partition:
        raise PartitionConvergenceError(
            f"Newton partition of [{x0}, {x1}] into {n} intervals did not converge "
            f"within {max_iter} iterations (tol={tol:.3e}, relax={relax})."
        )
    return partition
