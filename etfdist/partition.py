"""
Equal-area partitioning of a density for ETF tables.

An ETF table requires a partition of an interval such that the rectangles
making up the upper Riemann sum of the density all have the same area. The
partition is computed in two steps:

1. ``trapezoidal_prepartition`` splits the area under the trapezoidal
   quadrature of the density evenly, which gives a cheap, monotonic initial
   guess;
2. ``newton_partition`` refines the guess with a multivariate Newton method
   until the dispersion of the upper rectangle areas falls below a tolerance.

Failure of the Newton method to converge is signaled by an empty
``PartitionData`` rather than by an exception, so that callers can retry with
a different initial guess or a relaxed tolerance.
"""

import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field

import numpy as np

logger = logging.getLogger(__name__)


def _evaluate(f: Callable[[float], float], x: Iterable[float]) -> np.ndarray:
    return np.array([f(float(xi)) for xi in x], dtype=np.float64)


@dataclass(frozen=True)
class PartitionData:
    """A partition and the local extrema of the density over each sub-interval.

    The partition is made of sub-intervals ``[x[i], x[i+1]]``; the infimum and
    supremum of the density over sub-interval ``i`` are ``finf[i]`` and
    ``fsup[i]``. An empty partition signals a failure to converge.
    """

    x: np.ndarray = field(default_factory=lambda: np.empty(0))
    finf: np.ndarray = field(default_factory=lambda: np.empty(0))
    fsup: np.ndarray = field(default_factory=lambda: np.empty(0))

    @classmethod
    def empty(cls) -> "PartitionData":
        return cls()

    @property
    def converged(self) -> bool:
        return len(self.x) > 0

    def __bool__(self) -> bool:
        return self.converged

    @property
    def n_intervals(self) -> int:
        return max(len(self.x) - 1, 0)

    @property
    def areas(self) -> np.ndarray:
        """Areas of the upper rectangles."""
        return self.fsup * np.abs(np.diff(self.x))


def trapezoidal_prepartition(
    f: Callable[[float], float],
    x0: float,
    x1: float,
    n_intervals: int,
    n_points: int | None = None,
) -> np.ndarray:
    """Partition [x0, x1] so that the trapezoidal area is the same in each interval.

    The trapezoidal rule is applied to ``f`` over a regular grid of
    ``n_points`` nodes (boundaries included). Breakpoint ``k`` is then placed
    by linear interpolation where the cumulative area reaches ``k/n_intervals``
    of the total.

    Parameters
    ----------
    f : Callable[[float], float]
        Non-negative function to integrate.
    x0, x1 : float
        Interval boundaries; ``x1 < x0`` is allowed.
    n_intervals : int
        Number of sub-intervals.
    n_points : int or None, optional
        Number of grid points; defaults to ``n_intervals``.

    Returns
    -------
    np.ndarray
        The ``n_intervals + 1`` breakpoints, from ``x0`` to ``x1``.
    """
    if n_intervals < 1:
        raise ValueError(f"n_intervals must be at least 1, got {n_intervals}.")
    if n_points is None:
        n_points = n_intervals
    n_points = max(int(n_points), 2)

    x = np.linspace(x0, x1, n_points)
    x[-1] = x1
    y = _evaluate(f, x)

    # Cumulative area scaled by 1/dx.
    cumulative = np.concatenate(([0.0], np.cumsum(0.5 * (y[:-1] + y[1:]))))
    total = cumulative[-1]
    if not total > 0.0:
        raise ValueError("The function has no positive area over the interval.")

    targets = total * (np.arange(1, n_intervals) / n_intervals)
    xp = np.empty(n_intervals + 1)
    xp[0] = x0
    xp[-1] = x1
    xp[1:-1] = np.interp(targets, cumulative, x)
    return xp


def solve_tridiagonal_system(
    a: Sequence[float], b: Sequence[float], c: Sequence[float], rhs: Sequence[float]
) -> np.ndarray:
    """Solve a tridiagonal system by Gaussian elimination without pivoting.

    Row ``i`` reads ``a[i]*s[i-1] + b[i]*s[i] + c[i]*s[i+1] = rhs[i]``; ``a[0]``
    and ``c[-1]`` are ignored. The system is assumed diagonally dominant.
    """
    b = [float(v) for v in b]
    rhs = [float(v) for v in rhs]
    m = len(b)

    # Eliminate the sub-diagonal.
    for i in range(1, m):
        pivot = a[i] / b[i - 1]
        b[i] -= pivot * c[i - 1]
        rhs[i] -= pivot * rhs[i - 1]

    # Solve the remaining upper bidiagonal system.
    sol = np.empty(m)
    sol[m - 1] = rhs[m - 1] / b[m - 1]
    for i in range(m - 2, -1, -1):
        sol[i] = (rhs[i] - c[i] * sol[i + 1]) / b[i]
    return sol


def _inner_extrema(x: np.ndarray, extrema: list[tuple[float, float]]):
    """Yield (interval index, extremum value) for extrema strictly inside an interval."""
    for x_ext, f_ext in extrema:
        inside = np.flatnonzero((x_ext - x[:-1]) * (x_ext - x[1:]) < 0.0)
        for i in inside:
            yield i, f_ext


MAX_STEP_FRACTION = 0.49
"""Largest fraction of the gap to a neighbor that a clipped breakpoint may cover."""


def limit_newton_step(x: np.ndarray, step: np.ndarray, direction: float = 1.0) -> np.ndarray:
    """Move the inner breakpoints of ``x`` by ``step``, preserving strict monotonicity.

    The full step is taken if the breakpoints stay strictly increasing (for
    ``direction=1``) or decreasing (for ``direction=-1``). Otherwise each
    breakpoint is clipped so that it covers less than half the gap to either
    of its former neighbors, hence two neighbors can never meet.
    """
    x_new = x.copy()
    x_new[1:-1] = x[1:-1] + step
    if np.all(np.diff(x_new) * direction > 0.0):
        return x_new

    bound_left = x[1:-1] + MAX_STEP_FRACTION * (x[:-2] - x[1:-1])
    bound_right = x[1:-1] + MAX_STEP_FRACTION * (x[2:] - x[1:-1])
    x_new[1:-1] = np.clip(
        x[1:-1] + step,
        np.minimum(bound_left, bound_right),
        np.maximum(bound_left, bound_right),
    )
    return x_new


def newton_partition(
    f: Callable[[float], float],
    df: Callable[[float], float],
    x_initial: Sequence[float],
    extrema: Iterable[float] = (),
    tol: float = 1e-8,
    relax: float = 1.0,
    max_iter: int = 100,
) -> PartitionData:
    """Compute an ETF partition with Newton's method.

    The interval spanned by the first and last initial abscissae is
    partitioned so that the rectangles of the upper Riemann sum of ``f`` have
    equal areas. The returned ``PartitionData`` also holds the infimum and
    supremum of ``f`` over each sub-interval.

    Parameters
    ----------
    f : Callable[[float], float]
        The (possibly unnormalized) density.
    df : Callable[[float], float]
        Derivative of ``f``.
    x_initial : Sequence[float]
        Initial, strictly monotonic partition; its end points are kept.
    extrema : Iterable[float], optional
        Abscissae of the local extrema of ``f`` inside the interval, boundary
        points excluded. Extrema outside the interval are ignored.
    tol : float, optional
        Maximum relative dispersion of the upper rectangle areas, computed as
        the difference between the largest and smallest area relative to the
        mean area.
    relax : float, optional
        Relaxation factor applied to Newton updates; values below 1 improve
        robustness, values above 1 may speed up convergence.
    max_iter : int, optional
        Maximum number of Newton iterations.

    Returns
    -------
    PartitionData
        The partition, or an empty ``PartitionData`` if the method failed to
        converge within ``max_iter`` iterations.
    """
    x = np.array(x_initial, dtype=np.float64)
    n = len(x) - 1
    if n < 1:
        raise ValueError("The initial partition must contain at least 2 points.")

    lo, hi = min(x[0], x[-1]), max(x[0], x[-1])
    direction = 1.0 if x[-1] > x[0] else -1.0
    inner = [(float(xe), float(f(xe))) for xe in extrema if lo <= xe <= hi]

    y = np.empty(n + 1)
    dy_dx = np.zeros(n + 1)
    y[0] = f(x[0])
    y[-1] = f(x[-1])

    iteration = 0
    while True:
        y[1:-1] = _evaluate(f, x[1:-1])
        dy_dx[1:-1] = _evaluate(df, x[1:-1])

        # Supremum of f over (x[i], x[i+1]) and its partial derivatives with
        # respect to x[i] and x[i+1].
        left_is_sup = y[:-1] > y[1:]
        fsup = np.where(left_is_sup, y[:-1], y[1:])
        dfsup_dxl = np.where(left_is_sup, dy_dx[:-1], 0.0)
        dfsup_dxr = np.where(left_is_sup, 0.0, dy_dx[1:])
        for i, f_ext in _inner_extrema(x, inner):
            if f_ext > fsup[i]:
                fsup[i] = f_ext
                dfsup_dxl[i] = 0.0
                dfsup_dxr[i] = 0.0

        width = np.diff(x)
        areas = fsup * np.abs(width)
        max_area, min_area = areas.max(), areas.min()
        mean_area = areas.sum() / n
        logger.debug(
            "Newton partition iteration %d: relative area dispersion %.3e",
            iteration,
            (max_area - min_area) / mean_area if mean_area > 0.0 else np.inf,
        )

        if (max_area - min_area) < tol * mean_area:
            finf = np.where(left_is_sup, y[1:], y[:-1])
            for i, f_ext in _inner_extrema(x, inner):
                if f_ext < finf[i]:
                    finf[i] = f_ext
            logger.debug("Newton partition converged after %d iterations", iteration)
            return PartitionData(x=x, finf=finf, fsup=fsup)

        iteration += 1
        if iteration > max_iter:
            logger.warning(
                "Newton partition failed to converge within %d iterations "
                "(relative area dispersion %.3e, tolerance %.3e)",
                max_iter,
                (max_area - min_area) / mean_area,
                tol,
            )
            return PartitionData.empty()

        if n == 1:
            # A single interval has no inner breakpoint to move.
            continue

        # Differences s[i] between the areas of neighboring rectangles and the
        # partial derivatives of -s[i] with respect to x[i], x[i+1], x[i+2].
        s = fsup[:-1] * width[:-1] - fsup[1:] * width[1:]
        minus_ds_dxl = fsup[:-1] - width[:-1] * dfsup_dxl[:-1]
        minus_ds_dxc = (
            width[1:] * dfsup_dxl[1:] - width[:-1] * dfsup_dxr[:-1] - (fsup[:-1] + fsup[1:])
        )
        minus_ds_dxr = fsup[1:] + width[1:] * dfsup_dxr[1:]

        # Solve the tridiagonal system S + (dS/dX)*dX = 0.
        dx = solve_tridiagonal_system(minus_ds_dxl, minus_ds_dxc, minus_ds_dxr, s)

        x = limit_newton_step(x, relax * dx, direction)


def newton_partition_monotonic(
    f: Callable[[float], float],
    df: Callable[[float], float],
    x_initial: Sequence[float],
    tol: float = 1e-8,
    relax: float = 1.0,
    max_iter: int = 100,
) -> PartitionData:
    """Compute an ETF partition of a function monotonic over the interval.

    See ``newton_partition``; no inner extremum is considered.
    """
    return newton_partition(
        f, df, x_initial, extrema=(), tol=tol, relax=relax, max_iter=max_iter
    )
