"""Wall-clock timing of distribution samplers."""

import logging
import time
from dataclasses import asdict, dataclass

import numpy as np
import pandas as pd
import tqdm

from etfdist.rng import as_random_source

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TimingResult:
    """Timing of ``n_runs`` runs of ``n_iter`` draws each."""

    name: str
    n_iter: int
    n_runs: int
    best_seconds: float
    mean_seconds: float
    checksum: float

    @property
    def ns_per_sample(self) -> float:
        return 1e9 * self.best_seconds / self.n_iter


def time_distribution(dist, rng, n_iter: int = 10_000, n_runs: int = 5, name: str | None = None, vectorized: bool = False) -> TimingResult:
    """Time ``n_runs`` runs summing ``n_iter`` variates of ``dist``.

    Parameters
    ----------
    dist : distribution
        Object with a ``sample(rng, size=None)`` method.
    rng : random source
        Random source, or any object accepted by ``as_random_source``.
    n_iter : int, optional
        Number of draws per run.
    n_runs : int, optional
        Number of runs; the best and mean run times are reported.
    name : str or None, optional
        Label of the result; defaults to the distribution's repr.
    vectorized : bool, optional
        Draw all the variates of a run in one call rather than one at a time.

    Returns
    -------
    TimingResult
    """
    if n_iter < 1 or n_runs < 1:
        raise ValueError(f"n_iter and n_runs must be positive, got {n_iter} and {n_runs}.")
    rng = as_random_source(rng)
    name = repr(dist) if name is None else name

    durations = []
    checksum = 0.0
    for _ in range(n_runs):
        start = time.perf_counter()
        if vectorized:
            s = float(np.sum(dist.sample(rng, n_iter)))
        else:
            s = 0.0
            for _ in range(n_iter):
                s += dist.sample(rng)
        durations.append(time.perf_counter() - start)
        checksum += s

    result = TimingResult(
        name=name,
        n_iter=n_iter,
        n_runs=n_runs,
        best_seconds=min(durations),
        mean_seconds=sum(durations) / n_runs,
        checksum=checksum,
    )
    logger.info("%s: %.1f ns per sample", name, result.ns_per_sample)
    return result


def time_distributions(distributions: dict, rng, n_iter: int = 10_000, n_runs: int = 5, vectorized: bool = False, progress: bool = False) -> pd.DataFrame:
    """Time several distributions with a shared random source.

    Parameters
    ----------
    distributions : dict
        Mapping of labels to distributions.

    Returns
    -------
    pd.DataFrame
        One row per distribution, with the fields of ``TimingResult`` and
        the time per sample in nanoseconds.
    """
    rng = as_random_source(rng)
    rows = []
    for name, dist in tqdm.tqdm(distributions.items(), desc="Timing", unit="distribution", disable=not progress):
        result = time_distribution(dist, rng, n_iter=n_iter, n_runs=n_runs, name=name, vectorized=vectorized)
        rows.append({**asdict(result), "ns_per_sample": result.ns_per_sample})
    return pd.DataFrame(rows)
