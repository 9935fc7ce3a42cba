"""
Fixed-point encoding of an ETF partition.

The table stores, for each of the 2^N intervals of a partition, the data
needed by the sampling hot path, expressed in the integer space of the
mantissa drawn from the random source:

- ``scaled_fratio``: integer bound on the mantissa below which a draw falls in
  the rectangle lying entirely under the density (fast path);
- ``scaled_fsup``: supremum of the density divided by the outer switch, so
  that ``u * scaled_fsup`` is a uniform ordinate for a mantissa ``u``;
- ``scaled_dx``: interval width per unit of mantissa.

The outer switch is the integer threshold above which mantissas are routed to
the outer (tail) distribution.
"""

import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np

from etfdist.exceptions import InvalidTableSize
from etfdist.random_digits import MAX_WIDTH, integer_dtype

logger = logging.getLogger(__name__)

MIN_FRATIO = 0.5
"""Smallest finf/fsup ratio for which the fast path is enabled."""


def _read_only(a: np.ndarray) -> np.ndarray:
    a.flags.writeable = False
    return a


@dataclass(frozen=True)
class EtfTable:
    """Immutable ETF lookup table.

    Attributes
    ----------
    n_bits : int
        Number of bits N of the table index; the table has 2^N intervals.
    width : int
        Number of random bits W drawn per attempt.
    sign_bits : int
        1 if a sign bit is drawn along with the index, 0 otherwise.
    origin : float
        Origin subtracted from the breakpoints.
    x : np.ndarray
        The 2^N+1 breakpoints, relative to ``origin``.
    scaled_fratio : np.ndarray
        Fast-path mantissa bounds, one per interval.
    scaled_fsup : np.ndarray
        Density suprema divided by the outer switch.
    scaled_dx : np.ndarray
        Interval widths divided by ``scaled_fratio`` (0 where the fast path
        is disabled).
    outer_switch : int
        Mantissa threshold routing draws to the outer distribution.
    """

    n_bits: int
    width: int
    sign_bits: int
    origin: float
    x: np.ndarray
    scaled_fratio: np.ndarray
    scaled_fsup: np.ndarray
    scaled_dx: np.ndarray
    outer_switch: int

    @property
    def n_intervals(self) -> int:
        return 1 << self.n_bits

    @property
    def mantissa_bits(self) -> int:
        return self.width - self.n_bits - self.sign_bits

    @property
    def fast_path_probability(self) -> float:
        """Probability that a single draw is accepted without a second draw."""
        return float(
            sum(int(r) for r in self.scaled_fratio)
            / (self.n_intervals * float(1 << self.mantissa_bits))
        )

    def __repr__(self) -> str:
        return (
            f"EtfTable(n_bits={self.n_bits}, width={self.width}, "
            f"sign_bits={self.sign_bits}, outer_switch={self.outer_switch})"
        )


def build_table(
    n_bits: int,
    width: int,
    x: Sequence[float],
    finf: Sequence[float],
    fsup: Sequence[float],
    sign_bits: int = 0,
    origin: float = 0.0,
    outer_area: float | None = None,
) -> EtfTable:
    """Encode a partition into an ETF table.

    Parameters
    ----------
    n_bits : int
        Number of bits N of the table index.
    width : int
        Number of random bits W drawn per attempt.
    x : Sequence[float]
        The 2^N+1 breakpoints.
    finf, fsup : Sequence[float]
        Infimum and supremum of the density over each of the 2^N intervals.
    sign_bits : int, optional
        1 for shapes drawing a sign bit, 0 otherwise.
    origin : float, optional
        Origin of symmetric shapes; breakpoints are translated by ``-origin``.
    outer_area : float or None, optional
        Non-normalized area of the outer distribution, if any.

    Returns
    -------
    EtfTable

    Raises
    ------
    InvalidTableSize
        If ``x`` does not hold exactly 2^N+1 values or ``finf``/``fsup`` do
        not hold 2^N values.
    ValueError
        If the bit widths are inconsistent.
    """
    if n_bits < 0:
        raise ValueError(f"n_bits must be non-negative, got {n_bits}.")
    if sign_bits not in (0, 1):
        raise ValueError(f"sign_bits must be 0 or 1, got {sign_bits}.")
    if not n_bits + sign_bits < width <= MAX_WIDTH:
        raise ValueError(
            f"width must satisfy n_bits + sign_bits < width <= {MAX_WIDTH}, "
            f"got width={width}, n_bits={n_bits}, sign_bits={sign_bits}."
        )

    n = 1 << n_bits
    x = np.array(x, dtype=np.float64)
    finf = np.asarray(finf, dtype=np.float64)
    fsup = np.asarray(fsup, dtype=np.float64)
    if len(x) != n + 1:
        raise InvalidTableSize(
            f"Invalid ETF table size: expected {n + 1} breakpoints for a "
            f"{n_bits}-bit index, got {len(x)}."
        )
    if len(finf) != n or len(fsup) != n:
        raise InvalidTableSize(
            f"Invalid ETF table size: expected {n} finf and fsup values, "
            f"got {len(finf)} and {len(fsup)}."
        )

    if origin != 0.0:
        x -= origin

    # Integer threshold such that, for a mantissa u, P(u >= outer_switch) is
    # the probability of sampling the outer distribution.
    full_scale = 1 << (width - n_bits - sign_bits)
    if outer_area is not None:
        table_area = float(np.sum(np.abs(np.diff(x)) * fsup))
        outer_switch = int(round(float(full_scale) * (table_area / (outer_area + table_area))))
    else:
        outer_switch = full_scale

    # Fast-path bounds may reach the outer switch, itself up to 2^mantissa_bits.
    dtype = integer_dtype(min(width - n_bits - sign_bits + 1, MAX_WIDTH))
    scale = float(outer_switch)
    scaled_fratio = np.zeros(n, dtype=dtype)
    scaled_dx = np.zeros(n)
    with np.errstate(divide="ignore", invalid="ignore"):
        fratio = np.where(fsup > 0.0, finf / fsup, 0.0)
    for i in range(n):
        # At most 1 bit of accuracy is lost when the ratio is at least 1/2;
        # below that, every draw goes through the wedge test.
        if fratio[i] >= MIN_FRATIO:
            scaled_fratio[i] = math.floor(fratio[i] * scale)
        if scaled_fratio[i] > 0:
            scaled_dx[i] = (x[i + 1] - x[i]) / int(scaled_fratio[i])
    scaled_fsup = fsup / scale

    n_wedge_only = int(np.sum(scaled_fratio == 0))
    if n_wedge_only:
        logger.debug("%d of %d intervals are sampled by rejection only", n_wedge_only, n)
    logger.debug(
        "Built ETF table: n_bits=%d, width=%d, sign_bits=%d, outer_switch=%d",
        n_bits,
        width,
        sign_bits,
        outer_switch,
    )

    return EtfTable(
        n_bits=n_bits,
        width=width,
        sign_bits=sign_bits,
        origin=float(origin),
        x=_read_only(x),
        scaled_fratio=_read_only(scaled_fratio),
        scaled_fsup=_read_only(scaled_fsup),
        scaled_dx=_read_only(scaled_dx),
        outer_switch=outer_switch,
    )
