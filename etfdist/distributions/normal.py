"""ETF-based standard normal distribution."""

import math

from etfdist.categories import Composite
from etfdist.distributions.base import compute_partition
from etfdist.random_digits import generate_random_real
from etfdist.sampler import EtfDistribution
from etfdist.shapes import Central

SQRT_PI_OVER_TWO = 1.2533141373155001

# Tail positions closest to the empirical optimum (about 3.25) for which the
# relative tail area is a multiple of 1/2^(W-N-1), indexed by min(W - W_min, N).
_MAGIC_XTAIL = {
    7: (
        11,
        (1.532095304, 1.859950459, 2.150455371, 2.413614185,
         2.655703474, 2.880953316, 3.092363645, 3.292145211),
    ),
    8: (
        12,
        (1.533103263, 1.861331463, 2.152146391, 2.415553089,
         2.657829951, 2.883210552, 3.094702254, 3.294526271),
    ),
}

DEFAULT_XTAIL = 3.25


def normal_pdf(x: float) -> float:
    """Non-normalized standard normal density."""
    return math.exp(-0.5 * x * x)


def normal_dpdf(x: float) -> float:
    return -x * math.exp(-0.5 * x * x)


def normal_tail_area(xtail: float) -> float:
    """Area under ``normal_pdf`` from ``xtail`` to +inf."""
    return SQRT_PI_OVER_TWO * math.erfc(xtail / math.sqrt(2.0))


def default_normal_xtail(width: int, n_bits: int) -> float:
    """Tail position for a normal table with the given bit widths.

    For low W the tail area relative to the whole sampled area should be a
    multiple of 1/2^(W-N-1) to limit rounding of the sampling probability;
    tabulated values are used for N=7 and N=8, otherwise the tail is placed
    at 3.25, which is fine when W is large.
    """
    if n_bits in _MAGIC_XTAIL:
        min_width, values = _MAGIC_XTAIL[n_bits]
        if width >= min_width:
            return values[min(width - min_width, len(values) - 1)]
    return DEFAULT_XTAIL


class NormalTailDistribution:
    """Normal tail beyond ``xtail``, sampled with Marsaglia's algorithm."""

    def __init__(self, xtail: float, width: int = 64):
        if xtail <= 0.0:
            raise ValueError(f"xtail must be positive, got {xtail}.")
        self.xtail = xtail
        self._inv_xtail = 1.0 / xtail
        self.width = width

    def __call__(self, rng) -> float:
        while True:
            dx = math.log1p(-generate_random_real(rng, self.width)) * self._inv_xtail
            y = math.log1p(-generate_random_real(rng, self.width))
            if -2.0 * y >= dx * dx:
                return self.xtail - dx

    def min(self) -> float:
        return self.xtail

    def max(self) -> float:
        return math.inf

    def __repr__(self) -> str:
        return f"NormalTailDistribution(xtail={self.xtail!r})"


class EtfNormalDistribution(EtfDistribution):
    """Standard normal distribution sampled with a central ETF table.

    Parameters
    ----------
    width : int, optional
        Number of random bits W drawn per attempt.
    n_bits : int, optional
        Number of bits N of the table index.
    xtail : float or None, optional
        Start of the tail; see ``default_normal_xtail``.
    tol : float or None, optional
        Relative area tolerance of the partition.
    """

    def __init__(self, width: int = 64, n_bits: int = 7, xtail: float | None = None, tol: float | None = None):
        if xtail is None:
            xtail = default_normal_xtail(width, n_bits)
        self.xtail = xtail
        partition = compute_partition(normal_pdf, normal_dpdf, 0.0, xtail, n_bits, tol=tol)
        super().__init__(
            n_bits,
            partition.x,
            partition.finf,
            partition.fsup,
            normal_pdf,
            shape=Central(),
            category=Composite(NormalTailDistribution(xtail, width), normal_tail_area(xtail)),
            width=width,
        )
