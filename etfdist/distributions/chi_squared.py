"""ETF-based chi-squared distributions.

Two constructions are provided:

- ``EtfChiSquaredDistribution`` for k >= 2 degrees of freedom: the table
  covers [0, xtail] and the tail is rejection sampled against an exponential
  envelope tangent to the log-density at ``xtail``;
- ``EtfChiSquaredLowDofDistribution`` for k < 2, whose density diverges at 0:
  the table covers [x0, xtail] and the outer region is rejection sampled
  against a composite envelope made of a power-law head and an exponential
  tail.
"""

import math

from etfdist.distributions.base import compute_partition
from etfdist.distributions.weibull import WeibullPdf, WeibullTailDistribution
from etfdist.categories import RejectionComposite
from etfdist.random_digits import generate_random_real
from etfdist.sampler import EtfDistribution


class ChiSquaredPdf:
    """Non-normalized chi-squared density ``x^(k/2-1) * exp(-x/2)``."""

    def __init__(self, k: float):
        if k <= 0.0:
            raise ValueError(f"Degrees of freedom must be positive, got {k}.")
        self.k = k
        self._m = 0.5 * k - 1.0

    def __call__(self, x: float) -> float:
        if x <= 0.0:
            if x < 0.0:
                return 0.0
            if self._m == 0.0:
                return 1.0
            return 0.0 if self._m > 0.0 else math.inf
        return math.exp(math.log(x) * self._m - 0.5 * x)

    def derivative(self, x: float) -> float:
        if x <= 0.0:
            return 0.0
        m = self._m
        return (m - 0.5 * x) * math.exp(math.log(x) * (m - 1.0) - 0.5 * x)

    @property
    def mode(self) -> float:
        return max(2.0 * self._m, 0.0)


class EtfChiSquaredDistribution(EtfDistribution):
    """Chi-squared distribution with k >= 2 degrees of freedom.

    Parameters
    ----------
    k : float
        Degrees of freedom.
    xtail : float
        Start of the tail; must lie beyond the mode ``k-2``.
    width : int, optional
        Number of random bits W drawn per attempt.
    n_bits : int, optional
        Number of bits N of the table index.
    tol : float or None, optional
        Relative area tolerance of the partition.
    """

    def __init__(self, k: float, xtail: float, width: int = 64, n_bits: int = 8, tol: float | None = None):
        if k < 2.0:
            raise ValueError(
                f"EtfChiSquaredDistribution requires k >= 2, got {k}; "
                "use EtfChiSquaredLowDofDistribution instead."
            )
        m = 0.5 * k - 1.0
        if xtail <= 2.0 * m:
            raise ValueError(f"xtail must lie beyond the mode {2.0 * m}, got {xtail}.")
        self.k = k
        self.xtail = xtail

        # Exponential envelope tangent to the log-density at xtail.
        b = xtail / (0.5 * xtail - m)
        w = b * xtail**m * math.exp(-m)
        tail_dist = WeibullTailDistribution(xtail, 1.0, b, 0.0, width)
        tail_pdf = WeibullPdf(1.0, b, 0.0, w)

        pdf = ChiSquaredPdf(k)
        extrema = [pdf.mode] if 0.0 < pdf.mode < xtail else []
        partition = compute_partition(pdf, pdf.derivative, 0.0, xtail, n_bits, extrema=extrema, tol=tol)
        super().__init__(
            n_bits,
            partition.x,
            partition.finf,
            partition.fsup,
            pdf,
            category=RejectionComposite(tail_dist, tail_pdf, tail_pdf.tail_area(xtail)),
            width=width,
        )


class ChiSquaredOuterDistribution:
    """Outer envelope distribution for chi-squared with k < 2.

    It mixes a distribution with density ``x^(k/2-1)`` over [0, x0) and an
    exponential tail ``xtail^(k/2-1) * exp(-x/2)`` beyond ``xtail``, in
    proportion to their areas.
    """

    def __init__(self, k: float, x0: float, xtail: float, width: int = 64):
        self._x0 = x0
        self._p = 2.0 / k
        self._right = WeibullTailDistribution(xtail, 1.0, 2.0, 0.0, width)
        self.width = width

        right_area = 2.0 * xtail ** (0.5 * k - 1.0) * math.exp(-0.5 * xtail)
        left_area = 2.0 / k * x0 ** (0.5 * k)
        self._area = left_area + right_area
        self._switch = left_area / self._area

    def __call__(self, rng) -> float:
        if generate_random_real(rng, self.width) < self._switch:
            return self._x0 * generate_random_real(rng, self.width) ** self._p
        return self._right(rng)

    def total_non_normalized_area(self) -> float:
        return self._area

    def min(self) -> float:
        return 0.0

    def max(self) -> float:
        return math.inf


class ChiSquaredOuterPdf:
    """Density of ``ChiSquaredOuterDistribution``."""

    def __init__(self, k: float, x0: float, xtail: float):
        self._m = 0.5 * k - 1.0
        self._x_switch = 0.5 * (x0 + xtail)
        self._right = WeibullPdf(1.0, 2.0, 0.0, 2.0 * xtail**self._m)

    def __call__(self, x: float) -> float:
        if x < self._x_switch:
            return x**self._m if x > 0.0 else math.inf
        return self._right(x)


class EtfChiSquaredLowDofDistribution(EtfDistribution):
    """Chi-squared distribution with 0 < k < 2 degrees of freedom.

    Parameters
    ----------
    k : float
        Degrees of freedom.
    x0 : float
        Start of the table; the head [0, x0) is sampled from the envelope.
    xtail : float
        End of the table.
    width : int, optional
        Number of random bits W drawn per attempt.
    n_bits : int, optional
        Number of bits N of the table index.
    tol : float or None, optional
        Relative area tolerance of the partition.
    """

    def __init__(
        self,
        k: float,
        x0: float,
        xtail: float,
        width: int = 64,
        n_bits: int = 8,
        tol: float | None = None,
    ):
        if not 0.0 < k < 2.0:
            raise ValueError(f"EtfChiSquaredLowDofDistribution requires 0 < k < 2, got {k}.")
        if not 0.0 < x0 < xtail:
            raise ValueError(f"Expected 0 < x0 < xtail, got x0={x0}, xtail={xtail}.")
        self.k = k
        self.x0 = x0
        self.xtail = xtail

        pdf = ChiSquaredPdf(k)
        # The density diverges at 0: a fine quadrature grid gives a usable seed.
        partition = compute_partition(
            pdf, pdf.derivative, x0, xtail, n_bits, tol=tol, n_points=64 << n_bits
        )
        outer_dist = ChiSquaredOuterDistribution(k, x0, xtail, width)
        super().__init__(
            n_bits,
            partition.x,
            partition.finf,
            partition.fsup,
            pdf,
            category=RejectionComposite(
                outer_dist,
                ChiSquaredOuterPdf(k, x0, xtail),
                outer_dist.total_non_normalized_area(),
            ),
            width=width,
        )
