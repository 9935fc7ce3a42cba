"""Shifted Weibull tail distribution and density.

Both are used as outer distributions of ETF tables: the tail distribution is
sampled by inversion, and the density serves as a rejection envelope.
"""

import math

from etfdist.random_digits import generate_random_real


class WeibullTailDistribution:
    """Tail of a 3-parameter Weibull distribution sampled by inversion.

    The non-normalized density is::

        f(x|a,b,c) = ((x-c)/b)^(a-1) * exp[-((x-c)/b)^a]   if x/b > x0/b
        f(x|a,b,c) = 0                                     otherwise

    Parameters
    ----------
    x0 : float
        Start of the tail.
    a : float
        Shape parameter, strictly positive.
    b : float
        Scale parameter; positive for a tail extending to +inf, negative for a
        tail extending to -inf.
    c : float
        Location parameter.
    width : int
        Number of random bits used to draw the underlying uniform variate.
    """

    def __init__(self, x0: float = 0.0, a: float = 1.0, b: float = 1.0, c: float = 0.0, width: int = 64):
        if a <= 0.0:
            raise ValueError(f"Weibull shape parameter must be positive, got {a}.")
        if b == 0.0:
            raise ValueError("Weibull scale parameter must be non-zero.")
        self._inv_a = 1.0 / a
        self._b = b
        self._c = c
        self._x0 = x0
        self._alpha = ((x0 - c) / b) ** a
        self.width = width

    def __call__(self, rng) -> float:
        r = generate_random_real(rng, self.width)
        return self._c + self._b * (self._alpha - math.log1p(-r)) ** self._inv_a

    def min(self) -> float:
        return -math.inf if self._b < 0.0 else self._x0

    def max(self) -> float:
        return math.inf if self._b > 0.0 else self._x0

    @property
    def a(self) -> float:
        return 1.0 / self._inv_a

    @property
    def b(self) -> float:
        return self._b

    @property
    def c(self) -> float:
        return self._c

    def __repr__(self) -> str:
        return f"WeibullTailDistribution(x0={self._x0!r}, a={self.a!r}, b={self._b!r}, c={self._c!r})"


class WeibullPdf:
    """3-parameter Weibull density with an optional weight.

    The function is::

        f(x|a,b,c) = w*a/|b| * ((x-c)/b)^(a-1) * exp[-((x-c)/b)^a]   if x/b > c/b
        f(x|a,b,c) = 0                                               otherwise

    With ``w=1`` this is the normalized Weibull density.
    """

    def __init__(self, a: float = 1.0, b: float = 1.0, c: float = 0.0, w: float = 1.0):
        self._a = a
        self._inv_b = 1.0 / b
        self._c = c
        self._s = w * abs(a / b)

    def __call__(self, x: float) -> float:
        y = (x - self._c) * self._inv_b
        if y < 0.0:
            return 0.0
        if y == 0.0 and self._a < 1.0:
            return math.inf
        z = y ** (self._a - 1.0)
        return self._s * z * math.exp(-y * z)

    def total_area(self) -> float:
        """Total area under the function, equal to the weight ``w``."""
        return self._s / abs(self._a * self._inv_b)

    def tail_area(self, x0: float) -> float:
        """Area under the function from ``x0`` to ``sign(b)*inf``."""
        z0 = ((x0 - self._c) * self._inv_b) ** self._a
        return self._s * math.exp(-z0) / abs(self._a * self._inv_b)
