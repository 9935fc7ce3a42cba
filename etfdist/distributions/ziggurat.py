"""
Ziggurat sampler for N(0,1) (Marsaglia & Tsang style), used as a timing baseline.

Tables are generated programmatically for 128 layers. Each attempt draws a
single W-bit integer: the 7 most significant bits select the layer, the next
bit is the sign and the remaining W-8 bits form the unsigned abscissa.

References:
 - Marsaglia & Tsang, "The Ziggurat Method for Generating Random Variables" (2000).
"""

import math

import numpy as np

from etfdist.distributions.normal import NormalTailDistribution
from etfdist.random_digits import generate_random_integer, generate_random_real
from etfdist.rng import as_random_source

N_LAYERS = 128
R = 3.442619855899  # tail cutoff
V = 9.91256303526217e-3  # area of each layer
INDEX_BITS = 7


def make_ziggurat_tables(
    bits: int, n: int = N_LAYERS, r: float = R, v: float = V
) -> tuple[list[float], list[int], list[float]]:
    """
    Generate the wn, kn and fn arrays for ``bits``-bit abscissae.

    Layer 0 is the base strip, of width ``v / f(r)`` and including the tail;
    layer ``n-1`` spans [0, r]; layer 1 is the top of the ziggurat.

    - wn[i] = x_i / 2^bits, where x_i is the right edge of layer i
    - kn[i] = floor(2^bits * x_{i-1} / x_i), with kn[1] = 0 and
      kn[0] = floor(2^bits * r * f(r) / v)
    - fn[i] = f(x_i), with fn[0] = 1
    """
    scale = float(1 << bits)
    wn = [0.0] * n
    kn = [0] * n
    fn = [0.0] * n

    fr = math.exp(-0.5 * r * r)
    q = v / fr
    kn[0] = int(math.floor(r / q * scale))
    kn[1] = 0
    wn[0] = q / scale
    wn[n - 1] = r / scale
    fn[0] = 1.0
    fn[n - 1] = fr

    dn = tn = r
    for i in range(n - 2, 0, -1):
        dn = math.sqrt(-2.0 * math.log(v / dn + math.exp(-0.5 * dn * dn)))
        kn[i + 1] = int(math.floor(dn / tn * scale))
        tn = dn
        fn[i] = math.exp(-0.5 * dn * dn)
        wn[i] = dn / scale
    return wn, kn, fn


class ZigguratNormalDistribution:
    """Standard normal distribution sampled with the Ziggurat algorithm.

    Parameters
    ----------
    width : int, optional
        Number of random bits W drawn per attempt; must exceed 8.
    """

    def __init__(self, width: int = 64):
        if width <= INDEX_BITS + 1:
            raise ValueError(f"width must exceed {INDEX_BITS + 1}, got {width}.")
        self.width = width
        self._bits = width - INDEX_BITS - 1
        self._mask = (1 << self._bits) - 1
        self._wn, self._kn, self._fn = make_ziggurat_tables(self._bits)
        self._tail = NormalTailDistribution(R, width)

    @property
    def tables(self) -> dict[str, list]:
        return {"wn": list(self._wn), "kn": list(self._kn), "fn": list(self._fn)}

    def _sample_one(self, rng) -> float:
        while True:
            u = generate_random_integer(rng, self.width)
            i = u >> (self.width - INDEX_BITS)
            sign = (u >> self._bits) & 1
            j = u & self._mask

            # Fast path
            if j < self._kn[i]:
                x = j * self._wn[i]
                return x if sign else -x

            # Tail
            if i == 0:
                x = self._tail(rng)
                return x if sign else -x

            # Wedge: y uniform in [fn[i], fn[i-1]]
            x = j * self._wn[i]
            y = self._fn[i] + generate_random_real(rng, self.width) * (self._fn[i - 1] - self._fn[i])
            if y < math.exp(-0.5 * x * x):
                return x if sign else -x

    def sample(self, rng, size: int | None = None):
        rng = as_random_source(rng)
        if size is None:
            return self._sample_one(rng)
        return np.array([self._sample_one(rng) for _ in range(int(size))], dtype=np.float64)

    __call__ = sample

    def min(self) -> float:
        return -math.inf

    def max(self) -> float:
        return math.inf

    def __repr__(self) -> str:
        return f"ZigguratNormalDistribution(width={self.width})"
