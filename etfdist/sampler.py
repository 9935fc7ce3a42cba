"""
ETF sampler.

``EtfDistribution`` composes an ETF table with a shape (bit layout and output
transform) and a category (handling of the outer region). Each attempt draws
a single W-bit integer, split into a table index, a mantissa and, for
symmetric shapes, a sign bit:

1. if the mantissa is below the fast-path bound of the interval, the value is
   interpolated directly since the corresponding rectangle lies entirely under
   the density;
2. otherwise, if the mantissa is at or above the outer switch, the outer
   distribution is sampled, with rejection for ``RejectionComposite``;
3. otherwise the draw falls in a wedge: a second real draw positions the
   abscissa in the interval and the value is accepted by rejection against
   the density.

A rejected attempt restarts from step 1. Sampling never mutates the
distribution, so a single instance may be shared by any number of callers as
long as each supplies its own random source.
"""

import logging
from collections.abc import Callable, Sequence

import numpy as np

from etfdist.categories import Bounded, Category, make_category
from etfdist.random_digits import (
    generate_random_integer,
    generate_random_integers,
    generate_random_real,
)
from etfdist.rng import as_random_source
from etfdist.shapes import Asymmetric, Central, Shape, Symmetric
from etfdist.table import EtfTable, build_table

logger = logging.getLogger(__name__)

_ARRAY_CHUNK = 1 << 20
_MAX_ARRAY_WIDTH = 64


class EtfDistribution:
    """Distribution sampled with an ETF table.

    Parameters
    ----------
    n_bits : int
        Number of bits N of the table index.
    x : Sequence[float]
        The 2^N+1 breakpoints of the partition, in absolute coordinates.
    finf, fsup : Sequence[float]
        Infimum and supremum of the density over each interval.
    target : Callable[[float], float]
        The (possibly unnormalized) density, consistent with ``finf`` and
        ``fsup``.
    shape : Shape or None, optional
        ``Asymmetric`` (default), ``Central`` or ``Symmetric``.
    category : Category or None, optional
        ``Bounded`` (default), ``Composite`` or ``RejectionComposite``.
    width : int, optional
        Number of random bits W drawn per attempt.

    Raises
    ------
    InvalidTableSize
        If ``x`` does not hold exactly 2^N+1 breakpoints.

    Examples
    --------
    >>> import math
    >>> from etfdist import make_distribution, trapezoidal_prepartition
    >>> from etfdist import newton_partition_monotonic
    >>> f = lambda x: math.exp(-x)
    >>> df = lambda x: -math.exp(-x)
    >>> x0 = trapezoidal_prepartition(f, 0.0, 5.0, 16)
    >>> p = newton_partition_monotonic(f, df, x0, tol=1e-10)
    >>> dist = make_distribution(4, p.x, p.finf, p.fsup, f, width=32)
    >>> value = dist.sample(42)
    """

    def __init__(
        self,
        n_bits: int,
        x: Sequence[float],
        finf: Sequence[float],
        fsup: Sequence[float],
        target: Callable[[float], float],
        shape: Shape | None = None,
        category: Category | None = None,
        width: int = 64,
    ):
        self._shape = shape if shape is not None else Asymmetric()
        self._category = category if category is not None else Bounded()
        self._target = target
        self._table = build_table(
            n_bits,
            width,
            x,
            finf,
            fsup,
            sign_bits=self._shape.sign_bits,
            origin=self._shape.origin,
            outer_area=self._category.outer_area,
        )

        # Bit layout of a draw.
        mantissa_bits = self._table.mantissa_bits
        self._mantissa_mask = (1 << mantissa_bits) - 1
        self._index_shift = mantissa_bits
        self._index_mask = (1 << n_bits) - 1
        self._sign_shift = width - 1 if self._shape.sign_bits else None

        # Plain lists are faster to index than arrays in the scalar loop.
        self._x = self._table.x.tolist()
        self._fratio = [int(v) for v in self._table.scaled_fratio]
        self._fsup = self._table.scaled_fsup.tolist()
        self._dx = self._table.scaled_dx.tolist()
        self._outer_switch = self._table.outer_switch if self._category.has_outer else None

    @property
    def table(self) -> EtfTable:
        return self._table

    @property
    def shape(self) -> Shape:
        return self._shape

    @property
    def category(self) -> Category:
        return self._category

    @property
    def target(self) -> Callable[[float], float]:
        return self._target

    @property
    def width(self) -> int:
        return self._table.width

    @property
    def n_bits(self) -> int:
        return self._table.n_bits

    def _attempt(self, rng, r: int):
        """Run one attempt from the W-bit draw ``r``; return None on rejection."""
        u = r & self._mantissa_mask
        i = (r >> self._index_shift) & self._index_mask
        if self._sign_shift is None or (r >> self._sign_shift):
            s = 1
        else:
            s = -1

        if u < self._fratio[i]:
            return self._shape.apply(self._x[i] + self._dx[i] * u, s)

        if self._outer_switch is not None and u >= self._outer_switch:
            accepted, x = self._category.sample_outer(rng, self.width, self._target)
            if accepted:
                return self._shape.apply(x - self._shape.origin, s)
            return None

        # Wedge: rejection sampling of y < f(x).
        v = generate_random_real(rng, self.width)
        x = self._x[i] + v * (self._x[i + 1] - self._x[i])
        if u * self._fsup[i] < self._target(x + self._shape.origin):
            return self._shape.apply(x, s)
        return None

    def _resolve(self, rng, r: int) -> float:
        value = self._attempt(rng, r)
        while value is None:
            value = self._attempt(rng, generate_random_integer(rng, self.width))
        return value

    def _sample_one(self, rng) -> float:
        return self._resolve(rng, generate_random_integer(rng, self.width))

    def _sample_chunk(self, rng, size: int) -> np.ndarray:
        table = self._table
        r = generate_random_integers(rng, self.width, size)
        u = r & np.uint64(self._mantissa_mask)
        if table.n_bits:
            i = ((r >> np.uint64(self._index_shift)) & np.uint64(self._index_mask)).astype(np.intp)
        else:
            i = np.zeros(size, dtype=np.intp)
        if self._sign_shift is None:
            s = np.ones(size)
        else:
            s = np.where((r >> np.uint64(self._sign_shift)) != 0, 1.0, -1.0)

        out = self._shape.apply_array(
            table.x[i] + table.scaled_dx[i] * u.astype(np.float64), s
        )
        slow = np.flatnonzero(u >= table.scaled_fratio[i])
        for k in slow:
            out[k] = self._resolve(rng, int(r[k]))
        return out

    def sample(self, rng, size: int | None = None):
        """Draw random variates.

        Parameters
        ----------
        rng : random source
            A random source (see :mod:`etfdist.rng`) or any object accepted by
            ``as_random_source``. An integer seed creates a fresh generator.
        size : int or None, optional
            Number of variates. If None, a single float is returned.

        Returns
        -------
        float or np.ndarray
        """
        rng = as_random_source(rng)
        if size is None:
            return self._sample_one(rng)

        size = int(size)
        if size < 0:
            raise ValueError(f"size must be non-negative, got {size}.")
        if self.width > _MAX_ARRAY_WIDTH:
            return np.array([self._sample_one(rng) for _ in range(size)], dtype=np.float64)

        out = np.empty(size)
        for start in range(0, size, _ARRAY_CHUNK):
            stop = min(start + _ARRAY_CHUNK, size)
            out[start:stop] = self._sample_chunk(rng, stop - start)
        return out

    __call__ = sample

    def _outer_support(self):
        if not self._category.has_outer:
            return None
        return self._category.outer_min(), self._category.outer_max()

    def min(self) -> float:
        """Smallest value that may be returned."""
        return self._shape.support(self._x[0], self._x[-1], self._outer_support())[0]

    def max(self) -> float:
        """Largest value that may be returned."""
        return self._shape.support(self._x[0], self._x[-1], self._outer_support())[1]

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(shape={self._shape!r}, "
            f"category={type(self._category).__name__}, "
            f"n_bits={self.n_bits}, width={self.width})"
        )


def make_distribution(
    n_bits: int,
    x: Sequence[float],
    finf: Sequence[float],
    fsup: Sequence[float],
    target: Callable[[float], float],
    outer_dist: Callable | None = None,
    outer_pdf: Callable[[float], float] | None = None,
    outer_area: float | None = None,
    width: int = 64,
) -> EtfDistribution:
    """Create an asymmetric ETF distribution.

    The category is deduced from the outer components: none gives a bounded
    distribution, ``outer_dist`` and ``outer_area`` a composite distribution,
    and the addition of ``outer_pdf`` a rejection-sampled composite.
    """
    return EtfDistribution(
        n_bits,
        x,
        finf,
        fsup,
        target,
        shape=Asymmetric(),
        category=make_category(outer_dist, outer_pdf, outer_area),
        width=width,
    )


def make_central_distribution(
    n_bits: int,
    x: Sequence[float],
    finf: Sequence[float],
    fsup: Sequence[float],
    target: Callable[[float], float],
    outer_dist: Callable | None = None,
    outer_pdf: Callable[[float], float] | None = None,
    outer_area: float | None = None,
    width: int = 64,
) -> EtfDistribution:
    """Create an ETF distribution symmetric about 0.

    The table, ``outer_dist`` and ``outer_area`` describe one half of the
    distribution; the other half is obtained by symmetry.
    """
    return EtfDistribution(
        n_bits,
        x,
        finf,
        fsup,
        target,
        shape=Central(),
        category=make_category(outer_dist, outer_pdf, outer_area),
        width=width,
    )


def make_symmetric_distribution(
    origin: float,
    n_bits: int,
    x: Sequence[float],
    finf: Sequence[float],
    fsup: Sequence[float],
    target: Callable[[float], float],
    outer_dist: Callable | None = None,
    outer_pdf: Callable[[float], float] | None = None,
    outer_area: float | None = None,
    width: int = 64,
) -> EtfDistribution:
    """Create an ETF distribution symmetric about ``origin``.

    The breakpoints and the outer distribution are given in absolute
    coordinates and describe one half of the distribution.
    """
    return EtfDistribution(
        n_bits,
        x,
        finf,
        fsup,
        target,
        shape=Symmetric(origin),
        category=make_category(outer_dist, outer_pdf, outer_area),
        width=width,
    )
