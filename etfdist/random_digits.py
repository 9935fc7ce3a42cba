"""
Exact-width random digits drawn from a fixed-range random source.

A random source is any object with integer attributes ``min`` and ``max`` and
a zero-argument ``__call__`` returning one raw unsigned integer in
``[min, max]``. For efficiency, the range is expected to be ``[0, 2^K-1]``;
as a small pragmatic exception, sources that never produce 0 and/or ``2^K-1``
are tolerated.

When a source has fewer than the W digits requested, successive raw numbers
are concatenated, most significant bits first. When it has more, only its
upper bits are kept since many generators have weaker low bits.

Functions
---------
check_rng_range(rng) -> int
    Validate the range of a random source and return its number of digits.
generate_random_integer(rng, w) -> int
    Draw a W-bit unsigned integer equidistributed in [0, 2^W-1].
generate_random_real(rng, w, dtype=float) -> float
    Draw a real in [0, 1) with min(W, mantissa digits) bits of precision.
generate_random_integers(rng, w, size) -> np.ndarray
    Vectorised form of ``generate_random_integer`` for W <= 64.
generate_random_reals(rng, w, size, dtype=np.float64) -> np.ndarray
    Vectorised form of ``generate_random_real``.
"""

import math
from functools import lru_cache

import numpy as np

from etfdist.exceptions import RngRangeError

MAX_WIDTH = 128
"""Largest supported bit width W."""

_MAX_ARRAY_WIDTH = 64


def _is_power_of_2_less_1(value: int) -> bool:
    return value > 0 and (value & (value + 1)) == 0


@lru_cache(maxsize=64)
def _range_digits(lo: int, hi: int) -> int:
    if lo not in (0, 1):
        raise RngRangeError(f"Random source min value {lo} is not 0 or 1.")
    if hi <= lo or not (_is_power_of_2_less_1(hi) or _is_power_of_2_less_1(hi | 1)):
        raise RngRangeError(f"Random source max value {hi} is not 2^K-1 or 2^K-2.")
    return (hi | 1).bit_length()


def check_rng_range(rng) -> int:
    """Check the range of a random source and return its number of digits K.

    Parameters
    ----------
    rng : random source
        Object exposing integer ``min`` and ``max`` attributes.

    Returns
    -------
    int
        Number of significant digits K of each raw draw.

    Raises
    ------
    RngRangeError
        If ``min`` is not 0 or 1, or ``max`` is neither 2^K-1 nor 2^K-2.
    TypeError
        If the object does not expose ``min`` and ``max``.
    """
    try:
        lo, hi = rng.min, rng.max
    except AttributeError as e:
        raise TypeError(
            f"{type(rng).__name__} is not a random source: "
            "it must expose integer `min` and `max` attributes."
        ) from e
    return _range_digits(int(lo), int(hi))


@lru_cache(maxsize=8)
def _real_digits(dtype) -> int:
    return int(np.finfo(dtype).nmant) + 1


def integer_dtype(w: int):
    """Return the storage type for W-bit unsigned integers.

    Widths up to 32 and 64 bits map to ``np.uint32`` and ``np.uint64``;
    wider values, up to ``MAX_WIDTH``, are stored as Python integers.
    """
    if w < 1 or w > MAX_WIDTH:
        raise ValueError(f"Bit width must be in [1, {MAX_WIDTH}], got {w}.")
    if w <= 32:
        return np.uint32
    if w <= 64:
        return np.uint64
    return object


def generate_random_integer(rng, w: int) -> int:
    """Generate a W-bit random integer equidistributed in [0, 2^W-1].

    As many raw numbers are drawn as necessary to fill W random bits.
    """
    k = check_rng_range(rng)
    if k >= w:
        return int(rng()) >> (k - w)
    u = 0
    remaining = w
    while remaining >= k:
        u = (u << k) | int(rng())
        remaining -= k
    if remaining:
        u = (u << remaining) | (int(rng()) >> (k - remaining))
    return u


def generate_random_real(rng, w: int, dtype=float):
    """Generate a random real in [0, 1) with W bits of precision.

    The precision is capped to the number of significant digits of ``dtype``,
    i.e. M = min(W, digits). The value is computed as ``i / 2^M`` where ``i``
    is an M-bit integer, so it is never equal to 1.
    """
    m = min(w, _real_digits(dtype))
    value = math.ldexp(generate_random_integer(rng, m), -m)
    if dtype is float:
        return value
    return np.dtype(dtype).type(value)


def _draw_raw(rng, n: int) -> np.ndarray:
    draw = getattr(rng, "draw", None)
    if draw is not None:
        return np.asarray(draw(n), dtype=np.uint64)
    return np.fromiter((int(rng()) for _ in range(n)), dtype=np.uint64, count=n)


def generate_random_integers(rng, w: int, size: int) -> np.ndarray:
    """Generate ``size`` W-bit random integers as a ``np.uint64`` array.

    Raw numbers are consumed in the same order as ``size`` successive calls to
    ``generate_random_integer``, so both forms yield identical values.
    """
    if w > _MAX_ARRAY_WIDTH:
        raise ValueError(
            f"Vectorised generation supports at most {_MAX_ARRAY_WIDTH} bits, got {w}."
        )
    k = check_rng_range(rng)
    if k > _MAX_ARRAY_WIDTH:
        return np.fromiter(
            (generate_random_integer(rng, w) for _ in range(size)),
            dtype=np.uint64,
            count=size,
        )
    if k >= w:
        return _draw_raw(rng, size) >> np.uint64(k - w)

    n_full, rest = divmod(w, k)
    n_draws = n_full + (1 if rest else 0)
    raw = _draw_raw(rng, size * n_draws).reshape(size, n_draws)
    u = np.zeros(size, dtype=np.uint64)
    for j in range(n_full):
        u = (u << np.uint64(k)) | raw[:, j]
    if rest:
        u = (u << np.uint64(rest)) | (raw[:, n_full] >> np.uint64(k - rest))
    return u


def generate_random_reals(rng, w: int, size: int, dtype=np.float64) -> np.ndarray:
    """Generate ``size`` random reals in [0, 1), see ``generate_random_real``."""
    m = min(w, _real_digits(dtype))
    ints = generate_random_integers(rng, m, size)
    return np.ldexp(ints.astype(np.float64), -m).astype(dtype, copy=False)
