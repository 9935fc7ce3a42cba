"""Random sources usable by the ETF sampler.

A random source is a callable returning raw unsigned integers over a fixed
inclusive range ``[min, max]``; see :mod:`etfdist.random_digits`. Sources may
also provide ``draw(size)`` returning an array of ``size`` successive raw
outputs, which enables vectorised sampling.
"""

import random

import numpy as np

_MASK64 = (1 << 64) - 1

# Number of significant digits in the output of `BitGenerator.random_raw`.
_RAW_DIGITS = {
    "MT19937": 32,
    "PCG64": 64,
    "PCG64DXSM": 64,
    "Philox": 64,
    "SFC64": 64,
}


class BitGeneratorSource:
    """Random source wrapping a NumPy bit generator.

    Parameters
    ----------
    bit_generator : np.random.BitGenerator
        The underlying bit generator; its raw output is used directly.
    digits : int or None, optional
        Number of significant digits of the raw output. Inferred for the bit
        generators shipped with NumPy.
    """

    def __init__(self, bit_generator: np.random.BitGenerator, digits: int | None = None):
        if digits is None:
            name = type(bit_generator).__name__
            if name not in _RAW_DIGITS:
                raise ValueError(
                    f"Unknown raw output width for bit generator '{name}'. "
                    f"Pass `digits` explicitly."
                )
            digits = _RAW_DIGITS[name]
        self.bit_generator = bit_generator
        self.digits = digits
        self.min = 0
        self.max = (1 << digits) - 1

    @classmethod
    def from_seed(cls, seed: int | None = None, kind: str = "PCG64") -> "BitGeneratorSource":
        """Create a source from a seed and the name of a NumPy bit generator."""
        try:
            bit_generator_cls = getattr(np.random, kind)
        except AttributeError as e:
            raise ValueError(f"'{kind}' is not a NumPy bit generator.") from e
        return cls(bit_generator_cls(seed))

    def __call__(self) -> int:
        return int(self.bit_generator.random_raw())

    def draw(self, size: int) -> np.ndarray:
        return self.bit_generator.random_raw(size)

    def __repr__(self) -> str:
        return f"BitGeneratorSource({type(self.bit_generator).__name__}, digits={self.digits})"


class StdlibRandomSource:
    """Random source wrapping a ``random.Random`` instance."""

    def __init__(self, generator: random.Random | None = None, digits: int = 32):
        if digits < 1:
            raise ValueError(f"digits must be positive, got {digits}.")
        self.generator = generator if generator is not None else random.Random()
        self.digits = digits
        self.min = 0
        self.max = (1 << digits) - 1

    def __call__(self) -> int:
        return self.generator.getrandbits(self.digits)

    def __repr__(self) -> str:
        return f"StdlibRandomSource(digits={self.digits})"


def _rotl(x: int, k: int) -> int:
    """Rotate left helper for xoroshiro128+"""
    return ((x << k) | (x >> (64 - k))) & _MASK64


def _splitmix64(z: int) -> int:
    z = (z ^ (z >> 30)) * 0xBF58476D1CE4E5B9 & _MASK64
    z = (z ^ (z >> 27)) * 0x94D049BB133111EB & _MASK64
    return z ^ (z >> 31)


class Xoroshiro128Plus:
    """Pure-Python xoroshiro128+ generator with 64-bit output.

    The state is seeded with splitmix64. The low bits of xoroshiro128+ are of
    lower quality, which is harmless here since only upper bits are used when
    fewer than 64 digits are requested.
    """

    min = 0
    max = _MASK64

    def __init__(self, seed: int = 0, stream: int = 0):
        z = (seed + stream * 0x9E3779B97F4A7C15) & _MASK64
        s0 = _splitmix64(z)
        s1 = _splitmix64((s0 + 0x9E3779B97F4A7C15) & _MASK64)
        if s0 == 0 and s1 == 0:
            s0 = 1
        self._s0 = s0
        self._s1 = s1

    def __call__(self) -> int:
        s0, s1 = self._s0, self._s1
        result = (s0 + s1) & _MASK64
        s1 ^= s0
        self._s0 = _rotl(s0, 24) ^ s1 ^ ((s1 << 16) & _MASK64)
        self._s1 = _rotl(s1, 37)
        return result

    def draw(self, size: int) -> np.ndarray:
        return np.fromiter((self() for _ in range(size)), dtype=np.uint64, count=size)

    @property
    def state(self) -> tuple[int, int]:
        return self._s0, self._s1


def as_random_source(obj):
    """Coerce ``obj`` into a random source.

    Accepts an existing random source (anything with ``min``, ``max`` and
    ``__call__``), a ``np.random.Generator``, a ``np.random.BitGenerator``, a
    ``random.Random`` instance or an integer seed (seeding ``PCG64``).
    """
    if isinstance(obj, np.random.Generator):
        return BitGeneratorSource(obj.bit_generator)
    if isinstance(obj, np.random.BitGenerator):
        return BitGeneratorSource(obj)
    if isinstance(obj, random.Random):
        return StdlibRandomSource(obj)
    if isinstance(obj, (int, np.integer)) and not isinstance(obj, bool):
        return BitGeneratorSource(np.random.PCG64(int(obj)))
    if callable(obj) and hasattr(obj, "min") and hasattr(obj, "max"):
        return obj
    raise TypeError(f"Cannot use an object of type {type(obj).__name__} as a random source.")
