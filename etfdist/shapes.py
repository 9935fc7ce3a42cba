"""Shapes of ETF distributions.

The shape determines the bit layout of each W-bit draw and the transform
applied to accepted values:

- ``Asymmetric``: index in bits ``W-N..W-1``, mantissa in bits ``0..W-N-1``;
  values are returned unchanged;
- ``Central``: sign in bit ``W-1``, index in bits ``W-N-1..W-2``, mantissa in
  bits ``0..W-N-2``; the table spans one half of a distribution symmetric
  about 0 and values are returned as ``s*x``;
- ``Symmetric``: same layout as ``Central`` for a distribution symmetric
  about an arbitrary origin; values are returned as ``origin + s*(x-origin)``.

Table values handed to ``apply`` are relative to the origin.
"""

import numpy as np


class Shape:
    """Base class for ETF shapes."""

    sign_bits = 0

    @property
    def origin(self) -> float:
        return 0.0

    def apply(self, x: float, s: int) -> float:
        """Transform a value relative to the origin, drawn with sign ``s``."""
        raise NotImplementedError

    def apply_array(self, x: np.ndarray, s: np.ndarray) -> np.ndarray:
        """Vectorised form of ``apply``."""
        raise NotImplementedError

    def support(self, x_first: float, x_last: float, outer=None) -> tuple[float, float]:
        """Return the theoretical support of the distribution.

        Parameters
        ----------
        x_first, x_last : float
            First and last table breakpoints, relative to the origin.
        outer : tuple[float, float] or None, optional
            Support of the outer distribution in absolute coordinates.
        """
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class Asymmetric(Shape):
    def apply(self, x: float, s: int) -> float:
        return x

    def apply_array(self, x: np.ndarray, s: np.ndarray) -> np.ndarray:
        return x

    def support(self, x_first, x_last, outer=None):
        lo, hi = min(x_first, x_last), max(x_first, x_last)
        if outer is not None:
            lo, hi = min(lo, outer[0]), max(hi, outer[1])
        return lo, hi


class Central(Shape):
    """Distribution symmetric about 0."""

    sign_bits = 1

    def apply(self, x: float, s: int) -> float:
        return s * x

    def apply_array(self, x: np.ndarray, s: np.ndarray) -> np.ndarray:
        return s * x

    def support(self, x_first, x_last, outer=None):
        a, b = min(x_first, x_last), max(x_first, x_last)
        lo, hi = min(a, -b), max(-a, b)
        if outer is not None:
            lo = min(lo, outer[0], -outer[1])
            hi = max(hi, outer[1], -outer[0])
        return lo, hi


class Symmetric(Shape):
    """Distribution symmetric about ``origin``."""

    sign_bits = 1

    def __init__(self, origin: float = 0.0):
        self._origin = float(origin)

    @property
    def origin(self) -> float:
        return self._origin

    def apply(self, x: float, s: int) -> float:
        return self._origin + s * x

    def apply_array(self, x: np.ndarray, s: np.ndarray) -> np.ndarray:
        return self._origin + s * x

    def support(self, x_first, x_last, outer=None):
        a, b = min(x_first, x_last), max(x_first, x_last)
        x0 = self._origin
        lo, hi = min(x0 + a, x0 - b), max(x0 - a, x0 + b)
        if outer is not None:
            lo = min(lo, outer[0], 2.0 * x0 - outer[1])
            hi = max(hi, outer[1], 2.0 * x0 - outer[0])
        return lo, hi

    def __repr__(self) -> str:
        return f"Symmetric(origin={self._origin!r})"
