"""Policies for sampling the region beyond the ETF table.

A category decides what happens to draws whose mantissa falls at or above the
outer switch of the table:

- ``Bounded``: there is no outer region, the table covers the whole support;
- ``Composite``: the outer distribution is exactly proportional to the density
  over the outer region (e.g. inversion sampling of a tail) and its variates
  are accepted unconditionally;
- ``RejectionComposite``: the outer distribution is an envelope of the density
  over the outer region; its variates are accepted by rejection sampling
  against the envelope density ``outer_pdf``.

Outer distributions are callables ``outer_dist(rng) -> float``; their support
is read from optional ``min()`` and ``max()`` methods.
"""

import math
from collections.abc import Callable

from etfdist.random_digits import generate_random_real


class Category:
    """Base class for outer-region policies."""

    has_outer = False
    has_rejection = False

    @property
    def outer_area(self) -> float | None:
        """Non-normalized area of the outer distribution, if any."""
        return None

    def sample_outer(self, rng, width: int, target: Callable[[float], float]):
        """Draw from the outer distribution.

        Returns
        -------
        tuple[bool, float]
            Whether the variate is accepted, and the variate.
        """
        raise NotImplementedError(f"{type(self).__name__} has no outer distribution.")

    def outer_min(self) -> float:
        raise NotImplementedError(f"{type(self).__name__} has no outer distribution.")

    def outer_max(self) -> float:
        raise NotImplementedError(f"{type(self).__name__} has no outer distribution.")

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class Bounded(Category):
    """Distribution fully covered by the table."""


class Composite(Category):
    """Table complemented by an outer distribution sampled exactly.

    Parameters
    ----------
    outer_dist : Callable
        Outer distribution, called as ``outer_dist(rng)``.
    outer_area : float
        Non-normalized area under the density over the outer region, in the
        same units as the density used to build the table.
    """

    has_outer = True

    def __init__(self, outer_dist: Callable, outer_area: float):
        if outer_area < 0.0:
            raise ValueError(f"outer_area must be non-negative, got {outer_area}.")
        self.outer_dist = outer_dist
        self._outer_area = float(outer_area)

    @property
    def outer_area(self) -> float:
        return self._outer_area

    def sample_outer(self, rng, width: int, target: Callable[[float], float]):
        return True, self.outer_dist(rng)

    def outer_min(self) -> float:
        bound = getattr(self.outer_dist, "min", None)
        return bound() if bound is not None else -math.inf

    def outer_max(self) -> float:
        bound = getattr(self.outer_dist, "max", None)
        return bound() if bound is not None else math.inf

    def __repr__(self) -> str:
        return f"{type(self).__name__}(outer_dist={self.outer_dist!r}, outer_area={self._outer_area!r})"


class RejectionComposite(Composite):
    """Table complemented by an outer envelope sampled by rejection.

    Parameters
    ----------
    outer_dist : Callable
        Envelope distribution, called as ``outer_dist(rng)``.
    outer_pdf : Callable[[float], float]
        Envelope density, which must dominate the target density over the
        outer region.
    outer_area : float
        Non-normalized area under ``outer_pdf``.
    """

    has_rejection = True

    def __init__(self, outer_dist: Callable, outer_pdf: Callable[[float], float], outer_area: float):
        super().__init__(outer_dist, outer_area)
        self.outer_pdf = outer_pdf

    def sample_outer(self, rng, width: int, target: Callable[[float], float]):
        r = generate_random_real(rng, width)
        x = self.outer_dist(rng)
        return r * self.outer_pdf(x) <= target(x), x


def make_category(
    outer_dist: Callable | None = None,
    outer_pdf: Callable[[float], float] | None = None,
    outer_area: float | None = None,
) -> Category:
    """Deduce the category from the outer components that are provided."""
    if outer_dist is None:
        if outer_pdf is not None or outer_area is not None:
            raise ValueError("outer_pdf and outer_area require an outer distribution.")
        return Bounded()
    if outer_area is None:
        raise ValueError("An outer distribution requires its non-normalized area.")
    if outer_pdf is None:
        return Composite(outer_dist, outer_area)
    return RejectionComposite(outer_dist, outer_pdf, outer_area)
