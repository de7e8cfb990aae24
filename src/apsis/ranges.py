"""Angle-range algebra on true anomaly.

An :class:`AngleRanges` holds up to two half-open true-anomaly intervals.
The first interval may start below -π (down to -2π) so that a range passing
through apoapsis of a closed orbit stays one contiguous interval; every other
bound lies in [-π, π]. Empty intervals are encoded as ``lo > hi``.

:func:`intersect_ranges` intersects two such sets and normalizes the result
so that intervals are ordered, disjoint and the non-empty one comes first.
"""
from __future__ import annotations

import math
from dataclasses import dataclass

from .conic import TWO_PI, zero

Interval = tuple[float, float]

EMPTY: Interval = (1.0, -1.0)
"""Sentinel for an empty interval (``lo > hi``)."""


def _nonempty(interval: Interval) -> bool:
    return interval[0] < interval[1]


@dataclass(frozen=True)
class AngleRanges:
    """Up to two true-anomaly intervals, in radians.

    Attributes:
        first: First interval; may start below -π to wrap through apoapsis.
        second: Second interval, or ``EMPTY``.
    """
    first: Interval = EMPTY
    second: Interval = EMPTY

    @classmethod
    def full(cls) -> AngleRanges:
        """The whole orbit, [-π, π]."""
        return cls((-math.pi, math.pi))

    @property
    def count(self) -> int:
        """Number of non-empty intervals (0, 1 or 2)."""
        return _nonempty(self.first) + _nonempty(self.second)

    @property
    def intervals(self) -> list[Interval]:
        """The non-empty intervals, in order."""
        return [iv for iv in (self.first, self.second) if _nonempty(iv)]

    def __getitem__(self, index: int) -> Interval:
        return (self.first, self.second)[index]

    def __bool__(self) -> bool:
        return self.count > 0

    def contains(self, f: float) -> bool:
        """True if anomaly ``f`` (or its -2π alias) lies in one of the intervals."""
        return any(
            lo <= angle <= hi
            for lo, hi in self.intervals
            for angle in (f, f - TWO_PI)
        )


def intersect_ranges(a: AngleRanges, b: AngleRanges, closed: bool) -> AngleRanges:
    """Intersect two angle-range sets into canonical form.

    Each operand's i-th interval is paired with the other's i-th interval; an
    operand with a single interval pairs it with both. The naive result is
    then normalized, in order:

        1. pieces touching ±π on a closed orbit are joined through apoapsis;
        2. pieces touching at periapsis are merged;
        3. a second interval reaching past π is shifted by -2π and moved first;
        4. an empty first interval is replaced by the second;
        5. a first interval spanning a whole revolution becomes [-π, π].

    Args:
        a: Ranges of the first operand (the orbit the anomalies refer to).
        b: Ranges of the second operand.
        closed: Whether the orbit is closed, allowing apoapsis wraparound.

    Returns:
        The intersection; ``count`` gives the number of intervals.
    """
    pairs = []
    for i in range(2):
        f0 = _pick(a, i)
        f1 = _pick(b, i)
        pairs.append((max(f0[0], f1[0]), min(f0[1], f1[1])))
    (lo0, hi0), (lo2, hi2) = pairs

    # joined through apoapsis
    if (closed
            and (lo0 <= -math.pi or zero(lo0 + math.pi))
            and (hi2 >= math.pi or zero(hi2 - math.pi))):
        lo0 = min(lo0, lo2 - TWO_PI)
        hi0 = max(hi0, hi2 - TWO_PI)
        lo2, hi2 = EMPTY

    # merged at periapsis
    if lo0 < hi0 and lo2 < hi2 and (hi0 >= lo2 or zero(hi0 - lo2)):
        hi0 = hi2
        lo2, hi2 = EMPTY

    # second wraps past apoapsis, move it first
    if lo2 < hi2 and hi2 > math.pi:
        (lo0, hi0), (lo2, hi2) = (lo2 - TWO_PI, hi2 - TWO_PI), (lo0, hi0)

    if lo2 < hi2 and not lo0 < hi0:
        (lo0, hi0), (lo2, hi2) = (lo2, hi2), EMPTY

    if hi0 - lo0 >= TWO_PI:
        (lo0, hi0), (lo2, hi2) = (-math.pi, math.pi), EMPTY

    return AngleRanges((lo0, hi0), (lo2, hi2))


def _pick(ranges: AngleRanges, i: int) -> Interval:
    """The i-th interval, or the first one when the second is empty."""
    if i == 1 and _nonempty(ranges.second):
        return ranges.second
    return ranges.first
