"""Time windows where both orbits are inside their proximity ranges.

Each orbit's true-anomaly ranges are mapped to time intervals through the
mean anomaly. Closed orbits repeat those intervals every period; open orbits
pass periapsis once, so their anomaly is first restricted to what is reached
inside the search span. The two per-orbit interval streams are then walked
together (two-pointer merge) and their overlaps reported in time order.
"""
from __future__ import annotations

import logging
import math

from . import conic
from .conic import TWO_PI, clamp, zero
from .orbit import Orbit
from .ranges import EMPTY, AngleRanges, Interval

logger = logging.getLogger(__name__)


def intercept_times(
    orbit1: Orbit,
    orbit2: Orbit,
    t0: float,
    t1: float,
    ranges1: AngleRanges,
    ranges2: AngleRanges,
    max_times: int,
) -> list[Interval]:
    """Find time windows in ``[t0, t1]`` where both orbits are within range.

    Args:
        orbit1: First orbit.
        orbit2: Second orbit.
        t0: Start of the search span.
        t1: End of the search span.
        ranges1: True-anomaly ranges of ``orbit1``.
        ranges2: True-anomaly ranges of ``orbit2``.
        max_times: Maximum number of windows to return.

    Returns:
        Disjoint, non-adjacent ``(t_begin, t_end)`` windows sorted by time.
        The list is silently truncated at ``max_times``.

    Raises:
        ValueError: If ``t1 < t0``.
    """
    if t1 < t0:
        raise ValueError(f"Search span ends before it starts ({t0} > {t1})")
    if not (ranges1 and ranges2):
        return []

    orbits = (orbit1, orbit2)
    times = [_range_times(o, r, t0, t1) for o, r in zip(orbits, (ranges1, ranges2))]
    periods = [o.period if o.closed else 0.0 for o in orbits]
    n_orbit = [
        math.floor((t0 - o.periapsis_time) / periods[i] + 0.5) if o.closed else 0
        for i, o in enumerate(orbits)
    ]

    isect = [0, 0]
    windows: list[Interval] = []
    t = t0
    while t < t1 and len(windows) < max_times:
        trange = [
            (times[o][isect[o]][0] + n_orbit[o] * periods[o],
             times[o][isect[o]][1] + n_orbit[o] * periods[o])
            for o in range(2)
        ]

        t_begin = max(t, trange[0][0], trange[1][0])
        t_end = min(t1, trange[0][1], trange[1][1])
        t = max(t, t_end)

        if t_begin < t_end:
            if windows and (t_begin <= windows[-1][1] or zero(t_begin - windows[-1][1])):
                windows[-1] = (windows[-1][0], max(windows[-1][1], t_end))
            else:
                windows.append((t_begin, t_end))

        # advance the orbit whose interval ends first
        advance = 0 if trange[0][1] < trange[1][1] else 1
        isect[advance] += 1
        if isect[advance] == 2 or not times[advance][1][0] < times[advance][1][1]:
            if not orbits[advance].closed:
                # open orbit passes periapsis once, search exhausted
                break
            isect[advance] = 0
            n_orbit[advance] += 1

    if len(windows) == max_times and t < t1:
        logger.debug("Window list truncated at %d entries (t=%.6g of %.6g)", max_times, t, t1)
    return windows


def _range_times(
    orbit: Orbit,
    ranges: AngleRanges,
    t0: float,
    t1: float,
) -> list[Interval]:
    """Map an orbit's anomaly ranges to times around its reference periapsis.

    Empty ranges map to empty intervals so indices stay aligned with the
    anomaly ranges.
    """
    e = orbit.e
    n = orbit.mean_motion
    t_pe = orbit.periapsis_time

    if orbit.closed:
        f_min, f_max = -TWO_PI, TWO_PI
    else:
        # anomalies actually reached during [t0, t1]
        f_min = conic.mean_to_true(e, orbit.mean_anomaly(t0))
        f_max = conic.mean_to_true(e, orbit.mean_anomaly(t1))

    result: list[Interval] = []
    for lo, hi in (ranges.first, ranges.second):
        if not lo < hi:
            result.append(EMPTY)
            continue
        result.append(tuple(
            t_pe + _unwrapped_mean(e, clamp(f_min, f_max, f), orbit.closed) / n
            for f in (lo, hi)
        ))
    return result


def _unwrapped_mean(e: float, f: float, closed: bool) -> float:
    """Mean anomaly continuous in ``f``, counting revolutions on closed orbits."""
    if not closed:
        return conic.true_to_mean(e, f)
    revs = math.floor((f + math.pi) / TWO_PI)
    return conic.true_to_mean(e, f - revs * TWO_PI) + revs * TWO_PI
