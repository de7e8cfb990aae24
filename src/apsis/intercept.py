"""Intercept orchestration: from two orbits to a list of intercepts.

Chains the pipeline stages for one pair of orbits:

    1. Proximity ranges of each orbit relative to the other.
    2. Time windows where both bodies are inside their ranges.
    3. Closest-approach search inside each window, repeated from the
       search's progress time until the window is exhausted.

Only samples whose separation is within ``threshold`` of the target
distance are reported.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from itertools import combinations
from typing import Optional

import pandas as pd
from tqdm import tqdm

from .orbit import Orbit
from .proximity import proximity_ranges
from .search import Intercept, search
from .windows import intercept_times

logger = logging.getLogger(__name__)


# Configuration
@dataclass
class SearchSettings:
    """Configuration of an intercept query.

    Attributes:
        threshold: Distance tolerance around the target distance.
        target_distance: Separation searched for (0 for a collision).
        max_intercepts: Maximum number of intercepts reported per pair.
        max_steps: Step budget of each closest-approach search.
        max_times: Maximum number of time windows; ``None`` means
            ``4 * max_intercepts``.
    """
    threshold: float = 1.0
    target_distance: float = 0.0
    max_intercepts: int = 4
    max_steps: int = 100
    max_times: Optional[int] = None

    @classmethod
    def for_collision(cls, threshold: float) -> SearchSettings:
        """Close approaches within ``threshold`` of each other."""
        return cls(threshold=threshold)

    @classmethod
    def for_sphere_of_influence(cls, radius: float, tolerance: float = 0.05) -> SearchSettings:
        """Entries into and exits from a sphere of influence of ``radius``.

        The threshold is ``tolerance`` as a fraction of the radius.
        """
        return cls(threshold=tolerance * radius, target_distance=radius, max_intercepts=2)

    @property
    def window_limit(self) -> int:
        return self.max_times if self.max_times is not None else 4 * self.max_intercepts


def intercept_orbit(
    orbit1: Orbit,
    orbit2: Orbit,
    t0: float,
    t1: float,
    threshold: float,
    target_distance: float = 0.0,
    max_intercepts: int = 4,
    max_steps: int = 100,
    max_times: Optional[int] = None,
) -> list[Intercept]:
    """Find the times in ``[t0, t1]`` where two bodies pass ``target_distance`` apart.

    Args:
        orbit1: Orbit of the first body.
        orbit2: Orbit of the second body.
        t0: Start of the search span.
        t1: End of the search span.
        threshold: Accepted deviation from ``target_distance``.
        target_distance: Separation searched for (0 for closest approach).
        max_intercepts: Maximum number of intercepts returned.
        max_steps: Step budget of each search.
        max_times: Maximum number of time windows (``4 * max_intercepts``
            when omitted).

    Returns:
        Intercepts in time order, at most ``max_intercepts`` of them. Empty
        when the orbits never come within reach.

    Raises:
        ValueError: On a non-positive threshold or ``t1 < t0``.
    """
    if threshold <= 0.0:
        raise ValueError(f"Threshold must be positive, got {threshold}")
    if t1 < t0:
        raise ValueError(f"Search span ends before it starts ({t0} > {t1})")

    reach = target_distance + threshold
    ranges1 = proximity_ranges(orbit1, orbit2, reach)
    ranges2 = proximity_ranges(orbit2, orbit1, reach)
    if not (ranges1 and ranges2):
        return []

    if max_times is None:
        max_times = 4 * max_intercepts
    windows = intercept_times(orbit1, orbit2, t0, t1, ranges1, ranges2, max_times)
    logger.debug("%d time window(s) in [%.6g, %.6g]", len(windows), t0, t1)

    intercepts: list[Intercept] = []
    for t_begin, t_end in windows:
        t = t_begin
        while t < t_end and len(intercepts) < max_intercepts:
            sample, t = search(
                orbit1, orbit2, t, t_end, threshold, target_distance, max_steps,
            )
            # a search that ran past the window end found nothing inside it
            if sample.time <= t_end and abs(sample.distance - target_distance) <= threshold:
                intercepts.append(sample)
        if len(intercepts) >= max_intercepts:
            break

    return intercepts


# Query engine
class InterceptFinder:
    """Intercept search bound to a fixed configuration.

    Args:
        settings: Search configuration. Defaults to :class:`SearchSettings`.

    Example:
        >>> finder = InterceptFinder(SearchSettings.for_collision(10.0))
        >>> for hit in finder.find(station, debris, 0.0, 86400.0):
        ...     print(hit.summary())
    """
    def __init__(self, settings: Optional[SearchSettings] = None) -> None:
        self.settings = settings or SearchSettings()

    def find(self, orbit1: Orbit, orbit2: Orbit, t0: float, t1: float) -> list[Intercept]:
        """Intercepts of two orbits in ``[t0, t1]``."""
        s = self.settings
        return intercept_orbit(
            orbit1,
            orbit2,
            t0,
            t1,
            threshold=s.threshold,
            target_distance=s.target_distance,
            max_intercepts=s.max_intercepts,
            max_steps=s.max_steps,
            max_times=s.window_limit,
        )


# Batch utils
def screen_pairs(
    orbits: dict[str, Orbit],
    t0: float,
    t1: float,
    settings: Optional[SearchSettings] = None,
    progress: bool = True,
) -> pd.DataFrame:
    """Search every pair of a catalog for intercepts.

    Args:
        orbits: Mapping of name to orbit.
        t0: Start of the search span.
        t1: End of the search span.
        settings: Search configuration (defaults to :class:`SearchSettings`).
        progress: Show a progress bar.

    Returns:
        DataFrame of all intercepts with ``body1`` and ``body2`` columns,
        sorted by time. Empty when no pair intercepts.
    """
    finder = InterceptFinder(settings)
    pairs = list(combinations(orbits, 2))
    records: list[dict] = []

    for name1, name2 in tqdm(pairs, desc="Screening pairs", disable=not progress):
        for hit in finder.find(orbits[name1], orbits[name2], t0, t1):
            records.append({"body1": name1, "body2": name2, **hit.to_dict()})

    if not records:
        return pd.DataFrame()

    df = pd.DataFrame(records)
    return df.sort_values("time").reset_index(drop=True)
