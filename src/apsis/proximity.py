"""Proximity ranges: where on one orbit the other orbit's path is within reach.

For a pair of orbits and a distance threshold, find the true-anomaly ranges
of the first orbit where its position can be within ``threshold`` of any
point of the second orbit's path. Two independent necessary conditions are
combined:

    1. Radial band: the radius must lie between the other orbit's
       periapsis and apoapsis, widened by the threshold.
    2. Nodal band: the position must be near the line of nodes, where the
       two orbital planes are within the threshold of each other.

Both conditions are exact geometry, so a position that is actually close to
the other path always falls inside the returned ranges.
"""
from __future__ import annotations

import logging
import math

import numpy as np

from . import conic
from .conic import EPSILON, TWO_PI, clamp, zero
from .orbit import Orbit
from .ranges import EMPTY, AngleRanges, intersect_ranges

logger = logging.getLogger(__name__)


def proximity_ranges(orbit1: Orbit, orbit2: Orbit, threshold: float) -> AngleRanges:
    """True-anomaly ranges of ``orbit1`` that can be within ``threshold`` of ``orbit2``.

    Args:
        orbit1: Orbit the returned anomalies refer to.
        orbit2: Orbit whose path is tested against.
        threshold: Distance threshold (same units as ``p``).

    Returns:
        Up to two ranges in [-2π, π]. ``count == 0`` when either orbit is
        radial or the apsides rule out any close approach.

    Raises:
        ValueError: If ``threshold`` is negative.
    """
    if threshold < 0.0:
        raise ValueError(f"Threshold must be non-negative, got {threshold}")

    if orbit1.radial or orbit2.radial:
        logger.debug("Radial orbit, proximity ranges not computed")
        return AngleRanges()

    p1, e1 = orbit1.p, orbit1.e
    p2, e2 = orbit2.p, orbit2.e

    # Apoapsis of one below the periapsis of the other
    ap1, pe1 = conic.apoapsis(p1, e1), conic.periapsis(p1, e1)
    ap2, pe2 = conic.apoapsis(p2, e2), conic.periapsis(p2, e2)
    if ((conic.closed(e1) and ap1 <= pe2 - threshold)
            or (conic.closed(e2) and ap2 <= pe1 - threshold)):
        logger.debug(
            "Apsides never within %.6g (ap1=%.6g pe1=%.6g ap2=%.6g pe2=%.6g)",
            threshold, ap1, pe1, ap2, pe2,
        )
        return AngleRanges()

    radial = _radial_ranges(p1, e1, pe2 - threshold,
                            ap2 + threshold if conic.closed(e2) else math.inf)
    nodal = _nodal_ranges(orbit1, orbit2, threshold)

    return intersect_ranges(radial, nodal, conic.closed(e1))


def _radial_ranges(p: float, e: float, r_min: float, r_max: float) -> AngleRanges:
    """Anomalies where the radius lies in ``[r_min, r_max]``."""
    max_f = conic.max_true_anomaly(e)
    f_pe = 0.0 if conic.circular(e) else conic.true_anomaly_from_radius(p, e, r_min)
    f_ap = max_f if (conic.circular(e) or math.isinf(r_max)) else \
        conic.true_anomaly_from_radius(p, e, r_max)

    f1, f2 = min(f_ap, f_pe), max(f_ap, f_pe)
    closed = conic.closed(e)

    if closed and zero(f1) and not f2 < math.pi:
        # anywhere on the orbit
        return AngleRanges((-TWO_PI, TWO_PI))
    if zero(f1):
        # around periapsis
        return AngleRanges((-f2, f2))
    if closed and not f2 < math.pi:
        # around apoapsis
        return AngleRanges((-TWO_PI, -f1), (f1, TWO_PI))
    return AngleRanges((-f2, -f1), (f1, f2))


def _nodal_ranges(orbit1: Orbit, orbit2: Orbit, threshold: float) -> AngleRanges:
    """Anomalies of ``orbit1`` near the line of nodes with ``orbit2``."""
    nodes = np.cross(orbit1.normal_axis, orbit2.normal_axis)
    n2 = float(np.dot(nodes, nodes))
    if zero(n2):
        # coplanar (prograde or retrograde)
        return AngleRanges.full()
    n = math.sqrt(n2)

    rel_inc = conic.sign(np.dot(orbit1.normal_axis, orbit2.normal_axis)) * \
        math.asin(clamp(-1.0, 1.0, n))

    f_an = math.copysign(
        math.acos(clamp(-1.0, 1.0, np.dot(orbit1.major_axis, nodes) / n)),
        np.dot(orbit1.minor_axis, nodes),
    )
    f_dn = f_an - math.copysign(math.pi, f_an)

    windows = []
    for f_node in (min(f_an, f_dn), max(f_an, f_dn)):
        denom = 1.0 + orbit1.e * math.cos(f_node)
        if denom <= EPSILON:
            # node at or beyond the asymptote, never reached
            windows.append(EMPTY)
            continue
        r = orbit1.p / denom
        # spherical law of sines
        delta_f = math.asin(clamp(
            -1.0, 1.0,
            math.sin(threshold / (2.0 * r)) / math.sin(abs(rel_inc) / 2.0),
        ))
        windows.append((f_node - delta_f, f_node + delta_f))

    return AngleRanges(*windows)
