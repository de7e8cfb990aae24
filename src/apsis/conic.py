"""Conic-section formulas and anomaly conversions.

Scalar two-body relations on the semi-latus rectum ``p`` and eccentricity
``e``. Every function here accepts ellipses (``e < 1``), parabolas
(``e == 1``) and hyperbolas (``e > 1``) so that callers never branch on the
conic type themselves.

The "eccentric anomaly" is the elliptic anomaly ``E`` on closed orbits, the
hyperbolic anomaly ``H`` on hyperbolas and Barker's parameter
``D = tan(f/2)`` on parabolas. The mean anomaly follows the matching form of
Kepler's equation::

    ellipse:    M = E - e sin E
    hyperbola:  M = e sinh H - H
    parabola:   M = D + D³/3

and advances linearly with time at the rate ``mean_motion(mu, p, e)``.

References:
    - Vallado, D. (2013). Fundamentals of Astrodynamics and Applications.
    - Battin, R. (1999). An Introduction to the Mathematics and Methods of
      Astrodynamics.
"""
from __future__ import annotations

import math

# ── Tolerance policy ──

EPSILON = 1e-10
"""Absolute tolerance shared by every near-zero comparison in the package."""

TWO_PI = 2.0 * math.pi
"""2π constant."""

KEPLER_TOLERANCE = 1e-14
"""Convergence tolerance for Kepler's equation (radians)."""

KEPLER_MAX_ITER = 50
"""Newton iteration cap for Kepler's equation."""


def zero(x: float) -> bool:
    """True when ``x`` is zero within the package tolerance."""
    return abs(x) < EPSILON


def clamp(lo: float, hi: float, x: float) -> float:
    """Clamp ``x`` to ``[lo, hi]``."""
    return min(hi, max(lo, x))


def sign(x: float) -> int:
    """Sign of ``x`` as -1, 0 or +1."""
    x = float(x)
    return (x > 0.0) - (x < 0.0)


# ── Classification ──


def circular(e: float) -> bool:
    return zero(e)


def parabolic(e: float) -> bool:
    return zero(e - 1.0)


def closed(e: float) -> bool:
    """True for periodic (elliptic or circular) orbits."""
    return e < 1.0 and not parabolic(e)


def hyperbolic(e: float) -> bool:
    return e > 1.0 and not parabolic(e)


# ── Scalar formulas ──


def periapsis(p: float, e: float) -> float:
    """Periapsis radius."""
    return p / (1.0 + e)


def apoapsis(p: float, e: float) -> float:
    """Apoapsis radius (infinite for open orbits)."""
    if not closed(e):
        return math.inf
    return p / (1.0 - e)


def semi_major_axis(p: float, e: float) -> float:
    """Semi-major axis, negative for hyperbolas and infinite for parabolas."""
    if parabolic(e):
        return math.inf
    return p / (1.0 - e * e)


def radius(p: float, e: float, f: float) -> float:
    """Orbital radius at true anomaly ``f``."""
    return p / (1.0 + e * math.cos(f))


def max_true_anomaly(e: float) -> float:
    """Largest reachable true anomaly: π, or the asymptote of a hyperbola."""
    if not hyperbolic(e):
        return math.pi
    return math.acos(-1.0 / e)


def true_anomaly_from_radius(p: float, e: float, r: float) -> float:
    """Non-negative true anomaly at which the orbit reaches radius ``r``.

    Radii inside periapsis map to 0 and radii beyond reach map to the
    apoapsis (π) or the hyperbolic asymptote.
    """
    if r <= 0.0 or circular(e):
        return 0.0
    return math.acos(clamp(-1.0, 1.0, (p / r - 1.0) / e))


def mean_motion(mu: float, p: float, e: float) -> float:
    """Rate of change of mean anomaly (rad per unit time)."""
    if parabolic(e):
        return 2.0 * math.sqrt(mu / (p * p * p))
    a = abs(semi_major_axis(p, e))
    return math.sqrt(mu / (a * a * a))


def period(mu: float, p: float, e: float) -> float:
    """Orbital period (infinite for open orbits)."""
    if not closed(e):
        return math.inf
    return TWO_PI / mean_motion(mu, p, e)


def periapsis_velocity(mu: float, p: float, e: float) -> float:
    """Speed at periapsis, the fastest point of any conic."""
    return math.sqrt(mu / p) * (1.0 + e)


def sphere_of_influence(mu: float, mu_secondary: float, distance: float) -> float:
    """Laplace sphere-of-influence radius of a secondary at ``distance``."""
    return distance * (mu_secondary / mu) ** (2.0 / 5.0)


# ── Anomaly conversions ──


def true_to_eccentric(e: float, f: float) -> float:
    """Eccentric (E), hyperbolic (H) or parabolic (D) anomaly from true anomaly.

    On closed orbits the result is continuous for ``f`` in [-2π, 2π].
    """
    half = 0.5 * f
    if parabolic(e):
        return math.tan(half)
    if closed(e):
        return 2.0 * math.atan2(
            math.sqrt(1.0 - e) * math.sin(half),
            math.sqrt(1.0 + e) * math.cos(half),
        )
    x = math.sqrt((e - 1.0) / (e + 1.0)) * math.tan(half)
    return 2.0 * math.atanh(clamp(-1.0 + EPSILON, 1.0 - EPSILON, x))


def eccentric_to_true(e: float, E: float) -> float:
    """True anomaly from the eccentric, hyperbolic or parabolic anomaly."""
    if parabolic(e):
        return 2.0 * math.atan(E)
    if closed(e):
        half = 0.5 * E
        return 2.0 * math.atan2(
            math.sqrt(1.0 + e) * math.sin(half),
            math.sqrt(1.0 - e) * math.cos(half),
        )
    return 2.0 * math.atan(math.sqrt((e + 1.0) / (e - 1.0)) * math.tanh(0.5 * E))


def eccentric_to_mean(e: float, E: float) -> float:
    """Kepler's equation."""
    if parabolic(e):
        return E + E * E * E / 3.0
    if closed(e):
        return E - e * math.sin(E)
    return e * math.sinh(E) - E


def mean_to_eccentric(e: float, M: float) -> float:
    """Invert Kepler's equation.

    Closed orbits wrap ``M`` to [-π, π] and return ``E`` in the same range.
    Parabolas use Barker's closed-form solution; ellipses and hyperbolas
    use Newton iteration from a starting point that brackets the root.
    """
    if parabolic(e):
        return _barker(M)
    if closed(e):
        return _kepler_elliptic(e, math.remainder(M, TWO_PI))
    return _kepler_hyperbolic(e, M)


def true_to_mean(e: float, f: float) -> float:
    return eccentric_to_mean(e, true_to_eccentric(e, f))


def mean_to_true(e: float, M: float) -> float:
    return eccentric_to_true(e, mean_to_eccentric(e, M))


# ── Private helpers ──


def _barker(M: float) -> float:
    """Solve ``D + D³/3 = M`` in closed form.

    Solved for ``|M|`` and mirrored, which avoids cancellation in
    ``w - sqrt(w² + 1)`` for large negative mean anomalies.
    """
    w = 1.5 * abs(M)
    s = (w + math.sqrt(w * w + 1.0)) ** (1.0 / 3.0)
    return math.copysign(s - 1.0 / s, M)


def _kepler_elliptic(e: float, M: float) -> float:
    """Newton iteration for ``E - e sin E = M`` with ``M`` in [-π, π]."""
    if circular(e):
        return M

    E = M + e * math.sin(M) if e < 0.8 else math.copysign(math.pi, M)
    for _ in range(KEPLER_MAX_ITER):
        delta = (E - e * math.sin(E) - M) / (1.0 - e * math.cos(E))
        E -= delta
        if abs(delta) < KEPLER_TOLERANCE:
            break
    return E


def _kepler_hyperbolic(e: float, M: float) -> float:
    """Newton iteration for ``e sinh H - H = M``.

    ``e sinh H - H`` is convex and increasing for ``H > 0``, so starting
    from an upper bound of the root converges monotonically without
    overshooting into overflow.
    """
    m = abs(M)
    if m == 0.0:
        return 0.0

    # e sinh H - H >= e H³/6 and >= (e - 1) sinh H, both bound H from above
    H = min((6.0 * m / e) ** (1.0 / 3.0), math.asinh(m / (e - 1.0)))
    for _ in range(KEPLER_MAX_ITER):
        delta = (e * math.sinh(H) - H - m) / (e * math.cosh(H) - 1.0)
        H -= delta
        if abs(delta) < KEPLER_TOLERANCE * max(1.0, H):
            break
    return math.copysign(H, M)
