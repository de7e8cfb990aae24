"""
Example: Patched-conic lunar transfer and a small debris screening.

Builds a probe on an Earth-Moon transfer orbit (normalized units: Earth
mu = 1, Moon distance = 1), finds where it enters and leaves the Moon's
sphere of influence, then screens a handful of synthetic orbits for close
approaches. No input files needed.
"""

import sys
sys.path.insert(0, "src")

import math

from apsis import conic
from apsis.orbit import Orbit
from apsis.intercept import InterceptFinder, SearchSettings, screen_pairs


def make_transfer_orbit(
    r_periapsis: float = 0.2,
    eccentricity: float = 0.8,
    arrival_angle: float = 0.5,
    soi: float = 0.17,
) -> Orbit:
    """Transfer orbit that reaches the sphere of influence at t=0.

    ``arrival_angle`` is the angle at the Moon between the Earth-Moon line
    and the arrival point.
    """
    p = r_periapsis * (1.0 + eccentricity)
    r1 = math.sqrt(1.0 + soi**2 - 2.0 * soi * math.cos(arrival_angle))
    f1 = conic.true_anomaly_from_radius(p, eccentricity, r1)
    lead = math.asin(soi / r1 * math.sin(arrival_angle))
    t_arrival = conic.true_to_mean(eccentricity, f1) / conic.mean_motion(1.0, p, eccentricity)
    return Orbit.from_elements(
        1.0, p, eccentricity, 0.0, 0.0, lead - f1, -t_arrival, name="PROBE",
    )


def main():
    print("=" * 65)
    print("  APSIS — Lunar Transfer Demo")
    print("=" * 65)

    soi = conic.sphere_of_influence(1.0, 0.0123, 1.0)
    moon = Orbit.from_elements(1.0, 1.0, 0.0, 0.0, 0.0, 0.0, 0.0, name="MOON")
    probe = make_transfer_orbit(soi=soi)

    print(f"\nMoon sphere of influence: {soi:.4f}")
    print(f"Probe periapsis/apoapsis: {probe.periapsis:.3f} / {probe.apoapsis:.3f}")

    # ── Sphere-of-influence crossings ──
    finder = InterceptFinder(SearchSettings.for_sphere_of_influence(soi))
    t0 = probe.periapsis_time
    hits = finder.find(probe, moon, t0, t0 + probe.period)

    print(f"\n{len(hits)} sphere-of-influence crossing(s):")
    for hit in hits:
        event = "ENTER" if hit.speed < 0 else "EXIT "
        print(f"  {event} {hit.summary()}")

    # ── Collision screening ──
    catalog = {
        "LEO-A": Orbit.from_elements(1.0, 0.1, 0.0, 0.2, 0.0, 0.0, 0.0, name="LEO-A"),
        "LEO-B": Orbit.from_elements(1.0, 0.1, 0.0, 0.8, 0.0, 0.0, 0.0, name="LEO-B"),
        "LEO-C": Orbit.from_elements(1.0, 0.1, 0.0, 0.8, 0.0, 0.0, 0.3, name="LEO-C"),
        "MEO":   Orbit.from_elements(1.0, 0.4, 0.0, 0.9, 1.0, 0.0, 0.0, name="MEO"),
        "PROBE": probe,
    }
    span = 2.0 * catalog["LEO-A"].period

    print(f"\nScreening {len(catalog)} orbits over [0, {span:.3f}]...")
    df = screen_pairs(catalog, 0.0, span, SearchSettings.for_collision(1e-3))

    if df.empty:
        print("No close approaches.")
        return

    print(f"\n{'TIME':>10} {'BODY 1':8s} {'BODY 2':8s} {'DISTANCE':>10} {'SPEED':>10}")
    print("-" * 50)
    for _, row in df.iterrows():
        print(
            f"{row['time']:>10.5f} "
            f"{row['body1']:8s} "
            f"{row['body2']:8s} "
            f"{row['distance']:>10.2e} "
            f"{row['speed']:>+10.4f}"
        )


if __name__ == "__main__":
    main()
