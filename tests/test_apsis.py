#!/usr/bin/env python3
"""
Unit test driver for APSIS: Analytic Proximity Search for Intercepting Orbits
"""
import pytest
import math

import numpy as np

from apsis import conic
from apsis.conic import TWO_PI
from apsis.orbit import Orbit
from apsis.ranges import EMPTY, AngleRanges, intersect_ranges
from apsis.proximity import proximity_ranges
from apsis.windows import intercept_times
from apsis.search import Intercept, search
from apsis.intercept import (
    InterceptFinder,
    SearchSettings,
    intercept_orbit,
    screen_pairs,
)


# ═══════════════════════════════════════════════════════════════
# SCENARIOS
# ═══════════════════════════════════════════════════════════════
def _base_orbit() -> Orbit:
    return Orbit.from_elements(
        mu=1.0, p=1.0, e=0.3,
        inclination=0.4, ascending_node=0.3, argument_of_periapsis=0.5,
        periapsis_time=0.0, name="base",
    )


def _crossing_pair(
    e2: float = 0.2,
    f2: float = 0.7,
    rel_inc: float = 0.6,
    E1: float = 1.0,
) -> tuple[Orbit, Orbit, float]:
    """Two orbits whose bodies meet at eccentric anomaly ``E1`` of the first.

    The second orbit passes through the same point at the same time with
    true anomaly ``f2`` and a plane tilted by ``rel_inc``.
    """
    orbit1 = _base_orbit()
    t = conic.eccentric_to_mean(orbit1.e, E1) / orbit1.mean_motion

    r_vec = orbit1.position_eccentric(E1)
    r = np.linalg.norm(r_vec)
    radial = r_vec / r
    horizontal = np.cross(orbit1.normal_axis, radial)

    p2 = r * (1.0 + e2 * math.cos(f2))
    k = math.sqrt(orbit1.mu / p2)
    v_r = k * e2 * math.sin(f2)
    v_h = k * (1.0 + e2 * math.cos(f2))
    velocity = v_r * radial + v_h * (
        math.cos(rel_inc) * horizontal + math.sin(rel_inc) * orbit1.normal_axis
    )

    orbit2 = Orbit.from_state(orbit1.mu, r_vec, velocity, t, name="crossing")
    return orbit1, orbit2, t


def _circle(p: float = 1.0, inclination: float = 0.3, name=None) -> Orbit:
    return Orbit.from_elements(1.0, p, 0.0, inclination, 0.0, 0.0, 0.0, name=name)


def _lunar_transfer() -> tuple[Orbit, Orbit, float]:
    """Probe on a transfer orbit crossing into the Moon's sphere of influence at t=0."""
    mu, mu_moon, r_moon = 1.0, 0.012, 1.0
    soi = conic.sphere_of_influence(mu, mu_moon, r_moon)

    r0, e = 0.2, 0.8
    p = r0 * (1.0 + e)
    # arrival point on the sphere of influence, 0.5 rad off the Earth-Moon line
    lam = 0.5
    r1 = math.sqrt(r_moon**2 + soi**2 - 2.0 * r_moon * soi * math.cos(lam))
    f1 = conic.true_anomaly_from_radius(p, e, r1)
    gamma = math.asin(soi / r1 * math.sin(lam))
    t1 = conic.true_to_mean(e, f1) / conic.mean_motion(mu, p, e)

    probe = Orbit.from_elements(mu, p, e, 0.0, 0.0, gamma - f1, -t1, name="probe")
    moon = Orbit.from_elements(mu, r_moon, 0.0, 0.0, 0.0, 0.0, 0.0, name="moon")
    return probe, moon, soi


def _check_canonical(ranges: AngleRanges):
    assert 0 <= ranges.count <= 2
    for lo, hi in ranges.intervals:
        assert lo < hi
        assert lo >= -TWO_PI - 1e-12
        assert hi <= math.pi + 1e-12
    if ranges.count == 2:
        lo, hi = ranges.second
        assert lo >= -math.pi - 1e-12
        assert ranges.first[1] < ranges.second[0]
    if ranges.count == 1:
        assert ranges.second == EMPTY


# ═══════════════════════════════════════════════════════════════
# CONIC TESTS
# ═══════════════════════════════════════════════════════════════
class TestConic:
    @pytest.mark.parametrize("e", [0.0, 0.3, 0.9, 1.0, 1.5, 3.0])
    def test_anomaly_round_trip(self, e):
        for f in (-1.5, -0.5, 0.0, 0.7, 1.5):
            M = conic.true_to_mean(e, f)
            assert conic.mean_to_true(e, M) == pytest.approx(f, abs=1e-9)

    @pytest.mark.parametrize("e, M", [(0.1, 0.5), (0.95, -3.0), (1.2, 10.0), (2.0, -1e3), (1.0, 25.0)])
    def test_kepler_equation_solved(self, e, M):
        E = conic.mean_to_eccentric(e, M)
        assert conic.eccentric_to_mean(e, E) == pytest.approx(M, rel=1e-12, abs=1e-12)

    def test_closed_mean_anomaly_wraps(self):
        E = conic.mean_to_eccentric(0.3, 1.0)
        assert conic.mean_to_eccentric(0.3, 1.0 + 3 * TWO_PI) == pytest.approx(E, abs=1e-12)

    def test_eccentric_anomaly_continuous_past_apoapsis(self):
        # f in [-2π, 2π] maps to a continuous E on closed orbits
        E = conic.true_to_eccentric(0.5, -math.pi - 0.1)
        assert E < -math.pi

    def test_sign_of_numpy_scalars(self):
        assert conic.sign(np.float64(-2.5)) == -1
        assert conic.sign(np.dot([1.0, 0.0], [3.0, 1.0])) == 1
        assert conic.sign(np.float64(0.0)) == 0

    def test_apsides(self):
        assert conic.periapsis(1.0, 0.5) == pytest.approx(2.0 / 3.0)
        assert conic.apoapsis(1.0, 0.5) == pytest.approx(2.0)
        assert math.isinf(conic.apoapsis(1.0, 1.5))
        assert math.isinf(conic.apoapsis(1.0, 1.0))

    def test_classification(self):
        assert conic.circular(0.0)
        assert conic.closed(0.5)
        assert conic.parabolic(1.0)
        assert not conic.closed(1.0)
        assert not conic.hyperbolic(1.0)
        assert conic.hyperbolic(1.5)

    def test_period_circular(self):
        assert conic.period(1.0, 1.0, 0.0) == pytest.approx(TWO_PI)
        assert math.isinf(conic.period(1.0, 1.0, 2.0))

    def test_parabolic_mean_motion(self):
        assert conic.mean_motion(4.0, 2.0, 1.0) == pytest.approx(2.0 * math.sqrt(0.5))

    def test_true_anomaly_from_radius(self):
        assert conic.true_anomaly_from_radius(1.0, 0.5, 1.0) == pytest.approx(math.pi / 2)
        # inside periapsis and beyond apoapsis clamp to the apsides
        assert conic.true_anomaly_from_radius(1.0, 0.5, 0.1) == 0.0
        assert conic.true_anomaly_from_radius(1.0, 0.5, 5.0) == pytest.approx(math.pi)
        assert conic.true_anomaly_from_radius(1.0, 0.0, 1.0) == 0.0

    def test_max_true_anomaly(self):
        assert conic.max_true_anomaly(0.5) == math.pi
        assert conic.max_true_anomaly(2.0) == pytest.approx(2.0 * math.pi / 3.0)

    def test_sphere_of_influence(self):
        assert conic.sphere_of_influence(1.0, 0.012, 1.0) == pytest.approx(0.1705, abs=1e-4)


# ═══════════════════════════════════════════════════════════════
# ORBIT TESTS
# ═══════════════════════════════════════════════════════════════
class TestOrbit:
    def test_frame_orthonormal(self):
        o = _base_orbit()
        for axis in (o.major_axis, o.minor_axis, o.normal_axis):
            assert np.linalg.norm(axis) == pytest.approx(1.0)
        assert np.dot(o.major_axis, o.minor_axis) == pytest.approx(0.0, abs=1e-12)
        assert np.allclose(np.cross(o.major_axis, o.minor_axis), o.normal_axis)

    @pytest.mark.parametrize("e", [0.3, 1.5])
    def test_state_round_trip(self, e):
        o = Orbit.from_elements(1.0, 1.2, e, 0.4, 0.3, 0.5, 0.7)
        _, r, v = o.state_at(2.0)
        o2 = Orbit.from_state(1.0, r, v, 2.0)

        assert o2.p == pytest.approx(o.p, rel=1e-9)
        assert o2.e == pytest.approx(o.e, rel=1e-9)
        assert o2.periapsis_time == pytest.approx(o.periapsis_time, abs=1e-9)
        assert np.allclose(o2.major_axis, o.major_axis, atol=1e-9)
        assert np.allclose(o2.normal_axis, o.normal_axis, atol=1e-9)
        assert np.allclose(o2.state_at(5.0)[1], o.state_at(5.0)[1], atol=1e-9)

    def test_vis_viva(self):
        o = _base_orbit()
        f = 1.0
        r = np.linalg.norm(o.position_true(f))
        v = np.linalg.norm(o.velocity_true(f))
        a = conic.semi_major_axis(o.p, o.e)
        assert v * v == pytest.approx(o.mu * (2.0 / r - 1.0 / a))

    def test_circular_equatorial_state(self):
        o = Orbit.from_state(1.0, [1.0, 0.0, 0.0], [0.0, 1.0, 0.0], 3.0)
        assert o.circular
        assert o.e == 0.0
        assert np.allclose(o.major_axis, [1.0, 0.0, 0.0])
        assert np.allclose(o.minor_axis, [0.0, 1.0, 0.0])
        assert o.periapsis_time == pytest.approx(3.0)
        assert o.period == pytest.approx(TWO_PI)

    def test_parabolic_state(self):
        o = Orbit.from_state(1.0, [1.0, 0.0, 0.0], [0.0, math.sqrt(2.0), 0.0], 0.0)
        assert o.parabolic
        assert o.open
        assert math.isinf(o.period)
        assert o.periapsis == pytest.approx(1.0)
        assert np.allclose(o.state_at(0.0)[1], [1.0, 0.0, 0.0])

    def test_radial_state_rejected(self):
        with pytest.raises(ValueError, match="Radial"):
            Orbit.from_state(1.0, [1.0, 0.0, 0.0], [0.5, 0.0, 0.0], 0.0)

    def test_invalid_mu(self):
        with pytest.raises(ValueError, match="Gravitational parameter"):
            Orbit.from_elements(0.0, 1.0, 0.1, 0.0, 0.0, 0.0, 0.0)

    def test_negative_eccentricity(self):
        with pytest.raises(ValueError, match="Eccentricity"):
            Orbit.from_elements(1.0, 1.0, -0.1, 0.0, 0.0, 0.0, 0.0)

    def test_to_dict(self):
        d = _base_orbit().to_dict()
        assert d["name"] == "base"
        assert d["inclination_rad"] == pytest.approx(0.4)
        assert d["period"] == pytest.approx(_base_orbit().period)


# ═══════════════════════════════════════════════════════════════
# ANGLE RANGE TESTS
# ═══════════════════════════════════════════════════════════════
class TestIntersectRanges:
    def test_simple_overlap(self):
        r = intersect_ranges(AngleRanges((-1.0, 1.0)), AngleRanges((0.0, 2.0)), True)
        assert r.count == 1
        assert r.first == (0.0, 1.0)

    def test_joined_through_apoapsis(self):
        a = AngleRanges((-TWO_PI, -2.0), (2.0, TWO_PI))
        r = intersect_ranges(a, AngleRanges.full(), True)
        assert r.count == 1
        assert r.first[0] == pytest.approx(2.0 - TWO_PI)
        assert r.first[1] == pytest.approx(-2.0)

    def test_merged_at_periapsis(self):
        a = AngleRanges((-2.0, 0.0), (0.0, 2.0))
        r = intersect_ranges(a, AngleRanges((-1.0, 1.0)), True)
        assert r.count == 1
        assert r.first == (-1.0, 1.0)

    def test_second_wraps_moves_first(self):
        a = AngleRanges((-1.0, -0.5), (2.5, 4.0))
        r = intersect_ranges(a, AngleRanges((-TWO_PI, TWO_PI)), False)
        assert r.count == 2
        assert r.first[0] == pytest.approx(2.5 - TWO_PI)
        assert r.first[1] == pytest.approx(4.0 - TWO_PI)
        assert r.second == (-1.0, -0.5)

    def test_empty_first_replaced(self):
        a = AngleRanges((-2.0, -1.0), (1.0, 2.0))
        r = intersect_ranges(a, AngleRanges((0.5, 1.5)), False)
        assert r.count == 1
        assert r.first == (1.0, 1.5)
        assert r.second == EMPTY

    def test_disjoint(self):
        r = intersect_ranges(AngleRanges((-1.0, -0.5)), AngleRanges((0.5, 1.0)), True)
        assert r.count == 0
        assert not r

    @pytest.mark.parametrize("closed", [True, False])
    def test_full_revolution_collapses(self, closed):
        whole = AngleRanges((-TWO_PI, TWO_PI))
        r = intersect_ranges(whole, whole, closed)
        assert r.count == 1
        assert r.first == (-math.pi, math.pi)

    def test_contains_alias(self):
        r = AngleRanges((-4.0, -3.5))
        assert r.contains(2.5)
        assert not r.contains(0.0)


# ═══════════════════════════════════════════════════════════════
# PROXIMITY RANGE TESTS
# ═══════════════════════════════════════════════════════════════
class TestProximityRanges:
    @pytest.mark.parametrize("e2, f2", [(0.2, 0.7), (1.0, 0.5), (1.5, 0.5)])
    def test_meeting_point_inside_ranges(self, e2, f2):
        orbit1, orbit2, t = _crossing_pair(e2=e2, f2=f2)
        threshold = (orbit1.p + orbit2.p) / 1000.0

        f1 = conic.eccentric_to_true(orbit1.e, 1.0)
        ranges1 = proximity_ranges(orbit1, orbit2, threshold)
        ranges2 = proximity_ranges(orbit2, orbit1, threshold)

        assert ranges1.count in (1, 2)
        assert ranges2.count in (1, 2)
        assert ranges1.contains(f1)
        assert ranges2.contains(f2)
        _check_canonical(ranges1)
        _check_canonical(ranges2)

    def test_hyperbola_node_beyond_asymptote(self):
        orbit1, orbit2, _ = _crossing_pair(e2=1.5, f2=0.5)
        ranges = proximity_ranges(orbit2, orbit1, (orbit1.p + orbit2.p) / 1000.0)
        assert ranges.count == 1

    def test_parabola_node_at_infinity(self):
        # inclined parabola whose descending node lies at f = π
        parabola = Orbit.from_elements(1.0, 2.0, 1.0, 0.5, 0.0, 0.0, 0.0)
        circle = _circle(1.5, inclination=0.0)
        assert proximity_ranges(parabola, circle, 0.01).count == 0
        _check_canonical(proximity_ranges(circle, parabola, 0.01))

    def test_apsidal_infeasible(self):
        inner, outer = _circle(1.0), _circle(3.0)
        assert proximity_ranges(inner, outer, 0.1).count == 0
        assert proximity_ranges(outer, inner, 0.1).count == 0

    def test_coplanar_full_orbit(self):
        ranges = proximity_ranges(_circle(), _circle(), 0.1)
        assert ranges.count == 1
        assert ranges.first == (-math.pi, math.pi)

    def test_inclined_circles(self):
        a, b = _circle(inclination=0.2), _circle(inclination=0.8)
        for ranges in (proximity_ranges(a, b, 0.01), proximity_ranges(b, a, 0.01)):
            assert ranges.count == 2
            _check_canonical(ranges)
            assert ranges.contains(0.0)
            assert ranges.contains(math.pi)
            assert not ranges.contains(math.pi / 2)

    def test_lunar_transfer_ranges(self):
        probe, moon, soi = _lunar_transfer()
        ranges = proximity_ranges(probe, moon, soi * 1.05)
        assert ranges.count == 2
        _check_canonical(ranges)

    def test_radial_orbit(self):
        radial = Orbit(
            mu=1.0, p=0.0, e=1.0, periapsis_time=0.0,
            major_axis=[1.0, 0.0, 0.0],
            minor_axis=[0.0, 1.0, 0.0],
            normal_axis=[0.0, 0.0, 1.0],
        )
        assert radial.radial
        assert proximity_ranges(radial, _circle(), 0.1).count == 0
        assert proximity_ranges(_circle(), radial, 0.1).count == 0

    def test_negative_threshold(self):
        with pytest.raises(ValueError, match="non-negative"):
            proximity_ranges(_circle(), _circle(), -1.0)


# ═══════════════════════════════════════════════════════════════
# TIME WINDOW TESTS
# ═══════════════════════════════════════════════════════════════
def _ranges(orbit1, orbit2, threshold):
    return proximity_ranges(orbit1, orbit2, threshold), proximity_ranges(orbit2, orbit1, threshold)


class TestInterceptTimes:
    def test_window_contains_meeting(self):
        orbit1, orbit2, t = _crossing_pair()
        r1, r2 = _ranges(orbit1, orbit2, (orbit1.p + orbit2.p) / 1000.0)
        windows = intercept_times(orbit1, orbit2, 0.0, orbit1.period, r1, r2, 16)
        assert any(a <= t <= b for a, b in windows)

    @pytest.mark.parametrize("e2", [1.0, 1.5])
    def test_open_orbit_window_contains_meeting(self, e2):
        orbit1, orbit2, t = _crossing_pair(e2=e2, f2=0.5)
        r1, r2 = _ranges(orbit1, orbit2, (orbit1.p + orbit2.p) / 1000.0)
        windows = intercept_times(orbit1, orbit2, t - 2.0, t + 2.0, r1, r2, 16)
        assert any(a <= t <= b for a, b in windows)

    def test_repeated_node_passes(self):
        a, b = _circle(inclination=0.2), _circle(inclination=0.8)
        r1, r2 = _ranges(a, b, 0.01)
        t0, t1 = 0.5, 0.5 + 20 * math.pi
        windows = intercept_times(a, b, t0, t1, r1, r2, 100)

        # both bodies reach a node together every half period
        assert len(windows) == 20
        for k, (begin, end) in enumerate(windows, start=1):
            assert begin < k * math.pi < end
        for (_, end), (begin, _) in zip(windows, windows[1:]):
            assert end < begin
        assert t0 <= windows[0][0]
        assert windows[-1][1] <= t1

    def test_truncated(self):
        a, b = _circle(inclination=0.2), _circle(inclination=0.8)
        r1, r2 = _ranges(a, b, 0.01)
        windows = intercept_times(a, b, 0.5, 0.5 + 20 * math.pi, r1, r2, 3)
        assert len(windows) == 3
        assert windows[0][0] < math.pi < windows[0][1]

    def test_coplanar_single_window(self):
        a, b = _circle(), _circle()
        r1, r2 = _ranges(a, b, 0.1)
        assert intercept_times(a, b, 0.0, 10.0, r1, r2, 16) == [(0.0, 10.0)]

    def test_empty_ranges(self):
        a, b = _circle(), _circle()
        assert intercept_times(a, b, 0.0, 10.0, AngleRanges(), AngleRanges.full(), 16) == []

    def test_lunar_transfer_window(self):
        probe, moon, soi = _lunar_transfer()
        reach = soi * 1.05
        r1, r2 = _ranges(probe, moon, reach)
        t0 = probe.periapsis_time
        windows = intercept_times(probe, moon, t0, t0 + 0.6 * probe.period, r1, r2, 8)
        assert len(windows) == 1
        begin, end = windows[0]
        assert begin < 0.0 < end

    def test_reversed_span(self):
        a, b = _circle(), _circle()
        with pytest.raises(ValueError):
            intercept_times(a, b, 1.0, 0.0, AngleRanges.full(), AngleRanges.full(), 4)


# ═══════════════════════════════════════════════════════════════
# CLOSEST-APPROACH SEARCH TESTS
# ═══════════════════════════════════════════════════════════════
class TestSearch:
    def test_intercept_sample_consistent(self):
        orbit1, orbit2, t = _crossing_pair()
        s = Intercept.at(orbit1, orbit2, t + 0.3)
        assert s.distance == pytest.approx(np.linalg.norm(s.relative_position))
        expected = np.dot(s.relative_velocity, s.relative_position) / s.distance
        assert s.speed == pytest.approx(expected)
        assert np.allclose(s.relative_position, s.position2 - s.position1)

    def test_search_in_window(self):
        orbit1, orbit2, t = _crossing_pair()
        threshold = (orbit1.p + orbit2.p) / 1000.0
        r1, r2 = _ranges(orbit1, orbit2, threshold)
        windows = intercept_times(orbit1, orbit2, 0.0, orbit1.period, r1, r2, 16)
        begin, end = next((a, b) for a, b in windows if a <= t <= b)

        sample, progress = search(orbit1, orbit2, begin, end, threshold)
        assert sample.distance < threshold
        assert sample.time == pytest.approx(t, abs=1e-6)
        assert progress > begin

    def test_progress_without_approach(self):
        inner, outer = _circle(1.0, 0.0), _circle(1.5, 0.0)
        sample, progress = search(inner, outer, 0.0, 5.0, 0.01)
        assert sample.distance >= 0.5 - 1e-9
        assert progress > 0.0

    def test_progress_when_converged_at_start(self):
        a, b = _circle(), _circle()
        sample, progress = search(a, b, 2.0, 4.0, 0.1)
        assert sample.time == 2.0
        assert sample.distance == 0.0
        assert progress > 2.0

    def test_invalid_arguments(self):
        a, b = _circle(), _circle(1.2)
        with pytest.raises(ValueError, match="Threshold"):
            search(a, b, 0.0, 1.0, 0.0)
        with pytest.raises(ValueError, match="steps"):
            search(a, b, 0.0, 1.0, 0.1, max_steps=1)
        with pytest.raises(ValueError, match="ends before"):
            search(a, b, 1.0, 0.0, 0.1)

    def test_summary_and_dict(self):
        orbit1, orbit2, t = _crossing_pair()
        s = Intercept.at(orbit1, orbit2, t - 0.01)
        assert "closing" in s.summary()
        d = s.to_dict()
        assert d["time"] == t - 0.01
        assert set(d) >= {"distance", "speed", "E1", "E2", "rel_x", "rel_vz"}


# ═══════════════════════════════════════════════════════════════
# ORCHESTRATOR TESTS
# ═══════════════════════════════════════════════════════════════
class TestInterceptOrbit:
    @pytest.mark.parametrize("e2, f2", [(0.2, 0.7), (1.0, 0.5), (1.5, 0.5)])
    def test_finds_meeting(self, e2, f2):
        orbit1, orbit2, t = _crossing_pair(e2=e2, f2=f2)
        threshold = (orbit1.p + orbit2.p) / 1000.0
        t0, t1 = (0.0, orbit1.period) if orbit2.closed else (t - 2.0, t + 2.0)

        hits = intercept_orbit(orbit1, orbit2, t0, t1, threshold)
        match = [h for h in hits if abs(h.time - t) < 1e-6]
        assert len(match) == 1

        hit = match[0]
        assert hit.distance <= threshold
        assert hit.eccentric_anomaly1 == pytest.approx(1.0, abs=1e-5)
        assert hit.eccentric_anomaly2 == pytest.approx(conic.true_to_eccentric(e2, f2), abs=1e-5)

    def test_coplanar_identical(self):
        a, b = _circle(name="a"), _circle(name="b")
        hits = intercept_orbit(a, b, 0.0, 10.0, 0.1, max_intercepts=4)
        assert len(hits) == 4
        assert all(h.distance == pytest.approx(0.0, abs=1e-12) for h in hits)
        times = [h.time for h in hits]
        assert times == sorted(times)

    def test_node_collisions(self):
        a, b = _circle(inclination=0.2), _circle(inclination=0.8)
        hits = intercept_orbit(a, b, 0.5, 0.5 + 4 * math.pi, 0.01, max_intercepts=10)
        assert len(hits) == 4
        for k, hit in enumerate(hits, start=1):
            assert hit.time == pytest.approx(k * math.pi, abs=1e-6)
            assert hit.distance < 0.01

    def test_lunar_transfer(self):
        probe, moon, soi = _lunar_transfer()
        settings = SearchSettings.for_sphere_of_influence(soi)
        t0 = probe.periapsis_time

        hits = InterceptFinder(settings).find(probe, moon, t0, t0 + 0.6 * probe.period)
        assert 1 <= len(hits) <= 2
        for hit in hits:
            assert abs(hit.distance - soi) <= settings.threshold
        # entering the sphere of influence
        assert hits[0].speed < 0
        assert hits[0].time == pytest.approx(0.0, abs=0.05)

    def test_parabola_node_at_infinity(self):
        parabola = Orbit.from_elements(1.0, 2.0, 1.0, 0.5, 0.0, 0.0, 0.0)
        circle = _circle(1.5, inclination=0.0)
        assert intercept_orbit(parabola, circle, -5.0, 5.0, 0.01) == []
        assert intercept_orbit(circle, parabola, -5.0, 5.0, 0.01) == []

    def test_apsidal_infeasible_skips_search(self, monkeypatch):
        def fail(*args, **kwargs):
            raise AssertionError("search must not run")

        monkeypatch.setattr("apsis.intercept.search", fail)
        inner, outer = _circle(1.0), _circle(3.0)
        assert intercept_orbit(inner, outer, 0.0, 100.0, 0.1) == []
        assert intercept_orbit(outer, inner, 0.0, 100.0, 0.1) == []

    def test_invalid_threshold(self):
        with pytest.raises(ValueError):
            intercept_orbit(_circle(), _circle(), 0.0, 1.0, 0.0)


class TestSettings:
    def test_defaults(self):
        s = SearchSettings()
        assert s.threshold == 1.0
        assert s.target_distance == 0.0
        assert s.window_limit == 4 * s.max_intercepts

    def test_collision_preset(self):
        s = SearchSettings.for_collision(5.0)
        assert s.threshold == 5.0
        assert s.target_distance == 0.0

    def test_sphere_of_influence_preset(self):
        s = SearchSettings.for_sphere_of_influence(2.0, tolerance=0.1)
        assert s.target_distance == 2.0
        assert s.threshold == pytest.approx(0.2)
        assert s.max_intercepts == 2

    def test_explicit_window_limit(self):
        assert SearchSettings(max_times=7).window_limit == 7


class TestScreenPairs:
    def test_returns_dataframe(self):
        orbits = {
            "a": _circle(name="a"),
            "b": _circle(name="b"),
            "far": _circle(3.0, name="far"),
        }
        df = screen_pairs(orbits, 0.0, 10.0, SearchSettings.for_collision(0.1), progress=False)
        assert len(df) == 4
        assert set(df["body1"]) == {"a"}
        assert set(df["body2"]) == {"b"}
        assert list(df["time"]) == sorted(df["time"])

    def test_no_intercepts(self):
        orbits = {"inner": _circle(1.0), "outer": _circle(3.0)}
        df = screen_pairs(orbits, 0.0, 10.0, SearchSettings.for_collision(0.1), progress=False)
        assert df.empty
