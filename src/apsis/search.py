"""Adaptive closest-approach search inside one time window.

Walks forward in time evaluating both bodies and homes in on the instant
where their separation equals a target distance (0 for a collision, a
sphere-of-influence radius for a patched-conic handover), or on the closest
approach when the target is never reached.

Each sample is classified by ``sign(vrel) * sign(d - target)``: negative
while the separation moves towards the target, positive while it moves away.

    - Converged: ``(d - target)² / threshold²`` is zero within tolerance.
    - Approach inside the threshold band: secant step on ``d - target``,
      kept only if it lands closer to the target.
    - Sign flip after an approach: the target or an extremum was passed,
      step back and halve the step (bisection).
    - Otherwise: step ahead by the larger of the minimum step and the time
      the bodies need, at the largest possible closing speed, to bring the
      separation into the threshold band.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass

import numpy as np

from .conic import EPSILON, clamp, sign, zero
from .orbit import Orbit

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class Intercept:
    """State of both bodies at one instant of an intercept search.

    Relative quantities are body 2 minus body 1.

    Attributes:
        position1: Position of body 1.
        position2: Position of body 2.
        velocity1: Velocity of body 1.
        velocity2: Velocity of body 2.
        relative_position: ``position2 - position1``.
        relative_velocity: ``velocity2 - velocity1``.
        mu: Gravitational parameter of the central body.
        time: Time of the sample.
        distance: Magnitude of the relative position.
        speed: Rate of change of ``distance`` (negative when closing).
        eccentric_anomaly1: Eccentric anomaly of body 1 (diagnostic).
        eccentric_anomaly2: Eccentric anomaly of body 2 (diagnostic).
    """
    position1: np.ndarray
    position2: np.ndarray
    velocity1: np.ndarray
    velocity2: np.ndarray
    relative_position: np.ndarray
    relative_velocity: np.ndarray
    mu: float
    time: float
    distance: float
    speed: float
    eccentric_anomaly1: float
    eccentric_anomaly2: float

    @classmethod
    def at(cls, orbit1: Orbit, orbit2: Orbit, t: float) -> Intercept:
        """Evaluate both orbits at time ``t``."""
        E1, r1, v1 = orbit1.state_at(t)
        E2, r2, v2 = orbit2.state_at(t)
        dr = r2 - r1
        dv = v2 - v1
        dist = float(np.linalg.norm(dr))
        speed = float(np.dot(dr, dv)) / dist if dist > 0.0 else 0.0
        return cls(
            position1=r1,
            position2=r2,
            velocity1=v1,
            velocity2=v2,
            relative_position=dr,
            relative_velocity=dv,
            mu=orbit1.mu,
            time=t,
            distance=dist,
            speed=speed,
            eccentric_anomaly1=E1,
            eccentric_anomaly2=E2,
        )

    def to_dict(self) -> dict:
        """Serialize to a flat dictionary for DataFrame construction."""
        return {
            "time": self.time,
            "distance": self.distance,
            "speed": self.speed,
            "E1": self.eccentric_anomaly1,
            "E2": self.eccentric_anomaly2,
            "rel_x": self.relative_position[0],
            "rel_y": self.relative_position[1],
            "rel_z": self.relative_position[2],
            "rel_vx": self.relative_velocity[0],
            "rel_vy": self.relative_velocity[1],
            "rel_vz": self.relative_velocity[2],
        }

    def summary(self) -> str:
        """Return a one-line human-readable summary of the intercept."""
        direction = "closing" if self.speed < 0 else "opening"
        return (
            f"[t={self.time:.6g}] d={self.distance:.6g} "
            f"({direction} at {abs(self.speed):.4g})"
        )


def search(
    orbit1: Orbit,
    orbit2: Orbit,
    t0: float,
    t1: float,
    threshold: float,
    target_distance: float = 0.0,
    max_steps: int = 100,
) -> tuple[Intercept, float]:
    """Search ``[t0, t1]`` for the time the separation reaches ``target_distance``.

    Args:
        orbit1: First orbit.
        orbit2: Second orbit.
        t0: Window start.
        t1: Window end.
        threshold: Distance tolerance; also sets the convergence scale.
        target_distance: Separation to search for (0 for closest approach).
        max_steps: Step budget.

    Returns:
        The last evaluated sample and the time the search has progressed
        to, which is strictly after ``t0``. The sample is a best estimate:
        callers check ``|distance - target_distance| <= threshold``
        themselves.

    Raises:
        ValueError: On a non-positive threshold, ``max_steps < 2`` or
            ``t1 < t0``.
    """
    if threshold <= 0.0:
        raise ValueError(f"Threshold must be positive, got {threshold}")
    if max_steps < 2:
        raise ValueError(f"At least 2 search steps required, got {max_steps}")
    if t1 < t0:
        raise ValueError(f"Search window ends before it starts ({t0} > {t1})")

    # no two bodies close faster than both at periapsis
    v_max = orbit1.periapsis_velocity + orbit2.periapsis_velocity
    min_dt = (t1 - t0) / (max_steps // 2)
    resolution = EPSILON * (t1 - t0)

    t = t0
    t_prev = math.nan
    t_far = t0
    sgn_prev = 0
    accepted = False

    sample = Intercept.at(orbit1, orbit2, t)
    for _ in range(max_steps):
        offset = sample.distance - target_distance
        sgn = sign(sample.speed) * sign(offset)
        dt = min_dt
        trial = None

        if zero((sample.distance - max(0.0, target_distance)) ** 2 / threshold ** 2):
            accepted = True
            break
        elif sgn < 0 and abs(offset) < threshold and t <= t1:
            # secant step on d - target, kept only if it gets closer
            t_try = clamp(t0, t1, t - offset / sample.speed)
            trial = Intercept.at(orbit1, orbit2, t_try)
            if not abs(trial.distance - target_distance) < abs(offset):
                accepted = True
                break
        elif (sgn > 0 and sgn_prev < 0
                and (t - t_prev) * v_max + threshold > abs(offset)
                and t - t_prev > resolution):
            # passed the target or an extremum, bisect the last step
            t_far = max(t_far, t)
            min_dt = (t - t_prev) / 2.0
            dt = min_dt
            t = t_prev
            sgn = sgn_prev
        elif t > t1:
            break
        else:
            dt = max(min_dt, abs(offset - threshold) / v_max)

        t_far = max(t_far, t)
        t_prev, sgn_prev = t, sgn
        if trial is not None:
            t, sample = trial.time, trial
        else:
            t += dt
            sample = Intercept.at(orbit1, orbit2, t)
    else:
        logger.debug(
            "Search budget of %d steps exhausted at t=%.6g (d=%.6g)",
            max_steps, sample.time, sample.distance,
        )

    if accepted:
        progress = sample.time + threshold / v_max
    else:
        progress = max(t_far, sample.time)
    return sample, max(progress, t0 + threshold / v_max)
