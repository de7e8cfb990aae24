"""Keplerian orbit descriptor.

An :class:`Orbit` is the read-only input of every intercept query. It stores
the conic shape (``mu``, ``p``, ``e``), the time of periapsis passage and the
perifocal frame: the major axis points at periapsis, the minor axis is 90°
ahead in the direction of motion and the normal axis is along the angular
momentum.

Orbits are built from classical elements or from an instantaneous state
vector. Positions and velocities are evaluated at a true or eccentric
anomaly, or directly at a time.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional

import numpy as np

from . import conic
from .conic import zero

logger = logging.getLogger(__name__)

_X_AXIS = np.array([1.0, 0.0, 0.0])
_Y_AXIS = np.array([0.0, 1.0, 0.0])
_Z_AXIS = np.array([0.0, 0.0, 1.0])


@dataclass(frozen=True, eq=False)
class Orbit:
    """An unperturbed two-body orbit.

    Attributes:
        mu: Gravitational parameter of the central body.
        p: Semi-latus rectum (0 for radial orbits).
        e: Eccentricity (< 1 closed, 1 parabolic, > 1 hyperbolic).
        periapsis_time: Time of periapsis passage.
        major_axis: Unit vector towards periapsis.
        minor_axis: Unit vector 90° ahead of periapsis in the orbital plane.
        normal_axis: Unit vector along the angular momentum.
        name: Optional label used by catalogs and reports.
    """
    mu: float
    p: float
    e: float
    periapsis_time: float
    major_axis: np.ndarray
    minor_axis: np.ndarray
    normal_axis: np.ndarray
    name: Optional[str] = None

    def __post_init__(self) -> None:
        if self.mu <= 0.0:
            raise ValueError(f"Gravitational parameter must be positive, got {self.mu}")
        if self.p < 0.0:
            raise ValueError(f"Semi-latus rectum must be non-negative, got {self.p}")
        if self.e < 0.0:
            raise ValueError(f"Eccentricity must be non-negative, got {self.e}")

        for axis in ("major_axis", "minor_axis", "normal_axis"):
            vec = np.asarray(getattr(self, axis), dtype=float)
            if vec.shape != (3,):
                raise ValueError(f"{axis} must be a 3-vector, got shape {vec.shape}")
            object.__setattr__(self, axis, vec)

    # ── Construction ──

    @classmethod
    def from_elements(
        cls,
        mu: float,
        p: float,
        e: float,
        inclination: float,
        ascending_node: float,
        argument_of_periapsis: float,
        periapsis_time: float,
        name: Optional[str] = None,
    ) -> Orbit:
        """Build an orbit from classical elements (angles in radians).

        The perifocal frame is the 3-1-3 rotation (Ω, i, ω) of the
        reference frame.
        """
        cos_o, sin_o = math.cos(ascending_node), math.sin(ascending_node)
        cos_i, sin_i = math.cos(inclination), math.sin(inclination)
        cos_w, sin_w = math.cos(argument_of_periapsis), math.sin(argument_of_periapsis)

        major = np.array([
            cos_o * cos_w - sin_o * sin_w * cos_i,
            sin_o * cos_w + cos_o * sin_w * cos_i,
            sin_w * sin_i,
        ])
        minor = np.array([
            -cos_o * sin_w - sin_o * cos_w * cos_i,
            -sin_o * sin_w + cos_o * cos_w * cos_i,
            cos_w * sin_i,
        ])
        normal = np.array([sin_o * sin_i, -cos_o * sin_i, cos_i])

        return cls(
            mu=mu,
            p=p,
            e=e,
            periapsis_time=periapsis_time,
            major_axis=major,
            minor_axis=minor,
            normal_axis=normal,
            name=name,
        )

    @classmethod
    def from_state(
        cls,
        mu: float,
        position,
        velocity,
        time: float,
        name: Optional[str] = None,
    ) -> Orbit:
        """Build the orbit passing through ``position`` with ``velocity`` at ``time``.

        Circular orbits have no periapsis; their major axis is placed on the
        ascending node (or the reference x axis for equatorial orbits).

        Raises:
            ValueError: If the state has zero angular momentum (radial orbit).
        """
        r = np.asarray(position, dtype=float)
        v = np.asarray(velocity, dtype=float)
        r_mag = np.linalg.norm(r)

        h = np.cross(r, v)
        h_mag = np.linalg.norm(h)
        if r_mag == 0.0 or zero(h_mag / (r_mag * max(np.linalg.norm(v), conic.EPSILON))):
            raise ValueError("Radial state vector (zero angular momentum) is not supported")

        normal = h / h_mag
        p = h_mag * h_mag / mu
        e_vec = ((np.dot(v, v) - mu / r_mag) * r - np.dot(r, v) * v) / mu
        e = float(np.linalg.norm(e_vec))

        if conic.circular(e):
            logger.debug("Circular state (e=%.3g), major axis placed on the line of nodes", e)
            e = 0.0
            nodes = np.cross(_Z_AXIS, normal)
            if zero(np.dot(nodes, nodes)):
                reference = _X_AXIS if abs(normal[0]) < 0.5 else _Y_AXIS
                nodes = reference - np.dot(reference, normal) * normal
            major = nodes / np.linalg.norm(nodes)
        else:
            major = e_vec / e
        minor = np.cross(normal, major)

        f = math.atan2(np.dot(r, minor), np.dot(r, major))
        M = conic.true_to_mean(e, f)
        periapsis_time = time - M / conic.mean_motion(mu, p, e)

        return cls(
            mu=mu,
            p=float(p),
            e=e,
            periapsis_time=float(periapsis_time),
            major_axis=major,
            minor_axis=minor,
            normal_axis=normal,
            name=name,
        )

    # ── Classification ──

    @property
    def closed(self) -> bool:
        return conic.closed(self.e)

    @property
    def open(self) -> bool:
        return not conic.closed(self.e)

    @property
    def circular(self) -> bool:
        return conic.circular(self.e)

    @property
    def parabolic(self) -> bool:
        return conic.parabolic(self.e)

    @property
    def radial(self) -> bool:
        """Zero angular momentum; unsupported by the intercept pipeline."""
        return zero(self.p)

    # ── Derived quantities ──

    @property
    def periapsis(self) -> float:
        return conic.periapsis(self.p, self.e)

    @property
    def apoapsis(self) -> float:
        return conic.apoapsis(self.p, self.e)

    @property
    def mean_motion(self) -> float:
        return conic.mean_motion(self.mu, self.p, self.e)

    @property
    def period(self) -> float:
        return conic.period(self.mu, self.p, self.e)

    @property
    def periapsis_velocity(self) -> float:
        return conic.periapsis_velocity(self.mu, self.p, self.e)

    # ── State evaluation ──

    def position_true(self, f: float) -> np.ndarray:
        """Position vector at true anomaly ``f``."""
        r = conic.radius(self.p, self.e, f)
        return r * (math.cos(f) * self.major_axis + math.sin(f) * self.minor_axis)

    def velocity_true(self, f: float) -> np.ndarray:
        """Velocity vector at true anomaly ``f``."""
        k = math.sqrt(self.mu / self.p)
        return k * (
            -math.sin(f) * self.major_axis
            + (self.e + math.cos(f)) * self.minor_axis
        )

    def position_eccentric(self, E: float) -> np.ndarray:
        return self.position_true(conic.eccentric_to_true(self.e, E))

    def velocity_eccentric(self, E: float) -> np.ndarray:
        return self.velocity_true(conic.eccentric_to_true(self.e, E))

    def mean_anomaly(self, t: float) -> float:
        return (t - self.periapsis_time) * self.mean_motion

    def state_at(self, t: float) -> tuple[float, np.ndarray, np.ndarray]:
        """Eccentric anomaly, position and velocity at time ``t``."""
        E = conic.mean_to_eccentric(self.e, self.mean_anomaly(t))
        f = conic.eccentric_to_true(self.e, E)
        return E, self.position_true(f), self.velocity_true(f)

    def to_dict(self) -> dict:
        """Flat dictionary of the orbit's shape and frame."""
        return {
            "name": self.name,
            "mu": self.mu,
            "p": self.p,
            "e": self.e,
            "periapsis_time": self.periapsis_time,
            "periapsis": self.periapsis,
            "apoapsis": self.apoapsis,
            "period": self.period,
            "inclination_rad": math.acos(conic.clamp(-1.0, 1.0, self.normal_axis[2])),
        }
