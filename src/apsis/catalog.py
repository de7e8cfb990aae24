"""JSON orbit catalogs.

A catalog is a JSON document holding a list of named orbits::

    {"orbits": [
        {"name": "moon", "mu": 1.0, "p": 1.0, "e": 0.0,
         "inclination": 0.0, "ascending_node": 0.0,
         "argument_of_periapsis": 0.0, "periapsis_time": 0.0},
        {"name": "probe", "mu": 1.0,
         "position": [0.2, 0.0, 0.0], "velocity": [0.0, 2.98, 0.0],
         "epoch": 0.0}
    ]}

Angles are in radians. An entry gives either classical elements or a state
vector at an epoch. Catalogs are written as state vectors at periapsis,
which round-trips every non-radial orbit.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path

from .orbit import Orbit

logger = logging.getLogger(__name__)

_ELEMENT_KEYS = (
    "p",
    "e",
    "inclination",
    "ascending_node",
    "argument_of_periapsis",
    "periapsis_time",
)
_STATE_KEYS = ("position", "velocity", "epoch")


def orbit_from_dict(entry: dict) -> Orbit:
    """Build an orbit from one catalog entry.

    Raises:
        ValueError: If the entry has neither a complete element set nor a
            complete state vector.
    """
    name = entry.get("name")
    if "mu" not in entry:
        raise ValueError(f"Catalog entry {name!r} has no 'mu'")
    mu = float(entry["mu"])

    if all(k in entry for k in _STATE_KEYS):
        return Orbit.from_state(
            mu,
            [float(x) for x in entry["position"]],
            [float(x) for x in entry["velocity"]],
            float(entry["epoch"]),
            name=name,
        )
    if all(k in entry for k in _ELEMENT_KEYS):
        return Orbit.from_elements(
            mu,
            float(entry["p"]),
            float(entry["e"]),
            float(entry["inclination"]),
            float(entry["ascending_node"]),
            float(entry["argument_of_periapsis"]),
            float(entry["periapsis_time"]),
            name=name,
        )

    missing = [k for k in _ELEMENT_KEYS if k not in entry]
    raise ValueError(
        f"Catalog entry {name!r} needs either {', '.join(_STATE_KEYS)} "
        f"or a full element set (missing {', '.join(missing)})"
    )


def orbit_to_dict(orbit: Orbit) -> dict:
    """Catalog entry for ``orbit``: its state vector at periapsis."""
    return {
        "name": orbit.name,
        "mu": orbit.mu,
        "position": orbit.position_true(0.0).tolist(),
        "velocity": orbit.velocity_true(0.0).tolist(),
        "epoch": orbit.periapsis_time,
    }


def load_orbit_file(filepath: str | Path) -> dict[str, Orbit]:
    """Load a JSON catalog, keyed by orbit name.

    Unnamed entries are named after their position in the file.
    """
    data = json.loads(Path(filepath).read_text())
    if not isinstance(data, dict) or not isinstance(data.get("orbits"), list):
        raise ValueError(f"{filepath}: expected an object with an 'orbits' list")

    orbits: dict[str, Orbit] = {}
    for i, entry in enumerate(data["orbits"]):
        if not isinstance(entry, dict):
            raise ValueError(f"{filepath}: orbit entry {i} is not an object")
        name = entry.get("name") or f"orbit-{i}"
        if name in orbits:
            raise ValueError(f"{filepath}: duplicate orbit name {name!r}")
        orbits[name] = orbit_from_dict({**entry, "name": name})

    logger.debug("Loaded %d orbits from %s", len(orbits), filepath)
    return orbits


def save_orbit_file(orbits: dict[str, Orbit], filepath: str | Path) -> Path:
    """Write orbits to a JSON catalog and return its path."""
    path = Path(filepath)
    entries = [{**orbit_to_dict(o), "name": name} for name, o in orbits.items()]
    path.write_text(json.dumps({"orbits": entries}, indent=2))
    return path
