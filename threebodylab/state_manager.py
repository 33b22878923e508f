import json
import logging
from pathlib import Path
from typing import Optional, Tuple

from .physics import Body, ConfigurationError, SolverSettings, ThreeBodySystem

logger = logging.getLogger(__name__)


def system_to_dict(system: ThreeBodySystem, settings: Optional[SolverSettings] = None) -> dict:
    data = {
        "bodies": [
            {
                "name": b.name,
                "mass": b.mass,
                "position": list(b.position),
                "velocity": list(b.velocity),
            }
            for b in system
        ]
    }
    if settings is not None:
        data["settings"] = {
            "t_start": settings.t_start,
            "t_end": settings.t_end,
            "dt": settings.dt,
            "gravitational_constant": settings.gravitational_constant,
        }
    return data


def system_from_dict(data: dict) -> Tuple[ThreeBodySystem, Optional[SolverSettings]]:
    try:
        items = data["bodies"]
    except (KeyError, TypeError) as exc:
        raise ConfigurationError("scenario data has no 'bodies' list") from exc
    bodies = tuple(
        Body(
            item.get("name", f"Body {i}"),
            item.get("mass", 0.0),
            item.get("position", [0, 0, 0]),
            item.get("velocity", [0, 0, 0]),
        )
        for i, item in enumerate(items)
    )
    settings = None
    if "settings" in data:
        settings = SolverSettings(**data["settings"])
    return ThreeBodySystem(bodies), settings


def save_state(filepath, system: ThreeBodySystem, settings: Optional[SolverSettings] = None):
    """Serialize a system (and optionally its settings) to a JSON file."""
    Path(filepath).write_text(json.dumps(system_to_dict(system, settings), indent=2))
    logger.debug("Saved scenario to %s", filepath)


def load_state(filepath) -> Tuple[ThreeBodySystem, Optional[SolverSettings]]:
    """Load a system and its settings (``None`` if absent) from a JSON file."""
    data = json.loads(Path(filepath).read_text())
    logger.debug("Loaded scenario from %s", filepath)
    return system_from_dict(data)
