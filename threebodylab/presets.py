"""Literal initial conditions for common three-body scenarios.

Each preset lists its bodies (name, mass, position ``x, y, z``, velocity
``vx, vy, vz``) and the settings it is meant to be run with.  Missing
coordinates default to zero.
"""
import math

from . import constants as C
from .physics import Body, SolverSettings, ThreeBodySystem

_BINARY_SECONDARY = 1e-3
_BINARY_SPEED = math.sqrt(1.0 + _BINARY_SECONDARY)  # relative circular speed at r = 1

PRESETS = {
    "Sun-Earth-Moon": {
        "bodies": [
            {"name": "Sun", "mass": C.SOLAR_MASS},
            {"name": "Earth", "mass": C.EARTH_MASS, "x": C.AU, "vy": C.EARTH_ORBITAL_SPEED},
            {
                "name": "Moon",
                "mass": C.MOON_MASS,
                "x": C.AU + C.EARTH_MOON_DISTANCE,
                "vy": C.EARTH_ORBITAL_SPEED + C.MOON_ORBITAL_SPEED,
            },
        ],
        "settings": {
            "t_end": C.SECONDS_PER_YEAR,
            "dt": C.SECONDS_PER_HOUR,
            "gravitational_constant": C.G_REAL,
        },
    },
    # Chenciner-Montgomery figure-eight choreography, G = 1 model units
    "Figure-8": {
        "bodies": [
            {"name": "A", "mass": 1.0, "x": -0.97000436, "y": 0.24308753,
             "vx": 0.4662036850, "vy": 0.4323657300},
            {"name": "B", "mass": 1.0, "x": 0.97000436, "y": -0.24308753,
             "vx": 0.4662036850, "vy": 0.4323657300},
            {"name": "C", "mass": 1.0, "vx": -0.93240737, "vy": -0.86473146},
        ],
        "settings": {"t_end": 6.3259, "dt": 1e-3, "gravitational_constant": 1.0},
    },
    # Circular binary with a massless, distant spectator, G = 1 model units
    "Circular Binary": {
        "bodies": [
            {"name": "Primary", "mass": 1.0,
             "vy": -_BINARY_SECONDARY * _BINARY_SPEED / (1.0 + _BINARY_SECONDARY)},
            {"name": "Secondary", "mass": _BINARY_SECONDARY, "x": 1.0,
             "vy": _BINARY_SPEED / (1.0 + _BINARY_SECONDARY)},
            {"name": "Spectator", "mass": 0.0, "x": 50.0},
        ],
        "settings": {"t_end": 2 * math.pi, "dt": 1e-3, "gravitational_constant": 1.0},
    },
}


def _body_from_config(cfg) -> Body:
    return Body(
        cfg["name"],
        cfg.get("mass", 0.0),
        (cfg.get("x", 0.0), cfg.get("y", 0.0), cfg.get("z", 0.0)),
        (cfg.get("vx", 0.0), cfg.get("vy", 0.0), cfg.get("vz", 0.0)),
    )


def load_preset(preset_name: str) -> ThreeBodySystem:
    """Build the system defined by a named preset."""
    if preset_name not in PRESETS:
        raise KeyError(f"Preset '{preset_name}' not found")
    return ThreeBodySystem(tuple(_body_from_config(cfg) for cfg in PRESETS[preset_name]["bodies"]))


def preset_settings(preset_name: str, **overrides) -> SolverSettings:
    """Default settings of a preset, with keyword overrides applied."""
    if preset_name not in PRESETS:
        raise KeyError(f"Preset '{preset_name}' not found")
    values = dict(PRESETS[preset_name].get("settings", {}))
    values.update({k: v for k, v in overrides.items() if v is not None})
    return SolverSettings(**values)
