"""Three-body integrator comparison utilities."""

from importlib.metadata import PackageNotFoundError, version

from .vector import Vector3
from .physics import (
    Body,
    ConfigurationError,
    SolverSettings,
    ThreeBodySystem,
    accelerations,
    gravitational_parameters,
)
from .integrators import (
    SolutionStep,
    Solver,
    iter_forward_euler,
    iter_leapfrog,
    iter_midpoint,
    iter_rk4,
    iter_solution,
    iter_velocity_verlet,
    solve,
    solve_forward_euler,
    solve_leapfrog,
    solve_midpoint,
    solve_rk4,
    solve_velocity_verlet,
)
from .simulation import (
    Preset,
    SimulationError,
    SimulationResult,
    Trajectory,
    run_simulation,
    run_simulations_in_parallel,
    trajectories,
)
from .analysis import (
    apply_metric,
    deviation,
    distance,
    distance_deviation,
    energy_deviation,
    kinetic_energy,
    potential_energy,
    total_energy,
)
from .presets import PRESETS, load_preset, preset_settings
from .constants import G_REAL, AU, SOLAR_MASS, EARTH_MASS, MOON_MASS

try:
    __version__ = version("threebodylab")
except PackageNotFoundError:
    # Fallback when package metadata is unavailable (e.g. running from source)
    __version__ = "0.0.0"

__all__ = [
    "Vector3",
    "Body",
    "ConfigurationError",
    "SolverSettings",
    "ThreeBodySystem",
    "accelerations",
    "gravitational_parameters",
    "SolutionStep",
    "Solver",
    "iter_solution",
    "iter_forward_euler",
    "iter_midpoint",
    "iter_rk4",
    "iter_leapfrog",
    "iter_velocity_verlet",
    "solve",
    "solve_forward_euler",
    "solve_midpoint",
    "solve_rk4",
    "solve_leapfrog",
    "solve_velocity_verlet",
    "Preset",
    "SimulationError",
    "SimulationResult",
    "Trajectory",
    "run_simulation",
    "run_simulations_in_parallel",
    "trajectories",
    "apply_metric",
    "deviation",
    "distance",
    "distance_deviation",
    "energy_deviation",
    "kinetic_energy",
    "potential_energy",
    "total_energy",
    "PRESETS",
    "load_preset",
    "preset_settings",
    "G_REAL",
    "AU",
    "SOLAR_MASS",
    "EARTH_MASS",
    "MOON_MASS",
    "__version__",
]
