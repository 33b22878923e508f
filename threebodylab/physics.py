"""Physical model of a three-body system and its acceleration law.

This module defines the immutable initial-condition types (:class:`Body`,
:class:`ThreeBodySystem`), the run configuration (:class:`SolverSettings`)
and the pairwise Newtonian acceleration law unrolled for exactly three
bodies.  Quantities are plain floats; SI units are documented per field but
any consistent unit system (e.g. ``G = 1`` model units) works.
"""
import math
from dataclasses import dataclass, field

from . import constants as C
from .vector import Vector3


class ConfigurationError(ValueError):
    """Raised for settings or systems that cannot be integrated."""


@dataclass(frozen=True)
class Body:
    """Point mass used as an initial condition.

    Parameters
    ----------
    name : str
        Label used in results and trajectories.
    mass : float
        Mass in kilograms.
    position : Vector3
        Initial position in metres.  Any iterable of up to three components
        is accepted and padded with zeros.
    velocity : Vector3
        Initial velocity in metres per second.
    """

    name: str
    mass: float
    position: Vector3 = field(default_factory=Vector3.zero)
    velocity: Vector3 = field(default_factory=Vector3.zero)

    def __post_init__(self):
        object.__setattr__(self, "mass", float(self.mass))
        if not isinstance(self.position, Vector3):
            object.__setattr__(self, "position", Vector3.from_iterable(self.position))
        if not isinstance(self.velocity, Vector3):
            object.__setattr__(self, "velocity", Vector3.from_iterable(self.velocity))

    def __repr__(self):
        return (
            f"Body(name={self.name!r}, mass={self.mass}, "
            f"position={tuple(self.position)}, velocity={tuple(self.velocity)})"
        )


@dataclass(frozen=True)
class ThreeBodySystem:
    """Ordered triple of bodies.

    The order fixes which index refers to which body in every per-step
    triple produced by the integrators.
    """

    bodies: tuple

    def __post_init__(self):
        bodies = tuple(self.bodies)
        if len(bodies) != C.BODY_COUNT:
            raise ConfigurationError(
                f"a three-body system needs exactly {C.BODY_COUNT} bodies, got {len(bodies)}"
            )
        for b in bodies:
            if not isinstance(b, Body):
                raise ConfigurationError(f"expected Body instances, got {type(b).__name__}")
        object.__setattr__(self, "bodies", bodies)

    def __iter__(self):
        return iter(self.bodies)

    def __len__(self):
        return len(self.bodies)

    def __getitem__(self, index):
        return self.bodies[index]

    @property
    def names(self):
        return tuple(b.name for b in self.bodies)

    @property
    def masses(self):
        return tuple(b.mass for b in self.bodies)

    @property
    def positions(self):
        return tuple(b.position for b in self.bodies)

    @property
    def velocities(self):
        return tuple(b.velocity for b in self.bodies)


@dataclass(frozen=True)
class SolverSettings:
    """Time window, step size and gravitational constant of one run.

    ``t_start``, ``t_end`` and ``dt`` are in seconds and
    ``gravitational_constant`` in m^3 kg^-1 s^-2 unless the caller works in
    model units.
    """

    t_start: float = 0.0
    t_end: float = C.DEFAULT_DURATION
    dt: float = C.DEFAULT_TIME_STEP
    gravitational_constant: float = C.G_REAL

    def validate(self) -> None:
        """Raise :class:`ConfigurationError` if the settings cannot be run."""
        for name in ("t_start", "t_end", "dt", "gravitational_constant"):
            value = getattr(self, name)
            if not math.isfinite(value):
                raise ConfigurationError(f"{name} must be finite, got {value!r}")
        if self.dt <= 0:
            raise ConfigurationError(f"dt must be positive, got {self.dt!r}")
        if self.t_end < self.t_start:
            raise ConfigurationError(
                f"t_end ({self.t_end!r}) must not precede t_start ({self.t_start!r})"
            )
        if not math.isfinite((self.t_end - self.t_start) / self.dt):
            raise ConfigurationError(
                f"the window {self.t_start!r}..{self.t_end!r} holds too many steps of dt={self.dt!r}"
            )

    @property
    def num_steps(self) -> int:
        # truncated, not rounded: the last sample may land before t_end
        return math.floor((self.t_end - self.t_start) / self.dt)

    def time_at(self, k: int) -> float:
        return self.t_start + k * self.dt


def gravitational_parameters(system: ThreeBodySystem, g_constant: float):
    """Return ``(m1*G, m2*G, m3*G)`` for ``system``."""
    m1, m2, m3 = system.masses
    return m1 * g_constant, m2 * g_constant, m3 * g_constant


def _inverse_cube(d: Vector3) -> float:
    r_sq = d.squared_magnitude()
    r_cubed = r_sq * math.sqrt(r_sq)
    if r_cubed == 0.0:
        # coincident bodies: let the singularity show up as nan/inf
        return math.inf
    return 1.0 / r_cubed


def _pull(mu: float, inv_cube: float) -> float:
    # a massless partner exerts no pull, even when coincident
    return 0.0 if mu == 0.0 else mu * inv_cube


def accelerations(r1: Vector3, r2: Vector3, r3: Vector3, mu1: float, mu2: float, mu3: float):
    """Newtonian accelerations of three bodies.

    Each body is pulled towards the other two with magnitude ``mu / r**2``.
    Every separation vector and its inverse cube is computed once and shared
    by both bodies of the pair.
    """
    d12 = r2 - r1
    d13 = r3 - r1
    d23 = r3 - r2

    inv12 = _inverse_cube(d12)
    inv13 = _inverse_cube(d13)
    inv23 = _inverse_cube(d23)

    a1 = d12 * _pull(mu2, inv12) + d13 * _pull(mu3, inv13)
    a2 = d12 * -_pull(mu1, inv12) + d23 * _pull(mu3, inv23)
    a3 = d13 * -_pull(mu1, inv13) + d23 * -_pull(mu2, inv23)
    return a1, a2, a3
