"""Fixed-step integrators for the three-body model.

Every method shares the same driving loop: validate the settings, emit the
initial condition at ``t_start`` and apply one step function
``settings.num_steps`` times.  Step functions work on triples of
:class:`~threebodylab.vector.Vector3` (one per body) and never mutate their
inputs.

Leapfrog and velocity Verlet carry the acceleration of the previous step.
That value lives in the frame of the generator driving a single run, so two
runs never see each other's state.
"""
import logging
from enum import Enum
from typing import Iterator, NamedTuple, Tuple

from .physics import SolverSettings, ThreeBodySystem, accelerations, gravitational_parameters
from .vector import Vector3

logger = logging.getLogger(__name__)

Triple = Tuple[Vector3, Vector3, Vector3]


class SolutionStep(NamedTuple):
    """State of all three bodies at time ``t``."""

    t: float
    positions: Triple
    velocities: Triple


class Solver(str, Enum):
    """Identifiers of the available integration schemes."""

    FORWARD_EULER = "euler"
    MIDPOINT = "midpoint"
    RK4 = "rk4"
    LEAPFROG = "leapfrog"
    VELOCITY_VERLET = "verlet"

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]

    @classmethod
    def parse(cls, value) -> "Solver":
        """Look up a solver by member, value or display name."""
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower()
        for member in cls:
            if key in (member.value, member.name.lower(), member.display_name.lower()):
                return member
        raise KeyError(f"Unknown solver '{value}'")


_DISPLAY_NAMES = {
    Solver.FORWARD_EULER: "Forward Euler",
    Solver.MIDPOINT: "Midpoint",
    Solver.RK4: "RK4",
    Solver.LEAPFROG: "Leapfrog",
    Solver.VELOCITY_VERLET: "Velocity Verlet",
}


def _axpy(base, rate, h):
    """Return ``base + rate * h`` body by body."""
    return (base[0] + rate[0] * h, base[1] + rate[1] * h, base[2] + rate[2] * h)


def _acc(positions, mus):
    return accelerations(positions[0], positions[1], positions[2], mus[0], mus[1], mus[2])


# --- step functions ---------------------------------------------------------

def forward_euler_step(positions, velocities, dt, mus):
    """One force evaluation; position uses the old velocity."""
    acc = _acc(positions, mus)
    return _axpy(positions, velocities, dt), _axpy(velocities, acc, dt)


def midpoint_step(positions, velocities, dt, mus):
    """Explicit midpoint method, two force evaluations."""
    half = 0.5 * dt
    acc = _acc(positions, mus)
    pos_mid = _axpy(positions, velocities, half)
    vel_mid = _axpy(velocities, acc, half)
    acc_mid = _acc(pos_mid, mus)
    return _axpy(positions, vel_mid, dt), _axpy(velocities, acc_mid, dt)


def rk4_step(positions, velocities, dt, mus):
    """Classical Runge-Kutta on the combined state ``(R, V)``.

    The derivative of the state is ``(V, A(R))``, so the position slopes are
    the stage velocities.
    """
    half = 0.5 * dt

    k1_r = velocities
    k1_v = _acc(positions, mus)

    k2_r = _axpy(velocities, k1_v, half)
    k2_v = _acc(_axpy(positions, k1_r, half), mus)

    k3_r = _axpy(velocities, k2_v, half)
    k3_v = _acc(_axpy(positions, k2_r, half), mus)

    k4_r = _axpy(velocities, k3_v, dt)
    k4_v = _acc(_axpy(positions, k3_r, dt), mus)

    sixth = dt / 6.0
    pos_new = tuple(
        r + (a + b * 2.0 + c * 2.0 + d) * sixth
        for r, a, b, c, d in zip(positions, k1_r, k2_r, k3_r, k4_r)
    )
    vel_new = tuple(
        v + (a + b * 2.0 + c * 2.0 + d) * sixth
        for v, a, b, c, d in zip(velocities, k1_v, k2_v, k3_v, k4_v)
    )
    return pos_new, vel_new


def leapfrog_step(positions, velocities, acc_prev, dt, mus):
    """Kick-drift-kick leapfrog.  Returns the new acceleration as well."""
    half = 0.5 * dt
    vel_half = _axpy(velocities, acc_prev, half)
    pos_new = _axpy(positions, vel_half, dt)
    acc_new = _acc(pos_new, mus)
    vel_new = _axpy(vel_half, acc_new, half)
    return pos_new, vel_new, acc_new


def velocity_verlet_step(positions, velocities, acc_prev, dt, mus):
    """Velocity Verlet.  Returns the new acceleration as well."""
    half_dt_sq = 0.5 * dt * dt
    pos_new = tuple(
        r + v * dt + a * half_dt_sq
        for r, v, a in zip(positions, velocities, acc_prev)
    )
    acc_new = _acc(pos_new, mus)
    vel_new = tuple(
        v + (a0 + a1) * (0.5 * dt)
        for v, a0, a1 in zip(velocities, acc_prev, acc_new)
    )
    return pos_new, vel_new, acc_new


# --- driving loop -----------------------------------------------------------

def _generate(settings, system, step, carries_acceleration) -> Iterator[SolutionStep]:
    n_steps = settings.num_steps
    dt = settings.dt
    mus = gravitational_parameters(system, settings.gravitational_constant)
    positions = system.positions
    velocities = system.velocities

    yield SolutionStep(settings.time_at(0), positions, velocities)

    if carries_acceleration:
        acc = _acc(positions, mus)
        for k in range(1, n_steps + 1):
            positions, velocities, acc = step(positions, velocities, acc, dt, mus)
            yield SolutionStep(settings.time_at(k), positions, velocities)
    else:
        for k in range(1, n_steps + 1):
            positions, velocities = step(positions, velocities, dt, mus)
            yield SolutionStep(settings.time_at(k), positions, velocities)


_STEPPERS = {
    Solver.FORWARD_EULER: (forward_euler_step, False),
    Solver.MIDPOINT: (midpoint_step, False),
    Solver.RK4: (rk4_step, False),
    Solver.LEAPFROG: (leapfrog_step, True),
    Solver.VELOCITY_VERLET: (velocity_verlet_step, True),
}


def iter_solution(solver, settings: SolverSettings, system: ThreeBodySystem) -> Iterator[SolutionStep]:
    """Lazily generate the solution of one run.

    Settings are validated before the generator is returned, so a
    :class:`~threebodylab.physics.ConfigurationError` surfaces here rather
    than on the first ``next()``.  Each call starts a fresh run.
    """
    solver = Solver.parse(solver)
    settings.validate()
    step, carries_acceleration = _STEPPERS[solver]
    return _generate(settings, system, step, carries_acceleration)


def solve(solver, settings: SolverSettings, system: ThreeBodySystem) -> Tuple[SolutionStep, ...]:
    """Integrate ``system`` with ``solver`` and return every sample."""
    solver = Solver.parse(solver)
    steps = iter_solution(solver, settings, system)
    logger.debug(
        "Integrating %s: %d steps of dt=%g from t=%g",
        solver.display_name, settings.num_steps, settings.dt, settings.t_start,
    )
    return tuple(steps)


def solve_forward_euler(settings, system):
    return solve(Solver.FORWARD_EULER, settings, system)


def solve_midpoint(settings, system):
    return solve(Solver.MIDPOINT, settings, system)


def solve_rk4(settings, system):
    return solve(Solver.RK4, settings, system)


def solve_leapfrog(settings, system):
    return solve(Solver.LEAPFROG, settings, system)


def solve_velocity_verlet(settings, system):
    return solve(Solver.VELOCITY_VERLET, settings, system)


def iter_forward_euler(settings, system):
    return iter_solution(Solver.FORWARD_EULER, settings, system)


def iter_midpoint(settings, system):
    return iter_solution(Solver.MIDPOINT, settings, system)


def iter_rk4(settings, system):
    return iter_solution(Solver.RK4, settings, system)


def iter_leapfrog(settings, system):
    return iter_solution(Solver.LEAPFROG, settings, system)


def iter_velocity_verlet(settings, system):
    return iter_solution(Solver.VELOCITY_VERLET, settings, system)
