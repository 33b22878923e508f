"""Planar double pendulum integrated with fixed-step RK4.

Angles are measured from the downward vertical, in radians.  The equations
of motion are the closed-form Euler-Lagrange equations for two point masses
on massless rigid rods.
"""
import math
from dataclasses import dataclass
from typing import NamedTuple

from .physics import SolverSettings

STANDARD_GRAVITY = 9.80665  # m/s^2


@dataclass(frozen=True)
class DoublePendulum:
    m1: float = 1.0  # kg
    m2: float = 1.0  # kg
    l1: float = 1.0  # m
    l2: float = 1.0  # m
    g: float = STANDARD_GRAVITY


class PendulumState(NamedTuple):
    theta1: float
    theta2: float
    omega1: float
    omega2: float


class PendulumStep(NamedTuple):
    t: float
    state: PendulumState


def derivatives(p: DoublePendulum, s: PendulumState) -> PendulumState:
    """Time derivative ``(omega1, omega2, alpha1, alpha2)`` of a state."""
    delta = s.theta1 - s.theta2
    sin_d = math.sin(delta)
    cos_d = math.cos(delta)
    den = 2 * p.m1 + p.m2 - p.m2 * math.cos(2 * delta)

    alpha1 = (
        -p.g * (2 * p.m1 + p.m2) * math.sin(s.theta1)
        - p.m2 * p.g * math.sin(s.theta1 - 2 * s.theta2)
        - 2 * sin_d * p.m2 * (s.omega2 ** 2 * p.l2 + s.omega1 ** 2 * p.l1 * cos_d)
    ) / (p.l1 * den)
    alpha2 = (
        2 * sin_d * (
            s.omega1 ** 2 * p.l1 * (p.m1 + p.m2)
            + p.g * (p.m1 + p.m2) * math.cos(s.theta1)
            + s.omega2 ** 2 * p.l2 * p.m2 * cos_d
        )
    ) / (p.l2 * den)
    return PendulumState(s.omega1, s.omega2, alpha1, alpha2)


def _shift(s: PendulumState, k: PendulumState, h: float) -> PendulumState:
    return PendulumState(*(a + b * h for a, b in zip(s, k)))


def rk4_step(p: DoublePendulum, s: PendulumState, dt: float) -> PendulumState:
    k1 = derivatives(p, s)
    k2 = derivatives(p, _shift(s, k1, 0.5 * dt))
    k3 = derivatives(p, _shift(s, k2, 0.5 * dt))
    k4 = derivatives(p, _shift(s, k3, dt))
    return PendulumState(*(
        x + (a + 2 * b + 2 * c + d) * dt / 6.0
        for x, a, b, c, d in zip(s, k1, k2, k3, k4)
    ))


def solve_double_pendulum(pendulum: DoublePendulum, initial: PendulumState,
                          t_start: float, t_end: float, dt: float):
    """Integrate from ``t_start``; returns ``floor((t_end - t_start) / dt) + 1``
    samples, like the three-body solvers."""
    settings = SolverSettings(t_start=t_start, t_end=t_end, dt=dt)
    settings.validate()
    state = PendulumState(*initial)
    steps = [PendulumStep(settings.time_at(0), state)]
    for k in range(1, settings.num_steps + 1):
        state = rk4_step(pendulum, state, dt)
        steps.append(PendulumStep(settings.time_at(k), state))
    return tuple(steps)


def cartesian_positions(p: DoublePendulum, s: PendulumState):
    """Return ``((x1, y1), (x2, y2))`` with the pivot at the origin, y up."""
    x1 = p.l1 * math.sin(s.theta1)
    y1 = -p.l1 * math.cos(s.theta1)
    x2 = x1 + p.l2 * math.sin(s.theta2)
    y2 = y1 - p.l2 * math.cos(s.theta2)
    return (x1, y1), (x2, y2)


def pendulum_energy(p: DoublePendulum, s: PendulumState) -> float:
    """Total mechanical energy (J), zero potential at the pivot height."""
    kinetic = 0.5 * p.m1 * (p.l1 * s.omega1) ** 2 + 0.5 * p.m2 * (
        (p.l1 * s.omega1) ** 2
        + (p.l2 * s.omega2) ** 2
        + 2 * p.l1 * p.l2 * s.omega1 * s.omega2 * math.cos(s.theta1 - s.theta2)
    )
    potential = -(p.m1 + p.m2) * p.g * p.l1 * math.cos(s.theta1) - p.m2 * p.g * p.l2 * math.cos(s.theta2)
    return kinetic + potential
