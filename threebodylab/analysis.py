"""Derived metrics for judging integrator quality.

Per-step metrics are pure functions of one
:class:`~threebodylab.integrators.SolutionStep` plus constant run data
(masses, gravitational constant).  :func:`apply_metric` maps such a function
over a whole result; :func:`deviation` turns the series into absolute drift
from its first value.
"""
import csv
import math
import os
from dataclasses import dataclass
from functools import partial
from typing import Callable, Tuple

import numpy as np

from .jit import energy_series_jit, pair_distance_jit
from .vector import Vector3

_PAIRS = ((0, 1), (0, 2), (1, 2))


def kinetic_energy(step, masses) -> float:
    """Return ``sum(0.5 * m * |v|**2)``."""
    return sum(0.5 * m * v.squared_magnitude() for m, v in zip(masses, step.velocities))


def potential_energy(step, masses, g_constant) -> float:
    """Return ``-sum(G * m_i * m_j / r_ij)`` over the three pairs.

    Pairs with a massless member contribute nothing, even when coincident.
    """
    potential = 0.0
    for i, j in _PAIRS:
        weight = g_constant * masses[i] * masses[j]
        if weight == 0:
            continue
        r = (step.positions[j] - step.positions[i]).magnitude()
        if r == 0:
            return -math.inf
        potential -= weight / r
    return potential


def total_energy(step, masses, g_constant) -> float:
    return kinetic_energy(step, masses) + potential_energy(step, masses, g_constant)


def distance(step, i: int, j: int) -> float:
    return (step.positions[j] - step.positions[i]).magnitude()


def linear_momentum(step, masses) -> Vector3:
    p = Vector3.zero()
    for m, v in zip(masses, step.velocities):
        p = p + v * m
    return p


def angular_momentum(step, masses) -> Vector3:
    """Total angular momentum about the origin."""
    total = Vector3.zero()
    for m, r, v in zip(masses, step.positions, step.velocities):
        total = total + r.cross(v * m)
    return total


def center_of_mass(step, masses):
    """Return the centre-of-mass position and velocity, or ``(None, None)``
    when the total mass is zero."""
    total_mass = sum(masses)
    if total_mass == 0:
        return None, None
    pos = Vector3.zero()
    vel = Vector3.zero()
    for m, r, v in zip(masses, step.positions, step.velocities):
        pos = pos + r * m
        vel = vel + v * m
    return pos / total_mass, vel / total_mass


def orbital_elements(step, masses, g_constant, body: int, central: int) -> dict:
    """Two-body orbital elements of ``body`` relative to ``central``.

    Unbound or parabolic orbits report an infinite period and zero
    periapsis/apoapsis.
    """
    r_vec = step.positions[body] - step.positions[central]
    v_vec = step.velocities[body] - step.velocities[central]
    r = r_vec.magnitude()
    v = v_vec.magnitude()
    mu = g_constant * (masses[central] + masses[body])

    if mu <= 0 or r == 0:
        return {
            'semi_major_axis': 0.0, 'eccentricity': 0.0, 'period': 0.0,
            'periapsis': 0.0, 'apoapsis': 0.0, 'speed': v,
        }

    specific_orbital_energy = v ** 2 / 2 - mu / r
    h_vec = r_vec.cross(v_vec)
    e_vec = v_vec.cross(h_vec) / mu - r_vec / r
    eccentricity = e_vec.magnitude()

    if abs(specific_orbital_energy) < 1e-12 * (mu / r):  # parabolic
        semi_major_axis = math.inf
        period = math.inf
    else:
        semi_major_axis = -mu / (2 * specific_orbital_energy)
        if semi_major_axis > 0:
            period = 2 * math.pi * math.sqrt(semi_major_axis ** 3 / mu)
        else:
            period = math.inf

    bound = 0 < semi_major_axis < math.inf
    return {
        'semi_major_axis': semi_major_axis,
        'eccentricity': eccentricity,
        'period': period,
        'periapsis': semi_major_axis * (1 - eccentricity) if bound else 0.0,
        'apoapsis': semi_major_axis * (1 + eccentricity) if bound else 0.0,
        'speed': v,
    }


# --- series -----------------------------------------------------------------

def apply_metric(metric: Callable, result) -> Tuple[np.ndarray, np.ndarray]:
    """Evaluate ``metric(step)`` for every step of ``result``.

    Returns parallel ``(times, values)`` arrays.
    """
    times = np.array([s.t for s in result.solution], dtype=np.float64)
    values = np.array([metric(s) for s in result.solution], dtype=np.float64)
    return times, values


def deviation(times, values) -> Tuple[np.ndarray, np.ndarray]:
    """Absolute difference of every value from the first one."""
    values = np.asarray(values, dtype=np.float64)
    if values.size == 0:
        return np.asarray(times, dtype=np.float64), values
    return np.asarray(times, dtype=np.float64), np.abs(values - values[0])


def energy_metric(result) -> Callable:
    """Total-energy metric bound to the masses and G of ``result``."""
    return partial(
        total_energy,
        masses=result.system.masses,
        g_constant=result.settings.gravitational_constant,
    )


def distance_metric(i: int, j: int) -> Callable:
    return partial(distance, i=i, j=j)


def energy_deviation(result):
    return deviation(*apply_metric(energy_metric(result), result))


def distance_deviation(result, i: int = 0, j: int = 1):
    """Drift of the separation between bodies ``i`` and ``j`` (orbital radius)."""
    return deviation(*apply_metric(distance_metric(i, j), result))


def energy_series(result):
    """Kinetic, potential and total energy of every step.

    Uses the compiled kernels in :mod:`threebodylab.jit` on stacked arrays;
    agrees with :func:`apply_metric` of :func:`total_energy`.
    """
    positions = np.array([s.positions for s in result.solution], dtype=np.float64)
    velocities = np.array([s.velocities for s in result.solution], dtype=np.float64)
    masses = np.array(result.system.masses, dtype=np.float64)
    kinetic, potential = energy_series_jit(
        positions, velocities, masses, float(result.settings.gravitational_constant)
    )
    return result.times, kinetic, potential, kinetic + potential


def distance_series(result, i: int = 0, j: int = 1):
    """Separation of bodies ``i`` and ``j`` at every step (compiled kernel)."""
    positions = np.array([s.positions for s in result.solution], dtype=np.float64)
    return result.times, pair_distance_jit(positions, i, j)


@dataclass
class MetricSeries:
    """Named metric time series that can be exported to CSV."""

    name: str
    times: np.ndarray
    values: np.ndarray

    @classmethod
    def from_result(cls, name, metric, result, relative_to_start=False):
        times, values = apply_metric(metric, result)
        if relative_to_start:
            times, values = deviation(times, values)
        return cls(name, times, values)

    @property
    def final_value(self) -> float:
        return float(self.values[-1]) if len(self.values) else math.nan

    def export_csv(self, file, delimiter=","):
        """Write ``time,<name>`` rows.

        Parameters
        ----------
        file : str or file-like
            Destination filename or open file object.
        delimiter : str, optional
            Delimiter used between columns (default is ',').
        """
        close = False
        if isinstance(file, (str, bytes, os.PathLike)):
            f = open(file, "w", newline="")
            close = True
        else:
            f = file
        try:
            writer = csv.writer(f, delimiter=delimiter)
            writer.writerow(["time", self.name])
            for t, v in zip(self.times, self.values):
                writer.writerow([repr(float(t)), repr(float(v))])
        finally:
            if close:
                f.close()
