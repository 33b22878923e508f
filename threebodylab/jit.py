"""numba-compiled kernels for metrics over whole trajectories.

The kernels take stacked arrays of shape ``(n_steps, 3, 3)`` (step, body,
component) so a full energy series costs one compiled loop instead of one
Python call per step.
"""

import numba as nb
import numpy as np


@nb.njit(error_model="numpy")
def kinetic_energy_jit(velocities, masses):
    n_steps = velocities.shape[0]
    out = np.zeros(n_steps, dtype=np.float64)
    for k in range(n_steps):
        total = 0.0
        for i in range(masses.shape[0]):
            v = velocities[k, i]
            total += 0.5 * masses[i] * (v[0] * v[0] + v[1] * v[1] + v[2] * v[2])
        out[k] = total
    return out


@nb.njit(error_model="numpy")
def potential_energy_jit(positions, masses, g_const):
    n_steps = positions.shape[0]
    n_bodies = masses.shape[0]
    out = np.zeros(n_steps, dtype=np.float64)
    for k in range(n_steps):
        total = 0.0
        for i in range(n_bodies):
            for j in range(i + 1, n_bodies):
                weight = g_const * masses[i] * masses[j]
                if weight == 0.0:
                    continue
                d = positions[k, j] - positions[k, i]
                r = np.sqrt(d[0] * d[0] + d[1] * d[1] + d[2] * d[2])
                total -= weight / r
        out[k] = total
    return out


@nb.njit(error_model="numpy")
def energy_series_jit(positions, velocities, masses, g_const):
    return kinetic_energy_jit(velocities, masses), potential_energy_jit(positions, masses, g_const)


@nb.njit(error_model="numpy")
def pair_distance_jit(positions, i, j):
    n_steps = positions.shape[0]
    out = np.zeros(n_steps, dtype=np.float64)
    for k in range(n_steps):
        d = positions[k, j] - positions[k, i]
        out[k] = np.sqrt(d[0] * d[0] + d[1] * d[1] + d[2] * d[2])
    return out
