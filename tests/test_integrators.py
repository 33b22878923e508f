import math

import numpy as np
import pytest

from threebodylab.analysis import distance, total_energy
from threebodylab.integrators import (
    SolutionStep,
    Solver,
    iter_forward_euler,
    iter_leapfrog,
    iter_midpoint,
    iter_rk4,
    iter_solution,
    iter_velocity_verlet,
    leapfrog_step,
    solve,
    solve_forward_euler,
    solve_leapfrog,
    solve_midpoint,
    solve_rk4,
    solve_velocity_verlet,
    velocity_verlet_step,
)
from threebodylab.physics import Body, ConfigurationError, SolverSettings, ThreeBodySystem, accelerations
from threebodylab.presets import load_preset
from threebodylab.vector import Vector3

ALL_SOLVERS = list(Solver)
SOLVE_FUNCTIONS = [solve_forward_euler, solve_midpoint, solve_rk4, solve_leapfrog, solve_velocity_verlet]
ITER_FUNCTIONS = [iter_forward_euler, iter_midpoint, iter_rk4, iter_leapfrog, iter_velocity_verlet]


def _binary(e=0.0, secondary=1e-3):
    """Two bodies on a Kepler orbit (a = 1, G = 1) starting at apoapsis, plus
    a massless spectator far away."""
    mu = 1.0 + secondary
    r_apo = 1.0 + e
    v_rel = math.sqrt(mu * (1.0 - e) / r_apo)
    return ThreeBodySystem((
        Body("Primary", 1.0, (0.0, 0.0, 0.0), (0.0, -secondary * v_rel / mu, 0.0)),
        Body("Secondary", secondary, (r_apo, 0.0, 0.0), (0.0, v_rel / mu, 0.0)),
        Body("Spectator", 0.0, (50.0, 0.0, 0.0), (0.0, 0.0, 0.0)),
    ))


@pytest.mark.parametrize("solver", ALL_SOLVERS)
@pytest.mark.parametrize("t_start,t_end,dt", [(0.0, 1.0, 0.1), (2.0, 3.05, 0.25), (0.0, 0.3, 0.1)])
def test_step_count_and_times(solver, t_start, t_end, dt):
    settings = SolverSettings(t_start, t_end, dt, 1.0)
    solution = solve(solver, settings, _binary())
    n = math.floor((t_end - t_start) / dt)
    assert len(solution) == n + 1
    assert solution[0].t == t_start
    for k, step in enumerate(solution):
        assert step.t == t_start + k * dt
    assert all(b.t > a.t for a, b in zip(solution, solution[1:]))


@pytest.mark.parametrize("solver", ALL_SOLVERS)
def test_degenerate_runs_hold_only_initial_condition(solver):
    system = _binary()
    for settings in (SolverSettings(1.0, 1.0, 0.1, 1.0), SolverSettings(0.0, 0.5, 1.0, 1.0)):
        solution = solve(solver, settings, system)
        assert len(solution) == 1
        assert solution[0].positions == system.positions
        assert solution[0].velocities == system.velocities
        assert solution[0].t == settings.t_start


@pytest.mark.parametrize("solver", ALL_SOLVERS)
def test_zero_mass_bodies_stay_put(solver):
    system = ThreeBodySystem((
        Body("A", 0.0, (0.0, 0.0, 0.0)),
        Body("B", 0.0, (1.0, 0.0, 0.0)),
        Body("C", 0.0, (0.0, 1.0, 0.5)),
    ))
    solution = solve(solver, SolverSettings(0.0, 1.0, 0.01, 1.0), system)
    start = np.array(system.positions)
    for step in solution:
        assert np.allclose(np.array(step.positions), start, atol=1e-10, rtol=0)


@pytest.mark.parametrize("solver", ALL_SOLVERS)
def test_uniform_motion_without_gravity(solver):
    system = ThreeBodySystem((
        Body("A", 1.0, (0.0, 0.0, 0.0), (1.0, 0.0, 0.0)),
        Body("B", 1.0, (5.0, 0.0, 0.0), (0.0, 2.0, 0.0)),
        Body("C", 1.0, (0.0, 5.0, 0.0), (0.0, 0.0, -1.0)),
    ))
    solution = solve(solver, SolverSettings(0.0, 2.0, 0.5, 0.0), system)
    final = solution[-1]
    assert np.allclose(np.array(final.positions),
                       [[2.0, 0.0, 0.0], [5.0, 4.0, 0.0], [0.0, 5.0, -2.0]])
    assert final.velocities == system.velocities


@pytest.mark.parametrize("solver", ALL_SOLVERS)
def test_invalid_settings_rejected_before_stepping(solver):
    with pytest.raises(ConfigurationError):
        iter_solution(solver, SolverSettings(0.0, 1.0, 0.0, 1.0), _binary())
    with pytest.raises(ConfigurationError):
        solve(solver, SolverSettings(0.0, 1.0, -1.0, 1.0), _binary())
    with pytest.raises(ConfigurationError):
        solve(solver, SolverSettings(1.0, 0.0, 0.1, 1.0), _binary())


def test_named_entry_points_match_dispatch():
    settings = SolverSettings(0.0, 0.5, 0.05, 1.0)
    system = _binary(e=0.3)
    for fn, solver in zip(SOLVE_FUNCTIONS, ALL_SOLVERS):
        assert fn(settings, system) == solve(solver, settings, system)


def test_named_generators_match_eager_entry_points():
    settings = SolverSettings(0.0, 0.5, 0.05, 1.0)
    system = _binary(e=0.3)
    for it, fn in zip(ITER_FUNCTIONS, SOLVE_FUNCTIONS):
        lazy = it(settings, system)
        first = next(lazy)
        assert first == SolutionStep(0.0, system.positions, system.velocities)
        assert (first,) + tuple(lazy) == fn(settings, system)
    with pytest.raises(ConfigurationError):
        iter_rk4(SolverSettings(0.0, 1.0, 0.0, 1.0), system)


def test_solver_parse():
    assert Solver.parse("rk4") is Solver.RK4
    assert Solver.parse("Velocity Verlet") is Solver.VELOCITY_VERLET
    assert Solver.parse("FORWARD_EULER") is Solver.FORWARD_EULER
    assert Solver.parse(Solver.LEAPFROG) is Solver.LEAPFROG
    with pytest.raises(KeyError):
        Solver.parse("yoshida")


def test_lazy_generation_is_restartable():
    settings = SolverSettings(0.0, 1.0, 0.1, 1.0)
    system = _binary(e=0.5)
    first = tuple(iter_solution(Solver.LEAPFROG, settings, system))
    second = tuple(iter_solution(Solver.LEAPFROG, settings, system))
    assert first == second


def test_leapfrog_and_verlet_agree():
    settings = SolverSettings(0.0, 2.0, 0.01, 1.0)
    system = _binary(e=0.5)
    lf = solve_leapfrog(settings, system)[-1]
    vv = solve_velocity_verlet(settings, system)[-1]
    assert np.allclose(np.array(lf.positions), np.array(vv.positions), atol=1e-9)
    assert np.allclose(np.array(lf.velocities), np.array(vv.velocities), atol=1e-9)


def test_stored_acceleration_is_returned():
    mus = (1.0, 1e-3, 0.0)
    pos = (Vector3(0, 0, 0), Vector3(1, 0, 0), Vector3(50, 0, 0))
    vel = (Vector3(0, 0, 0), Vector3(0, 1, 0), Vector3(0, 0, 0))
    acc = accelerations(*pos, *mus)
    for step in (leapfrog_step, velocity_verlet_step):
        new_pos, _, new_acc = step(pos, vel, acc, 0.01, mus)
        assert new_acc == accelerations(*new_pos, *mus)


@pytest.mark.parametrize("solver", [Solver.RK4, Solver.MIDPOINT, Solver.LEAPFROG, Solver.VELOCITY_VERLET])
def test_circular_orbit_keeps_radius(solver):
    settings = SolverSettings(0.0, 2 * math.pi, 0.005, 1.0)
    solution = solve(solver, settings, _binary())
    r0 = distance(solution[0], 0, 1)
    worst = max(abs(distance(s, 0, 1) - r0) / r0 for s in solution)
    assert worst < 1e-3


def test_forward_euler_drifts_on_circular_orbit():
    settings = SolverSettings(0.0, 2 * math.pi, 0.005, 1.0)
    solution = solve_forward_euler(settings, _binary())
    r0 = distance(solution[0], 0, 1)
    assert abs(distance(solution[-1], 0, 1) - r0) / r0 > 5e-3


def test_energy_drift_ordering_on_eccentric_orbit():
    # five periods of an e = 0.9 orbit, ending back near apoapsis
    system = _binary(e=0.9)
    settings = SolverSettings(0.0, 5 * 2 * math.pi, 0.01, 1.0)
    masses = system.masses

    def final_drift(solver):
        solution = solve(solver, settings, system)
        e0 = total_energy(solution[0], masses, 1.0)
        return abs(total_energy(solution[-1], masses, 1.0) - e0)

    leapfrog = final_drift(Solver.LEAPFROG)
    rk4 = final_drift(Solver.RK4)
    euler = final_drift(Solver.FORWARD_EULER)
    assert leapfrog <= rk4 <= euler


def test_figure_eight_returns_close_to_start():
    system = load_preset("Figure-8")
    settings = SolverSettings(0.0, 6.3259, 1e-3, 1.0)
    final = solve_rk4(settings, system)[-1]
    assert np.allclose(np.array(final.positions), np.array(system.positions), atol=5e-3)


def test_coincident_bodies_yield_non_finite_trajectory():
    system = ThreeBodySystem((
        Body("A", 1.0, (0.0, 0.0, 0.0)),
        Body("B", 1.0, (0.0, 0.0, 0.0)),
        Body("C", 1.0, (1.0, 0.0, 0.0)),
    ))
    solution = solve_rk4(SolverSettings(0.0, 0.2, 0.1, 1.0), system)
    assert len(solution) == 3
    assert not all(v.is_finite() for v in solution[-1].velocities)
