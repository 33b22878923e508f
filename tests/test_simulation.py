import math
import threading
import time
from concurrent.futures import ProcessPoolExecutor, ThreadPoolExecutor

import numpy as np
import pytest

import threebodylab.simulation as simulation
from threebodylab.integrators import Solver
from threebodylab.physics import ConfigurationError, SolverSettings
from threebodylab.presets import load_preset, preset_settings
from threebodylab.simulation import (
    Preset,
    SimulationError,
    SimulationResult,
    run_simulation,
    run_simulations_in_parallel,
    trajectories,
)


def _settings(t_end=1.0, dt=0.01):
    return SolverSettings(0.0, t_end, dt, 1.0)


def test_run_simulation_builds_result():
    system = load_preset("Circular Binary")
    result = run_simulation(Preset(Solver.RK4, _settings(), system))
    assert isinstance(result, SimulationResult)
    assert result.solver_name == "RK4"
    assert result.system is system
    assert len(result) == 101
    assert isinstance(result.solution, tuple)


def test_batch_accepts_triples_and_preserves_order():
    system = load_preset("Circular Binary")
    presets = [
        (Solver.FORWARD_EULER, _settings(dt=0.1), system),
        ("verlet", _settings(dt=0.05), system),
        (Solver.RK4, _settings(dt=0.02), system),
    ]
    results = run_simulations_in_parallel(presets)
    assert [r.solver_name for r in results] == ["Forward Euler", "Velocity Verlet", "RK4"]
    assert [len(r) for r in results] == [11, 21, 51]


def test_batch_order_independent_of_completion(monkeypatch):
    """The slowest preset comes first but stays first in the output."""
    original = simulation.solve
    delays = {Solver.FORWARD_EULER: 0.3, Solver.MIDPOINT: 0.1, Solver.RK4: 0.0}

    def slow_solve(solver, settings, system):
        time.sleep(delays[solver])
        return original(solver, settings, system)

    monkeypatch.setattr(simulation, "solve", slow_solve)
    system = load_preset("Circular Binary")
    presets = [Preset(s, _settings(dt=0.1), system) for s in delays]
    results = run_simulations_in_parallel(presets)
    assert [r.solver_name for r in results] == ["Forward Euler", "Midpoint", "RK4"]


def test_runs_execute_concurrently(monkeypatch):
    original = simulation.solve
    barrier = threading.Barrier(3, timeout=5)

    def waiting_solve(solver, settings, system):
        barrier.wait()
        return original(solver, settings, system)

    monkeypatch.setattr(simulation, "solve", waiting_solve)
    system = load_preset("Circular Binary")
    presets = [Preset(s, _settings(dt=0.1), system) for s in (Solver.RK4, Solver.LEAPFROG, Solver.MIDPOINT)]
    assert len(run_simulations_in_parallel(presets)) == 3


@pytest.mark.parametrize("solver", [Solver.LEAPFROG, Solver.VELOCITY_VERLET])
def test_duplicate_presets_are_bit_identical(solver):
    system = load_preset("Figure-8")
    preset = Preset(solver, SolverSettings(0.0, 1.0, 1e-3, 1.0), system)
    results = run_simulations_in_parallel([preset, preset, preset])
    assert results[0].solution == results[1].solution == results[2].solution
    assert results[0].solution == run_simulation(preset).solution


def test_batch_fails_fast_without_partial_results():
    system = load_preset("Circular Binary")
    presets = [
        Preset(Solver.RK4, _settings(), system),
        Preset(Solver.LEAPFROG, SolverSettings(0.0, 1.0, 0.0, 1.0), system),
        Preset(Solver.MIDPOINT, _settings(), system),
    ]
    with pytest.raises(SimulationError) as info:
        run_simulations_in_parallel(presets)
    err = info.value
    assert err.index == 1
    assert err.solver_name == "Leapfrog"
    assert "Leapfrog" in str(err)
    assert isinstance(err.__cause__, ConfigurationError)


def test_empty_batch():
    assert run_simulations_in_parallel([]) == []


def test_process_pool_matches_threads():
    system = load_preset("Circular Binary")
    presets = [Preset(s, _settings(dt=0.05), system) for s in (Solver.RK4, Solver.LEAPFROG)]
    threaded = run_simulations_in_parallel(presets)
    processed = run_simulations_in_parallel(presets, max_workers=2, executor_cls=ProcessPoolExecutor)
    assert [r.solution for r in threaded] == [r.solution for r in processed]


def test_trajectories_projection():
    system = load_preset("Sun-Earth-Moon")
    settings = preset_settings("Sun-Earth-Moon", t_end=10 * 86400.0)
    result = run_simulation(Preset(Solver.LEAPFROG, settings, system))
    trajs = trajectories(result)
    assert [t.name for t in trajs] == ["Sun", "Earth", "Moon"]
    n = settings.num_steps + 1
    for i, t in enumerate(trajs):
        assert t.times.shape == (n,)
        assert t.positions.shape == (n, 3)
        assert t.velocities.shape == (n, 3)
        assert np.array_equal(t.positions[0], system[i].position.to_array())
    assert math.isclose(trajs[0].times[-1], settings.time_at(settings.num_steps))
    # the Moon stays near the Earth over ten days
    sep = np.linalg.norm(trajs[2].positions - trajs[1].positions, axis=1)
    assert np.all(sep < 5e8)


@pytest.mark.parametrize("bad_item,label", [
    (("yoshida", _settings(), load_preset("Circular Binary")), "yoshida"),
    ((Solver.RK4, _settings()), "RK4"),
    (42, "unknown solver"),
])
def test_malformed_preset_reports_its_index(bad_item, label):
    system = load_preset("Circular Binary")
    with pytest.raises(SimulationError) as info:
        run_simulations_in_parallel([(Solver.RK4, _settings(), system), bad_item])
    assert info.value.index == 1
    assert info.value.solver_name == label
    assert isinstance(info.value.__cause__, (KeyError, TypeError, ValueError))


def test_default_pool_is_capped(monkeypatch):
    seen = []

    class RecordingExecutor(ThreadPoolExecutor):
        def __init__(self, max_workers=None):
            seen.append(max_workers)
            super().__init__(max_workers=max_workers)

    monkeypatch.setattr(simulation.os, "cpu_count", lambda: 2)
    system = load_preset("Circular Binary")
    presets = [Preset(Solver.FORWARD_EULER, _settings(t_end=0.05), system)] * 40
    results = run_simulations_in_parallel(presets, executor_cls=RecordingExecutor)
    assert len(results) == 40
    assert seen == [6]

    run_simulations_in_parallel(presets[:2], executor_cls=RecordingExecutor)
    assert seen[-1] == 2


def test_non_positive_worker_count_rejected():
    system = load_preset("Circular Binary")
    with pytest.raises(ConfigurationError):
        run_simulations_in_parallel([Preset(Solver.RK4, _settings(), system)], max_workers=0)
