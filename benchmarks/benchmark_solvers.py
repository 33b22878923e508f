import time
import numpy as np

from threebodylab.analysis import apply_metric, energy_metric, energy_series
from threebodylab.integrators import Solver
from threebodylab.presets import load_preset, preset_settings
from threebodylab.simulation import Preset, run_simulation, run_simulations_in_parallel


if __name__ == "__main__":
    system = load_preset("Sun-Earth-Moon")
    settings = preset_settings("Sun-Earth-Moon")
    presets = [Preset(s, settings, system) for s in Solver]

    t0 = time.time()
    sequential = [run_simulation(p) for p in presets]
    t1 = time.time()
    parallel = run_simulations_in_parallel(presets)
    t2 = time.time()

    assert all(a.solution == b.solution for a, b in zip(sequential, parallel))
    print(f"{len(presets)} solvers x {len(sequential[0])} samples")
    print(f"Sequential  : {t1 - t0:.3f}s")
    print(f"Thread pool : {t2 - t1:.3f}s")

    result = sequential[0]
    # warm up JIT
    energy_series(result)

    t0 = time.time()
    _, baseline = apply_metric(energy_metric(result), result)
    t1 = time.time()
    _, _, _, accelerated = energy_series(result)
    t2 = time.time()

    assert np.allclose(baseline, accelerated)
    print(f"Energy, Python loop: {t1 - t0:.3f}s")
    print(f"Energy, JIT        : {t2 - t1:.3f}s")
    if t2 - t1 > 0:
        print(f"Speedup            : {(t1 - t0) / (t2 - t1):.1f}x")
