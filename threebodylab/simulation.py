"""Run integrations individually or as a concurrent comparison batch."""
import logging
import os
import time
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np

from .integrators import SolutionStep, Solver, solve
from .physics import ConfigurationError, SolverSettings, ThreeBodySystem

logger = logging.getLogger(__name__)


class SimulationError(RuntimeError):
    """A preset of a batch failed; the batch produced no results."""

    def __init__(self, index: int, solver_name: str, message: str):
        super().__init__(f"preset {index} ({solver_name}) failed: {message}")
        self.index = index
        self.solver_name = solver_name


@dataclass(frozen=True)
class Preset:
    """One entry of a comparison batch."""

    solver: Solver
    settings: SolverSettings
    system: ThreeBodySystem

    def __post_init__(self):
        object.__setattr__(self, "solver", Solver.parse(self.solver))


@dataclass(frozen=True)
class SimulationResult:
    """Output of a single integration run."""

    solver_name: str
    system: ThreeBodySystem
    settings: SolverSettings
    solution: tuple

    @property
    def times(self) -> np.ndarray:
        return np.array([s.t for s in self.solution], dtype=np.float64)

    @property
    def final_step(self) -> SolutionStep:
        return self.solution[-1]

    def __len__(self):
        return len(self.solution)


@dataclass(frozen=True)
class Trajectory:
    """Per-body projection of a result, shaped for plotting.

    ``positions`` and ``velocities`` have shape ``(len(times), 3)``.
    """

    name: str
    times: np.ndarray
    positions: np.ndarray
    velocities: np.ndarray


def _as_preset(item) -> Preset:
    if isinstance(item, Preset):
        return item
    solver, settings, system = item
    return Preset(solver, settings, system)


def _solver_label(item) -> str:
    if isinstance(item, Preset):
        solver = item.solver
    else:
        try:
            solver = item[0]
        except (TypeError, IndexError, KeyError):
            return "unknown solver"
    return solver.display_name if isinstance(solver, Solver) else str(solver)


def _default_workers(n_presets: int) -> int:
    # same ceiling as ThreadPoolExecutor's own default
    return min(n_presets, 32, (os.cpu_count() or 1) + 4)


def run_simulation(preset) -> SimulationResult:
    """Integrate a single preset (or ``(solver, settings, system)`` triple)."""
    preset = _as_preset(preset)
    start = time.perf_counter()
    solution = solve(preset.solver, preset.settings, preset.system)
    logger.info(
        "%s finished %d samples in %.3f s",
        preset.solver.display_name, len(solution), time.perf_counter() - start,
    )
    return SimulationResult(
        solver_name=preset.solver.display_name,
        system=preset.system,
        settings=preset.settings,
        solution=solution,
    )


def run_simulations_in_parallel(
    presets: Sequence,
    max_workers: Optional[int] = None,
    executor_cls=ThreadPoolExecutor,
) -> List[SimulationResult]:
    """Run every preset concurrently and return results in input order.

    Parameters
    ----------
    presets : sequence
        :class:`Preset` objects or ``(solver, settings, system)`` triples.
    max_workers : int, optional
        Pool size; defaults to one worker per preset, capped like
        :class:`~concurrent.futures.ThreadPoolExecutor`'s own default.
    executor_cls : type, optional
        :class:`concurrent.futures.Executor` subclass.  Pass
        :class:`~concurrent.futures.ProcessPoolExecutor` to sidestep the GIL.

    Raises
    ------
    SimulationError
        If any preset is malformed or fails.  Pending runs are cancelled and
        no partial results are returned.
    """
    prepared = []
    for index, item in enumerate(presets):
        try:
            prepared.append(_as_preset(item))
        except (KeyError, TypeError, ValueError) as exc:
            solver_name = _solver_label(item)
            logger.error("Preset %d (%s) is malformed: %s", index, solver_name, exc)
            raise SimulationError(index, solver_name, str(exc)) from exc
    presets = prepared
    if not presets:
        return []
    if max_workers is None:
        workers = _default_workers(len(presets))
    elif max_workers < 1:
        raise ConfigurationError(f"max_workers must be at least 1, got {max_workers!r}")
    else:
        workers = max_workers
    logger.info("Dispatching %d presets to %d workers", len(presets), workers)

    with executor_cls(max_workers=workers) as executor:
        futures = [executor.submit(run_simulation, p) for p in presets]
        done, pending = wait(futures, return_when=FIRST_EXCEPTION)
        for index, future in enumerate(futures):
            if future in done and future.exception() is not None:
                for other in pending:
                    other.cancel()
                exc = future.exception()
                solver_name = presets[index].solver.display_name
                logger.error("Preset %d (%s) failed: %s", index, solver_name, exc)
                raise SimulationError(index, solver_name, str(exc)) from exc
        return [f.result() for f in futures]


def trajectories(result: SimulationResult) -> List[Trajectory]:
    """Split a result into one :class:`Trajectory` per body."""
    times = result.times
    pos = np.array([s.positions for s in result.solution], dtype=np.float64).reshape(-1, 3, 3)
    vel = np.array([s.velocities for s in result.solution], dtype=np.float64).reshape(-1, 3, 3)
    return [
        Trajectory(
            name=body.name,
            times=times,
            positions=pos[:, i, :].copy(),
            velocities=vel[:, i, :].copy(),
        )
        for i, body in enumerate(result.system)
    ]
