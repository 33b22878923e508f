"""Command line entry point: run several solvers on one scenario and report
how far each drifts from the conserved quantities."""
import argparse
import logging
import sys
import time
from dataclasses import replace
from pathlib import Path

from .analysis import MetricSeries, distance_metric, energy_deviation, energy_metric
from .integrators import Solver
from .presets import PRESETS, load_preset, preset_settings
from .simulation import Preset, SimulationError, run_simulations_in_parallel
from .state_manager import load_state
from .utils import relative_to_display, time_to_display

logger = logging.getLogger("threebodylab")

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"


def _positive_int(text: str) -> int:
    value = int(text)
    if value < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {value}")
    return value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="threebodylab",
        description="Compare fixed-step integrators on a three-body system",
    )
    source = parser.add_mutually_exclusive_group()
    source.add_argument("--preset", default="Sun-Earth-Moon", choices=sorted(PRESETS),
                        help="Built-in scenario")
    source.add_argument("--scenario", type=Path, help="JSON scenario file")
    parser.add_argument(
        "--solvers",
        nargs="+",
        choices=[s.value for s in Solver],
        default=[s.value for s in Solver],
        help="Solvers to compare",
    )
    parser.add_argument("--dt", type=float, help="Step size (overrides the scenario)")
    parser.add_argument("--t-end", type=float, help="End time (overrides the scenario)")
    parser.add_argument("--workers", type=_positive_int, help="Worker threads (default: one per solver)")
    parser.add_argument("--csv", type=Path, help="Write energy deviation series to this directory")
    parser.add_argument("--plot", type=Path, help="Save a PNG comparison chart")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def _load_scenario(args):
    if args.scenario is not None:
        system, settings = load_state(args.scenario)
        if settings is None:
            settings = preset_settings("Sun-Earth-Moon")
        overrides = {"dt": args.dt, "t_end": args.t_end}
        return system, replace(settings, **{k: v for k, v in overrides.items() if v is not None})
    return load_preset(args.preset), preset_settings(args.preset, dt=args.dt, t_end=args.t_end)


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING, format=LOG_FORMAT)

    try:
        system, settings = _load_scenario(args)
    except (OSError, ValueError, TypeError) as exc:
        parser.error(str(exc))

    start = time.perf_counter()
    presets = [Preset(Solver.parse(name), settings, system) for name in args.solvers]
    try:
        results = run_simulations_in_parallel(presets, max_workers=args.workers)
    except SimulationError as exc:
        logger.error("%s", exc)
        return 1

    print(f"{len(results)} runs of {len(results[0])} samples (t = {settings.t_start:g} .. "
          f"{results[0].final_step.t:g}) in {time_to_display(time.perf_counter() - start)}")
    print(f"{'solver':<16} {'|dE| final':>14} {'|dr01| final':>14}")
    deviations = []
    for result in results:
        times, d_energy = energy_deviation(result)
        dist = MetricSeries.from_result("distance_0_1", distance_metric(0, 1), result,
                                        relative_to_start=True)
        e0 = energy_metric(result)(result.solution[0])
        r0 = distance_metric(0, 1)(result.solution[0])
        deviations.append((times, d_energy))
        print(f"{result.solver_name:<16} {relative_to_display(d_energy[-1], e0):>14} "
              f"{relative_to_display(dist.final_value, r0):>14}")
        if args.csv is not None:
            args.csv.mkdir(parents=True, exist_ok=True)
            slug = result.solver_name.lower().replace(" ", "_")
            MetricSeries("energy_deviation", times, d_energy).export_csv(
                args.csv / f"{slug}_energy.csv"
            )

    if args.plot is not None:
        from .rendering import render_comparison

        render_comparison(args.plot, results, deviations)
        logger.info("Saved comparison chart to %s", args.plot)
    return 0


if __name__ == "__main__":  # pragma: no cover - manual tool
    sys.exit(main())
