from __future__ import annotations

import argparse
import logging
import os
import signal
import sys
import threading
from pathlib import Path

from .charts import render_benchmark_chart, render_summary_heatmap
from .config import DEFAULT_BENCHMARKS, BenchmarkPlan, ToolPaths, default_benchmark_plan
from .logs import (
    DIAGNOSTICS_FILENAME,
    PROGRESS_FILENAME,
    close_logger,
    configure_progress_logger,
    setup_logging,
)
from .measurement.collector import ITERATIONS_DEFAULT, SampleCollector
from .measurement.results import Result, ResultStore
from .process import ProcessExecutor
from .report import write_benchmark_tables, write_manifest, write_text_report
from .sweep import BenchmarkSweep

LOGGER = logging.getLogger("benchmarker.main")

EXIT_CANCELLED = 130


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {value!r}")
    return number


def _positive_float(value: str) -> float:
    number = float(value)
    if number <= 0:
        raise argparse.ArgumentTypeError(f"expected a positive number, got {value!r}")
    return number


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    env = os.environ
    parser = argparse.ArgumentParser(description="Cross-runtime benchmark harness")
    parser.add_argument(
        "--defrac-benchmarks",
        default=env.get("DEFRAC_BENCHMARKS", "."),
        help="Path to the defrac benchmark suite",
    )
    parser.add_argument(
        "--ton80-benchmarks",
        default=env.get("TON80_BENCHMARKS", "."),
        help="Path to the ton80 benchmark suite",
    )
    parser.add_argument("--d8", default=env.get("PATH_TO_D8", "d8"), help="Path to V8")
    parser.add_argument("--dart", default=env.get("PATH_TO_DART", "dart"), help="Path to dart")
    parser.add_argument(
        "--dart2js", default=env.get("PATH_TO_DART2JS", "dart2js"), help="Path to dart2js"
    )
    parser.add_argument(
        "--defrac", default=env.get("PATH_TO_DEFRAC", "defrac"), help="Path to defrac"
    )
    parser.add_argument("--java", default=env.get("PATH_TO_JAVA", "java"), help="Path to java")
    parser.add_argument(
        "--js", default=env.get("PATH_TO_JS", "js"), help="Path to SpiderMonkey"
    )
    parser.add_argument(
        "--benchmarks",
        default=env.get("BENCHMARKS", ",".join(DEFAULT_BENCHMARKS)),
        help="Comma-separated list of benchmarks to run",
    )
    parser.add_argument(
        "--platforms",
        default=env.get("DEFRAC_PLATFORMS"),
        help="Comma-separated defrac platforms (default: jvm,web plus linux on Linux)",
    )
    parser.add_argument(
        "--iterations",
        type=_positive_int,
        default=env.get("BENCHMARK_ITERATIONS", str(ITERATIONS_DEFAULT)),
        help="Measured runs per benchmark and runner",
    )
    parser.add_argument(
        "--timeout",
        type=_positive_float,
        default=env.get("BENCHMARK_TIMEOUT_SECONDS"),
        help="Optional timeout in seconds for every external command",
    )
    parser.add_argument(
        "--output-dir",
        default=env.get("BENCHMARK_OUTPUT_DIR", "."),
        help="Directory to store benchmark artefacts (logs, tables and charts)",
    )
    parser.add_argument(
        "--no-charts",
        action="store_true",
        help="Skip rendering PNG charts",
    )
    parser.add_argument(
        "--print-errors",
        action="store_true",
        help="Echo absorbed failures with tracebacks to the console",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Only print the planned runners and commands without executing them",
    )
    parser.add_argument(
        "--log-level",
        default=env.get("BENCHMARK_LOG_LEVEL", "WARNING"),
        help="Console logging level",
    )
    return parser.parse_args(argv)


def _split_list(value: str | None) -> list[str]:
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def build_plan(args: argparse.Namespace) -> BenchmarkPlan:
    paths = ToolPaths(
        defrac_benchmarks=args.defrac_benchmarks,
        ton80_benchmarks=args.ton80_benchmarks,
        defrac=args.defrac,
        java=args.java,
        dart=args.dart,
        dart2js=args.dart2js,
        d8=args.d8,
        js=args.js,
    )
    platforms = _split_list(args.platforms) if args.platforms is not None else None
    return default_benchmark_plan(paths, _split_list(args.benchmarks), platforms)


class ArtefactPublisher:
    """Writes tables and charts as soon as a benchmark has been swept."""

    def __init__(self, output_dir: Path, charts: bool = True) -> None:
        self._output_dir = output_dir
        self._charts = charts
        self.artefacts: dict[str, dict[str, str]] = {}

    def publish(self, benchmark: str, results: list[Result]) -> None:
        artefacts = self.artefacts.setdefault(benchmark, {})
        try:
            csv_path, dat_path = write_benchmark_tables(benchmark, results, self._output_dir)
            artefacts.update(csv=str(csv_path), dat=str(dat_path))
            if self._charts:
                artefacts["chart"] = str(render_benchmark_chart(benchmark, results, self._output_dir))
        except Exception:  # noqa: BLE001
            LOGGER.exception("Failed to publish artefacts for %s", benchmark)

    def finish(self, store: ResultStore, name_width: int, completed: bool) -> None:
        try:
            write_text_report(store, self._output_dir, name_width)
            if self._charts:
                render_summary_heatmap(store, self._output_dir)
            write_manifest(store, self.artefacts, self._output_dir, completed)
        except Exception:  # noqa: BLE001
            LOGGER.exception("Failed to write the run summary")


def _print_plan(plan: BenchmarkPlan) -> None:
    print(f"Benchmarks: {', '.join(plan.benchmarks)}")
    benchmark = plan.benchmarks[0]
    for group in plan:
        print(f"Group: {group.label}")
        for command in group.setup_commands(benchmark):
            print(f"  setup: {' '.join(command)}")
        for runner in group.runners:
            print(f"  - {runner.name} ({runner.kind.value}): {' '.join(runner.command_for(benchmark))}")


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)

    try:
        plan = build_plan(args)
    except ValueError as exc:
        print(f"invalid benchmark plan: {exc}", file=sys.stderr)
        return 2

    if args.dry_run:
        _print_plan(plan)
        return 0

    output_dir = Path(args.output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    root_logger = setup_logging(
        args.log_level, output_dir / DIAGNOSTICS_FILENAME, print_errors=args.print_errors
    )
    progress = configure_progress_logger(output_dir / PROGRESS_FILENAME)

    stop_event = threading.Event()
    previous_sigterm = signal.signal(signal.SIGTERM, lambda signum, frame: stop_event.set())

    executor = ProcessExecutor(stop_event, timeout_s=args.timeout)
    collector = SampleCollector(executor, iterations=args.iterations)
    publisher = ArtefactPublisher(output_dir, charts=not args.no_charts)
    sweep = BenchmarkSweep(
        plan,
        executor,
        collector,
        progress,
        on_benchmark_complete=publisher.publish,
    )

    LOGGER.info("Benchmark output directory: %s", output_dir)
    LOGGER.info("Runners: %s", ", ".join(runner.name for runner in plan.runners()))

    try:
        try:
            completed = sweep.run()
        except KeyboardInterrupt:
            stop_event.set()
            LOGGER.info("Benchmark sweep interrupted")
            completed = False
        publisher.finish(sweep.results, plan.name_width(), completed)
    finally:
        signal.signal(signal.SIGTERM, previous_sigterm)
        close_logger(progress)
        close_logger(root_logger)

    if not completed:
        print("benchmark sweep cancelled", file=sys.stderr)
        return EXIT_CANCELLED
    return 0


if __name__ == "__main__":
    sys.exit(main())
