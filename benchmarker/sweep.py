from __future__ import annotations

import logging
from typing import Callable

from .config import BenchmarkPlan
from .measurement.collector import SampleCollector
from .measurement.results import Result, ResultStore
from .measurement.stats import reduce_sample
from .process import BenchmarkCancelled, ExecutionError, ProcessExecutor
from .runners import Runner, RunnerGroup

LOGGER = logging.getLogger("benchmarker.sweep")

BenchmarkCallback = Callable[[str, list[Result]], None]


class BenchmarkSweep:
    """
    Measures every benchmark on every runner of a plan, one pair at a time.

    Runner groups with a setup step (a compile) are prepared first; when that
    fails each runner of the group gets an all-NaN placeholder result instead of
    being measured. Cancellation stops the sweep without reducing the partial
    sample of the pair being measured.
    """

    def __init__(
        self,
        plan: BenchmarkPlan,
        executor: ProcessExecutor,
        collector: SampleCollector,
        progress: logging.Logger,
        results: ResultStore | None = None,
        on_benchmark_complete: BenchmarkCallback | None = None,
    ) -> None:
        self._plan = plan
        self._executor = executor
        self._collector = collector
        self._progress = progress
        self._on_benchmark_complete = on_benchmark_complete
        self._name_width = plan.name_width()
        self.results = results if results is not None else ResultStore()

    def run(self) -> bool:
        try:
            for benchmark in self._plan.benchmarks:
                self._check_cancelled()
                self._sweep_benchmark(benchmark)
                if self._on_benchmark_complete is not None:
                    self._on_benchmark_complete(benchmark, self.results.results_for(benchmark))
        except BenchmarkCancelled as exc:
            self._executor.stop_event.set()
            LOGGER.info("Benchmark sweep cancelled: %s", exc)
            return False
        return True

    def _sweep_benchmark(self, benchmark: str) -> None:
        self._progress.info("Running %s ...", benchmark)
        for group in self._plan:
            self._check_cancelled()
            if not self._prepare(benchmark, group):
                for runner in group.runners:
                    self._fail(benchmark, runner)
                continue
            for runner in group.runners:
                self._check_cancelled()
                self._measure(benchmark, runner)

    def _prepare(self, benchmark: str, group: RunnerGroup) -> bool:
        for command in group.setup_commands(benchmark):
            try:
                self._executor.run(command)
            except ExecutionError:
                LOGGER.exception("Setup of %s for %s failed", group.label, benchmark)
                return False
        return True

    def _measure(self, benchmark: str, runner: Runner) -> None:
        scores = self._collector.collect(benchmark, runner)
        result = reduce_sample(runner.name, scores)
        self.results.append(benchmark, result)
        self._progress.info("  - %s : %s", self._pad(runner.name), result)

    def _fail(self, benchmark: str, runner: Runner) -> None:
        self.results.append(benchmark, Result.failed(runner.name))
        self._progress.info("  - %s : <compile failed>", self._pad(runner.name))

    def _pad(self, name: str) -> str:
        return name.ljust(self._name_width)

    def _check_cancelled(self) -> None:
        if self._executor.stop_event.is_set():
            raise BenchmarkCancelled("sweep cancelled")
