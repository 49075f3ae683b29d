from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING

from ..process import BenchmarkCancelled, ExecutionError
from .extractor import extract_duration, score_from_duration

if TYPE_CHECKING:
    from ..process import ProcessExecutor
    from ..runners import Runner

LOGGER = logging.getLogger("benchmarker.collector")

ITERATIONS_DEFAULT = 10


class SampleCollector:
    """Runs a runner against a benchmark repeatedly and gathers throughput scores."""

    def __init__(self, executor: ProcessExecutor, iterations: int = ITERATIONS_DEFAULT) -> None:
        if iterations < 1:
            raise ValueError("iterations must be >= 1")
        self._executor = executor
        self._iterations = iterations

    @property
    def iterations(self) -> int:
        return self._iterations

    def collect(
        self, benchmark: str, runner: Runner, iterations: int | None = None
    ) -> list[float]:
        """Measure ``benchmark`` on ``runner``; ``iterations`` overrides the collector default."""
        total = self._iterations if iterations is None else iterations
        if total < 1:
            raise ValueError("iterations must be >= 1")
        scores: list[float] = []
        for iteration in range(1, total + 1):
            scores.append(self._measure_once(benchmark, runner, iteration, total))
            if self._executor.stop_event.is_set():
                raise BenchmarkCancelled("sweep cancelled")
        return scores

    def _measure_once(
        self, benchmark: str, runner: Runner, iteration: int, total: int
    ) -> float:
        try:
            output = runner.stdout_of(benchmark, self._executor)
        except ExecutionError:
            LOGGER.exception(
                "%s on %s failed (iteration %d/%d)",
                benchmark,
                runner.name,
                iteration,
                total,
            )
            return math.nan

        duration = extract_duration(output)
        if math.isnan(duration):
            LOGGER.warning(
                "%s on %s printed no timing (iteration %d/%d): %r",
                benchmark,
                runner.name,
                iteration,
                total,
                output[-200:],
            )
        return score_from_duration(duration)
