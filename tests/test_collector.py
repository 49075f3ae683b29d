import math

import pytest

from benchmarker.measurement.collector import SampleCollector
from benchmarker.measurement.stats import reduce_sample
from benchmarker.process import BenchmarkCancelled, ExecutionError


def test_scores_follow_each_invocation(fake_executor, runner) -> None:
    executor = fake_executor(["10 us", "20 us", "no timing here"])
    scores = SampleCollector(executor, iterations=3).collect("Richards", runner)

    assert scores[:2] == [100000.0, 50000.0]
    assert math.isnan(scores[2])

    result = reduce_sample(runner.name, scores)
    assert result.best == 100000.0
    assert math.isnan(result.mean)
    assert math.isnan(result.error)


def test_runner_command_is_expanded_per_benchmark(fake_executor, runner) -> None:
    executor = fake_executor(["Tracer: 5 us"] * 2)
    SampleCollector(executor, iterations=2).collect("Tracer", runner)
    assert executor.commands == [["fakevm", "Tracer.src"]] * 2


def test_default_iteration_count(fake_executor, runner) -> None:
    executor = fake_executor(["1000 us"] * 10)
    collector = SampleCollector(executor)

    scores = collector.collect("DeltaBlue", runner)

    assert collector.iterations == 10
    assert scores == [1000.0] * 10


def test_failed_invocation_becomes_nan_and_loop_continues(fake_executor, runner) -> None:
    failure = ExecutionError(["fakevm"], "exit code (1)", exit_code=1)
    executor = fake_executor(["100 us", failure, "200 us"])

    scores = SampleCollector(executor, iterations=3).collect("Havlak", runner)

    assert scores[0] == 10000.0
    assert math.isnan(scores[1])
    assert scores[2] == 5000.0
    assert len(executor.commands) == 3


def test_cancellation_abandons_remaining_iterations(fake_executor, runner) -> None:
    executor = fake_executor(["100 us", BenchmarkCancelled("interrupted"), "100 us"])

    with pytest.raises(BenchmarkCancelled):
        SampleCollector(executor, iterations=3).collect("Richards", runner)
    assert len(executor.commands) == 2


def test_stop_event_is_checked_after_each_iteration(fake_executor, runner) -> None:
    def respond(command: list[str]) -> str:
        executor.stop_event.set()
        return "100 us"

    executor = fake_executor(respond)

    with pytest.raises(BenchmarkCancelled):
        SampleCollector(executor, iterations=5).collect("Richards", runner)
    assert len(executor.commands) == 1


def test_iterations_must_be_positive(fake_executor) -> None:
    with pytest.raises(ValueError, match="iterations"):
        SampleCollector(fake_executor(), iterations=0)


def test_per_call_iterations_override_the_default(fake_executor, runner) -> None:
    executor = fake_executor(["50 us"] * 4)
    collector = SampleCollector(executor, iterations=2)

    assert collector.collect("Richards", runner, iterations=4) == [20000.0] * 4
    assert len(executor.commands) == 4
    assert collector.iterations == 2


def test_per_call_iterations_must_be_positive(fake_executor, runner) -> None:
    executor = fake_executor()
    with pytest.raises(ValueError, match="iterations"):
        SampleCollector(executor).collect("Richards", runner, iterations=0)
    assert executor.commands == []
