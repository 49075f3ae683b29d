import os
import signal
import sys
import threading
import time

import pytest

from benchmarker.process import BenchmarkCancelled, ExecutionError, ProcessExecutor


def python(code: str) -> list[str]:
    return [sys.executable, "-c", code]


@pytest.fixture
def executor() -> ProcessExecutor:
    return ProcessExecutor(threading.Event(), poll_interval_s=0.02)


def test_captures_stdout(executor: ProcessExecutor) -> None:
    assert executor.run(python("print('Richards: 12.5 us')")) == "Richards: 12.5 us"


def test_lines_are_joined_without_trailing_newline(executor: ProcessExecutor) -> None:
    output = executor.run(python("print('a'); print('b'); print()"))
    assert output == "a\nb\n"


def test_large_output_on_both_streams_does_not_block(executor: ProcessExecutor) -> None:
    code = "import sys; sys.stdout.write('x' * 300000 + '\\n'); sys.stderr.write('y' * 300000)"
    with pytest.raises(ExecutionError) as excinfo:
        executor.run(python(code))
    assert len(excinfo.value.stdout) == 300000
    assert len(excinfo.value.stderr) == 300000


def test_non_zero_exit_is_an_execution_error(executor: ProcessExecutor) -> None:
    with pytest.raises(ExecutionError) as excinfo:
        executor.run(python("print('partial'); raise SystemExit(3)"))
    assert excinfo.value.exit_code == 3
    assert excinfo.value.stdout == "partial"
    assert "exit code (3)" in str(excinfo.value)


def test_diagnostic_output_is_an_execution_error(executor: ProcessExecutor) -> None:
    code = "import sys; print('42 us'); print('warning', file=sys.stderr)"
    with pytest.raises(ExecutionError) as excinfo:
        executor.run(python(code))
    assert excinfo.value.exit_code == 0
    assert excinfo.value.stderr == "warning"


def test_missing_executable(executor: ProcessExecutor, tmp_path) -> None:
    with pytest.raises(ExecutionError, match="failed to start"):
        executor.run([str(tmp_path / "no-such-engine")])


def test_timeout_kills_the_child() -> None:
    executor = ProcessExecutor(threading.Event(), timeout_s=0.3, poll_interval_s=0.02)
    started = time.monotonic()
    with pytest.raises(ExecutionError, match="timed out"):
        executor.run(python("import time; time.sleep(30)"))
    assert time.monotonic() - started < 10


def test_stop_event_set_before_launch() -> None:
    stop_event = threading.Event()
    stop_event.set()
    with pytest.raises(BenchmarkCancelled):
        ProcessExecutor(stop_event).run(python("print('never')"))


def test_stop_event_interrupts_a_running_child() -> None:
    stop_event = threading.Event()
    executor = ProcessExecutor(stop_event, poll_interval_s=0.02)
    timer = threading.Timer(0.3, stop_event.set)
    timer.start()
    started = time.monotonic()
    try:
        with pytest.raises(BenchmarkCancelled):
            executor.run(python("import time; time.sleep(30)"))
    finally:
        timer.cancel()
    assert time.monotonic() - started < 10


SPAWNS_HELPER = (
    "import subprocess, sys, time; "
    "subprocess.Popen([sys.executable, '-c', 'import time; time.sleep(6)']); "
    "time.sleep(30)"
)

posix_only = pytest.mark.skipif(os.name != "posix", reason="needs POSIX signals")


@posix_only
def test_timeout_kills_helpers_holding_the_pipes() -> None:
    executor = ProcessExecutor(threading.Event(), timeout_s=0.5, poll_interval_s=0.02)
    started = time.monotonic()
    with pytest.raises(ExecutionError, match="timed out"):
        executor.run(python(SPAWNS_HELPER))
    assert time.monotonic() - started < 2.0


@posix_only
def test_stop_event_kills_helpers_holding_the_pipes() -> None:
    stop_event = threading.Event()
    executor = ProcessExecutor(stop_event, poll_interval_s=0.02)
    timer = threading.Timer(0.4, stop_event.set)
    timer.start()
    started = time.monotonic()
    try:
        with pytest.raises(BenchmarkCancelled):
            executor.run(python(SPAWNS_HELPER))
    finally:
        timer.cancel()
    assert time.monotonic() - started < 2.0


@posix_only
def test_ctrl_c_kills_the_child_and_sets_the_stop_event() -> None:
    previous = signal.signal(signal.SIGINT, signal.default_int_handler)
    stop_event = threading.Event()
    executor = ProcessExecutor(stop_event, poll_interval_s=0.02)
    timer = threading.Timer(0.3, os.kill, (os.getpid(), signal.SIGINT))
    timer.start()
    started = time.monotonic()
    try:
        with pytest.raises(BenchmarkCancelled, match="interrupted"):
            executor.run(python("import time; time.sleep(30)"))
    finally:
        timer.cancel()
        signal.signal(signal.SIGINT, previous)
    assert stop_event.is_set()
    assert time.monotonic() - started < 10
