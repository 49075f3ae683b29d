from __future__ import annotations

import logging
import threading
from typing import Callable, Sequence

import matplotlib

matplotlib.use("Agg")

import pytest

from benchmarker.process import BenchmarkCancelled
from benchmarker.runners import Runner, RunnerKind

Response = Callable[[list[str]], str]


class FakeExecutor:
    """Stands in for ProcessExecutor; answers commands from a script of responses."""

    def __init__(
        self,
        responses: Sequence[object] | Response = (),
        stop_event: threading.Event | None = None,
    ) -> None:
        self.stop_event = stop_event or threading.Event()
        self.commands: list[list[str]] = []
        self._respond = responses if callable(responses) else None
        self._queue = [] if callable(responses) else list(responses)

    def run(self, command: Sequence[str]) -> str:
        self.commands.append(list(command))
        if self.stop_event.is_set():
            raise BenchmarkCancelled("sweep cancelled before launch")
        item = self._respond(list(command)) if self._respond else self._queue.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item


@pytest.fixture
def runner() -> Runner:
    return Runner("fake:vm", RunnerKind.INTERPRETER, ("fakevm", "{benchmark}.src"))


@pytest.fixture
def progress_logger() -> logging.Logger:
    logger = logging.getLogger("tests.progress")
    logger.setLevel(logging.INFO)
    return logger


@pytest.fixture(autouse=True)
def reset_benchmarker_logger():
    yield
    logger = logging.getLogger("benchmarker")
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def fake_executor() -> type[FakeExecutor]:
    return FakeExecutor
