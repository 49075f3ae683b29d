from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Sequence

if TYPE_CHECKING:
    from .process import ProcessExecutor

BENCHMARK_PLACEHOLDER = "{benchmark}"


class RunnerKind(enum.Enum):
    INTERPRETER = "interpreter"
    SCRIPT_ENGINE = "script-engine"
    BYTECODE_RUNTIME = "bytecode-runtime"
    NATIVE_BINARY = "native-binary"


def expand_command(template: Sequence[str], benchmark: str) -> list[str]:
    return [part.replace(BENCHMARK_PLACEHOLDER, benchmark) for part in template]


@dataclass(frozen=True)
class Runner:
    """A way of executing a benchmark and capturing its standard output."""

    name: str
    kind: RunnerKind
    command: tuple[str, ...]

    def command_for(self, benchmark: str) -> list[str]:
        return expand_command(self.command, benchmark)

    def stdout_of(self, benchmark: str, executor: ProcessExecutor) -> str:
        return executor.run(self.command_for(benchmark))


@dataclass(frozen=True)
class RunnerGroup:
    """Runners sharing a setup step (e.g. a compile) that precedes measurement."""

    label: str
    runners: tuple[Runner, ...]
    setup: tuple[tuple[str, ...], ...] = field(default_factory=tuple)

    def setup_commands(self, benchmark: str) -> list[list[str]]:
        return [expand_command(step, benchmark) for step in self.setup]
