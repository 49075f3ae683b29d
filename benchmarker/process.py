from __future__ import annotations

import logging
import os
import shlex
import signal
import subprocess
import threading
import time
from typing import IO, Sequence

LOGGER = logging.getLogger("benchmarker.process")

POLL_INTERVAL_S_DEFAULT = 0.1

# Children lead their own process group so helpers they spawn die with them.
NEW_SESSION = os.name == "posix"


class ExecutionError(Exception):
    """Raised when an external command fails or reports diagnostics."""

    def __init__(
        self,
        command: Sequence[str],
        reason: str,
        stdout: str = "",
        stderr: str = "",
        exit_code: int | None = None,
    ) -> None:
        self.command = list(command)
        self.reason = reason
        self.stdout = stdout
        self.stderr = stderr
        self.exit_code = exit_code
        super().__init__(self._describe())

    def _describe(self) -> str:
        lines = [f"{shlex.join(self.command)}: {self.reason}"]
        if self.stdout:
            lines.extend(["", self.stdout])
        if self.stderr:
            lines.extend(["", self.stderr])
        return "\n".join(lines)


class BenchmarkCancelled(Exception):
    """Raised when the operator interrupts the sweep."""


class _StreamDrainer:
    """Reads one child stream to the end on a background thread."""

    def __init__(self, stream: IO[str], name: str) -> None:
        self._stream = stream
        self._lines: list[str] = []
        self._thread = threading.Thread(target=self._drain, name=name, daemon=True)

    def start(self) -> None:
        self._thread.start()

    def join(self) -> None:
        self._thread.join()

    def output(self) -> str:
        if self._thread.is_alive():
            raise RuntimeError(f"{self._thread.name} is still being drained")
        return "\n".join(self._lines)

    def _drain(self) -> None:
        try:
            with self._stream:
                for line in self._stream:
                    self._lines.append(line.rstrip("\r\n"))
        except (OSError, ValueError):
            LOGGER.exception("failed to drain %s", self._thread.name)


class ProcessExecutor:
    """
    Runs external commands to completion and captures their output.

    Standard output and standard error are drained concurrently so a chatty
    child never blocks on a full pipe. The shared ``stop_event`` is polled while
    waiting; once it is set (or Ctrl-C arrives) the child is killed and
    :class:`BenchmarkCancelled` is raised.
    """

    def __init__(
        self,
        stop_event: threading.Event,
        timeout_s: float | None = None,
        poll_interval_s: float = POLL_INTERVAL_S_DEFAULT,
    ) -> None:
        self._stop_event = stop_event
        self._timeout_s = timeout_s
        self._poll_interval_s = poll_interval_s

    @property
    def stop_event(self) -> threading.Event:
        return self._stop_event

    def run(self, command: Sequence[str]) -> str:
        if self._stop_event.is_set():
            raise BenchmarkCancelled("sweep cancelled before launch")

        LOGGER.debug("Running %s", shlex.join(command))
        try:
            process = subprocess.Popen(
                list(command),
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",
                start_new_session=NEW_SESSION,
            )
        except OSError as exc:
            raise ExecutionError(command, f"failed to start: {exc}") from exc

        stdout_drainer = _StreamDrainer(process.stdout, f"drain-stdout-{process.pid}")
        stderr_drainer = _StreamDrainer(process.stderr, f"drain-stderr-{process.pid}")
        stdout_drainer.start()
        stderr_drainer.start()

        try:
            exit_code = self._wait(process, command)
        except KeyboardInterrupt:
            self._stop_event.set()
            _kill(process)
            raise BenchmarkCancelled("interrupted by operator") from None
        except (BenchmarkCancelled, ExecutionError):
            _kill(process)
            raise
        finally:
            stdout_drainer.join()
            stderr_drainer.join()

        stdout = stdout_drainer.output()
        stderr = stderr_drainer.output()

        if exit_code != 0:
            raise ExecutionError(
                command,
                f"exit code ({exit_code})",
                stdout=stdout,
                stderr=stderr,
                exit_code=exit_code,
            )
        if stderr:
            raise ExecutionError(
                command, "diagnostic output", stdout=stdout, stderr=stderr, exit_code=0
            )
        return stdout

    def _wait(self, process: subprocess.Popen, command: Sequence[str]) -> int:
        deadline = None
        if self._timeout_s is not None:
            deadline = time.monotonic() + self._timeout_s

        while True:
            if self._stop_event.is_set():
                raise BenchmarkCancelled("sweep cancelled")
            try:
                return process.wait(timeout=self._poll_interval_s)
            except subprocess.TimeoutExpired:
                if deadline is not None and time.monotonic() >= deadline:
                    raise ExecutionError(
                        command, f"timed out after {self._timeout_s:.1f}s"
                    ) from None


def _kill(process: subprocess.Popen) -> None:
    if NEW_SESSION:
        try:
            os.killpg(process.pid, signal.SIGKILL)
        except ProcessLookupError:
            pass
    elif process.poll() is None:
        process.kill()
    process.wait()
