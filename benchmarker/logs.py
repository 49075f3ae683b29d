from __future__ import annotations

import logging
import sys
from pathlib import Path

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

DIAGNOSTICS_FILENAME = "stderr.txt"
PROGRESS_FILENAME = "stdout.txt"


def _without_traceback(record: logging.LogRecord) -> bool:
    return record.exc_info is None


def setup_logging(
    level: str, diagnostics_path: Path, print_errors: bool = False
) -> logging.Logger:
    """
    Route ``benchmarker`` logs to the console and to a persistent diagnostic log.

    The console only shows records at ``level`` and above, and drops records
    carrying a traceback unless ``print_errors`` is set. The file keeps every
    record, including the tracebacks of absorbed failures.
    """
    diagnostics_path.parent.mkdir(parents=True, exist_ok=True)
    formatter = logging.Formatter(LOG_FORMAT)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(getattr(logging, level.upper(), logging.WARNING))
    console.setFormatter(formatter)
    if not print_errors:
        console.addFilter(_without_traceback)

    diagnostics = logging.FileHandler(diagnostics_path, mode="w", encoding="utf-8")
    diagnostics.setLevel(logging.DEBUG)
    diagnostics.setFormatter(formatter)

    logger = logging.getLogger("benchmarker")
    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    close_logger(logger)
    logger.addHandler(console)
    logger.addHandler(diagnostics)
    return logger


def configure_progress_logger(progress_path: Path) -> logging.Logger:
    """Progress lines go to stdout and are mirrored into ``progress_path``."""
    progress_path.parent.mkdir(parents=True, exist_ok=True)
    logger = logging.getLogger("benchmarker.progress")
    logger.setLevel(logging.INFO)
    logger.propagate = False

    formatter = logging.Formatter("%(message)s")
    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(formatter)
    mirror = logging.FileHandler(progress_path, mode="w", encoding="utf-8")
    mirror.setFormatter(formatter)

    close_logger(logger)
    logger.addHandler(console)
    logger.addHandler(mirror)
    return logger


def close_logger(logger: logging.Logger) -> None:
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)
