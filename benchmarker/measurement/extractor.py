from __future__ import annotations

import math
import re

# Benchmarks print their elapsed time as e.g. "Richards: 1234.56 us".
TIMING_PATTERN = re.compile(r"(\d+(?:\.\d+)?) us", re.ASCII)

MICROSECONDS_PER_SECOND = 1.0e6


def extract_duration(output: str) -> float:
    """Return the first microsecond timing found in ``output`` or NaN."""
    match = TIMING_PATTERN.search(output)
    if match is None:
        return math.nan
    try:
        return float(match.group(1))
    except ValueError:
        return math.nan


def score_from_duration(duration_us: float) -> float:
    """Convert a single run's duration into a throughput in runs/sec."""
    if duration_us == 0:
        return math.inf
    return MICROSECONDS_PER_SECOND / duration_us
