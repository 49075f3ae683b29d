from __future__ import annotations

import math
from typing import Sequence

import numpy as np

from .results import Result

# Two-tailed 95% critical values of Student's t, indexed by sample size.
T_TABLE: tuple[float, ...] = (
    math.nan, math.nan, 12.71,
    4.30, 3.18, 2.78, 2.57, 2.45, 2.36, 2.31, 2.26, 2.23, 2.20, 2.18, 2.16,
    2.14, 2.13, 2.12, 2.11, 2.10, 2.09, 2.09, 2.08, 2.07, 2.07, 2.06, 2.06,
    2.06, 2.05, 2.05, 2.04, 2.04, 2.04, 2.04, 2.03, 2.03, 2.03, 2.03, 2.03,
    2.02, 2.02, 2.02, 2.02, 2.02, 2.02, 2.02, 2.01, 2.01, 2.01, 2.01, 2.01,
    2.01, 2.01, 2.01, 2.01, 2.00, 2.00, 2.00, 2.00, 2.00, 2.00, 2.00, 2.00,
    2.00, 2.00, 2.00, 2.00, 2.00, 2.00, 2.00, 1.99, 1.99, 1.99, 1.99, 1.99,
    1.99, 1.99, 1.99, 1.99, 1.99, 1.99, 1.99, 1.99, 1.99, 1.99, 1.99, 1.99,
    1.99, 1.99, 1.99, 1.99, 1.99, 1.99, 1.99, 1.99, 1.99, 1.99, 1.99, 1.99,
    1.99, 1.99,
)


def t_distribution(n: int) -> float:
    """Critical t value for a sample of ``n`` measurements."""
    if n >= 474:
        return 1.96
    if n >= 160:
        return 1.97
    if n >= len(T_TABLE):
        return 1.98
    return T_TABLE[n]


def compute_best(scores: np.ndarray) -> float:
    defined = scores[~np.isnan(scores)]
    if defined.size == 0:
        return math.nan
    return float(defined.max())


def compute_mean(scores: np.ndarray) -> float:
    # Undefined scores are not filtered: one NaN makes the mean NaN.
    return float(scores.sum() / scores.size)


def compute_standard_deviation(scores: np.ndarray, mean: float) -> float:
    deltas = scores - mean
    variance = float((deltas * deltas).sum()) / (scores.size - 1)
    return math.sqrt(variance)


def reduce_sample(run: str, scores: Sequence[float]) -> Result:
    """
    Fold a sample of throughput scores into a :class:`Result`.

    ``best`` ignores undefined entries, while ``mean`` and ``error`` propagate
    them. ``error`` is the half-width of the 95% confidence interval around the
    mean, expressed as a percentage of the mean.
    """
    samples = np.asarray(scores, dtype=float)
    n = samples.size
    if n == 0:
        raise ValueError("cannot reduce an empty sample")

    best = compute_best(samples)
    mean = compute_mean(samples)

    if n == 1 or np.ptp(samples) == 0:
        return Result(run=run, best=best, mean=mean, error=0.0)

    standard_deviation = compute_standard_deviation(samples, mean)
    standard_error = standard_deviation / math.sqrt(n)
    percent = (t_distribution(n) * standard_error / mean) * 100.0
    return Result(run=run, best=best, mean=mean, error=percent)
