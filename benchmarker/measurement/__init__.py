"""Measurement core: timing extraction, sample collection and reduction."""

from .collector import SampleCollector
from .extractor import extract_duration, score_from_duration
from .results import Result, ResultStore
from .stats import reduce_sample, t_distribution

__all__ = [
    "Result",
    "ResultStore",
    "SampleCollector",
    "extract_duration",
    "reduce_sample",
    "score_from_duration",
    "t_distribution",
]
