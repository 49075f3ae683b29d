from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Iterator

import pandas as pd

RESULT_COLUMNS = ["run", "mean", "error", "best"]


@dataclass(frozen=True)
class Result:
    """Reduced statistics for one benchmark measured on one runner."""

    run: str
    best: float
    mean: float
    error: float

    @classmethod
    def failed(cls, run: str) -> "Result":
        return cls(run=run, best=math.nan, mean=math.nan, error=math.nan)

    @property
    def is_failed(self) -> bool:
        return math.isnan(self.mean)

    def __str__(self) -> str:
        return f"{self.best:7.2f} runs/sec ({self.mean:6.2f}±{self.error:3.1f}%)"


@dataclass
class ResultStore:
    """Insertion-ordered results per benchmark for one harness run."""

    _results: dict[str, list[Result]] = field(default_factory=dict)

    def append(self, benchmark: str, result: Result) -> None:
        self._results.setdefault(benchmark, []).append(result)

    def results_for(self, benchmark: str) -> list[Result]:
        return list(self._results.get(benchmark, []))

    def benchmarks(self) -> list[str]:
        return list(self._results)

    def __iter__(self) -> Iterator[tuple[str, list[Result]]]:
        for benchmark, results in self._results.items():
            yield benchmark, list(results)

    def __len__(self) -> int:
        return sum(len(results) for results in self._results.values())

    def to_dataframe(self) -> pd.DataFrame:
        rows = [
            {"benchmark": benchmark, **_result_row(result)}
            for benchmark, results in self._results.items()
            for result in results
        ]
        if not rows:
            return pd.DataFrame(columns=["benchmark", *RESULT_COLUMNS])
        return pd.DataFrame(rows)


def _result_row(result: Result) -> dict[str, object]:
    return {
        "run": result.run,
        "mean": result.mean,
        "error": result.error,
        "best": result.best,
    }
