from __future__ import annotations

import json
import logging
import math
from pathlib import Path
from typing import Iterable

import pandas as pd

from .measurement.results import Result, ResultStore

LOGGER = logging.getLogger("benchmarker.report")

TABLE_COLUMNS = ["Platform", "Mean (runs/sec)", "Error (±%)", "Best (runs/sec)"]


def sort_by_run(results: Iterable[Result]) -> list[Result]:
    return sorted(results, key=lambda result: result.run)


def build_table(results: Iterable[Result]) -> pd.DataFrame:
    """Tabulate results sorted by run label; failed runs become zero rows."""
    rows = []
    for result in sort_by_run(results):
        if result.is_failed:
            rows.append([result.run, 0, 0, 0])
        else:
            rows.append([result.run, result.mean, result.error, result.best])
    return pd.DataFrame(rows, columns=TABLE_COLUMNS)


def write_benchmark_tables(
    benchmark: str, results: list[Result], output_dir: Path
) -> tuple[Path, Path]:
    """Write ``<benchmark>.csv`` (semicolons) and ``<benchmark>.dat`` (tabs)."""
    output_dir.mkdir(parents=True, exist_ok=True)
    table = build_table(results)

    csv_path = output_dir / f"{benchmark}.csv"
    table.to_csv(csv_path, sep=";", index=False, encoding="utf-8")

    dat_path = output_dir / f"{benchmark}.dat"
    with open(dat_path, "w", encoding="utf-8", newline="") as handle:
        handle.write("# " + "\t".join(TABLE_COLUMNS) + "\n")
        table.to_csv(handle, sep="\t", index=False, header=False)

    LOGGER.info("Wrote %s and %s", csv_path, dat_path)
    return csv_path, dat_path


def format_benchmark(benchmark: str, results: list[Result], name_width: int) -> str:
    lines = [f"{benchmark}:"]
    lines.extend(f"  - {result.run.ljust(name_width)} : {result}" for result in results)
    return "\n".join(lines)


def write_text_report(store: ResultStore, output_dir: Path, name_width: int) -> Path:
    report_path = output_dir / "results.txt"
    sections = [format_benchmark(benchmark, results, name_width) for benchmark, results in store]
    report_path.write_text("\n\n".join(sections) + "\n", encoding="utf-8")
    LOGGER.info("Wrote text report to %s", report_path)
    return report_path


def write_manifest(
    store: ResultStore,
    artefacts: dict[str, dict[str, str]],
    output_dir: Path,
    completed: bool,
) -> Path:
    manifest = {
        "completed": completed,
        "benchmarks": {
            benchmark: {
                "artefacts": artefacts.get(benchmark, {}),
                "results": [_manifest_row(result) for result in results],
            }
            for benchmark, results in store
        },
    }
    manifest_path = output_dir / "benchmark_manifest.json"
    with open(manifest_path, "w", encoding="utf-8") as f:
        json.dump(manifest, f, indent=2, ensure_ascii=False)
    LOGGER.info("Benchmark manifest written to %s", manifest_path)
    return manifest_path


def _manifest_row(result: Result) -> dict[str, object]:
    return {
        "run": result.run,
        "best": _finite_or_none(result.best),
        "mean": _finite_or_none(result.mean),
        "error": _finite_or_none(result.error),
    }


def _finite_or_none(value: float) -> float | None:
    return value if math.isfinite(value) else None
