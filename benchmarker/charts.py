from __future__ import annotations

import logging
from pathlib import Path

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import seaborn as sns

from .measurement.results import Result, ResultStore
from .report import build_table

LOGGER = logging.getLogger("benchmarker.charts")

sns.set_style("whitegrid")
plt.rcParams["figure.dpi"] = 100
plt.rcParams["savefig.dpi"] = 150
plt.rcParams["font.size"] = 10
plt.rcParams["axes.labelsize"] = 11
plt.rcParams["axes.titlesize"] = 13
plt.rcParams["xtick.labelsize"] = 8
plt.rcParams["ytick.labelsize"] = 10

BAR_COLOR = "#15C7E0"
ERROR_COLOR = "#333333"


def render_benchmark_chart(benchmark: str, results: list[Result], output_dir: Path) -> Path:
    """Bar chart of mean score per runner with the confidence interval as error bars."""
    chart_path = output_dir / f"{benchmark}.png"
    table = build_table(results)

    means = table["Mean (runs/sec)"].to_numpy(dtype=float)
    errors = means * table["Error (±%)"].to_numpy(dtype=float) / 100.0

    fig, ax = plt.subplots(figsize=(6.4, 4.8))
    positions = np.arange(len(table))
    ax.bar(
        positions,
        means,
        width=0.9,
        yerr=errors,
        color=BAR_COLOR,
        ecolor=ERROR_COLOR,
        capsize=3,
        edgecolor="none",
    )
    ax.set_xticks(positions)
    ax.set_xticklabels(table["Platform"], rotation=-45, ha="left")
    ax.set_ylabel("Score (runs/sec)", fontweight="semibold")
    ax.set_title(benchmark, fontweight="bold", pad=15)
    ax.set_ylim(bottom=0)
    ax.grid(True, alpha=0.3, linestyle="--", axis="y")

    plt.tight_layout()
    fig.savefig(chart_path, bbox_inches="tight", facecolor="white")
    plt.close(fig)
    LOGGER.info("Rendering chart %s", chart_path)
    return chart_path


def relative_scores(store: ResultStore) -> pd.DataFrame:
    """Mean score of each runner as a percentage of the best mean per benchmark."""
    df = store.to_dataframe()
    if df.empty:
        return pd.DataFrame()
    pivot = df.pivot(index="run", columns="benchmark", values="mean").astype(float)
    pivot = pivot.reindex(index=list(dict.fromkeys(df["run"])), columns=store.benchmarks())
    return pivot.div(pivot.max(axis=0), axis=1) * 100.0


def render_summary_heatmap(store: ResultStore, output_dir: Path) -> Path | None:
    chart_path = output_dir / "summary_heatmap.png"
    relative = relative_scores(store)
    if relative.empty or relative.isna().all().all():
        LOGGER.warning("No successful results available for the summary heatmap")
        return None

    fig, ax = plt.subplots(figsize=(1.6 * len(relative.columns) + 3, 0.5 * len(relative.index) + 2))
    sns.heatmap(
        relative,
        annot=True,
        fmt=".0f",
        cmap="YlGnBu",
        vmin=0,
        vmax=100,
        cbar_kws={"label": "Mean score (% of best)"},
        ax=ax,
    )
    ax.set_xlabel("Benchmark", fontweight="semibold")
    ax.set_ylabel("Runner", fontweight="semibold")
    ax.set_title("Relative Throughput by Runner", fontweight="bold", pad=15)

    plt.tight_layout()
    fig.savefig(chart_path, bbox_inches="tight", facecolor="white")
    plt.close(fig)
    LOGGER.info("Rendering chart %s", chart_path)
    return chart_path
