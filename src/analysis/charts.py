"""
Presentation helpers: CSV tables and one horizontal bar chart per indicator.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Optional

import matplotlib.pyplot as plt
import pandas as pd

from transformations.indicators_processed import require_fields

logger = logging.getLogger(__name__)

ANALYSIS_OUTPUT_DIR = Path("analysis")

INDICATOR_LABELS: Dict[str, str] = {
    "gdp_per_capita": "GDP per capita (current US$)",
    "school_years": "School life expectancy (years)",
    "life_expectancy": "Life expectancy at birth (years)",
    "labor_force": "Labor force participation (% of 15+)",
    "inflation": "Inflation, consumer prices (annual %)",
}


def write_summary_table(
    df: pd.DataFrame,
    name: str,
    *,
    output_dir: Path | str = ANALYSIS_OUTPUT_DIR,
    index: bool = False,
) -> Path:
    """Write `df` to <output_dir>/<name>.csv and return the path."""
    output_root = Path(output_dir)
    output_root.mkdir(parents=True, exist_ok=True)
    output_path = output_root / f"{name}.csv"
    df.to_csv(output_path, index=index)
    return output_path


def bar_chart_rows(summary: pd.DataFrame, indicator: str) -> pd.DataFrame:
    """
    Rows of `summary` in bar order, bottom to top.

    Undefined means are left out; the largest value comes last so that
    barh draws it at the top.
    """
    plotted = require_fields(summary, [indicator])
    return plotted.sort_values(by=indicator, ascending=True, kind="mergesort").reset_index(drop=True)


def build_indicator_bar_chart(
    summary: pd.DataFrame,
    indicator: str,
    *,
    group_col: str = "region",
    output_dir: Path | str = ANALYSIS_OUTPUT_DIR,
    year: Optional[int] = None,
) -> Path:
    """
    Horizontal bar chart of a (group, mean) summary.

    Bars are sorted descending with the largest at the top. Groups with an
    undefined mean are left out of the chart (they stay in the CSV table).
    """
    plotted = bar_chart_rows(summary, indicator)
    dropped = len(summary) - len(plotted)
    if dropped:
        logger.info("%s chart: %d %s values undefined, not plotted", indicator, dropped, group_col)

    label = INDICATOR_LABELS.get(indicator, indicator)
    height = max(3.0, 0.45 * len(plotted) + 1.5)

    fig, ax = plt.subplots(figsize=(10, height))
    ax.barh(
        plotted[group_col].astype(str).tolist(),
        plotted[indicator].astype(float).tolist(),
        color="steelblue",
    )
    ax.set_xlabel(label)
    ax.set_ylabel(group_col.replace("_", " ").title())
    title = f"Mean {label} by {group_col}"
    if year is not None:
        title = f"{title} - {year}"
    ax.set_title(title)
    ax.grid(True, axis="x", linestyle="--", alpha=0.3)
    fig.tight_layout()

    output_root = Path(output_dir)
    output_root.mkdir(parents=True, exist_ok=True)
    output_path = output_root / f"{indicator}_by_{group_col}.png"
    fig.savefig(output_path, dpi=150)
    plt.close(fig)
    return output_path


__all__ = [
    "ANALYSIS_OUTPUT_DIR",
    "INDICATOR_LABELS",
    "write_summary_table",
    "bar_chart_rows",
    "build_indicator_bar_chart",
]
