"""
Group and whole-dataset summaries of the cleaned indicator dataset.

Every mean excludes nulls; nothing is imputed. A group whose values are all
null keeps its row with a NaN mean and triggers an `InsufficientData`
warning instead of being dropped or zero-filled.

Outputs:

- one (group, mean) table per indicator, sorted descending (stable on ties)
- region_comparisons: one row per region, one mean column per indicator
- overall means: a single row across all countries
- descriptive statistics: count/mean/std/min/median/max per indicator
"""

from __future__ import annotations

import logging
import warnings
from typing import Dict, Iterable, Sequence

import pandas as pd

from common.errors import DataUnavailable, InsufficientData
from transformations.indicators_processed import INDICATOR_COLUMNS, require_fields

logger = logging.getLogger(__name__)

DESCRIBE_STATS = ["count", "mean", "std", "min", "median", "max"]


def _check_columns(df: pd.DataFrame, columns: Iterable[str]) -> None:
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise DataUnavailable(f"Dataset is missing columns: {missing}")


def _warn_undefined(label: str, indicator: str) -> None:
    warnings.warn(
        f"No non-null {indicator} values for {label}; mean is undefined",
        InsufficientData,
        stacklevel=3,
    )


def summarize_indicator_by_group(
    df: pd.DataFrame,
    indicator: str,
    *,
    group_col: str = "region",
) -> pd.DataFrame:
    """
    Mean of `indicator` per `group_col`, sorted descending by the mean.

    Groups are collected in encounter order and the sort is stable, so
    groups with equal means keep that order. Groups with an undefined
    (NaN) mean are kept and placed last. Rows with a null group label are
    not part of any group.

    Returns a DataFrame with columns [group_col, indicator].
    """
    _check_columns(df, [group_col, indicator])

    unlabeled = int(df[group_col].isna().sum())
    if unlabeled:
        logger.warning("%d rows have no %s and are left out of the summary", unlabeled, group_col)

    means = (
        df.groupby(group_col, sort=False)[indicator]
        .mean()
        .astype("float64")
    )
    summary = means.reset_index()

    for label in summary.loc[summary[indicator].isna(), group_col]:
        _warn_undefined(f"{group_col}={label}", indicator)

    summary = summary.sort_values(
        by=indicator,
        ascending=False,
        kind="mergesort",
        na_position="last",
    )
    return summary.reset_index(drop=True)


def summarize_indicators_by_group(
    df: pd.DataFrame,
    indicators: Sequence[str] = INDICATOR_COLUMNS,
    *,
    group_col: str = "region",
) -> pd.DataFrame:
    """
    Combined summary: one row per group (ordered by group label), one mean
    column per indicator. This is the region_comparisons table.
    """
    indicators = list(indicators)
    _check_columns(df, [group_col, *indicators])

    summary = (
        df.groupby(group_col, sort=True)[indicators]
        .mean()
        .astype("float64")
        .reset_index()
    )

    for indicator in indicators:
        for label in summary.loc[summary[indicator].isna(), group_col]:
            _warn_undefined(f"{group_col}={label}", indicator)

    return summary


def summarize_overall(
    df: pd.DataFrame,
    indicators: Sequence[str] = INDICATOR_COLUMNS,
) -> pd.DataFrame:
    """Whole-dataset variant: a single row holding the mean of each indicator."""
    indicators = list(indicators)
    _check_columns(df, indicators)

    means = df[indicators].astype("float64").mean()
    for indicator in indicators:
        if pd.isna(means[indicator]):
            _warn_undefined("all countries", indicator)

    return means.to_frame().T.reset_index(drop=True)


def describe_indicators(
    df: pd.DataFrame,
    indicators: Sequence[str] = INDICATOR_COLUMNS,
) -> pd.DataFrame:
    """
    Descriptive statistics per indicator (nulls excluded).

    One row per indicator with columns: indicator, count, mean, std, min,
    median, max. `count` is the number of non-null values.
    """
    rows = []
    for indicator in indicators:
        values = require_fields(df, [indicator])[indicator].astype("float64")
        row = values.agg(DESCRIBE_STATS).to_dict()
        row["indicator"] = indicator
        rows.append(row)

    stats = pd.DataFrame(rows, columns=["indicator", *DESCRIBE_STATS])
    stats["count"] = stats["count"].astype("int64")
    return stats


def build_group_summaries(
    df: pd.DataFrame,
    *,
    group_col: str = "region",
    indicators: Sequence[str] = INDICATOR_COLUMNS,
) -> Dict[str, pd.DataFrame]:
    """Run `summarize_indicator_by_group` once per indicator."""
    results: Dict[str, pd.DataFrame] = {}
    for indicator in indicators:
        results[indicator] = summarize_indicator_by_group(df, indicator, group_col=group_col)
    logger.info("Built %d %s summaries", len(results), group_col)
    return results


__all__ = [
    "DESCRIBE_STATS",
    "summarize_indicator_by_group",
    "summarize_indicators_by_group",
    "summarize_overall",
    "describe_indicators",
    "build_group_summaries",
]
