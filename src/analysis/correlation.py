"""
Pearson correlation matrix across the indicator columns.

Each coefficient uses the rows where *both* indicators are present
(pairwise-complete observations), not only the rows complete across all
five indicators. The diagonal is exactly 1.0 for every indicator with at
least two values; pairs with fewer than two paired observations are NaN.
"""

from __future__ import annotations

import logging
import warnings
from typing import Sequence

import numpy as np
import pandas as pd

from common.errors import DataUnavailable, InsufficientData
from transformations.indicators_processed import INDICATOR_COLUMNS

logger = logging.getLogger(__name__)

MIN_PAIRED_OBSERVATIONS = 2


def _numeric_projection(df: pd.DataFrame, indicators: Sequence[str]) -> pd.DataFrame:
    missing = [c for c in indicators if c not in df.columns]
    if missing:
        raise DataUnavailable(f"Dataset is missing indicator columns: {missing}")
    return df[list(indicators)].apply(pd.to_numeric, errors="coerce").astype("float64")


def pairwise_observation_counts(
    df: pd.DataFrame,
    indicators: Sequence[str] = INDICATOR_COLUMNS,
) -> pd.DataFrame:
    """Number of rows where both indicators are non-null, for every pair."""
    values = _numeric_projection(df, indicators)
    present = values.notna().astype("int64")
    return present.T.dot(present)


def build_correlation_matrix(
    df: pd.DataFrame,
    indicators: Sequence[str] = INDICATOR_COLUMNS,
) -> pd.DataFrame:
    """
    Symmetric Pearson matrix indexed (rows and columns) by `indicators`,
    in the given order.
    """
    indicators = list(indicators)
    values = _numeric_projection(df, indicators)
    counts = pairwise_observation_counts(values, indicators)

    matrix = values.corr(method="pearson", min_periods=MIN_PAIRED_OBSERVATIONS)
    matrix = matrix.reindex(index=indicators, columns=indicators)

    # Force the diagonal: exactly 1.0 with enough values, undefined otherwise.
    diagonal = np.where(np.diag(counts.to_numpy()) >= MIN_PAIRED_OBSERVATIONS, 1.0, np.nan)
    data = np.clip(matrix.to_numpy(copy=True), -1.0, 1.0)
    np.fill_diagonal(data, diagonal)

    # Mirror the upper triangle so corr(X, Y) == corr(Y, X) bit for bit.
    upper = np.triu_indices(len(indicators), k=1)
    data[(upper[1], upper[0])] = data[upper]
    matrix = pd.DataFrame(data, index=indicators, columns=indicators)

    for i, j in zip(*np.triu_indices(len(indicators))):
        if counts.iat[i, j] < MIN_PAIRED_OBSERVATIONS:
            left, right = indicators[i], indicators[j]
            warnings.warn(
                f"Only {counts.iat[i, j]} paired observations for {left}/{right}; "
                "correlation is undefined",
                InsufficientData,
                stacklevel=2,
            )

    logger.info("Built %dx%d correlation matrix", len(indicators), len(indicators))
    return matrix


def rank_correlation_pairs(matrix: pd.DataFrame) -> pd.DataFrame:
    """
    Long table of the distinct off-diagonal pairs, strongest first.

    Columns: indicator_x, indicator_y, correlation, abs_correlation.
    Undefined coefficients are listed last.
    """
    names = list(matrix.columns)
    rows = []
    for i, j in zip(*np.triu_indices(len(names), k=1)):
        value = float(matrix.iat[i, j])
        rows.append(
            {
                "indicator_x": names[i],
                "indicator_y": names[j],
                "correlation": value,
                "abs_correlation": abs(value),
            }
        )

    ranked = pd.DataFrame(
        rows,
        columns=["indicator_x", "indicator_y", "correlation", "abs_correlation"],
    )
    ranked = ranked.sort_values(
        by="abs_correlation",
        ascending=False,
        kind="mergesort",
        na_position="last",
    )
    return ranked.reset_index(drop=True)


__all__ = [
    "MIN_PAIRED_OBSERVATIONS",
    "pairwise_observation_counts",
    "build_correlation_matrix",
    "rank_correlation_pairs",
]
