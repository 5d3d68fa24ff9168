"""
Local orchestration entrypoint for the socioeconomic indicators pipeline.

Runs, for a single year (default 2023):

1. World Bank ingestion (raw indicator table + country metadata)
2. Normalization (semantic names, aggregates removed, requested year only)
3. Cleaning (duplicates removed)
4. Group summaries (region and income group, combined, overall, describe)
5. Correlation matrix (pairwise-complete Pearson)
6. Tables and bar charts

Intended usage (local):

    PYTHONPATH=src python -m local_pipeline

Rerun from a saved raw table instead of calling the API:

    PYTHONPATH=src python -m local_pipeline --raw-csv analysis/world_bank_indicators_raw_2023.csv
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

import pandas as pd

from analysis import (
    build_correlation_matrix,
    build_group_summaries,
    build_indicator_bar_chart,
    describe_indicators,
    rank_correlation_pairs,
    summarize_indicators_by_group,
    summarize_overall,
    write_summary_table,
)
from common.errors import DataUnavailable
from common.logging_config import configure_logging
from env_loader import get_env_int, load_dotenv_if_present
from ingestion_api.world_bank_indicators import (
    load_raw_indicator_csv,
    load_raw_indicator_table,
    save_raw_indicator_table,
)
from transformations import (
    DEFAULT_YEAR,
    INDICATOR_CODES,
    INDICATOR_COLUMNS,
    clean_dataset,
    normalize_indicators,
    select_year,
)

load_dotenv_if_present()

logger = logging.getLogger(__name__)

ANALYSIS_YEAR = get_env_int("ANALYSIS_YEAR", DEFAULT_YEAR)
ANALYSIS_OUTPUT_DIR = Path(os.getenv("ANALYSIS_OUTPUT_DIR", "analysis"))


@dataclass
class AnalysisResults:
    """Everything computed from one cleaned dataset."""

    dataset: pd.DataFrame
    region_summaries: Dict[str, pd.DataFrame]
    income_summaries: Dict[str, pd.DataFrame]
    region_comparisons: pd.DataFrame
    overall_means: pd.DataFrame
    descriptive_stats: pd.DataFrame
    correlation_matrix: pd.DataFrame
    correlation_ranking: pd.DataFrame


def prepare_dataset(raw_df: pd.DataFrame, year: Optional[int] = None) -> pd.DataFrame:
    """Normalizer, then the rows of `year` only (when given), then Cleaner."""
    dataset = normalize_indicators(raw_df)
    if year is not None:
        dataset = select_year(dataset, year)
    return clean_dataset(dataset)


def analyze_dataset(dataset: pd.DataFrame) -> AnalysisResults:
    """Compute every summary table and the correlation matrix in memory."""
    correlation = build_correlation_matrix(dataset, INDICATOR_COLUMNS)
    return AnalysisResults(
        dataset=dataset,
        region_summaries=build_group_summaries(dataset, group_col="region"),
        income_summaries=build_group_summaries(dataset, group_col="income"),
        region_comparisons=summarize_indicators_by_group(dataset, INDICATOR_COLUMNS, group_col="region"),
        overall_means=summarize_overall(dataset, INDICATOR_COLUMNS),
        descriptive_stats=describe_indicators(dataset, INDICATOR_COLUMNS),
        correlation_matrix=correlation,
        correlation_ranking=rank_correlation_pairs(correlation),
    )


def run_local_pipeline(
    *,
    year: int = ANALYSIS_YEAR,
    output_dir: Path | str = ANALYSIS_OUTPUT_DIR,
    raw_csv: Optional[Path | str] = None,
    skip_charts: bool = False,
) -> Dict[str, List[Path]]:
    """
    Run the full local pipeline end-to-end.

    Parameters
    ----------
    year:
        Single year requested from the World Bank API. A raw CSV holding
        several years is restricted to this one.
    output_dir:
        Directory for the raw snapshot, CSV tables and PNG charts.
    raw_csv:
        Optional raw table written by a previous run; skips the download.
    skip_charts:
        Only write the CSV tables.

    Returns
    -------
    artefacts:
        Dictionary mapping step names to lists of generated Paths.

    Raises DataUnavailable when the raw data cannot be obtained.
    """
    artefacts: Dict[str, List[Path]] = {}
    output_root = Path(output_dir)

    if raw_csv is not None:
        logger.info("[1/6] Loading raw indicator table from %s...", raw_csv)
        raw_df = load_raw_indicator_csv(raw_csv)
    else:
        logger.info("[1/6] Downloading World Bank indicators for %s...", year)
        raw_df = load_raw_indicator_table(INDICATOR_CODES, year, include_metadata=True)
        raw_path = save_raw_indicator_table(raw_df, output_root, year)
        artefacts["raw"] = [raw_path]
        logger.info("      Raw file: %s", raw_path)

    logger.info("[2/6] Normalizing and [3/6] cleaning %d raw rows...", len(raw_df))
    dataset = prepare_dataset(raw_df, year)
    logger.info("      %d countries after cleaning.", len(dataset))

    logger.info("[4/6] Building group summaries and [5/6] correlation matrix...")
    results = analyze_dataset(dataset)

    logger.info("[6/6] Writing tables and charts to %s...", output_root)
    tables: List[Path] = [
        write_summary_table(results.region_comparisons, "region_comparisons", output_dir=output_root),
        write_summary_table(results.overall_means, "overall_means", output_dir=output_root),
        write_summary_table(results.descriptive_stats, "descriptive_statistics", output_dir=output_root),
        write_summary_table(
            results.correlation_matrix,
            "correlation_matrix",
            output_dir=output_root,
            index=True,
        ),
        write_summary_table(results.correlation_ranking, "correlation_ranking", output_dir=output_root),
    ]
    for group_col, summaries in (
        ("region", results.region_summaries),
        ("income", results.income_summaries),
    ):
        for indicator, summary in summaries.items():
            tables.append(
                write_summary_table(summary, f"{indicator}_by_{group_col}", output_dir=output_root)
            )
    artefacts["tables"] = tables

    if not skip_charts:
        artefacts["charts"] = [
            build_indicator_bar_chart(
                summary,
                indicator,
                group_col="region",
                output_dir=output_root,
                year=year,
            )
            for indicator, summary in results.region_summaries.items()
        ]

    logger.info("Pipeline completed successfully.")
    return artefacts


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(
        description="Run the socioeconomic indicators pipeline end-to-end for one year.",
    )
    parser.add_argument(
        "--year",
        type=int,
        default=ANALYSIS_YEAR,
        help="Year requested from the World Bank API (default: ANALYSIS_YEAR or 2023).",
    )
    parser.add_argument(
        "--output-dir",
        type=str,
        default=str(ANALYSIS_OUTPUT_DIR),
        help="Directory where tables and charts will be saved.",
    )
    parser.add_argument(
        "--raw-csv",
        type=str,
        default=None,
        help="Raw indicator CSV from a previous run; skips the download.",
    )
    parser.add_argument(
        "--skip-charts",
        action="store_true",
        help="Only write the CSV tables.",
    )

    args = parser.parse_args()
    configure_logging()
    try:
        paths = run_local_pipeline(
            year=args.year,
            output_dir=Path(args.output_dir),
            raw_csv=args.raw_csv,
            skip_charts=args.skip_charts,
        )
    except DataUnavailable as exc:
        logger.error("Pipeline aborted: %s", exc)
        raise SystemExit(1) from exc
    for step_paths in paths.values():
        for p in step_paths:
            print(p)


__all__ = ["AnalysisResults", "prepare_dataset", "analyze_dataset", "run_local_pipeline"]
