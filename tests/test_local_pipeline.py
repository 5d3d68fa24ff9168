"""End-to-end tests for the local pipeline (no network)."""

from __future__ import annotations

import warnings
from pathlib import Path
from typing import Any, List, Sequence

import pandas as pd
import pytest

import local_pipeline
from common.errors import DataUnavailable, InsufficientData
from factories import make_raw_row, make_raw_table
from transformations.indicators_processed import INDICATOR_CODES

GDP = "NY.GDP.PCAP.CD"


def _east_asia_raw() -> pd.DataFrame:
    return make_raw_table(
        [
            make_raw_row(iso3c="AAA", country="A", region="East Asia", **{GDP: 1000.0, "SE.SCH.LIFE": 10.0}),
            make_raw_row(iso3c="BBB", country="B", region="East Asia", **{GDP: 2000.0, "SE.SCH.LIFE": 12.0}),
            make_raw_row(iso3c="CCC", country="C", region="East Asia", **{GDP: None, "SE.SCH.LIFE": 14.0}),
            make_raw_row(iso3c="WLD", country="World", region="Aggregates", income="Aggregates",
                         **{GDP: 50000.0, "SE.SCH.LIFE": 99.0}),
        ]
    )


def _analyze(raw: pd.DataFrame) -> local_pipeline.AnalysisResults:
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", InsufficientData)
        warnings.simplefilter("ignore", RuntimeWarning)
        return local_pipeline.analyze_dataset(local_pipeline.prepare_dataset(raw))


def test_aggregates_excluded_and_nulls_skipped() -> None:
    results = _analyze(_east_asia_raw())

    assert results.dataset["country"].tolist() == ["A", "B", "C"]

    gdp_by_region = results.region_summaries["gdp_per_capita"]
    assert gdp_by_region["region"].tolist() == ["East Asia"]
    assert gdp_by_region.loc[0, "gdp_per_capita"] == pytest.approx(1500.0)

    assert results.region_comparisons["region"].tolist() == ["East Asia"]
    assert results.region_comparisons.loc[0, "gdp_per_capita"] == pytest.approx(1500.0)
    assert results.overall_means.loc[0, "gdp_per_capita"] == pytest.approx(1500.0)
    assert results.overall_means.loc[0, "school_years"] == pytest.approx(12.0)

    stats = results.descriptive_stats.set_index("indicator")
    assert stats.loc["gdp_per_capita", "max"] == pytest.approx(2000.0)
    assert stats.loc["school_years", "max"] == pytest.approx(14.0)

    income = results.income_summaries["gdp_per_capita"]
    assert "Aggregates" not in income["income"].tolist()


def test_correlation_uses_pairwise_rows() -> None:
    results = _analyze(_east_asia_raw())

    matrix = results.correlation_matrix
    assert matrix.loc["gdp_per_capita", "school_years"] == pytest.approx(1.0)
    assert matrix.loc["school_years", "school_years"] == 1.0
    assert len(results.correlation_ranking) == 10


def test_run_local_pipeline_from_raw_csv(tmp_path: Path) -> None:
    raw_path = tmp_path / "raw.csv"
    _east_asia_raw().to_csv(raw_path, index=False)
    out_dir = tmp_path / "out"

    with warnings.catch_warnings():
        warnings.simplefilter("ignore", InsufficientData)
        warnings.simplefilter("ignore", RuntimeWarning)
        artefacts = local_pipeline.run_local_pipeline(year=2023, output_dir=out_dir, raw_csv=raw_path)

    assert "raw" not in artefacts
    table_names = {p.name for p in artefacts["tables"]}
    assert {
        "region_comparisons.csv",
        "overall_means.csv",
        "descriptive_statistics.csv",
        "correlation_matrix.csv",
        "correlation_ranking.csv",
        "gdp_per_capita_by_region.csv",
        "inflation_by_income.csv",
    } <= table_names
    assert len(artefacts["charts"]) == 5
    assert all(p.exists() for p in artefacts["charts"])

    gdp = pd.read_csv(out_dir / "gdp_per_capita_by_region.csv")
    assert gdp.to_dict("list") == {"region": ["East Asia"], "gdp_per_capita": [1500.0]}

    matrix = pd.read_csv(out_dir / "correlation_matrix.csv", index_col=0)
    assert list(matrix.index) == list(matrix.columns)


def test_run_local_pipeline_downloads_and_saves_raw(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    requested: List[Any] = []

    def fake_load(indicator_ids: Sequence[str], year: int, *, include_metadata: bool = True) -> pd.DataFrame:
        requested.append((list(indicator_ids), year, include_metadata))
        return _east_asia_raw()

    monkeypatch.setattr(local_pipeline, "load_raw_indicator_table", fake_load)

    with warnings.catch_warnings():
        warnings.simplefilter("ignore", InsufficientData)
        warnings.simplefilter("ignore", RuntimeWarning)
        artefacts = local_pipeline.run_local_pipeline(year=2023, output_dir=tmp_path, skip_charts=True)

    assert requested == [(INDICATOR_CODES, 2023, True)]
    assert artefacts["raw"] == [tmp_path / "world_bank_indicators_raw_2023.csv"]
    assert "charts" not in artefacts


def test_run_local_pipeline_propagates_data_unavailable(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_load(indicator_ids: Sequence[str], year: int, *, include_metadata: bool = True) -> pd.DataFrame:
        raise DataUnavailable("provider unreachable")

    monkeypatch.setattr(local_pipeline, "load_raw_indicator_table", fake_load)

    with pytest.raises(DataUnavailable, match="provider unreachable"):
        local_pipeline.run_local_pipeline(year=2023, output_dir=tmp_path)


def test_raw_csv_with_several_years_uses_requested_year(tmp_path: Path) -> None:
    raw_path = tmp_path / "raw.csv"
    make_raw_table(
        [
            make_raw_row(country="A", region="East Asia", year=2022, **{GDP: 100.0}),
            make_raw_row(country="A", region="East Asia", year=2023, **{GDP: 900.0}),
        ]
    ).to_csv(raw_path, index=False)
    out_dir = tmp_path / "out"

    with warnings.catch_warnings():
        warnings.simplefilter("ignore", InsufficientData)
        warnings.simplefilter("ignore", RuntimeWarning)
        local_pipeline.run_local_pipeline(year=2023, output_dir=out_dir, raw_csv=raw_path, skip_charts=True)

    gdp = pd.read_csv(out_dir / "gdp_per_capita_by_region.csv")
    assert gdp.to_dict("list") == {"region": ["East Asia"], "gdp_per_capita": [900.0]}
    overall = pd.read_csv(out_dir / "overall_means.csv")
    assert overall.loc[0, "gdp_per_capita"] == pytest.approx(900.0)


def test_raw_csv_without_requested_year_raises(tmp_path: Path) -> None:
    raw_path = tmp_path / "raw.csv"
    make_raw_table([make_raw_row(year=2021)]).to_csv(raw_path, index=False)

    with pytest.raises(DataUnavailable, match="year 2023"):
        local_pipeline.run_local_pipeline(year=2023, output_dir=tmp_path, raw_csv=raw_path)
