"""Tests for CSV tables and bar charts."""

from __future__ import annotations

from pathlib import Path
from typing import Any, List

import pandas as pd
import pytest

from analysis import charts
from analysis.charts import bar_chart_rows, build_indicator_bar_chart, write_summary_table
from common.errors import DataUnavailable


def test_write_summary_table(tmp_path: Path) -> None:
    df = pd.DataFrame({"region": ["A", "B"], "inflation": [3.0, 1.0]})

    path = write_summary_table(df, "inflation_by_region", output_dir=tmp_path / "out")

    assert path == tmp_path / "out" / "inflation_by_region.csv"
    assert pd.read_csv(path).to_dict("list") == {"region": ["A", "B"], "inflation": [3.0, 1.0]}


def test_bar_chart_rows_drop_undefined_and_put_largest_last() -> None:
    summary = pd.DataFrame(
        {"region": ["A", "B", "C", "D"], "gdp_per_capita": [9.0, float("nan"), 5.0, 7.0]}
    )

    rows = bar_chart_rows(summary, "gdp_per_capita")

    assert rows["region"].tolist() == ["C", "D", "A"]
    assert rows["gdp_per_capita"].tolist() == [5.0, 7.0, 9.0]


def test_bar_chart_rows_keep_order_of_ties() -> None:
    summary = pd.DataFrame({"income": ["High", "Upper", "Low"], "inflation": [2.0, 2.0, 8.0]})

    rows = bar_chart_rows(summary, "inflation")

    assert rows["income"].tolist() == ["High", "Upper", "Low"]


def test_bar_chart_rows_unknown_indicator_raises() -> None:
    summary = pd.DataFrame({"region": ["A"], "gdp_per_capita": [1.0]})

    with pytest.raises(DataUnavailable):
        bar_chart_rows(summary, "gini")


def test_bar_chart_skips_undefined_groups(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    closed: List[Any] = []
    real_close = charts.plt.close

    def keep_figure(fig: Any) -> None:
        closed.append(fig)
        real_close(fig)

    monkeypatch.setattr(charts.plt, "close", keep_figure)
    summary = pd.DataFrame({"region": ["A", "B", "C"], "gdp_per_capita": [5.0, 9.0, float("nan")]})

    path = build_indicator_bar_chart(summary, "gdp_per_capita", output_dir=tmp_path, year=2023)

    assert path == tmp_path / "gdp_per_capita_by_region.png"
    assert path.read_bytes()[:8] == b"\x89PNG\r\n\x1a\n"

    (ax,) = closed[0].axes
    assert [patch.get_width() for patch in ax.patches] == [5.0, 9.0]
    assert [tick.get_text() for tick in ax.get_yticklabels()] == ["A", "B"]
    assert ax.get_title().endswith("- 2023")


def test_bar_chart_with_no_defined_values(tmp_path: Path) -> None:
    summary = pd.DataFrame({"income": ["Low income"], "school_years": [float("nan")]})

    path = build_indicator_bar_chart(summary, "school_years", group_col="income", output_dir=tmp_path)

    assert path.exists()
