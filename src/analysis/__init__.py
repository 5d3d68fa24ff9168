"""
Analysis layer
--------------

Summaries and presentation built from the cleaned indicator dataset:

- per-indicator group means (region, income group) and region_comparisons
- overall means and descriptive statistics
- pairwise-complete correlation matrix
- CSV tables and horizontal bar charts
"""

from .charts import (  # noqa: F401
    ANALYSIS_OUTPUT_DIR,
    bar_chart_rows,
    build_indicator_bar_chart,
    write_summary_table,
)
from .correlation import (  # noqa: F401
    build_correlation_matrix,
    pairwise_observation_counts,
    rank_correlation_pairs,
)
from .group_summaries import (  # noqa: F401
    build_group_summaries,
    describe_indicators,
    summarize_indicator_by_group,
    summarize_indicators_by_group,
    summarize_overall,
)

__all__ = [
    "ANALYSIS_OUTPUT_DIR",
    "bar_chart_rows",
    "build_indicator_bar_chart",
    "write_summary_table",
    "build_correlation_matrix",
    "pairwise_observation_counts",
    "rank_correlation_pairs",
    "build_group_summaries",
    "describe_indicators",
    "summarize_indicator_by_group",
    "summarize_indicators_by_group",
    "summarize_overall",
]
