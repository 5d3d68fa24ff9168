"""
Transformations layer
----------------------

Módulos responsáveis por converter a tabela RAW de indicadores do
World Bank no Dataset normalizado e limpo usado pela camada de análise.
"""

from .indicators_processed import (  # noqa: F401
    AGGREGATE_REGION,
    DATASET_COLUMNS,
    DEFAULT_YEAR,
    IDENTIFYING_COLUMNS,
    INDICATOR_CODES,
    INDICATOR_COLUMNS,
    INDICATOR_FIELD_MAP,
    Observation,
    build_observations_dataframe,
    clean_dataset,
    normalize_indicators,
    require_fields,
    select_year,
)

__all__ = [
    "AGGREGATE_REGION",
    "DATASET_COLUMNS",
    "DEFAULT_YEAR",
    "IDENTIFYING_COLUMNS",
    "INDICATOR_CODES",
    "INDICATOR_COLUMNS",
    "INDICATOR_FIELD_MAP",
    "Observation",
    "build_observations_dataframe",
    "clean_dataset",
    "normalize_indicators",
    "require_fields",
    "select_year",
]
