"""
Normalização e limpeza da tabela RAW de indicadores do World Bank.

Este módulo cobre as duas primeiras etapas após o Loader:

- Normalizer: renomeia os códigos WDI para nomes semânticos, mantém apenas
  as colunas de identificação + os cinco indicadores e remove as linhas
  de agregados (region == "Aggregates", p.ex. "World", grupos de renda).
- Ano único: `select_year` mantém só as linhas do ano analisado (um
  snapshot CSV pode trazer vários anos).
- Cleaner: remove linhas duplicadas. O filtro de nulos NÃO é feito aqui.
  As médias por grupo e a correlação excluem nulos célula a célula
  (skipna / pares completos); a tabela descritiva e os gráficos declaram
  os campos que exigem via `require_fields`.

Schema resultante:
    country, year, region, income,
    gdp_per_capita, school_years, life_expectancy, labor_force, inflation
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence

import pandas as pd

from common.errors import DataUnavailable

logger = logging.getLogger(__name__)

# Códigos WDI -> nomes semânticos (ordem fixa usada em todas as saídas)
INDICATOR_FIELD_MAP: Dict[str, str] = {
    "NY.GDP.PCAP.CD": "gdp_per_capita",
    "SE.SCH.LIFE": "school_years",
    "SP.DYN.LE00.IN": "life_expectancy",
    "SL.TLF.CACT.ZS": "labor_force",
    "FP.CPI.TOTL.ZG": "inflation",
}
INDICATOR_CODES: List[str] = list(INDICATOR_FIELD_MAP)
INDICATOR_COLUMNS: List[str] = list(INDICATOR_FIELD_MAP.values())

IDENTIFYING_COLUMNS: List[str] = ["country", "year", "region", "income"]
DATASET_COLUMNS: List[str] = IDENTIFYING_COLUMNS + INDICATOR_COLUMNS

AGGREGATE_REGION = "Aggregates"
DEFAULT_YEAR = 2023


@dataclass
class Observation:
    """Uma linha por país/ano, já com nomes semânticos."""

    country: str
    year: int
    region: Optional[str]
    income: Optional[str]
    gdp_per_capita: Optional[float] = None
    school_years: Optional[float] = None
    life_expectancy: Optional[float] = None
    labor_force: Optional[float] = None
    inflation: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "country": self.country,
            "year": self.year,
            "region": self.region,
            "income": self.income,
            "gdp_per_capita": self.gdp_per_capita,
            "school_years": self.school_years,
            "life_expectancy": self.life_expectancy,
            "labor_force": self.labor_force,
            "inflation": self.inflation,
        }


def _empty_dataset() -> pd.DataFrame:
    return pd.DataFrame(columns=DATASET_COLUMNS)


def _apply_dtypes(df: pd.DataFrame) -> pd.DataFrame:
    """Tipagem explícita: strings para identificação, float para indicadores."""
    df = df.copy()
    for col in ["country", "region", "income"]:
        df[col] = df[col].astype("string")
    df["year"] = pd.to_numeric(df["year"], errors="coerce").astype("Int64")
    for col in INDICATOR_COLUMNS:
        df[col] = pd.to_numeric(df[col], errors="coerce").astype("float64")
    return df


def build_observations_dataframe(observations: Iterable[Observation]) -> pd.DataFrame:
    """
    Constrói um Dataset a partir de registros `Observation`.

    Mantém as mesmas colunas e tipos produzidos por `normalize_indicators`,
    mesmo quando a lista está vazia (contrato estável).
    """
    rows = [obs.to_dict() for obs in observations]
    if not rows:
        return _empty_dataset()
    return _apply_dtypes(pd.DataFrame(rows, columns=DATASET_COLUMNS))


def normalize_indicators(
    raw_df: Optional[pd.DataFrame],
    *,
    field_map: Optional[Dict[str, str]] = None,
) -> pd.DataFrame:
    """
    Normalizer: RAW -> Dataset.

    - Renomeia colunas de indicador segundo `field_map` (default:
      INDICATOR_FIELD_MAP). Colunas que já usam o nome semântico são aceitas.
    - Mantém somente country, year, region, income + cinco indicadores.
    - Remove linhas com region == "Aggregates".

    Levanta DataUnavailable se a tabela vier vazia ou se faltar alguma
    coluna referenciada.
    """
    if raw_df is None or raw_df.empty:
        raise DataUnavailable("No raw indicator rows to normalize")

    mapping = field_map or INDICATOR_FIELD_MAP
    df = raw_df.rename(columns=mapping)

    missing = [c for c in DATASET_COLUMNS if c not in df.columns]
    if missing:
        raise DataUnavailable(f"Raw indicator table is missing columns: {missing}")

    df = _apply_dtypes(df[DATASET_COLUMNS])

    is_aggregate = df["region"].fillna("").str.strip() == AGGREGATE_REGION
    dropped = int(is_aggregate.sum())
    df = df.loc[~is_aggregate].reset_index(drop=True)

    logger.info(
        "Normalized %d rows (%d aggregate rows removed)",
        len(df),
        dropped,
    )
    return df


def select_year(df: pd.DataFrame, year: int) -> pd.DataFrame:
    """
    Mantém apenas as linhas de `year`.

    Um snapshot RAW pode trazer mais de um ano. Levanta DataUnavailable
    se nenhuma linha sobrar.
    """
    in_year = (df["year"] == year).fillna(False).astype(bool)
    kept = df.loc[in_year].reset_index(drop=True)
    if kept.empty:
        raise DataUnavailable(f"No indicator rows for year {year}")

    dropped = len(df) - len(kept)
    if dropped:
        logger.info("Dropped %d rows outside year %d", dropped, year)
    return kept


def clean_dataset(df: pd.DataFrame) -> pd.DataFrame:
    """
    Cleaner: remove linhas duplicadas (todas as colunas iguais).

    Idempotente. Não remove linhas com nulos: um país sem GDP ainda é
    válido para a média de expectativa de vida.
    """
    before = len(df)
    cleaned = df.drop_duplicates().reset_index(drop=True)

    dup_keys = cleaned.duplicated(subset=["country", "year"], keep=False)
    if dup_keys.any():
        # Mesmo país/ano com valores diferentes: mantemos ambos, mas avisamos.
        logger.warning(
            "%d rows share a (country, year) key with different values",
            int(dup_keys.sum()),
        )

    if before != len(cleaned):
        logger.info("Removed %d duplicate rows", before - len(cleaned))
    return cleaned


def require_fields(df: pd.DataFrame, fields: Sequence[str]) -> pd.DataFrame:
    """
    Filtro de nulos declarado pelo consumidor.

    Remove as linhas com valor nulo em qualquer um de `fields`.
    """
    missing = [c for c in fields if c not in df.columns]
    if missing:
        raise DataUnavailable(f"Dataset is missing required columns: {missing}")
    return df.dropna(subset=list(fields)).reset_index(drop=True)


__all__ = [
    "INDICATOR_FIELD_MAP",
    "INDICATOR_CODES",
    "INDICATOR_COLUMNS",
    "IDENTIFYING_COLUMNS",
    "DATASET_COLUMNS",
    "AGGREGATE_REGION",
    "DEFAULT_YEAR",
    "Observation",
    "build_observations_dataframe",
    "normalize_indicators",
    "select_year",
    "clean_dataset",
    "require_fields",
]
