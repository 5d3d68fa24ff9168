"""
Loader for World Bank WDI indicators (single year, all countries).

Builds the raw table consumed by the Normalizer: one row per economy,
with country metadata (region, income group) and one column per
requested indicator code, e.g.:

    iso3c, iso2c, country, year, region, income, NY.GDP.PCAP.CD, ...

Aggregate economies ("World", income rollups, ...) are kept here with
region == "Aggregates"; filtering them is the Normalizer's job.

The raw table can also be saved to / reloaded from CSV so that the
analysis can be rerun offline.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

import pandas as pd
import requests

from common.errors import DataUnavailable
from env_loader import get_env_int, load_dotenv_if_present

load_dotenv_if_present()

logger = logging.getLogger(__name__)

WORLD_BANK_BASE_URL = os.getenv("WORLD_BANK_BASE_URL", "https://api.worldbank.org/v2").rstrip("/")
WORLD_BANK_TIMEOUT = get_env_int("WORLD_BANK_TIMEOUT", 30)
WORLD_BANK_PER_PAGE = 1000

RAW_CSV_NAME_TEMPLATE = "world_bank_indicators_raw_{year}.csv"

METADATA_COLUMNS = ["iso3c", "iso2c", "country", "region", "income"]


def _get_json(url: str, params: Dict[str, Any], *, timeout: int) -> Any:
    try:
        response = requests.get(url, params=params, timeout=timeout)
        response.raise_for_status()
        return response.json()
    except requests.exceptions.RequestException as exc:
        raise DataUnavailable(f"World Bank API request failed for {url}: {exc}") from exc
    except ValueError as exc:
        raise DataUnavailable(f"World Bank API returned invalid JSON for {url}") from exc


def _fetch_page(
    url: str,
    page: int,
    *,
    params: Optional[Dict[str, Any]] = None,
    per_page: int = WORLD_BANK_PER_PAGE,
    timeout: int = WORLD_BANK_TIMEOUT,
) -> Tuple[Dict[str, Any], List[Dict[str, Any]]]:
    """
    Fetch one page from a World Bank v2 endpoint.

    Returns (metadata, records). An error payload such as
    [{"message": [{"key": "Invalid value", ...}]}] raises DataUnavailable.
    """
    query = {"format": "json", "page": page, "per_page": per_page, **(params or {})}
    data = _get_json(url, query, timeout=timeout)

    if isinstance(data, list) and len(data) == 1 and isinstance(data[0], dict):
        messages = data[0].get("message") or []
        details = "; ".join(
            f"{m.get('key')}: {m.get('value')}" for m in messages if isinstance(m, dict)
        )
        raise DataUnavailable(f"World Bank API error for {url}: {details or data!r}")

    if not isinstance(data, list) or len(data) != 2 or not isinstance(data[0], dict):
        raise DataUnavailable(f"Unexpected response from World Bank API: {data!r}")

    metadata, records = data
    # No rows comes back as [{"total": 0, ...}, null].
    if records is None:
        records = []
    if not isinstance(records, list):
        raise DataUnavailable(f"Unexpected structure from World Bank API: {data!r}")

    return metadata, records


def _iter_all_pages(url: str, params: Optional[Dict[str, Any]] = None) -> Iterable[Dict[str, Any]]:
    page = 1
    metadata, records = _fetch_page(url, page, params=params)
    total_pages = int(metadata.get("pages") or 1)

    yield from records

    while page < total_pages:
        page += 1
        _, records = _fetch_page(url, page, params=params)
        yield from records


def fetch_country_metadata() -> List[Dict[str, Any]]:
    """
    List every economy known to the API with its region and income group.

    Each entry: iso3c, iso2c, country, region, income. Region and income
    labels are stripped (the API pads some of them with spaces).
    """
    url = f"{WORLD_BANK_BASE_URL}/country"
    rows: List[Dict[str, Any]] = []
    for record in _iter_all_pages(url):
        region = record.get("region") or {}
        income = record.get("incomeLevel") or {}
        rows.append(
            {
                "iso3c": record.get("id"),
                "iso2c": record.get("iso2Code"),
                "country": (record.get("name") or "").strip() or None,
                "region": (region.get("value") or "").strip() or None,
                "income": (income.get("value") or "").strip() or None,
            }
        )
    return rows


def fetch_indicator_records(indicator_id: str, year: int) -> Iterable[Dict[str, Any]]:
    """Iterate over the raw API records of one indicator for one year, all countries."""
    url = f"{WORLD_BANK_BASE_URL}/country/all/indicator/{indicator_id}"
    return _iter_all_pages(url, params={"date": f"{year}:{year}"})


def _to_float(value: Any) -> Optional[float]:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def load_raw_indicator_table(
    indicator_ids: Sequence[str],
    year: int,
    *,
    include_metadata: bool = True,
) -> pd.DataFrame:
    """
    Download the raw indicator table for `year`.

    One row per economy keyed by its ISO2 code; one column per indicator
    code holding the reported value (None when not reported). With
    `include_metadata`, region and income group are attached from the
    country listing.

    Raises DataUnavailable when the provider cannot be reached, rejects an
    indicator code, or returns no rows.
    """
    rows: Dict[str, Dict[str, Any]] = {}

    for indicator_id in indicator_ids:
        count = 0
        for record in fetch_indicator_records(indicator_id, year):
            country = record.get("country") or {}
            key = country.get("id") or record.get("countryiso3code")
            if not key:
                continue
            row = rows.setdefault(
                key,
                {
                    "iso3c": record.get("countryiso3code") or None,
                    "iso2c": country.get("id"),
                    "country": country.get("value"),
                    "year": year,
                },
            )
            row[indicator_id] = _to_float(record.get("value"))
            count += 1
        logger.info("Fetched %d records for %s (%s)", count, indicator_id, year)

    if not rows:
        raise DataUnavailable(f"No World Bank records for indicators {list(indicator_ids)} in {year}")

    df = pd.DataFrame(list(rows.values()))
    for indicator_id in indicator_ids:
        if indicator_id not in df.columns:
            df[indicator_id] = None

    if include_metadata:
        meta_df = pd.DataFrame(fetch_country_metadata(), columns=METADATA_COLUMNS)
        meta_df = meta_df.dropna(subset=["iso2c"]).drop_duplicates(subset=["iso2c"])
        df = df.merge(
            meta_df[["iso2c", "region", "income"]],
            on="iso2c",
            how="left",
        )
        missing = int(df["region"].isna().sum())
        if missing:
            logger.warning("%d economies have no region metadata", missing)

    ordered = [c for c in METADATA_COLUMNS[:3] + ["year"] + METADATA_COLUMNS[3:] if c in df.columns]
    return df[ordered + list(indicator_ids)]


def save_raw_indicator_table(df: pd.DataFrame, output_dir: Path | str, year: int) -> Path:
    """Write the raw table as CSV so later runs can skip the download."""
    output_root = Path(output_dir)
    output_root.mkdir(parents=True, exist_ok=True)
    output_path = output_root / RAW_CSV_NAME_TEMPLATE.format(year=year)
    df.to_csv(output_path, index=False)
    return output_path


def load_raw_indicator_csv(path: Path | str) -> pd.DataFrame:
    """Read a raw table previously written by `save_raw_indicator_table`."""
    csv_path = Path(path)
    if not csv_path.exists():
        raise DataUnavailable(f"Raw indicator file not found: {csv_path}")

    try:
        df = pd.read_csv(csv_path)
    except pd.errors.EmptyDataError as exc:
        raise DataUnavailable(f"Raw indicator file is empty: {csv_path}") from exc
    if df.empty:
        raise DataUnavailable(f"Raw indicator file is empty: {csv_path}")
    return df


__all__ = [
    "WORLD_BANK_BASE_URL",
    "WORLD_BANK_TIMEOUT",
    "fetch_country_metadata",
    "fetch_indicator_records",
    "load_raw_indicator_table",
    "save_raw_indicator_table",
    "load_raw_indicator_csv",
]
