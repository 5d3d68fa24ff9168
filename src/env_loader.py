"""
Settings for local runs, read from the process environment and an optional
`.env` file.

Variables: WORLD_BANK_BASE_URL, WORLD_BANK_TIMEOUT, ANALYSIS_YEAR,
ANALYSIS_OUTPUT_DIR, LOG_LEVEL.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import List, Optional, Tuple

logger = logging.getLogger(__name__)

_QUOTES = ("'", '"')


def parse_env_line(line: str) -> Optional[Tuple[str, str]]:
    """
    Parse one `.env` line into (key, value).

    Accepts an optional leading `export `. A value wrapped in matching
    quotes is unwrapped as-is; an unquoted value stops at ` #`. Blank lines,
    comments and lines without `=` give None.
    """
    line = line.strip()
    if not line or line.startswith("#"):
        return None
    if line.startswith("export "):
        line = line[len("export "):].lstrip()

    key, sep, value = line.partition("=")
    key = key.strip()
    if not sep or not key:
        return None

    value = value.strip()
    if len(value) >= 2 and value[0] in _QUOTES and value[-1] == value[0]:
        return key, value[1:-1]
    return key, value.split(" #", 1)[0].rstrip()


def load_dotenv_if_present(path: str | None = None) -> List[str]:
    """
    Load KEY=VALUE pairs from `path` (default: ".env" in CWD).

    Variables already present in os.environ win over the file. A missing
    or unreadable file is ignored. Returns the keys that were set.
    """
    env_path = Path(path or ".env")
    if not env_path.exists():
        return []

    try:
        text = env_path.read_text(encoding="utf-8")
    except OSError as exc:
        logger.warning("Could not read %s: %s", env_path, exc)
        return []

    loaded: List[str] = []
    for line in text.splitlines():
        pair = parse_env_line(line)
        if pair is None:
            continue
        key, value = pair
        if key in os.environ:
            continue
        os.environ[key] = value
        loaded.append(key)

    logger.debug("Loaded %d settings from %s", len(loaded), env_path)
    return loaded


def get_env_int(name: str, default: int) -> int:
    """Read an integer setting, falling back to `default` when unset or invalid."""
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring invalid integer for %s=%r; using %s", name, raw, default)
        return default


__all__ = ["parse_env_line", "load_dotenv_if_present", "get_env_int"]
