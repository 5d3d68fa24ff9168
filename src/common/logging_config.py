from __future__ import annotations

import logging
import os
from typing import Optional

LOG_LEVEL_ENV = "LOG_LEVEL"
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: Optional[str] = None) -> None:
    """
    Configure root logging once for a pipeline run.

    Python warnings (e.g. InsufficientData) are routed to the log.
    The level comes from `level`, then LOG_LEVEL, then INFO. If the root
    logger already has handlers (pytest, notebooks), only the level is set.
    """
    level_name = (level or os.getenv(LOG_LEVEL_ENV) or "INFO").upper()
    numeric_level = getattr(logging, level_name, None)
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    logging.captureWarnings(True)

    root = logging.getLogger()
    if root.handlers:
        root.setLevel(numeric_level)
        return

    logging.basicConfig(level=numeric_level, format=LOG_FORMAT)


__all__ = ["LOG_LEVEL_ENV", "configure_logging"]
