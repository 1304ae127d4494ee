"""Logging configuration."""

import logging
import sys
from typing import Optional

from holdings.config.settings import get_settings


def setup_logging(level: Optional[str] = None) -> None:
    """Configure application logging at the given level (settings.log_level by default)."""
    level_name = (level or get_settings().log_level).upper()

    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    # Upload parsing and SQL echo are noisy at INFO
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("python_multipart").setLevel(logging.WARNING)
    logging.getLogger("uvicorn").setLevel(logging.INFO)
