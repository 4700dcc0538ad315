"""Logging configuration."""

import logging

from bucketfile.core.config import get_settings


def setup_logging() -> None:
    """Configure root logging for scripts using the library."""
    level = get_settings().LOG_LEVEL.upper()
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
