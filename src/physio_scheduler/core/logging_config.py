"""Logging setup for processes embedding the scheduling engine."""

import logging
from typing import Optional

from physio_scheduler.core.config import LOG_LEVEL

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: Optional[str] = None) -> None:
    """Configure root logging with the engine's standard format."""
    logging.basicConfig(
        level=(level or LOG_LEVEL).upper(),
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler()],
    )
