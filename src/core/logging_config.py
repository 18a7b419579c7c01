"""Logging setup shared by the API server and the CLI."""

import logging
from typing import Optional

from config import LOG_LEVEL

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: Optional[str] = None) -> None:
    """Configure the root logger once.

    Args:
        level: Optional level name overriding LOG_LEVEL.
    """
    logging.basicConfig(
        level=getattr(logging, (level or LOG_LEVEL).upper(), logging.INFO),
        format=LOG_FORMAT,
    )
    # SQLAlchemy engine chatter is only useful when debugging the store
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
