"""Logging configuration."""
import logging
import sys
from typing import Optional

from printdesk.core.config import settings

# Third-party loggers capped at WARNING
QUIET_LOGGERS = (
    "sqlalchemy.engine",
    "aiosqlite",
    "asyncpg",
    "multipart",
    "uvicorn.access",
)


def setup_logging(level: Optional[str] = None) -> None:
    """Configure application logging.

    Args:
        level: Level name for the root logger; defaults to settings.log_level
    """
    level_name = (level or settings.log_level).upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout),
        ],
    )

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger(__name__).debug(f"[LOGGING] Configured at level {level_name}")
