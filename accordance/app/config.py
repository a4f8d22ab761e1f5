"""Environment-driven settings."""
from __future__ import annotations

import logging
import os

from dotenv import load_dotenv

load_dotenv()

# Fall back to a local SQLite file when no database is configured
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./accordance.db")
LOG_LEVEL = os.getenv("ACCORDANCE_LOG_LEVEL", "INFO").upper()
DB_INIT_ATTEMPTS = int(os.getenv("ACCORDANCE_DB_INIT_ATTEMPTS", "30"))


def configure_logging(level: str | None = None) -> None:
    logging.basicConfig(
        level=level or LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
