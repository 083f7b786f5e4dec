#!/usr/bin/env python3
"""Database bootstrap: run Alembic migrations (production-safe).

- Always run `alembic upgrade head` on startup.
- If migrations fail, fail fast (don't start with an unknown schema).
"""

import logging
import os
import sys
import time

from dotenv import load_dotenv
from sqlalchemy import text

load_dotenv()

logger = logging.getLogger(__name__)


def check_db_ready() -> bool:
    """Check if database is ready"""
    from core.database import engine
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except Exception:
        return False


def _get_alembic_config(database_url=None):
    """Load Alembic config for programmatic migrations."""
    from alembic.config import Config

    here = os.path.dirname(os.path.abspath(__file__))
    cfg = Config(os.path.join(here, "alembic.ini"))
    cfg.set_main_option("script_location", os.path.join(here, "alembic"))
    if database_url:
        cfg.set_main_option("sqlalchemy.url", database_url)
    return cfg


def alembic_upgrade_head(database_url=None) -> None:
    """Apply all pending migrations."""
    from alembic import command

    command.upgrade(_get_alembic_config(database_url), "head")


def main():
    from core.logging import setup_logging

    setup_logging()
    logger.info("Waiting for database to be ready...")
    max_retries = 30

    for attempt in range(1, max_retries + 1):
        if check_db_ready():
            logger.info("Database is ready!")
            break
        logger.warning(f"Database is unavailable - sleeping (attempt {attempt}/{max_retries})")
        time.sleep(1)
    else:
        logger.error("Database is not ready after maximum retries")
        sys.exit(1)

    try:
        alembic_upgrade_head()
    except Exception as e:
        logger.error(f"Alembic upgrade failed: {e}", exc_info=True)
        sys.exit(1)
    logger.info("Migrations completed successfully!")


if __name__ == '__main__':
    main()
