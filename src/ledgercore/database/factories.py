"""Database factory functions for creating database instances."""

import logging
import os
from pathlib import Path
from typing import Optional

from ledgercore.database.sqlalchemy_db import SQLAlchemyDatabase

logger = logging.getLogger(__name__)


def create_sqlite_database(database_path: Optional[str] = None) -> SQLAlchemyDatabase:
    """Create a SQLite database instance.

    Args:
        database_path: Path to SQLite database file. If None, checks LEDGERCORE_DB_PATH
            environment variable, then defaults to ~/.ledgercore/ledger.db

    Returns:
        SQLAlchemyDatabase instance configured for SQLite
    """
    if database_path is None:
        # Check environment variable
        database_path = os.environ.get("LEDGERCORE_DB_PATH")

    if database_path is None:
        # Default to ~/.ledgercore/ledger.db
        db_dir = Path.home() / ".ledgercore"
        db_dir.mkdir(exist_ok=True)
        database_path = str(db_dir / "ledger.db")

    logger.debug("Opening SQLite ledger at %s", database_path)
    return SQLAlchemyDatabase(f"sqlite:///{database_path}")


def create_database(
    database_url: Optional[str] = None, database_path: Optional[str] = None
) -> SQLAlchemyDatabase:
    """Create a database instance from a URL or a SQLite path.

    Args:
        database_url: Any SQLAlchemy URL. If None, checks LEDGERCORE_DATABASE_URL.
        database_path: SQLite file used when no URL is configured.

    Returns:
        SQLAlchemyDatabase instance
    """
    if database_url is None:
        database_url = os.environ.get("LEDGERCORE_DATABASE_URL")

    if database_url:
        logger.debug("Opening ledger at %s", database_url.split("@")[-1])
        return SQLAlchemyDatabase(database_url)

    return create_sqlite_database(database_path)
