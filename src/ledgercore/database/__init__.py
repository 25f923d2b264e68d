"""Database layer for the ledger."""

from ledgercore.database.base import Database
from ledgercore.database.factories import create_database, create_sqlite_database

__all__ = ["Database", "create_database", "create_sqlite_database"]
