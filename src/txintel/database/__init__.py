"""Database layer for txintel application."""

from txintel.database.base import Database
from txintel.database.factories import create_sqlite_database

__all__ = ["Database", "create_sqlite_database"]
