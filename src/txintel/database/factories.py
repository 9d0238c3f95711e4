"""Database factory functions for creating database instances."""

import os
from pathlib import Path
from typing import Optional

from txintel.database.sqlalchemy_db import SQLAlchemyDatabase

DEFAULT_STORE_TIMEOUT = 30.0


def create_sqlite_database(
    database_path: Optional[str] = None, timeout: Optional[float] = None
) -> SQLAlchemyDatabase:
    """Create a SQLite database instance.

    Args:
        database_path: Path to SQLite database file. If None, checks TXINTEL_DB_PATH
            environment variable, then defaults to ~/.txintel/txintel.db
        timeout: Seconds to wait on a locked database. If None, checks
            TXINTEL_STORE_TIMEOUT, then defaults to 30.

    Returns:
        SQLAlchemyDatabase instance configured for SQLite
    """
    if database_path is None:
        # Check environment variable
        database_path = os.environ.get("TXINTEL_DB_PATH")

    if database_path is None:
        db_dir = Path.home() / ".txintel"
        db_dir.mkdir(exist_ok=True)
        database_path = str(db_dir / "txintel.db")

    if timeout is None:
        timeout = float(os.environ.get("TXINTEL_STORE_TIMEOUT", DEFAULT_STORE_TIMEOUT))

    return SQLAlchemyDatabase(f"sqlite:///{database_path}", timeout=timeout)
