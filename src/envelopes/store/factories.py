"""Construction of the storage that holds the budget document and CSV uploads."""

import os
from pathlib import Path
from typing import Optional

from envelopes.store.sqlalchemy_storage import SQLAlchemyStorage

DB_PATH_ENV = "ENVELOPES_DB_PATH"
DEFAULT_DB_FILENAME = "envelopes.db"
MEMORY_DATABASE_URL = "sqlite://"


def default_data_dir() -> Path:
    """Directory holding the budget database when no path is configured."""
    return Path.home() / ".envelopes"


def resolve_database_path(database_path: Optional[str] = None) -> Path:
    """Pick the SQLite file for the budget.

    Order: the explicit path, then ENVELOPES_DB_PATH, then
    ``~/.envelopes/envelopes.db``. The default directory is created on demand;
    explicit paths are used as given.
    """
    configured = database_path or os.environ.get(DB_PATH_ENV)
    if configured:
        return Path(configured).expanduser()

    data_dir = default_data_dir()
    data_dir.mkdir(parents=True, exist_ok=True)
    return data_dir / DEFAULT_DB_FILENAME


def create_sqlite_storage(database_path: Optional[str] = None) -> SQLAlchemyStorage:
    """Storage backed by a SQLite file (see resolve_database_path)."""
    return SQLAlchemyStorage(f"sqlite:///{resolve_database_path(database_path)}")


def create_memory_storage() -> SQLAlchemyStorage:
    """Storage that lives only as long as the process; nothing is written to disk."""
    return SQLAlchemyStorage(MEMORY_DATABASE_URL)
