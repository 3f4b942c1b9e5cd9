"""Generic SQLAlchemy key-value storage implementation."""

import logging
from typing import Optional
from sqlalchemy.orm import Session

from envelopes.store.base import StateStorage
from envelopes.store.models import StorageEntry, create_session_factory

logger = logging.getLogger(__name__)


class SQLAlchemyStorage(StateStorage):
    """SQLAlchemy-based implementation of StateStorage interface."""

    def __init__(self, database_url: str):
        """Initialize SQLAlchemy storage.

        Args:
            database_url: SQLAlchemy database URL (e.g., 'sqlite:///path/to.db',
                'sqlite://' for an in-memory database)
        """
        self.database_url = database_url
        self.session_factory = create_session_factory(database_url)
        self._session: Optional[Session] = None

    def _get_session(self) -> Session:
        """Get current session, creating one if needed."""
        if self._session is None:
            self._session = self.session_factory()
        return self._session

    def connect(self) -> None:
        """Connect to the database."""
        # Connection is lazy, so this is a no-op
        pass

    def disconnect(self) -> None:
        """Disconnect from the database."""
        if self._session is not None:
            self._session.close()
            self._session = None

    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        # Schema is created automatically by create_session_factory
        pass

    def get_item(self, key: str) -> Optional[str]:
        """Get the value stored under key, or None if absent."""
        session = self._get_session()
        entry = session.get(StorageEntry, key)
        if entry is None:
            return None
        return entry.value

    def set_item(self, key: str, value: str) -> None:
        """Store value under key, replacing any previous value."""
        session = self._get_session()
        entry = session.get(StorageEntry, key)
        if entry is None:
            session.add(StorageEntry(key=key, value=value))
        else:
            entry.value = value
        session.commit()
        logger.debug("Stored %d chars under %s", len(value), key)

    def remove_item(self, key: str) -> None:
        """Remove key. Removing an absent key is a no-op."""
        session = self._get_session()
        entry = session.get(StorageEntry, key)
        if entry is None:
            return
        session.delete(entry)
        session.commit()

    def list_keys(self, prefix: str = "") -> list[str]:
        """List stored keys starting with prefix, sorted."""
        session = self._get_session()
        query = session.query(StorageEntry.key)
        if prefix:
            query = query.filter(StorageEntry.key.startswith(prefix, autoescape=True))
        return [key for (key,) in query.order_by(StorageEntry.key).all()]
