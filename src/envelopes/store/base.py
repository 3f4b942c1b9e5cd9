"""Abstract key-value storage interface."""

from abc import ABC, abstractmethod
from typing import Optional


class StateStorage(ABC):
    """Durable string key-value storage for envelopes.

    Values are opaque text (JSON documents written by the callers).
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the storage backend."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the storage backend."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize storage schema (create tables)."""
        pass

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        """Get the value stored under key, or None if absent."""
        pass

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """Store value under key, replacing any previous value."""
        pass

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """Remove key. Removing an absent key is a no-op."""
        pass

    @abstractmethod
    def list_keys(self, prefix: str = "") -> list[str]:
        """List stored keys starting with prefix, sorted."""
        pass
