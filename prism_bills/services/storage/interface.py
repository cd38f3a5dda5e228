"""
Abstract Storage Interface

DESIGN DECISION: The tracker persists exactly one JSON document under a
fixed key. Stores only move opaque payloads in and out; parsing and
validation belong to the gateway. This allows us to:
1. Swap the local file for an embedded key-value store later
2. Use in-memory storage for testing
3. Keep business logic decoupled from the storage medium

The interface is intentionally tiny - read and write a whole payload.
"""

from abc import ABC, abstractmethod
from typing import Optional


class DocumentStoreInterface(ABC):
    """
    Abstract interface for a single-document key-value store.

    Writes replace the whole payload; a reader never observes a partial
    write.
    """

    @abstractmethod
    def read(self, key: str) -> Optional[str]:
        """
        Read the payload stored under a key.

        Args:
            key: Store key

        Returns:
            The payload, or None if nothing is stored under the key

        Raises:
            StorageUnavailableError: If the store cannot be read
        """
        pass

    @abstractmethod
    def write(self, key: str, payload: str) -> None:
        """
        Replace the payload stored under a key.

        Args:
            key: Store key
            payload: Serialized document

        Raises:
            StorageWriteError: If the payload could not be written
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class StorageUnavailableError(StorageError):
    """The storage backend could not be read."""
    pass


class StorageWriteError(StorageError):
    """A payload could not be written."""
    pass
