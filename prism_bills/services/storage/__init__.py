"""
Storage Services Package

Provides the abstract document store interface and its implementations.
The local JSON file store is the default backend, but designed to be swappable.
"""

from prism_bills.services.storage.interface import (
    DocumentStoreInterface,
    StorageError,
    StorageUnavailableError,
    StorageWriteError,
)
from prism_bills.services.storage.json_file import JsonFileDocumentStore
from prism_bills.services.storage.memory import InMemoryDocumentStore

__all__ = [
    # Interface
    "DocumentStoreInterface",
    # Exceptions
    "StorageError",
    "StorageUnavailableError",
    "StorageWriteError",
    # Implementations
    "InMemoryDocumentStore",
    "JsonFileDocumentStore",
]
