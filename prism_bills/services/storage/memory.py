"""In-memory document store for tests and throwaway sessions."""

from typing import Optional

from prism_bills.services.storage.interface import DocumentStoreInterface


class InMemoryDocumentStore(DocumentStoreInterface):
    """Keeps payloads in a dict. Nothing survives the process."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._payloads: dict[str, str] = dict(initial or {})

    def read(self, key: str) -> Optional[str]:
        return self._payloads.get(key)

    def write(self, key: str, payload: str) -> None:
        self._payloads[key] = payload
