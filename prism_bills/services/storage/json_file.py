"""
Local JSON File Storage

DESIGN DECISION: A local JSON file is the default backend because:
1. The tracker is a single-user personal tool
2. No database setup required
3. The user can inspect or back up the file directly

TRADEOFFS:
- The whole document is rewritten on every change (fine for personal data)
- No transactions; atomicity comes from writing a temp file and renaming
  it over the old one

Writes are retried because antivirus scanners and sync clients
occasionally hold the file for a moment.
"""

import os
import tempfile
from pathlib import Path
from typing import Optional, Union

from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from prism_bills.config import get_settings
from prism_bills.services.storage.interface import (
    DocumentStoreInterface,
    StorageUnavailableError,
    StorageWriteError,
)


class JsonFileDocumentStore(DocumentStoreInterface):
    """
    Stores each key as ``<data_dir>/<key>.json``.
    """

    def __init__(
        self,
        data_dir: Optional[Union[str, Path]] = None,
        write_attempts: Optional[int] = None,
    ):
        settings = get_settings().storage
        self._data_dir = Path(data_dir) if data_dir is not None else settings.data_dir
        self._write_attempts = write_attempts or settings.write_attempts

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    def path_for(self, key: str) -> Path:
        """File holding the payload for a key."""
        return self._data_dir / f"{key}.json"

    def read(self, key: str) -> Optional[str]:
        path = self.path_for(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            raise StorageUnavailableError(f"Cannot read {path}: {e}") from e

    def write(self, key: str, payload: str) -> None:
        path = self.path_for(key)
        writer = retry(
            retry=retry_if_exception_type(OSError),
            stop=stop_after_attempt(self._write_attempts),
            wait=wait_exponential(multiplier=0.1, min=0.1, max=2),
            reraise=True,
        )(self._write_atomically)
        try:
            writer(path, payload)
        except OSError as e:
            raise StorageWriteError(f"Cannot write {path}: {e}") from e

    def _write_atomically(self, path: Path, payload: str) -> None:
        """Write to a temp file in the same directory, then rename over."""
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=path.parent,
            prefix=f".{path.stem}-",
            suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(payload)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise
