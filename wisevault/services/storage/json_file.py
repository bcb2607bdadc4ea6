"""
JSON File Storage Implementation

Writes the whole ledger to a single JSON file after every change.

TRADEOFFS:
- Rewrites the full file on each save (fine for a personal ledger)
- One writer per file; there is no locking
- Writes go to a temp file first and are swapped in, so a crash never
  leaves a half-written ledger behind
"""

import os
from pathlib import Path
from typing import Optional, Union

from pydantic import ValidationError

from wisevault.models.ledger import LedgerSnapshot
from wisevault.services.storage.interface import (
    CorruptSnapshotError,
    LedgerStorageInterface,
    StorageError,
)


class JsonFileLedgerStorage(LedgerStorageInterface):
    """Ledger snapshot persisted as pretty-printed JSON."""

    def __init__(self, path: Union[str, Path]):
        self._path = Path(path)

    @property
    def location(self) -> str:
        return str(self._path)

    def save_snapshot(self, snapshot: LedgerSnapshot) -> None:
        tmp_path = self._path.with_name(self._path.name + ".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(snapshot.model_dump_json(indent=2), encoding="utf-8")
            os.replace(tmp_path, self._path)
        except OSError as e:
            raise StorageError(f"Failed to write ledger to {self._path}: {e}") from e

    def load_snapshot(self) -> Optional[LedgerSnapshot]:
        try:
            raw = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StorageError(f"Failed to read ledger from {self._path}: {e}") from e

        try:
            return LedgerSnapshot.model_validate_json(raw)
        except ValidationError as e:
            raise CorruptSnapshotError(
                f"Ledger file {self._path} is not a valid snapshot: {e.error_count()} error(s)"
            ) from e

    def clear(self) -> None:
        try:
            self._path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            raise StorageError(f"Failed to delete {self._path}: {e}") from e
