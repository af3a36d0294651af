"""Opaque blob stores for the persisted transaction collection.

A store is bound to one logical key and only moves bytes; encoding lives in
:mod:`bank_import.codec`. The SQL-backed implementation is
``db.kv_store.SqlBlobStore`` in the shared ``db`` library.
"""

from __future__ import annotations

import contextlib
import os
from pathlib import Path
from typing import Protocol, runtime_checkable


@runtime_checkable
class BlobStore(Protocol):
    def load(self) -> bytes | None: ...

    def save(self, data: bytes) -> None: ...

    def clear(self) -> None: ...


class MemoryBlobStore:
    """In-process store, handy for tests and embedding."""

    def __init__(self, data: bytes | None = None) -> None:
        self._data = data
        self.saves = 0

    def load(self) -> bytes | None:
        return self._data

    def save(self, data: bytes) -> None:
        self._data = bytes(data)
        self.saves += 1

    def clear(self) -> None:
        self._data = None


class FileBlobStore:
    """Single-file store.

    Writes go to a ``.tmp`` sibling first and are moved into place with
    ``os.replace``, so a failed write leaves the previous content intact.
    """

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self.path = Path(path)

    def load(self) -> bytes | None:
        try:
            return self.path.read_bytes()
        except FileNotFoundError:
            return None

    def save(self, data: bytes) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            tmp.write_bytes(data)
            os.replace(tmp, self.path)
        except Exception:
            with contextlib.suppress(FileNotFoundError):
                tmp.unlink()
            raise

    def clear(self) -> None:
        with contextlib.suppress(FileNotFoundError):
            self.path.unlink()


__all__ = ["BlobStore", "FileBlobStore", "MemoryBlobStore"]
