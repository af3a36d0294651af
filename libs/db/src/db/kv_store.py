"""SQL-backed blob store: one ``kv_entries`` row per logical key.

Implements the ``load``/``save``/``clear`` protocol expected by
``bank_import.store.BlobStore``. Each call runs in its own short transaction,
so a ``save`` either replaces the value completely or not at all.
"""

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import delete, select

from .client import init_schema, session_scope
from .models.kv import KvEntry


class SqlBlobStore:
    def __init__(self, key: str, *, database_url: str | None = None, create: bool = True) -> None:
        self.key = key
        self.database_url = database_url
        if create:
            init_schema(database_url=database_url)

    def load(self) -> bytes | None:
        with session_scope(database_url=self.database_url) as session:
            return session.execute(
                select(KvEntry.value).where(KvEntry.key == self.key)
            ).scalar_one_or_none()

    def save(self, data: bytes) -> None:
        with session_scope(database_url=self.database_url) as session:
            row = session.get(KvEntry, self.key)
            if row is None:
                session.add(KvEntry(key=self.key, value=bytes(data)))
            else:
                row.value = bytes(data)
                row.updated_at = datetime.now(UTC)

    def clear(self) -> None:
        with session_scope(database_url=self.database_url) as session:
            session.execute(delete(KvEntry).where(KvEntry.key == self.key))


__all__ = ["SqlBlobStore"]
