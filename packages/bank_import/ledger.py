"""Import orchestration over a persisted transaction collection.

:class:`TransactionLedger` owns the stored collection. Each import goes
through three steps, and the first two never touch storage:

1) parse the CSV into a complete batch (any fatal error aborts here);
2) merge the batch with the current collection (dedup + sort);
3) encode and ``save`` once; the in-memory view is replaced only after the
   save succeeds.

Imports are serialized by tickets: starting an import supersedes any import
that has not committed yet, and a superseded import is refused at commit
time with :class:`~bank_import.errors.ImportSupersededError`.
"""

from __future__ import annotations

import asyncio
import os
from collections.abc import Sequence
from pathlib import Path

from .builder import parse_transactions
from .codec import decode_transactions, encode_transactions
from .config import DEFAULT_CURRENCY, ImportSettings
from .duplicates import MergeResult, merge_transactions
from .errors import ImportSupersededError
from .logging_setup import get_logger
from .models import Transaction
from .normalizers import decode_bytes
from .store import BlobStore, FileBlobStore
from .tokenizer import DelimiterSniffer

_logger = get_logger("bank_import.ledger")


class TransactionLedger:
    def __init__(
        self,
        store: BlobStore,
        *,
        default_currency: str = DEFAULT_CURRENCY,
        sniffer: DelimiterSniffer | None = None,
    ) -> None:
        self.store = store
        self.default_currency = default_currency
        self.sniffer = sniffer
        self._transactions: tuple[Transaction, ...] | None = None
        self._ticket = 0

    # ---- Reading -------------------------------------------------------------

    @property
    def transactions(self) -> tuple[Transaction, ...]:
        if self._transactions is None:
            self.reload()
        assert self._transactions is not None
        return self._transactions

    def reload(self) -> tuple[Transaction, ...]:
        """Re-read the store; corrupt content recovers to an empty collection."""

        self._transactions = tuple(
            decode_transactions(self.store.load(), default_currency=self.default_currency)
        )
        return self._transactions

    # ---- Imports -------------------------------------------------------------

    def begin_import(self) -> int:
        """Reserve a ticket; any earlier uncommitted import becomes stale."""

        self._ticket += 1
        return self._ticket

    def import_text(self, text: str, *, ticket: int | None = None) -> MergeResult:
        if ticket is None:
            ticket = self.begin_import()
        batch = parse_transactions(
            text, default_currency=self.default_currency, sniffer=self.sniffer
        )
        return self._commit(batch, ticket=ticket)

    def import_bytes(self, data: bytes, *, ticket: int | None = None) -> MergeResult:
        return self.import_text(decode_bytes(data), ticket=ticket)

    def import_path(self, path: str | os.PathLike[str]) -> MergeResult:
        ticket = self.begin_import()
        return self.import_bytes(Path(path).read_bytes(), ticket=ticket)

    async def import_path_async(self, path: str | os.PathLike[str]) -> MergeResult:
        """Read ``path`` off the event loop, then normalize synchronously.

        Starting another import while the read is pending supersedes this one.
        """

        ticket = self.begin_import()
        data = await asyncio.to_thread(Path(path).read_bytes)
        return self.import_bytes(data, ticket=ticket)

    def _commit(self, batch: Sequence[Transaction], *, ticket: int) -> MergeResult:
        if ticket != self._ticket:
            _logger.info("dropping import #%d; superseded by #%d", ticket, self._ticket)
            raise ImportSupersededError(ticket, self._ticket)
        result = merge_transactions(self.transactions, batch)
        self._replace(result.transactions)
        return result

    # ---- Edits -------------------------------------------------------------

    def override_category(self, tx_id: str, category: str) -> Transaction:
        """Replace the effective category of one stored transaction."""

        current = self.transactions
        for pos, tx in enumerate(current):
            if tx.id == tx_id:
                updated = tx.with_category(category)
                self._replace([*current[:pos], updated, *current[pos + 1 :]])
                return updated
        raise KeyError(tx_id)

    def clear(self) -> None:
        """Remove every stored transaction."""

        self.store.clear()
        self._transactions = ()
        _logger.info("cleared stored transactions")

    def _replace(self, transactions: Sequence[Transaction]) -> None:
        # Save first; keep the old view when storage fails.
        self.store.save(encode_transactions(transactions))
        self._transactions = tuple(transactions)


def open_store(settings: ImportSettings) -> BlobStore:
    """Pick the SQL store when a database URL is configured, else the file store."""

    if settings.database_url:
        from db.kv_store import SqlBlobStore  # local import; only SQL storage needs it

        return SqlBlobStore(settings.storage_key, database_url=settings.database_url)
    if settings.store_path is None:
        raise ValueError("ImportSettings.store_path is required without a database URL")
    return FileBlobStore(settings.store_path)


def open_ledger(settings: ImportSettings | None = None) -> TransactionLedger:
    settings = settings or ImportSettings.from_env()
    return TransactionLedger(open_store(settings), default_currency=settings.default_currency)


__all__ = ["TransactionLedger", "open_ledger", "open_store"]
