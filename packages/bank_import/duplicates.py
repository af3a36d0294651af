"""Duplicate detection and merging of imported batches.

Public surface:
- ``DedupKey`` / ``dedup_key``: content identity of a transaction (booking
  date, amount in cents, normalized description and payee). Computed once
  per transaction by the merger.
- ``merge_transactions``: put a new batch ahead of the stored collection,
  drop content-equivalent duplicates, and sort by booking date descending.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import NamedTuple

from .logging_setup import get_logger
from .models import Transaction
from .normalizers import format_amount

_logger = get_logger("bank_import.duplicates")


class DedupKey(NamedTuple):
    booking_date: str
    amount: str
    description: str
    payee: str


def _norm_text(value: str | None) -> str:
    if value is None:
        return ""
    # Collapse internal whitespace and compare case-insensitively.
    return " ".join(value.split()).casefold()


def dedup_key(tx: Transaction) -> DedupKey:
    return DedupKey(
        booking_date=tx.booking_date.strip(),
        amount=format_amount(tx.amount),
        description=_norm_text(tx.description),
        payee=_norm_text(tx.payee),
    )


def sort_by_booking_date(transactions: Iterable[Transaction]) -> list[Transaction]:
    """Newest first by plain string comparison of ``booking_date``.

    Correct for ``YYYY-MM-DD`` values; degraded (unparsed) dates sort by their
    literal text. The sort is stable, so equal dates keep their input order.
    """

    return sorted(transactions, key=lambda tx: tx.booking_date, reverse=True)


@dataclass(frozen=True, slots=True)
class MergeResult:
    transactions: list[Transaction]
    added: int
    skipped_duplicates: int


def merge_transactions(
    existing: Sequence[Transaction],
    incoming: Sequence[Transaction],
) -> MergeResult:
    """Merge ``incoming`` into ``existing`` without double counting.

    Matching is per occurrence: each stored record can absorb at most one
    incoming duplicate. Re-importing a file is therefore a no-op, while a
    file that legitimately lists the same purchase twice keeps both rows.
    Stored records win conflicts (their id and category override survive).
    """

    available: Counter[DedupKey] = Counter(dedup_key(tx) for tx in existing)

    accepted: list[Transaction] = []
    skipped = 0
    for tx in incoming:
        key = dedup_key(tx)
        if available[key] > 0:
            available[key] -= 1
            skipped += 1
            continue
        accepted.append(tx)

    merged = sort_by_booking_date([*accepted, *existing])
    _logger.info(
        "merged batch: %d added, %d duplicate(s) skipped, %d total",
        len(accepted),
        skipped,
        len(merged),
    )
    return MergeResult(transactions=merged, added=len(accepted), skipped_duplicates=skipped)


__all__ = [
    "DedupKey",
    "MergeResult",
    "dedup_key",
    "merge_transactions",
    "sort_by_booking_date",
]
