"""Serialization of the stored transaction collection.

The on-disk format is a JSON array of camelCase objects (see
:class:`~bank_import.models.StoredTransaction`). Decoding never raises:

- a missing, empty, or corrupt blob decodes to ``[]``;
- entries that are not JSON objects are skipped;
- every other entry is rebuilt with best-effort defaults, so records written
  by older versions (missing ``detectedCategory``, string amounts, German
  dates, ...) keep loading.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import TypeAdapter, ValidationError

from .builder import IdFactory, new_id
from .categorize import categorize
from .config import DEFAULT_CURRENCY
from .logging_setup import get_logger
from .models import (
    CATEGORY_SOURCES,
    PLACEHOLDER_DESCRIPTION,
    StoredTransaction,
    Transaction,
)
from .normalizers import clean_iban, clean_text, to_iso_date

_logger = get_logger("bank_import.codec")

_LIST_ADAPTER: TypeAdapter[list[StoredTransaction]] = TypeAdapter(list[StoredTransaction])


def encode_transactions(transactions: Iterable[Transaction]) -> bytes:
    """Encode the full collection, including each record's raw column map."""

    items = [StoredTransaction.from_transaction(tx) for tx in transactions]
    return _LIST_ADAPTER.dump_json(items, by_alias=True)


def reconstruct(
    stored: StoredTransaction,
    *,
    default_currency: str = DEFAULT_CURRENCY,
    id_factory: IdFactory = new_id,
) -> Transaction:
    """Rebuild a :class:`Transaction` from a permissively validated record."""

    description = clean_text(stored.description) or PLACEHOLDER_DESCRIPTION
    payee = clean_text(stored.payee)
    amount = stored.amount
    bank_category = clean_text(stored.bank_category)
    detected = clean_text(stored.detected_category) or categorize(description, payee, amount)
    category = clean_text(stored.category) or bank_category or detected
    source = stored.category_source
    if source not in CATEGORY_SOURCES:
        source = "bank" if bank_category else "detected"
    account = clean_text(stored.account)
    info = clean_text(stored.info)

    return Transaction(
        id=stored.id or id_factory(),
        booking_date=to_iso_date(stored.booking_date) or stored.booking_date,
        value_date=to_iso_date(stored.value_date) or clean_text(stored.value_date),
        description=description,
        payee=payee,
        amount=amount,
        currency=clean_text(stored.currency) or default_currency,
        category=category,
        detected_category=detected,
        category_source=source,  # type: ignore[arg-type]
        bank_category=bank_category,
        account=account if account != description else None,
        info=info if info != description else None,
        iban=clean_iban(stored.iban),
        bic=clean_text(stored.bic),
        raw=stored.raw,
    )


def decode_transactions(
    data: bytes | str | None,
    *,
    default_currency: str = DEFAULT_CURRENCY,
    id_factory: IdFactory = new_id,
) -> list[Transaction]:
    """Decode a stored blob into transactions without ever raising."""

    if not data:
        return []
    try:
        parsed: Any = json.loads(data)
    except ValueError as e:  # includes JSONDecodeError and the int digit limit
        _logger.warning("stored transactions are not valid JSON; starting empty: %s", e)
        return []
    if not isinstance(parsed, list):
        _logger.warning(
            "stored transactions are not a list (got %s); starting empty",
            type(parsed).__name__,
        )
        return []

    out: list[Transaction] = []
    seen_ids: set[str] = set()
    skipped = 0
    for entry in parsed:
        if not isinstance(entry, Mapping):
            skipped += 1
            continue
        try:
            stored = StoredTransaction.model_validate(entry)
        except ValidationError as e:
            _logger.warning("skipping unreadable stored entry: %s", e)
            skipped += 1
            continue
        # Ids must stay unique within one collection.
        if stored.id and stored.id in seen_ids:
            stored = stored.model_copy(update={"id": None})
        tx = reconstruct(stored, default_currency=default_currency, id_factory=id_factory)
        seen_ids.add(tx.id)
        out.append(tx)

    if skipped:
        _logger.warning("skipped %d stored entr(y/ies) that are not row-shaped", skipped)
    return out


__all__ = ["decode_transactions", "encode_transactions", "reconstruct"]
