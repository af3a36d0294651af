"""CSV text → :class:`~bank_import.models.Transaction` records.

Pipeline per import: tokenize → locate header → resolve logical columns
(once) → normalize each row → categorize → build. Any fatal error aborts the
whole batch; nothing is returned partially.
"""

from __future__ import annotations

import uuid
from collections.abc import Callable, Sequence
from typing import TypeAlias

from .categorize import categorize
from .config import DEFAULT_CURRENCY
from .errors import AmountParseError, EmptyFileError
from .headers import normalize_header, resolve_header
from .logging_setup import get_logger
from .models import PLACEHOLDER_DESCRIPTION, HeaderMap, Transaction
from .normalizers import clean_iban, clean_text, is_iso_date, parse_amount, to_iso_date
from .tokenizer import DelimiterSniffer, Row, is_blank_row, tokenize

IdFactory: TypeAlias = Callable[[], str]

_logger = get_logger("bank_import.builder")


def new_id() -> str:
    return uuid.uuid4().hex


def _raw_row(header: Sequence[str], row: Sequence[str]) -> dict[str, str | None]:
    # Every header column is kept; short rows map the tail to None.
    raw: dict[str, str | None] = {}
    for idx, key in enumerate(header):
        raw[key] = row[idx] if idx < len(row) else None
    return raw


def build_transaction(
    row: Row,
    *,
    header: Sequence[str],
    hmap: HeaderMap,
    row_number: int,
    default_currency: str = DEFAULT_CURRENCY,
    id_factory: IdFactory = new_id,
) -> Transaction:
    """Build one transaction from a tokenized data row.

    ``row_number`` is 1-based and includes the header line; it is only used
    for error messages.
    """

    booking_raw = (hmap.cell(row, "booking_date") or "").strip()
    value_raw = (hmap.cell(row, "value_date") or "").strip()
    amount_raw = hmap.cell(row, "amount") or ""

    amount = parse_amount(amount_raw)
    if amount is None:
        raise AmountParseError(row_number, amount_raw)

    description_col = clean_text(hmap.cell(row, "description"))
    payee = clean_text(hmap.cell(row, "payee"))
    info = clean_text(hmap.cell(row, "info"))
    account = clean_text(hmap.cell(row, "account"))
    bank_category = clean_text(hmap.cell(row, "bank_category"))

    description = description_col or payee or info or PLACEHOLDER_DESCRIPTION
    detected = categorize(description, payee, amount)

    return Transaction(
        id=id_factory(),
        booking_date=to_iso_date(booking_raw) or booking_raw,
        value_date=to_iso_date(value_raw) or (value_raw or None),
        description=description,
        payee=payee,
        amount=amount,
        currency=clean_text(hmap.cell(row, "currency")) or default_currency,
        category=bank_category or detected,
        detected_category=detected,
        category_source="bank" if bank_category else "detected",
        bank_category=bank_category,
        # Auxiliary text identical to the description adds nothing.
        account=account if account != description else None,
        info=info if info != description else None,
        iban=clean_iban(hmap.cell(row, "iban")),
        bic=clean_text(hmap.cell(row, "bic")),
        raw=_raw_row(header, row),
    )


def parse_transactions(
    text: str,
    *,
    default_currency: str = DEFAULT_CURRENCY,
    sniffer: DelimiterSniffer | None = None,
    id_factory: IdFactory = new_id,
) -> list[Transaction]:
    """Parse a full CSV export into transactions.

    Raises
    ------
    EmptyFileError
        The text holds no non-blank rows.
    MissingColumnsError
        Booking date or amount cannot be located in the header row.
    AmountParseError
        Any data row carries an unreadable amount.
    """

    rows = tokenize(text, sniffer=sniffer)
    while rows and is_blank_row(rows[0]):
        rows.pop(0)
    if not rows:
        raise EmptyFileError()

    header = [normalize_header(h) for h in rows[0]]
    hmap = resolve_header(header)

    out: list[Transaction] = []
    degraded = 0
    for offset, row in enumerate(rows[1:]):
        tx = build_transaction(
            row,
            header=header,
            hmap=hmap,
            row_number=offset + 2,
            default_currency=default_currency,
            id_factory=id_factory,
        )
        if not is_iso_date(tx.booking_date):
            degraded += 1
        out.append(tx)

    if degraded:
        _logger.warning("%d booking date(s) could not be parsed and were kept as-is", degraded)
    _logger.debug("built %d transaction(s) from %d data row(s)", len(out), len(rows) - 1)
    return out


__all__ = ["IdFactory", "build_transaction", "new_id", "parse_transactions"]
