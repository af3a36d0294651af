"""Header alias resolution.

Each logical field owns an ordered alias list. Labels are compared
case-insensitively after :func:`normalize_header`; the first column (in
header order) matching any alias of a field wins.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from .errors import MissingColumnsError
from .models import ABSENT, LOGICAL_FIELDS, HeaderMap

# German online-banking exports plus a few English fallbacks.
HEADER_ALIASES: Mapping[str, tuple[str, ...]] = {
    "booking_date": (
        "Buchungstag",
        "Buchungstag (DD.MM.YYYY)",
        "Buchungsdatum",
        "Datum",
        "Booking Date",
        "Date",
    ),
    "value_date": ("Valutadatum", "Wertstellung", "Valuta", "Value Date"),
    "description": (
        "Verwendungszweck",
        "Buchungstext",
        "Text",
        "Beschreibung",
        "Description",
    ),
    "payee": (
        "Beguenstigter/Zahlungspflichtiger",
        "Begünstigter/Zahlungspflichtiger",
        "Empfaenger",
        "Empfänger",
        "Zahlungspflichtiger",
        "Auftraggeber/Empfaenger",
        "Auftraggeber/Empfänger",
        "Name",
        "Payee",
    ),
    "amount": (
        "Betrag",
        "Umsatz in EUR",
        "Betrag (€)",
        "Betrag (EUR)",
        "Umsatz",
        "Betrag EUR",
        "Amount",
    ),
    "currency": ("Waehrung", "Währung", "Currency"),
    "account": ("Auftragskonto", "Account", "Konto"),
    "info": ("Info", "Notiz", "Hinweis", "Notes"),
    "iban": ("Kontonummer/IBAN", "IBAN", "Kontonummer"),
    "bic": ("BIC (SWIFT-Code)", "BIC", "SWIFT", "SWIFT-Code"),
    "bank_category": ("Kategorie", "Kategorie der Bank", "Category"),
}


def normalize_header(label: str) -> str:
    """Strip a leading BOM, turn NBSPs into spaces, and trim."""

    if label.startswith("\ufeff"):
        label = label[1:]
    return label.replace("\u00a0", " ").strip()


def _find_column(header: Sequence[str], aliases: Sequence[str]) -> int:
    wanted = {a.casefold() for a in aliases}
    for idx, label in enumerate(header):
        if normalize_header(label).casefold() in wanted:
            return idx
    return ABSENT


def map_header(
    header: Sequence[str],
    aliases: Mapping[str, Sequence[str]] = HEADER_ALIASES,
) -> HeaderMap:
    """Map each logical field to a column index (``ABSENT`` when unmatched)."""

    return HeaderMap(
        **{name: _find_column(header, aliases.get(name, ())) for name in LOGICAL_FIELDS}
    )


def resolve_header(
    header: Sequence[str],
    aliases: Mapping[str, Sequence[str]] = HEADER_ALIASES,
) -> HeaderMap:
    """Like :func:`map_header` but raise when a mandatory field is missing."""

    hmap = map_header(header, aliases)
    missing = hmap.missing_required()
    if missing:
        raise MissingColumnsError(missing, [normalize_header(h) for h in header])
    return hmap


__all__ = ["HEADER_ALIASES", "map_header", "normalize_header", "resolve_header"]
