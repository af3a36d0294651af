"""Locale-aware field normalization for German-style bank exports.

- Dates: ``D.M.YYYY`` / ``DD.MM.YY`` → ``YYYY-MM-DD``.
- Amounts: ``1.234,56``, ``-10,50 €``, ``5,00-``, ``−3,20`` → ``float``.
- Text: trimmed, empty → ``None``.

Date and amount helpers return ``None`` for unparseable input and leave the
fallback policy to the caller.
"""

from __future__ import annotations

import math
import re
from datetime import date
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

_DATE_RE = re.compile(r"^(\d{1,2})\.(\d{1,2})\.(\d{4}|\d{2})$")
_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_WS_RE = re.compile(r"\s+")

_CURRENCY_MARKERS: tuple[str, ...] = ("€", "EUR")
_UNICODE_MINUS = "\u2212"


# ---------------------------------------------------------------------------
# Dates
# ---------------------------------------------------------------------------


def to_iso_date(value: str | None) -> str | None:
    """Return ``YYYY-MM-DD`` for a ``day.month.year`` string, else ``None``.

    Two-digit years map to ``2000 + YY``. Impossible calendar dates such as
    ``31.02.2024`` are treated as unparseable rather than rolled over.
    """

    if value is None:
        return None
    m = _DATE_RE.match(value.strip())
    if not m:
        return None
    day, month, year = (int(g) for g in m.groups())
    if year < 100:
        year += 2000
    try:
        return date(year, month, day).isoformat()
    except ValueError:
        return None


def is_iso_date(value: str | None) -> bool:
    return bool(value) and bool(_ISO_DATE_RE.match(value.strip()))


def normalize_date(value: str | None) -> str | None:
    """Accept an already-normalized ISO date or a ``day.month.year`` string."""

    if value is None:
        return None
    s = value.strip()
    if is_iso_date(s):
        try:
            return date.fromisoformat(s).isoformat()
        except ValueError:
            return None
    return to_iso_date(s)


# ---------------------------------------------------------------------------
# Amounts
# ---------------------------------------------------------------------------


def _to_decimal(raw: str | None) -> Decimal | None:
    if raw is None:
        return None
    s = _WS_RE.sub("", raw)
    for marker in _CURRENCY_MARKERS:
        s = s.replace(marker, "")
    # Grouping dots go first, then the decimal comma becomes a point.
    s = s.replace(".", "").replace(",", ".").replace(_UNICODE_MINUS, "-")

    trailing_minus = s.endswith("-")
    if trailing_minus:
        s = s[:-1]
    # Leftover separator from inputs like "5," or "5,-".
    if s.endswith("."):
        s = s[:-1]
    if not s:
        return None

    try:
        d = Decimal(s)
    except InvalidOperation:
        return None
    if not d.is_finite():
        return None
    # A trailing minus wins over any leading sign.
    return -abs(d) if trailing_minus else d


def parse_amount(raw: str | None) -> float | None:
    """Parse a locale-formatted amount into a signed ``float``.

    Returns ``None`` when the value is empty or not a finite number.
    """

    d = _to_decimal(raw)
    if d is None:
        return None
    value = float(d)
    # Finite decimals beyond the float range ("1e400") overflow to inf.
    return value if math.isfinite(value) else None


def format_amount(amount: float) -> str:
    """Two decimals with an ASCII point and leading minus."""

    q = Decimal(repr(amount)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    if q.is_zero():
        q = abs(q)
    return f"{q:.2f}"


# ---------------------------------------------------------------------------
# Text
# ---------------------------------------------------------------------------


def clean_text(value: str | None) -> str | None:
    if value is None:
        return None
    s = value.strip()
    return s if s else None


def clean_iban(value: str | None) -> str | None:
    if value is None:
        return None
    s = _WS_RE.sub("", value)
    return s if s else None


def decode_bytes(data: bytes) -> str:
    """Decode an export as UTF-8, falling back to Windows-1252.

    A leading BOM is kept; header normalization removes it.
    """

    try:
        return data.decode("utf-8")
    except UnicodeDecodeError:
        return data.decode("cp1252", errors="replace")


__all__ = [
    "clean_iban",
    "clean_text",
    "decode_bytes",
    "format_amount",
    "is_iso_date",
    "normalize_date",
    "parse_amount",
    "to_iso_date",
]
