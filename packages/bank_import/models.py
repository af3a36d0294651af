"""Data models for ``bank_import``.

- :class:`Transaction` is the immutable, normalized record produced by the
  builder and reconstructed by the store codec.
- :class:`HeaderMap` records which column holds each logical field.
- :class:`StoredTransaction` is the permissive on-disk DTO used by the codec.
"""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field, fields, replace
from types import MappingProxyType
from typing import Any, Literal, TypeAlias

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .normalizers import parse_amount

# ---------------------------------------------------------------------------
# Core record
# ---------------------------------------------------------------------------

CategorySource: TypeAlias = Literal["bank", "detected", "manual"]

CATEGORY_SOURCES: frozenset[str] = frozenset({"bank", "detected", "manual"})

# Stand-in for rows that carry no descriptive text at all.
PLACEHOLDER_DESCRIPTION: str = "—"


@dataclass(frozen=True, slots=True)
class Transaction:
    """A single normalized transaction.

    ``category`` is the effective category used for aggregation. Both
    ``bank_category`` (as supplied by the institution) and
    ``detected_category`` (heuristic) are kept so the choice can be
    re-derived later. ``raw`` holds the complete source row keyed by the
    normalized header, including columns no logical field was mapped to.

    ``booking_date`` is ``YYYY-MM-DD`` when the source date could be parsed;
    otherwise it is the trimmed source string (a degraded value).
    """

    id: str
    booking_date: str
    description: str
    amount: float
    currency: str
    category: str
    detected_category: str
    category_source: CategorySource
    value_date: str | None = None
    payee: str | None = None
    bank_category: str | None = None
    account: str | None = None
    info: str | None = None
    iban: str | None = None
    bic: str | None = None
    raw: Mapping[str, str | None] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if isinstance(self.amount, bool) or not math.isfinite(self.amount):
            raise ValueError(f"Transaction.amount must be a finite number, got {self.amount!r}")
        if not self.category.strip():
            raise ValueError("Transaction.category must be non-empty")
        if not self.description:
            raise ValueError("Transaction.description must be non-empty")
        if self.category_source not in CATEGORY_SOURCES:
            raise ValueError(f"Unsupported category_source: {self.category_source!r}")
        # Freeze the raw row so the record cannot be mutated through it.
        object.__setattr__(self, "amount", float(self.amount))
        object.__setattr__(self, "raw", MappingProxyType(dict(self.raw)))

    @property
    def is_income(self) -> bool:
        return self.amount >= 0

    def with_category(self, category: str) -> Transaction:
        """Return a copy with a manually chosen effective category."""

        value = category.strip()
        if not value:
            raise ValueError("category override must be non-empty")
        return replace(self, category=value, category_source="manual")

    def as_dict(self) -> dict[str, Any]:
        out = {f.name: getattr(self, f.name) for f in fields(self)}
        out["raw"] = dict(self.raw)
        return out


# ---------------------------------------------------------------------------
# Header resolution result
# ---------------------------------------------------------------------------

ABSENT: int = -1


@dataclass(frozen=True, slots=True)
class HeaderMap:
    """Column index per logical field, ``ABSENT`` when unmatched."""

    booking_date: int = ABSENT
    value_date: int = ABSENT
    description: int = ABSENT
    payee: int = ABSENT
    amount: int = ABSENT
    currency: int = ABSENT
    account: int = ABSENT
    info: int = ABSENT
    iban: int = ABSENT
    bic: int = ABSENT
    bank_category: int = ABSENT

    REQUIRED = ("booking_date", "amount")

    def missing_required(self) -> list[str]:
        return [name for name in self.REQUIRED if getattr(self, name) == ABSENT]

    def cell(self, row: Sequence[str], name: str) -> str | None:
        """Return the raw cell for ``name`` or ``None`` when absent/short row."""

        idx = getattr(self, name)
        if idx == ABSENT or idx >= len(row):
            return None
        return row[idx]


# ``REQUIRED`` is a plain class attribute, not a dataclass field.
LOGICAL_FIELDS: tuple[str, ...] = tuple(f.name for f in fields(HeaderMap))


# ---------------------------------------------------------------------------
# Persisted DTO
# ---------------------------------------------------------------------------

_TEXT_FIELDS = (
    "id",
    "description",
    "payee",
    "currency",
    "category",
    "detected_category",
    "category_source",
    "bank_category",
    "account",
    "info",
    "iban",
    "bic",
)


class StoredTransaction(BaseModel):
    """Permissive model of one persisted record.

    Keys are camelCase on disk (``bookingDate``) and accepted either way on
    input. Every field has a default and every validator coerces instead of
    rejecting, so legacy or partially-shaped records always load. Semantic
    reconstruction (date normalization, category derivation) happens in
    :mod:`bank_import.codec`.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: str | None = None
    booking_date: str = Field("", alias="bookingDate")
    value_date: str | None = Field(None, alias="valueDate")
    description: str | None = None
    payee: str | None = None
    amount: float = 0.0
    currency: str | None = None
    category: str | None = None
    detected_category: str | None = Field(None, alias="detectedCategory")
    category_source: str | None = Field(None, alias="categorySource")
    bank_category: str | None = Field(None, alias="bankCategory")
    account: str | None = None
    info: str | None = None
    iban: str | None = None
    bic: str | None = None
    raw: dict[str, str | None] = Field(default_factory=dict)

    @field_validator(*_TEXT_FIELDS, mode="before")
    @classmethod
    def _text_or_none(cls, v: Any) -> str | None:
        return v if isinstance(v, str) else None

    @field_validator("booking_date", mode="before")
    @classmethod
    def _booking_as_text(cls, v: Any) -> str:
        if v is None:
            return ""
        return v if isinstance(v, str) else str(v)

    @field_validator("value_date", mode="before")
    @classmethod
    def _value_as_text(cls, v: Any) -> str | None:
        if v is None:
            return None
        return v if isinstance(v, str) else str(v)

    @field_validator("amount", mode="before")
    @classmethod
    def _amount_finite(cls, v: Any) -> float:
        if isinstance(v, bool):
            return 0.0
        if isinstance(v, int | float):
            try:
                num = float(v)
            except OverflowError:
                return 0.0
        elif isinstance(v, str):
            try:
                num = float(v.strip()) if v.strip() else 0.0
            except ValueError:
                # Older records may hold the bank's own notation ("-10,50").
                parsed = parse_amount(v)
                return parsed if parsed is not None else 0.0
        else:
            return 0.0
        return num if math.isfinite(num) else 0.0

    @field_validator("raw", mode="before")
    @classmethod
    def _raw_as_text_map(cls, v: Any) -> dict[str, str | None]:
        if not isinstance(v, Mapping):
            return {}
        out: dict[str, str | None] = {}
        for key, value in v.items():
            if value is None or isinstance(value, str):
                out[str(key)] = value
            else:
                out[str(key)] = str(value)
        return out

    @classmethod
    def from_transaction(cls, tx: Transaction) -> StoredTransaction:
        return cls.model_validate(tx.as_dict())


__all__ = [
    "ABSENT",
    "CATEGORY_SOURCES",
    "CategorySource",
    "HeaderMap",
    "LOGICAL_FIELDS",
    "PLACEHOLDER_DESCRIPTION",
    "StoredTransaction",
    "Transaction",
]
