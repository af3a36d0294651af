from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, LargeBinary, String, text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


# ---------------------------
# Key-value blobs: kv_entries
# ---------------------------


class KvEntry(Base):
    __tablename__ = "kv_entries"

    # Logical key, e.g. "finance-app/transactions". One row per key.
    key: Mapped[str] = mapped_column(String, primary_key=True)
    # Opaque payload; the application owns the encoding.
    value: Mapped[bytes] = mapped_column(LargeBinary, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=text("CURRENT_TIMESTAMP")
    )


__all__ = [
    "Base",
    "KvEntry",
]
