"""Environment-driven settings for imports and storage.

Values are resolved lazily by :meth:`ImportSettings.from_env` so that a
``.env`` file loaded by the CLI (``python-dotenv``) is honored. Nothing is
read at import time.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

# Fixed logical key for the persisted transaction collection.
STORAGE_KEY: str = "finance-app/transactions"

DEFAULT_CURRENCY: str = "EUR"


def _env_str(name: str) -> str | None:
    val = os.getenv(name)
    if val is None or not val.strip():
        return None
    return val.strip()


def _default_store_path() -> Path:
    """Return the file store location.

    Default: ``./.bank_import/transactions.json`` under the current working
    directory. Override: ``BANK_IMPORT_STORE_PATH``.
    """

    root = _env_str("BANK_IMPORT_STORE_PATH")
    if root:
        return Path(root).expanduser().resolve()
    return (Path.cwd() / ".bank_import" / "transactions.json").resolve()


@dataclass(frozen=True, slots=True)
class ImportSettings:
    default_currency: str = DEFAULT_CURRENCY
    store_path: Path | None = None
    database_url: str | None = None
    storage_key: str = STORAGE_KEY

    @classmethod
    def from_env(
        cls,
        *,
        default_currency: str | None = None,
        store_path: str | os.PathLike[str] | None = None,
        database_url: str | None = None,
    ) -> ImportSettings:
        """Resolve settings; explicit arguments win over the environment."""

        currency = (
            default_currency
            or _env_str("BANK_IMPORT_DEFAULT_CURRENCY")
            or DEFAULT_CURRENCY
        )
        return cls(
            default_currency=currency.strip().upper(),
            store_path=Path(store_path).expanduser().resolve()
            if store_path is not None
            else _default_store_path(),
            database_url=database_url or _env_str("DATABASE_URL"),
        )


__all__ = ["ImportSettings", "STORAGE_KEY", "DEFAULT_CURRENCY"]
