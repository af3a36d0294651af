"""Pytest configuration for test isolation.

The ledger defaults to a file store under ``./.bank_import`` and the SQL store
keeps a process-wide engine. Both would leak state between tests, so every
test gets its own store path, no inherited ``DATABASE_URL``, and a fresh
engine afterwards.
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Iterator
from pathlib import Path

import pytest

# Make the workspace packages importable without an install.
_ROOT = Path(__file__).resolve().parents[1]
_PATHS = (_ROOT / "packages", _ROOT / "libs" / "db" / "src", _ROOT)
sys.path[:0] = [str(p) for p in _PATHS if str(p) not in sys.path]


@pytest.fixture(autouse=True)
def _isolate_store(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    store = tmp_path / "store" / "transactions.json"
    monkeypatch.setenv("BANK_IMPORT_STORE_PATH", os.fspath(store))
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.delenv("BANK_IMPORT_DEFAULT_CURRENCY", raising=False)
    monkeypatch.delenv("BANK_IMPORT_LOG_LEVEL", raising=False)
    yield
    from db.client import dispose_engine

    dispose_engine()


@pytest.fixture(autouse=True)
def _reset_logging() -> Iterator[None]:
    # The CLI configures the package logger once per process; undo it so
    # caplog keeps seeing records in later tests.
    yield
    logger = logging.getLogger("bank_import")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
