# ruff: noqa: I001
from __future__ import annotations

from pathlib import Path

from db.client import dispose_engine, get_engine, session_scope
from db.kv_store import SqlBlobStore
from db.models.kv import KvEntry

from bank_import.config import STORAGE_KEY, ImportSettings
from bank_import.ledger import TransactionLedger, open_ledger

from tests.helpers.db import bootstrap_sqlite_db, table_names

CSV = "Buchungstag;Betrag;Verwendungszweck\n02.01.2024;-5,00;REWE\n01.01.2024;100,00;Gehalt\n"


def test_bootstrap_creates_kv_table(tmp_path: Path):
    db_url = bootstrap_sqlite_db(tmp_path / "kv.db")
    assert "kv_entries" in table_names(db_url)


def test_blob_round_trip_and_overwrite(tmp_path: Path):
    db_url = bootstrap_sqlite_db(tmp_path / "kv.db")
    store = SqlBlobStore("k", database_url=db_url)

    assert store.load() is None
    store.save(b"one")
    store.save(b"two")
    assert store.load() == b"two"

    with session_scope(database_url=db_url) as session:
        row = session.get(KvEntry, "k")
        assert row is not None
        assert row.updated_at is not None

    store.clear()
    assert store.load() is None
    # Clearing an absent key is a no-op.
    store.clear()


def test_keys_are_isolated(tmp_path: Path):
    db_url = bootstrap_sqlite_db(tmp_path / "kv.db")
    SqlBlobStore("a", database_url=db_url).save(b"A")
    assert SqlBlobStore("b", database_url=db_url).load() is None


def test_ledger_on_sql_storage_is_idempotent(tmp_path: Path):
    db_url = bootstrap_sqlite_db(tmp_path / "ledger.db")
    settings = ImportSettings.from_env(database_url=db_url)
    ledger = open_ledger(settings)
    assert isinstance(ledger.store, SqlBlobStore)
    assert ledger.store.key == STORAGE_KEY

    ledger.import_text(CSV)
    again = TransactionLedger(SqlBlobStore(STORAGE_KEY, database_url=db_url)).import_text(CSV)

    assert again.added == 0
    assert [t.description for t in again.transactions] == ["REWE", "Gehalt"]


def test_engines_are_kept_per_database_url(tmp_path: Path):
    first = bootstrap_sqlite_db(tmp_path / "one.db")
    second = bootstrap_sqlite_db(tmp_path / "two.db")

    SqlBlobStore("k", database_url=first).save(b"1")
    SqlBlobStore("k", database_url=second).save(b"2")
    assert get_engine(database_url=first) is not get_engine(database_url=second)

    dispose_engine(database_url=first)
    assert SqlBlobStore("k", database_url=first, create=False).load() == b"1"
    assert SqlBlobStore("k", database_url=second, create=False).load() == b"2"
