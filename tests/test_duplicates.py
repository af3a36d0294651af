from bank_import.duplicates import dedup_key, merge_transactions, sort_by_booking_date
from bank_import.models import Transaction


def _tx(id: str, booking_date: str, amount: float, description: str = "REWE", **kw) -> Transaction:
    return Transaction(
        id=id,
        booking_date=booking_date,
        description=description,
        amount=amount,
        currency="EUR",
        category=kw.pop("category", "Groceries"),
        detected_category="Groceries",
        category_source=kw.pop("category_source", "detected"),
        **kw,
    )


def test_dedup_key_normalizes_text_and_amount():
    a = _tx("a", "2024-01-02", -10.5, "  Rewe   Markt ", payee="Rewe GmbH")
    b = _tx("b", "2024-01-02", -10.50000001, "REWE MARKT", payee="rewe gmbh")
    assert dedup_key(a) == dedup_key(b)
    assert dedup_key(a).amount == "-10.50"


def test_dedup_key_distinguishes_dates_amounts_and_payees():
    base = _tx("a", "2024-01-02", -10.0)
    assert dedup_key(base) != dedup_key(_tx("b", "2024-01-03", -10.0))
    assert dedup_key(base) != dedup_key(_tx("c", "2024-01-02", -10.01))
    assert dedup_key(base) != dedup_key(_tx("d", "2024-01-02", -10.0, payee="Someone"))


def test_reimport_of_identical_batch_adds_nothing():
    stored = [_tx("s1", "2024-01-02", -10.0), _tx("s2", "2024-01-01", 100.0, "Gehalt")]
    incoming = [_tx("n1", "2024-01-02", -10.0), _tx("n2", "2024-01-01", 100.0, "Gehalt")]

    result = merge_transactions(stored, incoming)

    assert result.added == 0
    assert result.skipped_duplicates == 2
    assert [t.id for t in result.transactions] == ["s1", "s2"]


def test_stored_record_wins_and_keeps_manual_category():
    stored = [_tx("s1", "2024-01-02", -10.0, category="Household", category_source="manual")]
    result = merge_transactions(stored, [_tx("n1", "2024-01-02", -10.0)])
    (only,) = result.transactions
    assert (only.id, only.category, only.category_source) == ("s1", "Household", "manual")


def test_in_file_duplicates_are_kept_per_occurrence():
    twice = [_tx("n1", "2024-01-02", -3.0, "Kaffee"), _tx("n2", "2024-01-02", -3.0, "Kaffee")]
    first = merge_transactions([], twice)
    assert first.added == 2

    # Each stored copy absorbs one incoming copy; the third is new.
    thrice = [_tx(f"m{i}", "2024-01-02", -3.0, "Kaffee") for i in range(3)]
    again = merge_transactions(first.transactions, thrice)
    assert (again.added, again.skipped_duplicates) == (1, 2)
    assert len(again.transactions) == 3


def test_merge_sorts_newest_first_and_puts_batch_ahead_on_ties():
    stored = [_tx("s1", "2024-01-05", -1.0, "A"), _tx("s2", "2023-12-31", -1.0, "B")]
    incoming = [_tx("n1", "2024-01-05", -2.0, "C"), _tx("n2", "2024-02-01", -2.0, "D")]

    merged = merge_transactions(stored, incoming).transactions

    assert [t.id for t in merged] == ["n2", "n1", "s1", "s2"]
    dates = [t.booking_date for t in merged]
    assert dates == sorted(dates, reverse=True)


def test_degraded_dates_sort_by_literal_text():
    txs = [_tx("a", "2024-01-01", -1.0), _tx("b", "Anfang Mai", -1.0), _tx("c", "2025-01-01", -1.0)]
    assert [t.id for t in sort_by_booking_date(txs)] == ["b", "c", "a"]
