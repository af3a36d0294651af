import itertools
import logging

import pytest

from bank_import.builder import build_transaction, parse_transactions
from bank_import.errors import AmountParseError, EmptyFileError, MissingColumnsError
from bank_import.headers import resolve_header
from bank_import.models import PLACEHOLDER_DESCRIPTION


def _ids():
    counter = itertools.count(1)
    return lambda: f"id-{next(counter)}"


def _one(csv_text: str, **kwargs):
    (tx,) = parse_transactions(csv_text, id_factory=_ids(), **kwargs)
    return tx


def test_unparseable_booking_date_is_kept_trimmed_and_logged(caplog):
    with caplog.at_level(logging.WARNING, logger="bank_import"):
        tx = _one("Buchungstag;Betrag\n  Anfang Mai ;-1,00\n")
    assert tx.booking_date == "Anfang Mai"
    assert "1 booking date(s) could not be parsed" in caplog.text


def test_value_date_fallbacks():
    rows = parse_transactions(
        "Buchungstag;Valuta;Betrag\n"
        "01.02.2024;03.02.2024;-1,00\n"
        "01.02.2024;sofort ;-1,00\n"
        "01.02.2024;  ;-1,00\n",
        id_factory=_ids(),
    )
    assert [r.value_date for r in rows] == ["2024-02-03", "sofort", None]


def test_description_falls_back_to_payee_then_info_then_placeholder():
    rows = parse_transactions(
        "Datum;Betrag;Verwendungszweck;Empfänger;Info\n"
        "01.01.2024;-1;Text;Payee;Note\n"
        "01.01.2024;-1;;Payee;Note\n"
        "01.01.2024;-1;;;Note\n"
        "01.01.2024;-1;;;\n",
        id_factory=_ids(),
    )
    assert [r.description for r in rows] == ["Text", "Payee", "Note", PLACEHOLDER_DESCRIPTION]
    # Info that became the description is not repeated.
    assert rows[2].info is None
    assert rows[0].info == "Note"


def test_account_identical_to_description_is_dropped():
    tx = _one("Datum;Betrag;Buchungstext;Auftragskonto\n01.01.2024;-1;Sparkonto;Sparkonto\n")
    assert tx.account is None


def test_bank_category_wins_but_detected_is_kept():
    tx = _one("Datum;Betrag;Text;Kategorie\n01.01.2024;-5,00;REWE;Lebensmittel\n")
    assert tx.category == "Lebensmittel"
    assert tx.category_source == "bank"
    assert tx.detected_category == "Groceries"


def test_unmapped_columns_and_short_rows_are_preserved_in_raw():
    tx = _one("Datum;Betrag;Extra;Noch eins\n01.01.2024;-1;x\n")
    assert dict(tx.raw) == {"Datum": "01.01.2024", "Betrag": "-1", "Extra": "x", "Noch eins": None}


def test_missing_currency_uses_default():
    assert _one("Datum;Betrag\n01.01.2024;-1\n").currency == "EUR"
    assert _one("Datum;Betrag\n01.01.2024;-1\n", default_currency="CHF").currency == "CHF"


@pytest.mark.parametrize("bad", ["zwölf", "1e400", "-9" + "9" * 400 + ",00"])
def test_bad_amount_aborts_with_row_number(bad):
    text = f"Datum;Betrag\n01.01.2024;-1,00\n02.01.2024;{bad}\n"
    with pytest.raises(AmountParseError) as exc_info:
        parse_transactions(text)
    assert exc_info.value.row_number == 3
    assert exc_info.value.raw_value == bad
    assert "row 3" in str(exc_info.value)


def test_empty_amount_cell_is_fatal():
    with pytest.raises(AmountParseError):
        parse_transactions("Datum;Betrag;Text\n01.01.2024;;Hallo\n")


@pytest.mark.parametrize("text", ["", "\n\n", " ; ; \r\n;;\n"])
def test_empty_input_raises(text):
    with pytest.raises(EmptyFileError):
        parse_transactions(text)


def test_header_only_yields_no_rows():
    assert parse_transactions("Datum;Betrag\n") == []


def test_missing_mandatory_column_names_the_field():
    with pytest.raises(MissingColumnsError) as exc_info:
        parse_transactions("Datum;Text\n01.01.2024;Hallo\n")
    assert exc_info.value.missing == ("amount",)


def test_build_transaction_with_prepared_header():
    header = ["Datum", "Betrag", "Text"]
    tx = build_transaction(
        ["5.6.24", "1.000,00", "Bonus"],
        header=header,
        hmap=resolve_header(header),
        row_number=2,
        id_factory=lambda: "fixed",
    )
    assert (tx.id, tx.booking_date, tx.amount, tx.category) == ("fixed", "2024-06-05", 1000.0, "Income")
