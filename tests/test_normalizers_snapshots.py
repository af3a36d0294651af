# ruff: noqa: E501
import itertools
import textwrap

from bank_import import Transaction, parse_transactions


def _dedent(s: str) -> str:
    # Keep internal newlines, but normalize indentation for readability.
    return textwrap.dedent(s).lstrip("\n").rstrip()


def _ids():
    counter = itertools.count(1)
    return lambda: f"tx-{next(counter)}"


def test_giro_export_snapshot_to_transactions():
    csv_text = _dedent(
        """
        Buchungstag;Valutadatum;Beguenstigter/Zahlungspflichtiger;Verwendungszweck;Kontonummer/IBAN;BIC (SWIFT-Code);Betrag;Waehrung;Kategorie;Mandatsreferenz
        02.01.2024;02.01.2024;REWE Markt GmbH;REWE SAGT DANKE 1234;DE89 3704 0044 0532 0130 00;COBADEFFXXX;-23,45;EUR;;MREF1
        01.01.24;;Arbeitgeber AG;Gehalt Januar;;;"2.500,00";EUR;Gehalt;
        15.01.2024;16.01.2024;Stadtwerke;"Abschlag Strom; Januar";;;"85,00-";;;
        """
    )

    rows = parse_transactions(csv_text, id_factory=_ids())
    assert len(rows) == 3

    expected = [
        Transaction(
            id="tx-1",
            booking_date="2024-01-02",
            value_date="2024-01-02",
            description="REWE SAGT DANKE 1234",
            payee="REWE Markt GmbH",
            amount=-23.45,
            currency="EUR",
            category="Groceries",
            detected_category="Groceries",
            category_source="detected",
            iban="DE89370400440532013000",
            bic="COBADEFFXXX",
            raw={
                "Buchungstag": "02.01.2024",
                "Valutadatum": "02.01.2024",
                "Beguenstigter/Zahlungspflichtiger": "REWE Markt GmbH",
                "Verwendungszweck": "REWE SAGT DANKE 1234",
                "Kontonummer/IBAN": "DE89 3704 0044 0532 0130 00",
                "BIC (SWIFT-Code)": "COBADEFFXXX",
                "Betrag": "-23,45",
                "Waehrung": "EUR",
                "Kategorie": "",
                "Mandatsreferenz": "MREF1",
            },
        ),
        Transaction(
            id="tx-2",
            booking_date="2024-01-01",
            value_date=None,
            description="Gehalt Januar",
            payee="Arbeitgeber AG",
            amount=2500.0,
            currency="EUR",
            category="Gehalt",
            detected_category="Income",
            category_source="bank",
            bank_category="Gehalt",
            raw={
                "Buchungstag": "01.01.24",
                "Valutadatum": "",
                "Beguenstigter/Zahlungspflichtiger": "Arbeitgeber AG",
                "Verwendungszweck": "Gehalt Januar",
                "Kontonummer/IBAN": "",
                "BIC (SWIFT-Code)": "",
                "Betrag": "2.500,00",
                "Waehrung": "EUR",
                "Kategorie": "Gehalt",
                "Mandatsreferenz": "",
            },
        ),
        Transaction(
            id="tx-3",
            booking_date="2024-01-15",
            value_date="2024-01-16",
            description="Abschlag Strom; Januar",
            payee="Stadtwerke",
            amount=-85.0,
            currency="EUR",
            category="Utilities",
            detected_category="Utilities",
            category_source="detected",
            raw={
                "Buchungstag": "15.01.2024",
                "Valutadatum": "16.01.2024",
                "Beguenstigter/Zahlungspflichtiger": "Stadtwerke",
                "Verwendungszweck": "Abschlag Strom; Januar",
                "Kontonummer/IBAN": "",
                "BIC (SWIFT-Code)": "",
                "Betrag": "85,00-",
                "Waehrung": "",
                "Kategorie": "",
                "Mandatsreferenz": "",
            },
        ),
    ]

    assert [r.as_dict() for r in rows] == [e.as_dict() for e in expected]


def test_english_comma_export_with_bom_and_crlf():
    csv_text = "\ufeffDate,Description,Amount,Currency\r\n31.12.2023,Netflix,\"-12,99\",USD\r\n"

    (tx,) = parse_transactions(csv_text, id_factory=_ids())

    assert tx.booking_date == "2023-12-31"
    assert tx.description == "Netflix"
    assert tx.amount == -12.99
    assert tx.currency == "USD"
    assert tx.category == "Subscriptions"
    assert tx.raw == {"Date": "31.12.2023", "Description": "Netflix", "Amount": "-12,99", "Currency": "USD"}
