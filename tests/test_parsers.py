"""Tests for bank statement parsers."""

from datetime import date
from decimal import Decimal

import pytest

from deductit.domain.entities import TransactionType
from deductit.domain.errors import ValidationError
from deductit.parsers import (
    SUPPORTED_BANKS,
    get_parser,
    normalize_signs,
    parse_amex,
    parse_anz,
    parse_cba,
    parse_westpac,
)
from deductit.parsers.westpac import clean_description


AMEX_TEXT = """\
Statement of Account
July 3
UBER *TRIP SYDNEY
Reference 12345
24.50
July 15
OFFICEWORKS 0423 BRISBANE
1,299.00
August 2
REFUND NOT A DATE
"""

WESTPAC_TEXT = """\
Opening balance 1,000.00
05/07/24 DEBIT CARD PURCHASE BUNNINGS 123
NORTH SYDNEY 89.95 910.05
06/07/24 SALARY DEPOSIT ACME PTY LTD
2,500.00 3,410.05
07/07/24 INCOMPLETE LINE 12.00
"""


class TestAnzParser:
    def test_parses_example_line(self):
        transactions = parse_anz("01/07/2024 01/07/2024 1234 WOOLWORTHS 45.67 123.00")

        assert len(transactions) == 1
        txn = transactions[0]
        assert txn.date == date(2024, 7, 1)
        assert txn.description == "WOOLWORTHS"
        assert txn.amount == Decimal("45.67")
        assert txn.type == TransactionType.DEBIT
        assert txn.balance == Decimal("123.00")

    def test_credit_marker_makes_amount_negative(self):
        transactions = parse_anz("02/07/2024 01/07/2024 1234 PAYMENT THANK YOU 500.00 CR 1,200.00")

        assert len(transactions) == 1
        assert transactions[0].amount == Decimal("-500.00")
        assert transactions[0].type == TransactionType.CREDIT
        assert transactions[0].balance == Decimal("1200.00")

    def test_uses_transaction_date_not_processed_date(self):
        transactions = parse_anz("03/07/2024 30/06/2024 1234 SHELL COLES EXPRESS $60.00 183.00")

        assert transactions[0].date == date(2024, 6, 30)

    def test_no_matches_returns_empty_list(self):
        assert parse_anz("This is not a statement") == []


class TestAmexParser:
    def test_parses_multiline_records(self):
        transactions = parse_amex(AMEX_TEXT, statement_year=2024)

        assert len(transactions) == 2
        assert transactions[0].date == date(2024, 7, 3)
        assert transactions[0].description == "UBER *TRIP SYDNEY"
        assert transactions[0].amount == Decimal("24.50")
        assert transactions[1].amount == Decimal("1299.00")
        assert all(t.type == TransactionType.DEBIT for t in transactions)

    def test_record_without_amount_is_skipped(self):
        transactions = parse_amex("March 4\nNO AMOUNT HERE\nsomething\nelse\nmore\n", 2024)

        assert transactions == []

    def test_defaults_to_current_year(self):
        transactions = parse_amex("January 5\nCOFFEE\n4.50\n")

        assert transactions[0].date.year == date.today().year


class TestCbaParser:
    def test_reads_balance_markers(self):
        text = "22 Jan 2022 OPENING BALANCE Nil\n01 Feb CLOSING BALANCE $1,234.56\n"
        transactions = parse_cba(text, statement_year=2022)

        assert [t.description for t in transactions] == ["OPENING BALANCE", "CLOSING BALANCE"]
        assert transactions[0].date == date(2022, 1, 22)
        assert transactions[1].date == date(2022, 2, 1)
        assert all(t.amount == Decimal("0") for t in transactions)

    def test_marker_without_date_is_skipped(self):
        assert parse_cba("OPENING BALANCE Nil") == []


class TestWestpacParser:
    def test_joins_continuation_lines(self):
        transactions = parse_westpac(WESTPAC_TEXT)

        assert len(transactions) == 2
        purchase, salary = transactions
        assert purchase.date == date(2024, 7, 5)
        assert purchase.description == "DEBIT CARD PURCHASE BUNNINGS NORTH SYDNEY"
        assert purchase.amount == Decimal("-89.95")
        assert purchase.type == TransactionType.DEBIT
        assert purchase.balance == Decimal("910.05")

        assert salary.amount == Decimal("2500.00")
        assert salary.type == TransactionType.CREDIT
        assert salary.balance == Decimal("3410.05")

    def test_clean_description_strips_numbers(self):
        assert clean_description("WOOLWORTHS 1234 SYDNEY 45.67 1,000.00") == "WOOLWORTHS SYDNEY"


class TestParserRegistry:
    def test_supported_banks(self):
        assert set(SUPPORTED_BANKS) == {"amex", "anz", "cba", "westpac"}

    def test_lookup_is_case_insensitive(self):
        assert get_parser("ANZ") is parse_anz

    def test_unknown_bank_raises(self):
        with pytest.raises(ValidationError, match="No parser available for bank: nab"):
            get_parser("nab")

    @pytest.mark.parametrize(
        "bank,text",
        [
            ("amex", AMEX_TEXT),
            ("anz", "01/07/2024 01/07/2024 1234 WOOLWORTHS 45.67 123.00"),
            ("westpac", WESTPAC_TEXT),
        ],
    )
    def test_every_parser_yields_valid_dates_and_finite_amounts(self, bank, text):
        transactions = get_parser(bank)(text, 2024)

        assert transactions
        for txn in transactions:
            assert date.fromisoformat(txn.date.isoformat()) == txn.date
            assert txn.amount.is_finite()


def test_normalize_signs_makes_debits_negative():
    transactions = normalize_signs(parse_anz(
        "01/07/2024 01/07/2024 1234 WOOLWORTHS 45.67 123.00\n"
        "02/07/2024 02/07/2024 1234 REFUND 10.00 CR 113.00"
    ))

    assert [t.amount for t in transactions] == [Decimal("-45.67"), Decimal("10.00")]
