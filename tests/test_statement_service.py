"""Tests for bank statement processing."""

from decimal import Decimal

import pytest

from deductit.domain.entities import ExtractedText, TransactionType
from deductit.domain.errors import ExtractionError, ValidationError
from deductit.domain.statement import MAX_UPLOAD_BYTES, StatementService
from deductit.utils.pdf_text import extract_pdf_text

ANZ_TEXT = (
    "01/07/2024 01/07/2024 1234 WOOLWORTHS 45.67 123.00\n"
    "02/07/2024 02/07/2024 1234 PAYMENT THANK YOU 500.00 CR 623.00\n"
)


def _service(text=ANZ_TEXT, pages=1):
    return StatementService(extractor=lambda content: ExtractedText(text=text, page_count=pages))


class TestValidation:
    def test_missing_file(self):
        with pytest.raises(ValidationError, match="No file provided"):
            _service().process(None, "", None, "anz")

    def test_wrong_content_type(self):
        with pytest.raises(ValidationError, match="File must be a PDF"):
            _service().process(b"%PDF", "s.txt", "text/plain", "anz")

    def test_file_too_large(self):
        content = b"x" * (MAX_UPLOAD_BYTES + 1)
        with pytest.raises(ValidationError, match="less than 10MB"):
            _service().process(content, "s.pdf", "application/pdf", "anz")

    def test_missing_bank(self):
        with pytest.raises(ValidationError, match="No bank specified"):
            _service().process(b"%PDF", "s.pdf", "application/pdf", "  ")

    def test_unsupported_bank(self):
        with pytest.raises(ValidationError, match="No parser available for bank: nab"):
            _service().process(b"%PDF", "s.pdf", "application/pdf", "NAB")

    def test_file_is_checked_before_bank(self):
        with pytest.raises(ValidationError, match="No file provided"):
            _service().process(b"", "s.pdf", "application/pdf", None)

    def test_extractor_not_called_for_invalid_upload(self):
        calls = []
        service = StatementService(extractor=lambda content: calls.append(content))

        with pytest.raises(ValidationError):
            service.process(b"%PDF", "s.pdf", "application/pdf", "nab")
        assert calls == []


class TestProcess:
    def test_parses_and_normalizes(self):
        result = _service(pages=2).process(b"%PDF-1.4", "july.pdf", "application/pdf", " ANZ ")

        assert result.success
        assert result.bank == "ANZ"
        assert result.file_name == "july.pdf"
        assert result.file_size == 8
        assert result.page_count == 2
        assert result.text_length == len(ANZ_TEXT)
        assert result.error is None
        assert result.transaction_count == 2

        purchase, payment = result.transactions
        assert purchase.amount == Decimal("-45.67")
        assert purchase.type == TransactionType.DEBIT
        assert payment.amount == Decimal("500.00")
        assert payment.type == TransactionType.CREDIT
        assert {t.account_id for t in result.transactions} == {"pdf-anz"}
        assert {t.source for t in result.transactions} == {"pdf-upload"}

    def test_no_transactions_gives_hint(self):
        result = _service(text="Nothing to see").process(b"%PDF", "s.pdf", None, "westpac")

        assert not result.success
        assert result.transactions == []
        assert result.error.startswith("No transactions found in WESTPAC statement")
        assert result.raw_text_preview == "Nothing to see"

    def test_raw_text_preview_is_truncated(self):
        text = ANZ_TEXT + "x" * 2000
        result = _service(text=text).process(b"%PDF", "s.pdf", None, "anz")

        assert len(result.raw_text_preview) == 1000

    def test_statement_year_is_passed_to_parser(self):
        result = _service(text="March 4\nCOFFEE\n4.50\n").process(
            b"%PDF", "s.pdf", None, "amex", statement_year=2023
        )

        assert result.transactions[0].date.year == 2023
        assert result.transactions[0].amount == Decimal("-4.50")

    def test_extraction_errors_propagate(self):
        def broken(content):
            raise ExtractionError("Error reading PDF file: damaged")

        service = StatementService(extractor=broken)
        with pytest.raises(ExtractionError):
            service.process(b"%PDF", "s.pdf", None, "anz")


def test_extract_pdf_text_rejects_non_pdf_bytes():
    with pytest.raises(ExtractionError, match="Error reading PDF file"):
        extract_pdf_text(b"this is not a pdf")
