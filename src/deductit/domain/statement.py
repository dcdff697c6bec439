"""Bank statement processing domain service."""

import logging
from dataclasses import replace
from typing import Callable, Optional

from deductit.domain.entities import ExtractedText, RawTransaction, StatementResult
from deductit.domain.errors import (
    ValidationError,
    file_too_large,
    no_transactions_found,
    unsupported_bank,
)
from deductit.parsers import SUPPORTED_BANKS, get_parser, normalize_signs
from deductit.utils.pdf_text import extract_pdf_text

logger = logging.getLogger(__name__)

MAX_UPLOAD_BYTES = 10 * 1024 * 1024
PDF_CONTENT_TYPE = "application/pdf"
RAW_TEXT_PREVIEW_CHARS = 1000
UPLOAD_SOURCE = "pdf-upload"


class StatementService:
    """Service for turning uploaded statement PDFs into transactions."""

    def __init__(self, extractor: Callable[[bytes], ExtractedText] = extract_pdf_text):
        """Initialize statement service.

        Args:
            extractor: Converts PDF bytes to text; replaced in tests
        """
        self.extractor = extractor

    def validate_upload(
        self,
        content: Optional[bytes],
        content_type: Optional[str],
        bank: Optional[str],
    ) -> str:
        """Check an upload before any parsing work.

        Returns:
            The normalized bank identifier

        Raises:
            ValidationError: If the file is missing, not a PDF, larger than
                10MB, or the bank is missing or unsupported
        """
        if not content:
            raise ValidationError("No file provided")
        if content_type is not None and content_type != PDF_CONTENT_TYPE:
            raise ValidationError("File must be a PDF")
        if len(content) > MAX_UPLOAD_BYTES:
            raise ValidationError(file_too_large())
        if not bank or not bank.strip():
            raise ValidationError("No bank specified")
        bank = bank.strip().lower()
        if bank not in SUPPORTED_BANKS:
            raise ValidationError(unsupported_bank(bank))
        return bank

    def parse_text(
        self, text: str, bank: str, statement_year: Optional[int] = None
    ) -> list[RawTransaction]:
        """Parse statement text with the bank's parser and normalize signs.

        Every transaction is tagged with account ``pdf-<bank>``.
        """
        parser = get_parser(bank)
        bank = bank.strip().lower()
        transactions = normalize_signs(parser(text, statement_year))
        return [
            replace(txn, account_id=f"pdf-{bank}", source=UPLOAD_SOURCE) for txn in transactions
        ]

    def process(
        self,
        content: Optional[bytes],
        filename: str,
        content_type: Optional[str],
        bank: Optional[str],
        statement_year: Optional[int] = None,
    ) -> StatementResult:
        """Validate, extract, parse and normalize one statement.

        Args:
            content: PDF bytes
            filename: Original file name, for metadata only
            content_type: MIME type reported by the uploader; None skips the check
            bank: Bank identifier (amex, anz, cba, westpac)
            statement_year: Year for formats that omit it on each line

        Returns:
            StatementResult. ``success`` is False with a corrective hint when
            no transactions were found.

        Raises:
            ValidationError: If the upload fails validation
            ExtractionError: If the PDF cannot be read
        """
        bank = self.validate_upload(content, content_type, bank)
        extracted = self.extractor(content)
        transactions = self.parse_text(extracted.text, bank, statement_year)
        logger.info(
            "Parsed %d transactions from %s (%s, %d pages)",
            len(transactions),
            filename,
            bank,
            extracted.page_count,
        )

        return StatementResult(
            success=bool(transactions),
            bank=bank.upper(),
            file_name=filename,
            file_size=len(content),
            page_count=extracted.page_count,
            text_length=len(extracted.text),
            transactions=transactions,
            raw_text_preview=extracted.text[:RAW_TEXT_PREVIEW_CHARS],
            error=None if transactions else no_transactions_found(bank),
        )
