"""PDF text extraction."""

import logging
from io import BytesIO

import pdfplumber

from deductit.domain.entities import ExtractedText
from deductit.domain.errors import ExtractionError

logger = logging.getLogger(__name__)


def extract_pdf_text(content: bytes) -> ExtractedText:
    """Extract plain text from every page of a PDF.

    Pages are joined with a blank line. Pages without a text layer
    contribute nothing, so a scanned statement yields empty text rather
    than an error.

    Args:
        content: PDF file bytes

    Returns:
        ExtractedText with the joined text and page count

    Raises:
        ExtractionError: If the bytes cannot be opened as a PDF
    """
    pages_text = []
    try:
        with pdfplumber.open(BytesIO(content)) as pdf:
            page_count = len(pdf.pages)
            for page_number, page in enumerate(pdf.pages, start=1):
                text = page.extract_text() or ""
                if text.strip():
                    pages_text.append(text)
                logger.debug("Extracted %d chars from page %d", len(text), page_number)
    except Exception as e:
        raise ExtractionError(f"Error reading PDF file: {e}") from e

    if not pages_text:
        logger.warning("No text extracted from PDF - may need OCR")

    full_text = "\n\n".join(pages_text)
    logger.info("Extracted %d chars from %d pages", len(full_text), page_count)
    return ExtractedText(text=full_text, page_count=page_count)
