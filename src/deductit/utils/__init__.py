"""Utility functions for deductit."""

from deductit.utils.date_parser import parse_date, financial_year_for
from deductit.utils.amount_parser import parse_amount
from deductit.utils.merchant_extraction import (
    extract_merchant,
    NOISE_WORD_STRATEGY,
    PREFIX_PATTERN_STRATEGY,
)

__all__ = [
    "parse_date",
    "financial_year_for",
    "parse_amount",
    "extract_merchant",
    "NOISE_WORD_STRATEGY",
    "PREFIX_PATTERN_STRATEGY",
]
