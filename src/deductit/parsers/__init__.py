"""Bank statement parsers, one grammar per supported bank."""

from typing import Callable, Optional

from deductit.domain.entities import RawTransaction
from deductit.domain.errors import ValidationError, unsupported_bank
from deductit.parsers.amex import parse_amex
from deductit.parsers.anz import parse_anz
from deductit.parsers.cba import parse_cba
from deductit.parsers.westpac import parse_westpac
from deductit.parsers.normalize import normalize_signs

StatementParser = Callable[[str, Optional[int]], list[RawTransaction]]

PARSERS: dict[str, StatementParser] = {
    "amex": parse_amex,
    "anz": parse_anz,
    "cba": parse_cba,
    "westpac": parse_westpac,
}

SUPPORTED_BANKS = tuple(PARSERS)


def get_parser(bank: str) -> StatementParser:
    """Return the statement parser for a bank identifier.

    Raises:
        ValidationError: If no parser exists for the bank
    """
    parser = PARSERS.get(bank.strip().lower()) if bank else None
    if parser is None:
        raise ValidationError(unsupported_bank(bank))
    return parser


__all__ = [
    "PARSERS",
    "SUPPORTED_BANKS",
    "get_parser",
    "normalize_signs",
    "parse_amex",
    "parse_anz",
    "parse_cba",
    "parse_westpac",
]
