"""Westpac statement parser."""

import logging
import re
import uuid
from typing import Optional

from deductit.domain.entities import RawTransaction, TransactionType
from deductit.utils.amount_parser import AMOUNT_TOKEN, parse_amount
from deductit.utils.date_parser import parse_numeric_date

logger = logging.getLogger(__name__)

_DATE_PREFIX = re.compile(r"^(\d{2}/\d{2}/\d{2,4})")
_AMOUNT = re.compile(AMOUNT_TOKEN)
_STANDALONE_NUMBER = re.compile(r"\b\d+\b")
_SPACES = re.compile(r"\s+")

CREDIT_KEYWORDS = ("deposit", "salary", "transfer", "refund")


def clean_description(text: str) -> str:
    """Strip money amounts and bare numbers from a description."""
    text = _AMOUNT.sub("", text)
    text = _STANDALONE_NUMBER.sub("", text)
    return _SPACES.sub(" ", text).strip()


def parse_westpac(text: str, statement_year: Optional[int] = None) -> list[RawTransaction]:
    """Parse Westpac statement text into transactions.

    A line starting with a DD/MM/YY(YY) date opens a record and following
    lines up to the next date line continue its description. The record
    needs at least two money amounts: the first is the transaction amount
    and the last is the running balance. Credit or debit is decided by
    keywords in the description.
    """
    lines = [line.strip() for line in text.splitlines() if line.strip()]
    transactions = []

    i = 0
    while i < len(lines):
        date_match = _DATE_PREFIX.match(lines[i])
        if date_match is None:
            i += 1
            continue

        raw_date = date_match.group(1)
        parts = [lines[i][len(raw_date):].strip()]
        i += 1
        while i < len(lines) and not _DATE_PREFIX.match(lines[i]):
            parts.append(lines[i])
            i += 1
        description = " ".join(part for part in parts if part)

        amounts = _AMOUNT.findall(description)
        day = parse_numeric_date(raw_date)
        if len(amounts) < 2 or day is None:
            continue

        amount = abs(parse_amount(amounts[0]))
        lowered = description.lower()
        is_credit = any(keyword in lowered for keyword in CREDIT_KEYWORDS)
        transactions.append(
            RawTransaction(
                id=str(uuid.uuid4()),
                date=day,
                description=clean_description(description),
                amount=amount if is_credit else -amount,
                type=TransactionType.CREDIT if is_credit else TransactionType.DEBIT,
                balance=parse_amount(amounts[-1]),
            )
        )

    logger.debug("Westpac parser found %d transactions", len(transactions))
    return transactions
