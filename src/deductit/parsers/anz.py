"""ANZ credit card statement parser."""

import logging
import re
import uuid
from typing import Optional

from deductit.domain.entities import RawTransaction, TransactionType
from deductit.utils.amount_parser import parse_amount
from deductit.utils.date_parser import parse_numeric_date

logger = logging.getLogger(__name__)

# processed date, transaction date, card last 4, description, amount, CR, balance
_TRANSACTION = re.compile(
    r"(\d{2}/\d{2}/\d{4})\s+"
    r"(\d{2}/\d{2}/\d{4})\s+"
    r"(\d{4})\s+"
    r"(.*?)\s+"
    r"\$?([\d,]+\.\d{2})\s*"
    r"(CR)?\s+"
    r"\$?([\d,]+\.\d{2})"
)


def parse_anz(text: str, statement_year: Optional[int] = None) -> list[RawTransaction]:
    """Parse ANZ statement text into transactions.

    The transaction date (second date column) is used, not the processed
    date. Amounts carry the statement's own convention: purchases are
    positive, and a "CR" marker makes the amount negative and the type
    credit. ``statement_year`` is accepted for a uniform parser signature;
    ANZ lines carry full dates.
    """
    transactions = []
    for match in _TRANSACTION.finditer(text):
        day = parse_numeric_date(match.group(2))
        if day is None:
            continue
        amount = parse_amount(match.group(5))
        is_credit = match.group(6) is not None
        transactions.append(
            RawTransaction(
                id=str(uuid.uuid4()),
                date=day,
                description=match.group(4).strip(),
                amount=-amount if is_credit else amount,
                type=TransactionType.CREDIT if is_credit else TransactionType.DEBIT,
                balance=parse_amount(match.group(7)),
            )
        )

    logger.debug("ANZ parser found %d transactions", len(transactions))
    return transactions
