"""American Express statement parser.

Amex statement text puts each transaction over several lines: a
"<Month> <day>" line, a description line, then the amount on a line of its
own within the next three lines. The statement lists charges only, so every
record is an outflow.
"""

import logging
import re
import uuid
from datetime import date
from typing import Optional

from deductit.domain.entities import RawTransaction, TransactionType
from deductit.utils.amount_parser import parse_amount
from deductit.utils.date_parser import MONTHS

logger = logging.getLogger(__name__)

_DATE_LINE = re.compile(rf"^({'|'.join(MONTHS)})\s+(\d{{1,2}})$", re.IGNORECASE)
_AMOUNT_LINE = re.compile(r"^(-?[\d,]*\d\.\d{2})$")
AMOUNT_LOOKAHEAD = 3


def parse_amex(text: str, statement_year: Optional[int] = None) -> list[RawTransaction]:
    """Parse Amex statement text into transactions.

    Args:
        text: Text extracted from the statement PDF
        statement_year: Year to date transactions in, since the statement
            omits it on each line. Defaults to the current year.

    Returns:
        Transactions in statement order, amounts as positive debits
    """
    year = statement_year or date.today().year
    lines = [line.strip() for line in text.splitlines() if line.strip()]
    transactions = []

    i = 0
    while i < len(lines):
        date_match = _DATE_LINE.match(lines[i])
        if date_match is None:
            i += 1
            continue

        i += 1
        if i >= len(lines):
            break
        description = lines[i]

        amount = None
        for offset in range(1, min(AMOUNT_LOOKAHEAD, len(lines) - i - 1) + 1):
            amount_match = _AMOUNT_LINE.match(lines[i + offset])
            if amount_match:
                amount = abs(parse_amount(amount_match.group(1)))
                i += offset
                break

        try:
            day = date(year, MONTHS[date_match.group(1).lower()], int(date_match.group(2)))
        except ValueError:
            day = None

        if amount and day is not None:
            transactions.append(
                RawTransaction(
                    id=str(uuid.uuid4()),
                    date=day,
                    description=description,
                    amount=amount,
                    type=TransactionType.DEBIT,
                )
            )
        i += 1

    logger.debug("Amex parser found %d transactions in %d lines", len(transactions), len(lines))
    return transactions
