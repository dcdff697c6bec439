"""Commonwealth Bank statement parser.

Only the opening and closing balance markers are read from CBA statements;
itemised transactions are not extracted for this layout.
"""

import logging
import re
import uuid
from datetime import date
from decimal import Decimal
from typing import Optional

from deductit.domain.entities import RawTransaction, TransactionType
from deductit.utils.date_parser import month_number

logger = logging.getLogger(__name__)

OPENING_BALANCE = "OPENING BALANCE"
CLOSING_BALANCE = "CLOSING BALANCE"

_LEADING_DATE = re.compile(r"^(\d{1,2})\s+([A-Za-z]+)\s*(\d{4})?")


def parse_cba(text: str, statement_year: Optional[int] = None) -> list[RawTransaction]:
    """Parse CBA statement text into zero-amount balance marker records.

    A marker line looks like "22 Jan 2022 OPENING BALANCE Nil". When the
    line omits the year, ``statement_year`` (default: current year) is used.
    """
    year = statement_year or date.today().year
    transactions = []

    for line in (line.strip() for line in text.splitlines()):
        if OPENING_BALANCE in line:
            description = OPENING_BALANCE
        elif CLOSING_BALANCE in line:
            description = CLOSING_BALANCE
        else:
            continue

        match = _LEADING_DATE.match(line)
        if match is None:
            continue
        month = month_number(match.group(2))
        if month is None:
            continue
        try:
            day = date(int(match.group(3) or year), month, int(match.group(1)))
        except ValueError:
            continue

        transactions.append(
            RawTransaction(
                id=str(uuid.uuid4()),
                date=day,
                description=description,
                amount=Decimal("0"),
                type=TransactionType.CREDIT,
            )
        )

    logger.debug("CBA parser found %d balance markers", len(transactions))
    return transactions
