"""Amount parsing utilities."""

from decimal import Decimal, InvalidOperation
import re

# Decimal money token as printed on statements, e.g. "1,234.56"
AMOUNT_TOKEN = r"[\d,]+\.\d{2}"


def parse_amount(amount_str: str) -> Decimal:
    """Parse an amount string into a Decimal.

    Handles various formats:
    - "123.45"
    - "$123.45"
    - "-123.45"
    - "-$123.45"
    - "1,234.56"
    - "(123.45)" (negative in parentheses)

    Args:
        amount_str: Amount string

    Returns:
        Decimal amount

    Raises:
        ValueError: If amount string cannot be parsed
    """
    if not amount_str or not amount_str.strip():
        raise ValueError("Empty amount string")

    amount_str = amount_str.strip()

    is_negative = False
    if amount_str.startswith("(") and amount_str.endswith(")"):
        is_negative = True
        amount_str = amount_str[1:-1]

    amount_str = re.sub(r"[$€£¥]", "", amount_str)
    amount_str = amount_str.replace(",", "").strip()

    try:
        amount = Decimal(amount_str)
    except InvalidOperation as e:
        raise ValueError(f"Could not parse amount '{amount_str}': {e}")
    if not amount.is_finite():
        raise ValueError(f"Amount '{amount_str}' is not a finite number")
    return -amount if is_negative else amount


def to_decimal(value) -> Decimal:
    """Coerce a JSON number or string to Decimal.

    Floats go through ``str`` so that 45.67 stays 45.67 rather than its
    binary expansion.
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, (int, float)):
        return Decimal(str(value))
    if value is None:
        raise ValueError("Missing amount")
    return parse_amount(str(value))


def format_amount(amount: Decimal) -> str:
    """Format an amount with thousands separator and two decimals."""
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):,.2f}"
