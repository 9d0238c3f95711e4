"""Amount parsing utilities."""

import re
from decimal import Decimal, InvalidOperation

CENTS = Decimal("0.01")


def to_cents(amount: Decimal | float | int | str) -> Decimal:
    """Round an amount to cents, the precision the store keeps.

    Floats go through their shortest repr, so ``0.1 + 0.2`` becomes ``0.30``.
    Every amount is rounded here before it is stored or compared, so stored
    rows and fingerprints agree.

    Raises:
        ValueError: If the amount is not a finite number
    """
    try:
        value = amount if isinstance(amount, Decimal) else Decimal(str(amount))
    except InvalidOperation:
        raise ValueError(f"Could not parse amount '{amount}'")
    if not value.is_finite():
        raise ValueError(f"Could not parse amount '{amount}'")
    return value.quantize(CENTS)


def parse_amount(amount_str: str) -> Decimal:
    """Parse a signed amount such as "-5.75", "$1,234.56" or "(22.00)".

    Parentheses mean a negative amount.

    Raises:
        ValueError: If amount string cannot be parsed
    """
    if not amount_str or not amount_str.strip():
        raise ValueError("Empty amount string")

    text = amount_str.strip()
    negative = text.startswith("(") and text.endswith(")")
    if negative:
        text = text[1:-1]
    text = re.sub(r"[$€£¥,\s]", "", text)

    try:
        amount = Decimal(text)
    except InvalidOperation:
        raise ValueError(f"Could not parse amount '{amount_str}'")
    if not amount.is_finite():
        raise ValueError(f"Could not parse amount '{amount_str}'")
    amount = to_cents(amount)
    return -amount if negative else amount
