"""Amount parsing utilities."""

from decimal import Decimal
from typing import Iterable, Union

CENT = Decimal("0.01")


def normalize_amount(amount: Union[str, Decimal, int, float]) -> str:
    """Turn an amount into the text form checked against the SEPA grammar.

    Handles:
    - "123.45" and " 123.45 " (surrounding whitespace is removed)
    - Decimal("123.45")

    Nothing is rounded or padded: "100" stays "100" and is later rejected,
    because SEPA amounts always carry exactly two decimals.

    Args:
        amount: Amount as text or number

    Returns:
        Amount text
    """
    if isinstance(amount, Decimal):
        return format(amount, "f")
    return str(amount).strip()


def sum_amounts(amounts: Iterable[str]) -> Decimal:
    """Sum two-decimal amount strings without floating point drift.

    Args:
        amounts: Amounts already valid per the SEPA amount grammar

    Returns:
        Decimal total with two decimals
    """
    total = Decimal("0.00")
    for amount in amounts:
        total += Decimal(amount)
    return total.quantize(CENT)


def format_amount(amount: Decimal) -> str:
    """Format a Decimal total for the XML document, e.g. "6655.86"."""
    return format(amount.quantize(CENT), "f")
