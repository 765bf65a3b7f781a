"""
Display formatting for amounts.

Amounts travel through the workflow as ``Decimal`` values. They are only
turned into text here, for pages and emails, using the es-ES convention of
``.`` for thousands and ``,`` for decimals.
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Union

_TWO_PLACES = Decimal("0.01")
_SWAP_SEPARATORS = str.maketrans({",": ".", ".": ","})

Number = Union[Decimal, int, float, str]


def format_amount(amount: Optional[Number], placeholder: str = "N/A") -> str:
    """Format an amount with two fixed decimals, e.g. ``1.234,50``."""
    if amount is None:
        return placeholder
    try:
        value = Decimal(str(amount))
        if not value.is_finite():
            return placeholder
        rounded = value.quantize(_TWO_PLACES, rounding=ROUND_HALF_UP)
    except ArithmeticError:
        return placeholder
    return f"{rounded:,.2f}".translate(_SWAP_SEPARATORS)


def format_money(amount: Optional[Number], currency: Optional[str]) -> str:
    """Format an amount followed by its currency code."""
    return f"{format_amount(amount)} {currency or 'N/A'}"
