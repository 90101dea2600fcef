"""
TxBridge - Amount Conversion
==============================
Coin-denominated wire amounts to integer minimal units and back.

The node writes amounts as JSON numbers with 8 fractional digits. Parsed as
float they are rarely exact in binary, so conversion goes through the
shortest decimal representation of the value, which is the literal the node
wrote.
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_EVEN
from typing import Optional, Union

from tx_bridge.constants import (
    AMOUNT_EPSILON,
    COIN_DECIMALS,
    MINIMAL_UNITS_PER_COIN,
)
from tx_bridge.errors import InvalidAmountError, PrecisionLossError


AmountLike = Union[float, int, Decimal, str]

_SCALE = Decimal(MINIMAL_UNITS_PER_COIN)
_QUANTUM = Decimal(1).scaleb(-COIN_DECIMALS)


def _to_decimal(value: AmountLike, field: Optional[str]) -> Decimal:
    details = {"field": field} if field else {}

    # bool is an int subclass; True is never a meaningful amount
    if isinstance(value, bool) or not isinstance(value, (float, int, Decimal, str)):
        raise InvalidAmountError(
            f"Amount must be a number, got {type(value).__name__}",
            code="AMOUNT_NOT_NUMBER",
            details=details
        )

    try:
        # repr() of a float is its shortest round-tripping decimal form
        amount = Decimal(repr(value)) if isinstance(value, float) else Decimal(value)
    except InvalidOperation:
        raise InvalidAmountError(
            f"Amount is not a decimal number: {value!r}",
            code="AMOUNT_NOT_NUMBER",
            details=details
        )

    if not amount.is_finite():
        raise InvalidAmountError(
            f"Amount must be finite, got {value!r}",
            code="AMOUNT_NOT_FINITE",
            details=details
        )

    return amount


def coin_to_minimal(value: AmountLike, field: Optional[str] = None) -> int:
    """
    Convert a coin amount to minimal units.

    Args:
        value: Amount in coin units (float, int, Decimal or decimal string)
        field: Wire field path reported on failure

    Returns:
        int: Amount in minimal units (sign preserved)

    Raises:
        PrecisionLossError: If the amount has value below one minimal unit
        InvalidAmountError: If the amount is not a finite number

    Examples:
        >>> coin_to_minimal(50.0)
        5000000000
        >>> coin_to_minimal(0.00000001)
        1
        >>> coin_to_minimal(0.000000001)
        Traceback (most recent call last):
        ...
        tx_bridge.errors.PrecisionLossError: ...
    """
    scaled = _to_decimal(value, field) * _SCALE
    rounded = scaled.to_integral_value(rounding=ROUND_HALF_EVEN)

    if abs(scaled - rounded) > AMOUNT_EPSILON:
        raise PrecisionLossError(
            f"Amount {value!r} is not a whole number of minimal units",
            code="AMOUNT_PRECISION_LOSS",
            details={
                **({"field": field} if field else {}),
                "amount": str(value),
                "delta": str(scaled - rounded),
            }
        )

    return int(rounded)


def minimal_to_coin(units: int) -> Decimal:
    """
    Convert minimal units to an exact coin amount.

    Examples:
        >>> minimal_to_coin(150000000)
        Decimal('1.50000000')
    """
    return (Decimal(units) / _SCALE).quantize(_QUANTUM)


def format_amount(units: int, ticker: str = "BTC") -> str:
    """
    Format minimal units for display.

    Examples:
        >>> format_amount(150000000)
        '1.50000000 BTC'
    """
    return f"{minimal_to_coin(units)} {ticker}"


__all__ = [
    "AmountLike",
    "coin_to_minimal",
    "minimal_to_coin",
    "format_amount",
]
