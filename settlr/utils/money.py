"""
Money helpers shared by the ledger and settlement services.

All amounts are Decimal. Floats are converted through str so that 0.1
stays 0.1 instead of becoming 0.1000000000000000055511151231257827.
"""
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import List, Optional, Union

from settlr.core.config import settings

Number = Union[Decimal, int, float, str]

ZERO = Decimal("0")


def to_decimal(value: Number) -> Decimal:
    """Convert any numeric input to Decimal without binary float noise."""
    if isinstance(value, bool):
        raise ValueError("Boolean is not a valid amount")
    if not isinstance(value, Decimal):
        try:
            value = Decimal(str(value))
        except InvalidOperation:
            raise ValueError(f"Invalid amount: {value!r}") from None
    if not value.is_finite():
        raise ValueError(f"Amount must be finite, got {value}")
    return value


def quantize(value: Number, quantum: Optional[Decimal] = None) -> Decimal:
    """Round half-up to the minor currency unit (0.01 by default)."""
    quantum = quantum or settings.CURRENCY_QUANTUM
    return to_decimal(value).quantize(quantum, rounding=ROUND_HALF_UP)


def is_settled(value: Number, epsilon: Optional[Decimal] = None) -> bool:
    """A magnitude below epsilon counts as exactly zero."""
    epsilon = settings.SETTLEMENT_EPSILON if epsilon is None else epsilon
    return abs(to_decimal(value)) < epsilon


def split_evenly(amount: Number, parts: int, quantum: Optional[Decimal] = None) -> List[Decimal]:
    """
    Split amount into `parts` shares of whole minor units.

    The shares always add up to the quantized amount. When the amount does
    not divide evenly, the first `remainder` shares carry one extra unit,
    so no two shares differ by more than one unit.

    Example: split_evenly(100, 3) -> [33.34, 33.33, 33.33]
    """
    if parts <= 0:
        raise ValueError(f"Cannot split into {parts} parts")

    quantum = quantum or settings.CURRENCY_QUANTUM
    total_units = int(quantize(amount, quantum) / quantum)
    base, remainder = divmod(total_units, parts)

    shares = []
    for index in range(parts):
        units = base + 1 if index < remainder else base
        shares.append(units * quantum)
    return shares


def is_whole_units(value: Number, quantum: Optional[Decimal] = None) -> bool:
    """True when value needs no rounding to the minor currency unit."""
    value = to_decimal(value)
    return quantize(value, quantum) == value
