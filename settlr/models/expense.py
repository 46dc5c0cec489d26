"""
Expense model - one amount paid by a member, split equally among participants.

Design principles:
- Immutable once created
- Amount is a positive Decimal
- Participants are unique member ids; order decides who carries the odd cent
"""
from datetime import datetime
from decimal import Decimal
from typing import List

from pydantic import Field, field_validator

from settlr.models.base import LedgerModel, _utcnow
from settlr.core.config import settings
from settlr.utils.money import is_whole_units, to_decimal


class Expense(LedgerModel):
    group_id: str
    amount: Decimal
    payer: str                 # member id of who paid
    participants: List[str]    # member ids sharing the cost
    description: str = ""
    created_at: datetime = Field(default_factory=_utcnow)

    @field_validator("amount", mode="before")
    @classmethod
    def _coerce_amount(cls, value):
        return to_decimal(value)

    @field_validator("amount")
    @classmethod
    def _positive_amount(cls, value: Decimal) -> Decimal:
        if value <= 0:
            raise ValueError(f"Expense amount must be positive, got {value}")
        if not is_whole_units(value):
            raise ValueError(
                f"Expense amount {value} is finer than the currency unit {settings.CURRENCY_QUANTUM}"
            )
        return value

    @field_validator("participants")
    @classmethod
    def _participants_not_empty(cls, value: List[str]) -> List[str]:
        if not value:
            raise ValueError("Expense must have at least one participant")
        if len(set(value)) != len(value):
            raise ValueError("Expense participants must be unique")
        return value
