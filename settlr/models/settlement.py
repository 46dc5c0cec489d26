from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import Field, field_validator, model_validator

from settlr.models.base import LedgerModel, _utcnow
from settlr.core.config import settings
from settlr.utils.money import is_whole_units, to_decimal


class Settlement(LedgerModel):
    """Real-world payment from one member to another."""
    group_id: str
    from_member: str
    to_member: str
    amount: Decimal
    payment_method: Optional[str] = None
    notes: Optional[str] = None
    timestamp: datetime = Field(default_factory=_utcnow)

    @field_validator("amount", mode="before")
    @classmethod
    def _coerce_amount(cls, value):
        return to_decimal(value)

    @field_validator("amount")
    @classmethod
    def _positive_amount(cls, value: Decimal) -> Decimal:
        if value <= 0:
            raise ValueError("Amount must be positive")
        if not is_whole_units(value):
            raise ValueError(
                f"Settlement amount {value} is finer than the currency unit {settings.CURRENCY_QUANTUM}"
            )
        return value

    @model_validator(mode="after")
    def _distinct_members(self):
        if self.from_member == self.to_member:
            raise ValueError("From member and to member cannot be the same")
        return self
