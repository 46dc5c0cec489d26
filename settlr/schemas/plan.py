from decimal import Decimal
from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field

from settlr.utils.money import ZERO


class Transfer(BaseModel):
    """One suggested payment: from_member pays to_member."""
    from_member: str
    from_name: str
    to_member: str
    to_name: str
    amount: Decimal

    model_config = ConfigDict(frozen=True)


class SettlementPlan(BaseModel):
    """
    Ordered payments that zero a balance snapshot.

    residual is the snapshot's sum and unsettled holds what the greedy pass
    could not place; both are empty/zero for a consistent snapshot.
    """
    group_id: str
    transfers: List[Transfer] = Field(default_factory=list)
    residual: Decimal = ZERO
    unsettled: Dict[str, Decimal] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)

    @property
    def is_complete(self) -> bool:
        return not self.unsettled

    def total_amount(self) -> Decimal:
        return sum((t.amount for t in self.transfers), ZERO)
