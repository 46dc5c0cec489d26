from decimal import Decimal
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, model_validator

from settlr.models.member import Member
from settlr.utils.ledger_validation import UnknownMemberError
from settlr.utils.money import ZERO, is_settled


class BalanceSnapshot(BaseModel):
    """
    Net position of every member of one group.

    Positive = net creditor (is owed money), negative = net debtor (owes money).
    Both mappings follow the group's member order.
    """
    group_id: str
    members: Dict[str, Member]
    balances: Dict[str, Decimal]

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def _same_members(self):
        missing = [m for m in self.balances if m not in self.members]
        extra = [m for m in self.members if m not in self.balances]
        if missing or extra:
            raise ValueError(
                f"Unknown member in snapshot for group '{self.group_id}': "
                f"balances without member {missing}, members without balance {extra}"
            )
        return self

    def balance_of(self, member_id: str) -> Decimal:
        if member_id not in self.balances:
            raise UnknownMemberError(f"Member '{member_id}' is not part of group '{self.group_id}'")
        return self.balances[member_id]

    def total(self) -> Decimal:
        """Sum of all balances; zero for a consistent group."""
        return sum(self.balances.values(), ZERO)

    def is_consistent(self, epsilon: Optional[Decimal] = None) -> bool:
        return is_settled(self.total(), epsilon)

    def is_settled(self, epsilon: Optional[Decimal] = None) -> bool:
        return all(is_settled(amount, epsilon) for amount in self.balances.values())


class MemberBalanceSummary(BaseModel):
    """What a member owes and is owed, for the dashboard."""
    member_id: str
    name: str
    owes: Decimal = ZERO
    is_owed: Decimal = ZERO
    net: Decimal = ZERO
