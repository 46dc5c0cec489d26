"""Ledger validation utilities."""
from typing import Dict

from settlr.models.expense import Expense
from settlr.models.member import Member
from settlr.models.settlement import Settlement


class LedgerValidationError(ValueError):
    """Base exception for records the ledger refuses to aggregate."""
    pass


class InvalidExpenseError(LedgerValidationError):
    pass


class InvalidSettlementError(LedgerValidationError):
    pass


class UnknownMemberError(LedgerValidationError, KeyError):
    """Member id not present in the group or snapshot."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""


def validate_expense(expense: Expense, group_id: str, members: Dict[str, Member]) -> None:
    """
    Validate an expense against the group it is aggregated into.

    Rules:
    - expense must belong to the group
    - payer must be a group member
    - every participant must be a group member

    Amount and participant-set rules are enforced when the Expense is built.
    """
    if expense.group_id != group_id:
        raise InvalidExpenseError(
            f"Expense '{expense.id}' belongs to group '{expense.group_id}', not '{group_id}'"
        )

    if expense.payer not in members:
        raise InvalidExpenseError(
            f"Expense '{expense.id}' has unknown payer: {expense.payer}"
        )

    unknown = [p for p in expense.participants if p not in members]
    if unknown:
        raise InvalidExpenseError(
            f"Expense '{expense.id}' has unknown participants: {', '.join(unknown)}"
        )


def validate_settlement(settlement: Settlement, group_id: str, members: Dict[str, Member]) -> None:
    """
    Validate a settlement against its group.

    Over-settlement is not checked here: paying more than is owed simply
    flips the payer into credit.
    """
    if settlement.group_id != group_id:
        raise InvalidSettlementError(
            f"Settlement '{settlement.id}' belongs to group '{settlement.group_id}', not '{group_id}'"
        )

    for member_id in (settlement.from_member, settlement.to_member):
        if member_id not in members:
            raise InvalidSettlementError(
                f"Settlement '{settlement.id}' references unknown member: {member_id}"
            )
