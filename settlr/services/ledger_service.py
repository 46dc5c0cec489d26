import logging
from datetime import datetime
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from settlr.models.expense import Expense
from settlr.models.member import Group
from settlr.models.settlement import Settlement
from settlr.schemas.balance import BalanceSnapshot, MemberBalanceSummary
from settlr.utils.ledger_validation import (
    UnknownMemberError,
    validate_expense,
    validate_settlement,
)
from settlr.utils.money import ZERO, is_settled, split_evenly

logger = logging.getLogger(__name__)


class LedgerService:
    @staticmethod
    def compute_balances(
        group: Group,
        expenses: Iterable[Expense],
        settlements: Iterable[Settlement],
    ) -> BalanceSnapshot:
        """
        Aggregates a group's expense and settlement history into a net
        balance per member.

        Positive = is owed money, negative = owes money.
        """
        members = group.member_map()

        # 1. Everyone starts at zero
        balances: Dict[str, Decimal] = {member_id: ZERO for member_id in members}

        # 2. Expenses: payer is credited what others owe, others are debited their share
        expense_count = 0
        for expense in expenses:
            validate_expense(expense, group.id, members)
            shares = split_evenly(expense.amount, len(expense.participants))

            balances[expense.payer] += sum(shares, ZERO)
            for participant, share in zip(expense.participants, shares):
                balances[participant] -= share
            expense_count += 1

        # 3. Settlements move balance from the receiver back to the payer
        settlement_count = 0
        for settlement in settlements:
            validate_settlement(settlement, group.id, members)
            balances[settlement.from_member] += settlement.amount
            balances[settlement.to_member] -= settlement.amount
            settlement_count += 1

        snapshot = BalanceSnapshot(group_id=group.id, members=members, balances=balances)

        logger.debug(
            "Computed balances: group_id=%s, expenses=%d, settlements=%d",
            group.id, expense_count, settlement_count
        )
        if not snapshot.is_consistent():
            logger.warning(
                "Balances for group %s do not sum to zero: residual=%s",
                group.id, snapshot.total()
            )

        return snapshot

    @staticmethod
    def summarize_member(snapshot: BalanceSnapshot, member_id: str) -> MemberBalanceSummary:
        """Owes / is owed / net for one member of one group."""
        balance = snapshot.balance_of(member_id)
        member = snapshot.members[member_id]

        owes = ZERO
        is_owed = ZERO
        if not is_settled(balance):
            if balance > 0:
                is_owed = balance
            else:
                owes = -balance

        return MemberBalanceSummary(
            member_id=member_id,
            name=member.name,
            owes=owes,
            is_owed=is_owed,
            net=is_owed - owes
        )

    @staticmethod
    def summarize_across_groups(
        snapshots: Sequence[BalanceSnapshot], member_id: str
    ) -> MemberBalanceSummary:
        """
        Dashboard totals for a member over every group they belong to.

        Groups without the member are skipped. Raises UnknownMemberError if
        the member is in none of them.
        """
        owes = ZERO
        is_owed = ZERO
        name = None

        for snapshot in snapshots:
            if member_id not in snapshot.balances:
                continue
            summary = LedgerService.summarize_member(snapshot, member_id)
            owes += summary.owes
            is_owed += summary.is_owed
            name = name or summary.name

        if name is None:
            raise UnknownMemberError(f"Member '{member_id}' is not part of any given group")

        return MemberBalanceSummary(
            member_id=member_id,
            name=name,
            owes=owes,
            is_owed=is_owed,
            net=is_owed - owes
        )

    @staticmethod
    def total_expenses(expenses: Iterable[Expense], group_id: Optional[str] = None) -> Decimal:
        """Total spend, optionally limited to one group. Zero when there are no expenses."""
        return sum(
            (e.amount for e in expenses if group_id is None or e.group_id == group_id),
            ZERO
        )

    @staticmethod
    def cache_key(
        group_id: str,
        expenses: List[Expense],
        settlements: List[Settlement],
    ) -> Tuple[str, Optional[datetime], Optional[datetime]]:
        """Key under which a caller may cache the snapshot of this history."""
        last_expense = max((e.created_at for e in expenses), default=None)
        last_settlement = max((s.timestamp for s in settlements), default=None)
        return group_id, last_expense, last_settlement
