import logging
from decimal import Decimal
from typing import Dict, List, Optional, Sequence

from settlr.models.settlement import Settlement
from settlr.schemas.balance import BalanceSnapshot
from settlr.schemas.plan import SettlementPlan, Transfer
from settlr.utils.ledger_validation import UnknownMemberError
from settlr.utils.money import ZERO, is_settled, quantize

logger = logging.getLogger(__name__)


class SettlementService:
    @staticmethod
    def build_plan(snapshot: BalanceSnapshot) -> SettlementPlan:
        """
        Greedy netting of a balance snapshot into payer -> payee transfers.

        Debtors and creditors are both walked in the snapshot's member order,
        so the same snapshot always yields the same plan. The result zeroes
        every balance but is not guaranteed to use the fewest transfers.
        """
        # 1. Partition, storing debt as a positive amount
        debtors = []
        creditors = []
        for member_id, balance in snapshot.balances.items():
            if is_settled(balance):
                continue
            if balance > 0:
                creditors.append([member_id, balance])
            else:
                debtors.append([member_id, -balance])

        # 2. Pair each debtor with creditors until the debt is gone
        transfers: List[Transfer] = []
        for debtor in debtors:
            for creditor in creditors:
                if is_settled(debtor[1]):
                    break
                if is_settled(creditor[1]):
                    continue

                amount = quantize(min(debtor[1], creditor[1]))
                if amount <= 0:
                    continue

                transfers.append(Transfer(
                    from_member=debtor[0],
                    from_name=snapshot.members[debtor[0]].name,
                    to_member=creditor[0],
                    to_name=snapshot.members[creditor[0]].name,
                    amount=amount
                ))

                debtor[1] -= amount
                creditor[1] -= amount

        # 3. Anything left means the snapshot did not balance
        unsettled: Dict[str, Decimal] = {}
        for member_id, remaining in debtors:
            if not is_settled(remaining):
                unsettled[member_id] = -remaining
        for member_id, remaining in creditors:
            if not is_settled(remaining):
                unsettled[member_id] = remaining

        residual = snapshot.total()
        if unsettled or not is_settled(residual):
            logger.warning(
                "Settlement plan for group %s is incomplete: residual=%s, unsettled=%s",
                snapshot.group_id, residual, unsettled
            )

        return SettlementPlan(
            group_id=snapshot.group_id,
            transfers=transfers,
            residual=residual,
            unsettled=unsettled
        )

    @staticmethod
    def apply_plan(snapshot: BalanceSnapshot, plan: SettlementPlan) -> Dict[str, Decimal]:
        """Balances after every transfer of the plan has been paid."""
        balances = dict(snapshot.balances)
        for transfer in plan.transfers:
            for member_id in (transfer.from_member, transfer.to_member):
                if member_id not in balances:
                    raise UnknownMemberError(
                        f"Member '{member_id}' is not part of group '{snapshot.group_id}'"
                    )
            balances[transfer.from_member] += transfer.amount
            balances[transfer.to_member] -= transfer.amount
        return balances

    @staticmethod
    def plan_for_member(plan: SettlementPlan, member_id: str) -> List[Transfer]:
        """Transfers the member pays or receives."""
        return [
            t for t in plan.transfers
            if t.from_member == member_id or t.to_member == member_id
        ]

    @staticmethod
    def record_transfer(
        group_id: str,
        transfer: Transfer,
        payment_method: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Settlement:
        """Turn a suggested transfer the user marked as paid into a Settlement."""
        logger.info(
            "Recording settlement: group_id=%s, from=%s, to=%s, amount=%s",
            group_id, transfer.from_member, transfer.to_member, transfer.amount
        )
        return Settlement(
            group_id=group_id,
            from_member=transfer.from_member,
            to_member=transfer.to_member,
            amount=transfer.amount,
            payment_method=payment_method,
            notes=notes
        )

    @staticmethod
    def settlements_for_member(
        settlements: Sequence[Settlement],
        member_id: str,
        group_id: Optional[str] = None,
    ) -> List[Settlement]:
        """All settlements the member paid or received."""
        return [
            s for s in settlements
            if (group_id is None or s.group_id == group_id)
            and (s.from_member == member_id or s.to_member == member_id)
        ]

    @staticmethod
    def settlements_between(
        settlements: Sequence[Settlement],
        from_member: str,
        to_member: str,
        group_id: Optional[str] = None,
    ) -> List[Settlement]:
        """Settlements paid by from_member to to_member (one direction only)."""
        return [
            s for s in settlements
            if (group_id is None or s.group_id == group_id)
            and s.from_member == from_member
            and s.to_member == to_member
        ]

    @staticmethod
    def total_settled(
        settlements: Sequence[Settlement],
        from_member: str,
        to_member: str,
        group_id: Optional[str] = None,
    ) -> Decimal:
        matches = SettlementService.settlements_between(settlements, from_member, to_member, group_id)
        return sum((s.amount for s in matches), ZERO)
