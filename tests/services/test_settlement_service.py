import logging
from decimal import Decimal

import pytest
from pydantic import ValidationError

from settlr.models.member import Member
from settlr.schemas.balance import BalanceSnapshot
from settlr.schemas.plan import SettlementPlan, Transfer
from settlr.services.ledger_service import LedgerService
from settlr.services.settlement_service import SettlementService
from settlr.utils.ledger_validation import UnknownMemberError
from settlr.utils.money import is_settled


def _snapshot(balances, group_id="g"):
    members = {member_id: Member(id=member_id, name=member_id.upper()) for member_id in balances}
    return BalanceSnapshot(
        group_id=group_id,
        members=members,
        balances={k: Decimal(str(v)) for k, v in balances.items()},
    )


def _pairs_of(transfers):
    return [(t.from_member, t.to_member) for t in transfers]


def _pairs(plan):
    return [(t.from_member, t.to_member, t.amount) for t in plan.transfers]


def test_build_plan_single_payer(group, dinner):
    snapshot = LedgerService.compute_balances(group, [dinner], [])

    plan = SettlementService.build_plan(snapshot)

    # Debtors in member order: Bob first, then Charlie
    assert _pairs(plan) == [("b", "a", Decimal("100")), ("c", "a", Decimal("100"))]
    assert plan.transfers[0].from_name == "Bob"
    assert plan.transfers[0].to_name == "Alice"
    assert plan.residual == 0
    assert plan.is_complete


def test_build_plan_after_partial_settlement(group, dinner, make_settlement):
    snapshot = LedgerService.compute_balances(group, [dinner], [make_settlement("b", "a", 100)])

    plan = SettlementService.build_plan(snapshot)

    assert _pairs(plan) == [("c", "a", Decimal("100"))]


def test_build_plan_uneven_split(group, make_expense):
    snapshot = LedgerService.compute_balances(group, [make_expense(100, "a", ["a", "b", "c"])], [])

    plan = SettlementService.build_plan(snapshot)

    assert _pairs(plan) == [("b", "a", Decimal("33.33")), ("c", "a", Decimal("33.33"))]
    assert plan.total_amount() == Decimal("66.66")


def test_build_plan_settled_group_is_empty():
    snapshot = _snapshot({"a": "0.004", "b": "-0.004", "c": "0"})

    plan = SettlementService.build_plan(snapshot)

    assert plan.transfers == []
    assert plan.is_complete


def test_build_plan_empty_snapshot():
    plan = SettlementService.build_plan(_snapshot({}))

    assert plan.transfers == []
    assert plan.residual == 0


def test_build_plan_debtor_split_across_creditors():
    snapshot = _snapshot({"a": "-90", "b": "30", "c": "60"})

    plan = SettlementService.build_plan(snapshot)

    assert _pairs(plan) == [("a", "b", Decimal("30")), ("a", "c", Decimal("60"))]


def test_build_plan_creditor_paid_by_several_debtors():
    snapshot = _snapshot({"a": "-10", "b": "-25.50", "c": "50", "d": "-14.50"})

    plan = SettlementService.build_plan(snapshot)

    assert _pairs(plan) == [
        ("a", "c", Decimal("10")),
        ("b", "c", Decimal("25.50")),
        ("d", "c", Decimal("14.50")),
    ]


def test_build_plan_zeroes_every_balance(group, make_expense, make_settlement):
    expenses = [
        make_expense("87.40", "a", ["a", "b", "c"]),
        make_expense("19.99", "b", ["b", "c"]),
        make_expense("250", "c", ["a", "b", "c"]),
        make_expense("3.01", "a", ["b"]),
    ]
    settlements = [make_settlement("b", "c", "40"), make_settlement("a", "c", "12.34")]
    snapshot = LedgerService.compute_balances(group, expenses, settlements)

    plan = SettlementService.build_plan(snapshot)
    after = SettlementService.apply_plan(snapshot, plan)

    assert plan.transfers
    assert all(t.amount > 0 for t in plan.transfers)
    assert all(is_settled(balance) for balance in after.values())


def test_build_plan_is_deterministic():
    snapshot = _snapshot({"a": "-12.5", "b": "40", "c": "-7.5", "d": "-20"})

    first = SettlementService.build_plan(snapshot)
    second = SettlementService.build_plan(snapshot)

    assert first.transfers == second.transfers


def test_build_plan_reports_inconsistent_snapshot(caplog):
    # Balances sum to -20: somebody's expense went missing upstream
    snapshot = _snapshot({"a": "-50", "b": "30"})

    with caplog.at_level(logging.WARNING):
        plan = SettlementService.build_plan(snapshot)

    assert _pairs(plan) == [("a", "b", Decimal("30"))]
    assert plan.residual == Decimal("-20")
    assert plan.unsettled == {"a": Decimal("-20")}
    assert not plan.is_complete
    assert "incomplete" in caplog.text


def test_build_plan_does_not_touch_snapshot():
    snapshot = _snapshot({"a": "-5", "b": "5"})

    SettlementService.build_plan(snapshot)

    assert snapshot.balances == {"a": Decimal("-5"), "b": Decimal("5")}


def test_plan_for_member():
    snapshot = _snapshot({"a": "-10", "b": "-20", "c": "30"})
    plan = SettlementService.build_plan(snapshot)

    assert _pairs_of(SettlementService.plan_for_member(plan, "a")) == [("a", "c")]
    assert len(SettlementService.plan_for_member(plan, "c")) == 2
    assert SettlementService.plan_for_member(plan, "zed") == []


def test_record_transfer(group, dinner):
    plan = SettlementService.build_plan(LedgerService.compute_balances(group, [dinner], []))

    settlement = SettlementService.record_transfer(
        group.id, plan.transfers[0], payment_method="Cash", notes="Thanks!"
    )

    assert settlement.group_id == "trip"
    assert settlement.from_member == "b"
    assert settlement.to_member == "a"
    assert settlement.amount == Decimal("100")
    assert settlement.payment_method == "Cash"

    # Recording it brings Bob to zero
    snapshot = LedgerService.compute_balances(group, [dinner], [settlement])
    assert snapshot.balances["b"] == 0


def test_settlement_queries(make_settlement):
    settlements = [
        make_settlement("b", "a", 20),
        make_settlement("b", "a", "5.50"),
        make_settlement("a", "b", 3),
        make_settlement("c", "a", 10),
        make_settlement("b", "a", 100, group_id="other"),
    ]

    assert len(SettlementService.settlements_for_member(settlements, "b")) == 4
    assert len(SettlementService.settlements_for_member(settlements, "b", group_id="trip")) == 3
    assert len(SettlementService.settlements_between(settlements, "b", "a", group_id="trip")) == 2
    assert SettlementService.total_settled(settlements, "b", "a", group_id="trip") == Decimal("25.50")
    assert SettlementService.total_settled(settlements, "b", "a") == Decimal("125.50")
    assert SettlementService.total_settled(settlements, "c", "b") == 0


def test_apply_plan_rejects_foreign_transfer():
    snapshot = _snapshot({"a": "-5", "b": "5"})
    plan = SettlementPlan(group_id="g", transfers=[
        Transfer(from_member="a", from_name="A", to_member="zed", to_name="Z", amount=Decimal("5"))
    ])

    with pytest.raises(UnknownMemberError):
        SettlementService.apply_plan(snapshot, plan)


def test_snapshot_requires_a_member_for_every_balance():
    with pytest.raises(ValidationError, match="Unknown member in snapshot"):
        BalanceSnapshot(group_id="g", members={}, balances={"a": Decimal("-5"), "b": Decimal("5")})


def test_snapshot_requires_a_balance_for_every_member():
    with pytest.raises(ValidationError, match="members without balance \\['b'\\]"):
        BalanceSnapshot(
            group_id="g",
            members={"a": Member(id="a", name="A"), "b": Member(id="b", name="B")},
            balances={"a": Decimal("0")},
        )
