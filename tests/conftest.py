from decimal import Decimal

import pytest

from settlr.models.expense import Expense
from settlr.models.member import Group, Member
from settlr.models.settlement import Settlement


@pytest.fixture
def members():
    """Alice, Bob and Charlie, in group order."""
    return [
        Member(id="a", name="Alice"),
        Member(id="b", name="Bob"),
        Member(id="c", name="Charlie"),
    ]


@pytest.fixture
def group(members):
    return Group(id="trip", name="Weekend Trip", members=members)


@pytest.fixture
def make_expense(group):
    """Factory for expenses in the default group."""
    def _make(amount, payer, participants, **kwargs):
        kwargs.setdefault("group_id", group.id)
        return Expense(amount=amount, payer=payer, participants=participants, **kwargs)
    return _make


@pytest.fixture
def make_settlement(group):
    """Factory for settlements in the default group."""
    def _make(from_member, to_member, amount, **kwargs):
        kwargs.setdefault("group_id", group.id)
        return Settlement(from_member=from_member, to_member=to_member, amount=amount, **kwargs)
    return _make


@pytest.fixture
def dinner(make_expense):
    # Alice pays 300, split between all three
    return make_expense(Decimal("300"), "a", ["a", "b", "c"], description="Dinner")
