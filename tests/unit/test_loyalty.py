"""Unit tests for points redemption math and the redemption commit."""

import uuid
from decimal import Decimal

import pytest
from services.ordering_service.loyalty import (
    InsufficientPoints,
    PointsDebit,
    apply_redemption,
    commit_redemption,
    max_redeemable,
    points_to_earn,
)
from tests.fakes import FakeLedger

CASES = [
    # subtotal, balance, requested
    ("100.00", "150.00", "200"),
    ("100.00", "30.00", "20"),
    ("100.00", "30.00", "-5"),
    ("0", "50", "10"),
    ("12.34", "12.35", "12.34"),
    ("45.10", "0", "0"),
]


@pytest.mark.unit
def test_redemption_larger_than_subtotal_is_clamped():
    quote = apply_redemption(Decimal("100.00"), Decimal("200"), Decimal("150.00"))

    assert quote.accepted == Decimal("100.00")
    assert quote.clamped is True
    assert quote.final_total == Decimal("0.00")


@pytest.mark.unit
@pytest.mark.parametrize("subtotal,balance,requested", CASES)
def test_redemption_invariants(subtotal, balance, requested):
    s, p, r = Decimal(subtotal), Decimal(balance), Decimal(requested)

    ceiling = max_redeemable(s, p)
    quote = apply_redemption(s, r, p)

    assert ceiling == min(s, p)
    assert ceiling >= 0
    assert 0 <= quote.accepted <= ceiling
    assert quote.final_total == s - quote.accepted
    assert quote.final_total >= 0
    assert quote.clamped == (r < 0 or r > ceiling)


@pytest.mark.unit
def test_request_within_range_is_taken_as_is():
    quote = apply_redemption(Decimal("80.00"), Decimal("12.5"), Decimal("40"))

    assert quote.accepted == Decimal("12.5")
    assert quote.final_total == Decimal("67.50")
    assert quote.clamped is False


@pytest.mark.unit
def test_negative_request_is_clamped_to_zero():
    quote = apply_redemption(Decimal("80.00"), Decimal("-10"), Decimal("40"))

    assert quote.accepted == Decimal("0")
    assert quote.final_total == Decimal("80.00")
    assert quote.clamped is True


@pytest.mark.unit
def test_precision_is_kept_across_repeated_redemptions():
    total = Decimal("100")
    for _ in range(3):
        total = apply_redemption(total, Decimal("33.333"), Decimal("1000")).final_total

    assert total == Decimal("0.001")


@pytest.mark.asyncio
@pytest.mark.unit
async def test_commit_debits_the_ledger():
    ledger = FakeLedger({"u1": "50"})
    order_id = uuid.uuid4()

    result = await commit_redemption(ledger, "u1", order_id, Decimal("20"))

    assert isinstance(result, PointsDebit)
    assert result.points == Decimal("20")
    assert result.balance_after == Decimal("30")
    assert ledger.history[0].order_id == order_id
    assert ledger.history[0].points == Decimal("-20")


@pytest.mark.asyncio
@pytest.mark.unit
async def test_commit_fails_when_balance_was_spent_elsewhere():
    """A quote computed against 50 points cannot overdraw after a concurrent spend."""
    ledger = FakeLedger({"u1": "50"})
    quote = apply_redemption(Decimal("100"), Decimal("50"), await ledger.get_balance("u1"))

    ledger.balances["u1"] = Decimal("10")
    result = await commit_redemption(ledger, "u1", uuid.uuid4(), quote.accepted)

    assert isinstance(result, InsufficientPoints)
    assert result.requested == Decimal("50")
    assert result.available == Decimal("10")
    assert result.status_code == 409
    assert ledger.balances["u1"] == Decimal("10")
    assert ledger.history == []


@pytest.mark.asyncio
@pytest.mark.unit
async def test_commit_of_zero_points_skips_the_ledger_write():
    ledger = FakeLedger({"u1": "50"})

    result = await commit_redemption(ledger, "u1", uuid.uuid4(), Decimal("0"))

    assert result.points == Decimal("0")
    assert result.balance_after == Decimal("50")
    assert ledger.debit_calls == 0


@pytest.mark.unit
def test_points_to_earn():
    rate, minimum = Decimal("5"), Decimal("50")

    assert points_to_earn(Decimal("49.99"), rate, minimum) == Decimal("0")
    assert points_to_earn(Decimal("50"), rate, minimum) == Decimal("2.50")
    assert points_to_earn(Decimal("123.45"), rate, minimum) == Decimal("6.17")
