"""
Tests for buying and selling through a curve instance.

Covers the fee path, refunds, preconditions, the reentrancy guard and
rollback of failed operations.
"""

import asyncio

import pytest

from launchpad.errors import (
    InsufficientFunds,
    InvariantViolation,
    SlippageExceeded,
    StateError,
    ValidationError,
)
from launchpad.models import CurveEventType, TokensPurchased, TokensSold

from .conftest import ADMIN, ALICE, BOB, FUNDING, PLATFORM, ZERO_TRADING_FEES

# buy_cost(0, 10) at SCALE=1, base 1000, slope 100
COST_10 = 15_000
FEE_10 = 150


# ==================== Buy Tests ====================


class TestBuy:
    """Tests for BondingCurveToken.buy."""

    @pytest.mark.asyncio
    async def test_buy_mints_and_charges(self, token, funded):
        result = await token.buy(ALICE, 10, payment=16_000)

        assert result.minted == 10
        assert result.cost == COST_10
        assert result.fee == FEE_10
        assert result.refund == 16_000 - COST_10 - FEE_10
        assert result.new_supply == 10
        assert result.graduated is False

        assert token.balance_of(ALICE) == 10
        assert token.total_supply == 10
        assert token.total_raised == COST_10
        assert funded.balance_of(ALICE) == FUNDING - COST_10 - FEE_10
        assert funded.balance_of(PLATFORM) == FEE_10
        assert funded.balance_of(token.address) == COST_10
        assert token.total_fees_collected == FEE_10

    @pytest.mark.asyncio
    async def test_buy_emits_purchase_record(self, token, funded):
        await token.buy(ALICE, 10, payment=16_000)

        events = [e for e in token.events if e.event_type == CurveEventType.TOKENS_PURCHASED]
        assert len(events) == 1
        record = events[0]
        assert isinstance(record, TokensPurchased)
        assert (record.buyer, record.amount, record.cost, record.new_supply) == (
            ALICE,
            10,
            COST_10,
            10,
        )

    @pytest.mark.asyncio
    async def test_exact_payment_has_no_refund(self, token, funded):
        result = await token.buy(ALICE, 10, payment=COST_10 + FEE_10)
        assert result.refund == 0

    @pytest.mark.asyncio
    async def test_payment_below_total(self, token, funded):
        before = token.snapshot()
        with pytest.raises(InsufficientFunds):
            await token.buy(ALICE, 10, payment=COST_10)
        assert token.snapshot() == before
        assert funded.balance_of(ALICE) == FUNDING

    @pytest.mark.asyncio
    async def test_balance_below_payment(self, token, funded):
        poor = "0x" + "7" * 40
        await funded.mint(poor, 100)
        with pytest.raises(InsufficientFunds):
            await token.buy(poor, 10, payment=16_000)
        assert funded.balance_of(poor) == 100

    @pytest.mark.asyncio
    async def test_zero_amount(self, token, funded):
        with pytest.raises(ValidationError):
            await token.buy(ALICE, 0, payment=16_000)

    @pytest.mark.asyncio
    async def test_paused(self, make_token, gate, funded):
        token = make_token(gate=gate)
        gate.pause(ADMIN)
        with pytest.raises(StateError, match="paused"):
            await token.buy(ALICE, 10, payment=16_000)

    @pytest.mark.asyncio
    async def test_blocked_buyer(self, make_token, gate, funded):
        token = make_token(gate=gate)
        gate.block_account(ADMIN, ALICE)
        with pytest.raises(StateError, match="blocked"):
            await token.buy(ALICE, 10, payment=16_000)
        result = await token.buy(BOB, 10, payment=16_000)
        assert result.minted == 10


# ==================== Sell Tests ====================


class TestSell:
    """Tests for BondingCurveToken.sell."""

    @pytest.mark.asyncio
    async def test_sell_burns_and_pays(self, token, funded):
        await token.buy(ALICE, 10, payment=16_000)
        alice_before = funded.balance_of(ALICE)

        result = await token.sell(ALICE, 4, min_proceeds=7_200)

        # sell_proceeds(10, 4) = 4000 + floor(400 * 16 / 2)
        assert result.proceeds == 7_200
        assert result.fee == 72
        assert result.net_proceeds == 7_128
        assert result.new_supply == 6
        assert token.total_raised == COST_10 - 7_200
        assert token.balance_of(ALICE) == 6
        assert funded.balance_of(ALICE) == alice_before + 7_128
        assert funded.balance_of(PLATFORM) == FEE_10 + 72
        assert funded.balance_of(token.address) == token.total_raised

    @pytest.mark.asyncio
    async def test_sell_emits_sale_record(self, token, funded):
        await token.buy(ALICE, 10, payment=16_000)
        await token.sell(ALICE, 4)

        record = token.events[-1]
        assert isinstance(record, TokensSold)
        assert (record.seller, record.amount, record.proceeds, record.new_supply) == (
            ALICE,
            4,
            7_200,
            6,
        )

    @pytest.mark.asyncio
    async def test_slippage_exceeded(self, token, funded):
        await token.buy(ALICE, 10, payment=16_000)
        before = token.snapshot()
        with pytest.raises(SlippageExceeded):
            await token.sell(ALICE, 4, min_proceeds=7_201)
        assert token.snapshot() == before
        assert token.balance_of(ALICE) == 10

    @pytest.mark.asyncio
    async def test_sell_more_than_held(self, token, funded):
        await token.buy(ALICE, 10, payment=16_000)
        await token.buy(BOB, 5, payment=20_000)
        with pytest.raises(InsufficientFunds):
            await token.sell(ALICE, 11)

    @pytest.mark.asyncio
    async def test_retained_capital_shortfall_is_fatal(self, token, funded):
        await token.buy(ALICE, 10, payment=16_000)
        token._state.total_raised = 100
        with pytest.raises(InvariantViolation):
            await token.sell(ALICE, 4)
        assert token.balance_of(ALICE) == 10

    @pytest.mark.asyncio
    async def test_zero_fee_round_trip_never_profits(self, fee_free_token, funded):
        await fee_free_token.buy(ALICE, 7, payment=FUNDING)
        await fee_free_token.sell(ALICE, 7)
        assert funded.balance_of(ALICE) <= FUNDING
        assert fee_free_token.total_supply == 0

    @pytest.mark.asyncio
    async def test_raised_tracks_costs_minus_proceeds(self, token, funded):
        costs = 0
        proceeds = 0
        for buyer, amount in ((ALICE, 10), (BOB, 7), (ALICE, 3)):
            costs += (await token.buy(buyer, amount, payment=funded.balance_of(buyer))).cost
        for seller, amount in ((ALICE, 5), (BOB, 2)):
            proceeds += (await token.sell(seller, amount)).proceeds
        assert token.total_raised == costs - proceeds
        assert funded.balance_of(token.address) == token.total_raised


# ==================== Reentrancy & Atomicity Tests ====================


class TestReentrancyAndAtomicity:
    """Tests for the reentrancy guard and rollback."""

    @pytest.mark.asyncio
    async def test_reentrant_buy_aborts_outer_buy(self, token, funded):
        async def reenter(sender, amount):
            await token.buy(ALICE, 1, payment=5_000)

        funded.set_receive_hook(ALICE, reenter)
        before = token.snapshot()

        with pytest.raises(StateError, match="Re-entrant"):
            await token.buy(ALICE, 10, payment=16_000)

        assert token.snapshot() == before
        assert funded.balance_of(ALICE) == FUNDING
        assert token.events == []

    @pytest.mark.asyncio
    async def test_reentry_attempt_is_rejected_while_hook_sees_final_state(self, token, funded):
        observed = {}

        async def reenter(sender, amount):
            observed["supply"] = token.total_supply
            observed["raised"] = token.total_raised
            try:
                await token.sell(ALICE, 1)
            except StateError as e:
                observed["error"] = str(e)

        funded.set_receive_hook(ALICE, reenter)
        await token.buy(ALICE, 10, payment=16_000)

        assert observed["supply"] == 10
        assert observed["raised"] == COST_10
        assert "Re-entrant" in observed["error"]
        assert token.balance_of(ALICE) == 10

    @pytest.mark.asyncio
    async def test_failing_recipient_rolls_back_everything(self, token, funded):
        async def explode(sender, amount):
            raise RuntimeError("recipient rejected transfer")

        funded.set_receive_hook(PLATFORM, explode)
        before = token.snapshot()

        with pytest.raises(RuntimeError):
            await token.buy(ALICE, 10, payment=16_000)

        assert token.snapshot() == before
        assert token.balance_of(ALICE) == 0
        assert funded.balance_of(ALICE) == FUNDING
        assert funded.balance_of(PLATFORM) == 0
        assert token.total_fees_collected == 0
        assert token.events == []

    @pytest.mark.asyncio
    async def test_concurrent_buys_are_serialized(self, token, funded):
        await asyncio.gather(
            token.buy(ALICE, 10, payment=FUNDING),
            token.buy(BOB, 10, payment=FUNDING),
        )
        assert token.total_supply == 20
        # buy_cost(0, 20) == buy_cost(0, 10) + buy_cost(10, 10) at SCALE=1
        assert token.total_raised == 40_000

    @pytest.mark.asyncio
    async def test_price_non_decreasing_across_buys(self, token, funded):
        prices = [token.get_price()]
        for _ in range(5):
            await token.buy(ALICE, 3, payment=funded.balance_of(ALICE))
            prices.append(token.get_price())
        assert prices == sorted(prices)


# ==================== Cross-instance Tests ====================


class TestCrossInstanceIsolation:
    """Tests for instances sharing one settlement ledger and venue."""

    @pytest.fixture
    def token_b(self, make_token):
        return make_token(fee_config=ZERO_TRADING_FEES)

    def test_instances_share_one_guard(self, token, token_b):
        assert token._guard is token_b._guard

    @pytest.mark.asyncio
    async def test_hook_cannot_trade_another_instance(self, token, token_b, funded):
        attempts = []

        async def buy_other_then_fail(sender, amount):
            try:
                await token_b.buy(ALICE, 10, payment=10**6)
            except StateError as e:
                attempts.append(str(e))
            raise RuntimeError("recipient rejected refund")

        funded.set_receive_hook(ALICE, buy_other_then_fail)
        before_a, before_b = token.snapshot(), token_b.snapshot()

        with pytest.raises(RuntimeError):
            await token.buy(ALICE, 10, payment=10**6)

        assert len(attempts) == 1
        assert "Re-entrant" in attempts[0]
        assert token.snapshot() == before_a
        assert token_b.snapshot() == before_b
        assert token_b.balance_of(ALICE) == 0
        assert funded.balance_of(token_b.address) == 0
        assert funded.balance_of(ALICE) == FUNDING

    @pytest.mark.asyncio
    async def test_rejected_hook_call_leaves_outer_buy_intact(self, token, token_b, funded):
        async def try_other(sender, amount):
            with pytest.raises(StateError):
                await token_b.buy(ALICE, 10, payment=10**6)

        funded.set_receive_hook(ALICE, try_other)
        await token.buy(ALICE, 10, payment=10**6)

        assert token.total_raised == COST_10
        assert token.balance_of(ALICE) == 10
        assert token_b.total_supply == 0
        assert funded.balance_of(ALICE) == FUNDING - COST_10 - FEE_10

    @pytest.mark.asyncio
    async def test_rollback_spares_concurrent_trade_on_other_instance(
        self, token, token_b, funded
    ):
        async def slow_reject(sender, amount):
            for _ in range(3):
                await asyncio.sleep(0)
            raise RuntimeError("recipient rejected refund")

        funded.set_receive_hook(ALICE, slow_reject)

        results = await asyncio.gather(
            token.buy(ALICE, 10, payment=10**6),
            token_b.buy(BOB, 10, payment=10**6),
            return_exceptions=True,
        )

        assert isinstance(results[0], RuntimeError)
        assert results[1].minted == 10
        assert token.total_supply == 0
        assert token_b.total_raised == COST_10
        assert funded.balance_of(token_b.address) == token_b.total_raised
        assert funded.balance_of(BOB) == FUNDING - COST_10
        assert funded.balance_of(ALICE) == FUNDING
