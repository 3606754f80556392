"""
Trade Executor

Orchestrates buys and sells against one curve instance:

    quote (PricingEngine) -> fee (FeeLedger) -> supply / capital effects
    -> record -> external transfers -> graduation check

Every precondition is checked before the first mutation. State effects are
applied before any transfer that can run recipient code, so a hook that
observes the instance mid-operation sees the post-trade state. The caller
(the curve token) wraps each trade in the reentrancy guard and an atomic
scope; the executor itself never rolls anything back.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from ..access.gate import AccessGate
from ..errors import (
    InsufficientFunds,
    InvariantViolation,
    SlippageExceeded,
    StateError,
    ValidationError,
)
from ..fees.ledger import FeeLedger
from ..graduation.coordinator import GraduationCoordinator
from ..ledger.base import FungibleLedger
from ..models.curve import TradeState
from ..models.records import SaleResult, TokensPurchased, TokensSold, TradeResult
from ..pricing.engine import PricingEngine, checked_add

if TYPE_CHECKING:
    from ..curve.events import EventLog

logger = structlog.get_logger(__name__)


class TradeExecutor:
    """
    Buy and sell orchestration for a single curve instance.

    The instance's own account (``token_address``) holds the raised
    settlement capital; the asset ledger's total supply is the curve supply.
    """

    def __init__(
        self,
        *,
        token_address: str,
        engine: PricingEngine,
        state: TradeState,
        fees: FeeLedger,
        gate: AccessGate,
        asset: FungibleLedger,
        settlement: FungibleLedger,
        events: EventLog,
        coordinator: GraduationCoordinator,
    ):
        self._address = token_address
        self._engine = engine
        self._state = state
        self._fees = fees
        self._gate = gate
        self._asset = asset
        self._settlement = settlement
        self._events = events
        self._coordinator = coordinator
        self._logger = logger.bind(token=token_address)

    # ==================== Preconditions ====================

    def _require_tradable(self, account: str, amount: int) -> None:
        if self._state.has_graduated:
            raise StateError("Token has graduated; trade on the liquidity venue instead")
        if self._gate.is_paused():
            raise StateError("Trading is paused")
        if amount <= 0:
            raise ValidationError(f"Amount must be greater than zero, got {amount}")
        if not account:
            raise ValidationError("Account address is required")
        if self._gate.is_blocked(account):
            raise StateError(f"Account {account} is blocked")

    # ==================== Buy ====================

    async def buy(self, buyer: str, amount: int, payment: int) -> TradeResult:
        """
        Mint ``amount`` to ``buyer`` against ``payment`` settlement units.

        The buyer pays curve cost plus the buy fee; any excess is refunded.
        """
        self._require_tradable(buyer, amount)
        if payment < 0:
            raise ValidationError(f"Payment cannot be negative, got {payment}")

        supply = self._asset.total_supply
        cost = self._engine.buy_cost(supply, amount)
        fee = self._fees.buy_fee(cost)
        total = checked_add(cost, fee)

        if payment < total:
            raise InsufficientFunds(f"Payment {payment} below cost {cost} plus fee {fee}")
        balance = self._settlement.balance_of(buyer)
        if balance < payment:
            raise InsufficientFunds(f"{buyer} holds {balance}, cannot pay {payment}")

        # Effects
        await self._settlement.transfer(buyer, self._address, payment)
        await self._asset.mint(buyer, amount)
        self._state.total_raised = checked_add(self._state.total_raised, cost)
        self._fees.record_collected(fee)
        new_supply = supply + amount

        self._events.append(
            TokensPurchased(
                token_address=self._address,
                buyer=buyer,
                amount=amount,
                cost=cost,
                fee=fee,
                new_supply=new_supply,
            )
        )

        # Interactions
        refund = payment - total
        if fee > 0:
            await self._settlement.transfer(self._address, self._fees.fee_collector, fee)
        if refund > 0:
            await self._settlement.transfer(self._address, buyer, refund)

        self._logger.info(
            "tokens_purchased",
            buyer=buyer,
            amount=amount,
            cost=cost,
            fee=fee,
            new_supply=new_supply,
        )

        graduation = await self._coordinator.check_graduation()

        return TradeResult(
            minted=amount,
            cost=cost,
            fee=fee,
            refund=refund,
            new_supply=new_supply,
            graduated=graduation is not None,
        )

    # ==================== Sell ====================

    async def sell(self, seller: str, amount: int, min_proceeds: int = 0) -> SaleResult:
        """
        Burn ``amount`` from ``seller`` and pay out curve proceeds net of the sell fee.

        Raises SlippageExceeded when gross proceeds fall below ``min_proceeds``.
        """
        self._require_tradable(seller, amount)
        held = self._asset.balance_of(seller)
        if held < amount:
            raise InsufficientFunds(f"{seller} holds {held} tokens, cannot sell {amount}")

        supply = self._asset.total_supply
        proceeds = self._engine.sell_proceeds(supply, amount)
        if proceeds < min_proceeds:
            raise SlippageExceeded(f"Proceeds {proceeds} below minimum {min_proceeds}")

        fee = self._fees.sell_fee(proceeds)
        net = proceeds - fee

        retained = self._settlement.balance_of(self._address)
        if self._state.total_raised < proceeds or retained < proceeds:
            self._logger.error(
                "retained_capital_short",
                total_raised=self._state.total_raised,
                retained=retained,
                proceeds=proceeds,
            )
            raise InvariantViolation(
                f"Retained capital {min(retained, self._state.total_raised)} "
                f"cannot cover proceeds {proceeds}"
            )

        # Effects
        await self._asset.burn(seller, amount)
        self._state.total_raised -= proceeds
        self._fees.record_collected(fee)
        new_supply = supply - amount

        self._events.append(
            TokensSold(
                token_address=self._address,
                seller=seller,
                amount=amount,
                proceeds=proceeds,
                fee=fee,
                net_proceeds=net,
                new_supply=new_supply,
            )
        )

        # Interactions
        if fee > 0:
            await self._settlement.transfer(self._address, self._fees.fee_collector, fee)
        if net > 0:
            await self._settlement.transfer(self._address, seller, net)

        self._logger.info(
            "tokens_sold",
            seller=seller,
            amount=amount,
            proceeds=proceeds,
            fee=fee,
            new_supply=new_supply,
        )

        return SaleResult(
            burned=amount,
            proceeds=proceeds,
            fee=fee,
            net_proceeds=net,
            new_supply=new_supply,
        )
