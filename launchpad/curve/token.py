"""
Bonding Curve Token

One launched asset: composes the pricing engine, fee ledger, trade executor,
graduation coordinator and access gate, and exposes the public operations.

Every state-changing operation runs under the reentrancy guard shared by
all instances on the same settlement ledger or venue, and inside an atomic
scope over the asset ledger, settlement ledger, trade state, fee ledger,
event log and (when it supports snapshots) the venue. An operation that
raises leaves all of them exactly as they were, and no other operation of
the lock domain can commit work inside that scope.

Example:
    ```python
    token = BondingCurveToken(
        name="Launch", symbol="LCH", creator=creator,
        params=CurveParameters(slope=10**14, base_price=10**15,
                               graduation_threshold=5 * 10**17),
        fee_config=FeeConfig(), fee_collector=platform,
        gate=InMemoryAccessGate(owner=admin),
        asset=InMemoryLedger(new_address(), "LCH"),
        settlement=weth, venue=venue,
    )
    result = await token.buy(buyer, 10**18, payment=2 * 10**15)
    ```
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator

import structlog

from ..access.gate import AccessGate
from ..clock import Clock, SystemClock
from ..config import LaunchpadConfig, get_launchpad_config
from ..errors import UnauthorizedError, ValidationError
from ..fees.ledger import FeeConfig, FeeLedger
from ..graduation.coordinator import GraduationCoordinator
from ..ledger.atomic import atomic
from ..ledger.base import FungibleLedger, Snapshottable
from ..models.curve import (
    CurveInfo,
    CurveParameters,
    CurveSnapshot,
    GraduationProgress,
    TradeState,
)
from ..models.records import (
    CurveEvent,
    GraduationResult,
    SaleResult,
    TradeResult,
    TradingFeesUpdated,
)
from ..pricing.engine import PricingEngine
from ..trading.executor import TradeExecutor
from ..trading.guard import ReentrancyGuard
from ..venue.base import LiquidityVenue
from .events import EventLog

logger = structlog.get_logger(__name__)


class BondingCurveToken:
    """
    A single bonding-curve instance.

    The instance account is the asset ledger's id: it holds raised settlement
    capital during trading and the venue receipt after graduation.
    """

    def __init__(
        self,
        *,
        name: str,
        symbol: str,
        creator: str,
        params: CurveParameters,
        fee_config: FeeConfig,
        fee_collector: str,
        gate: AccessGate,
        asset: FungibleLedger,
        settlement: FungibleLedger,
        venue: LiquidityVenue,
        clock: Clock | None = None,
        config: LaunchpadConfig | None = None,
    ):
        if not name or not name.strip():
            raise ValidationError("Token name is required")
        if not symbol or not symbol.strip():
            raise ValidationError("Token symbol is required")
        if not creator:
            raise ValidationError("Creator address is required")
        if asset.asset_id == settlement.asset_id:
            raise ValidationError("Asset and settlement ledgers must differ")

        config = config or get_launchpad_config()

        self._address = asset.asset_id
        self._name = name
        self._symbol = symbol
        self._creator = creator
        self._params = params
        self._gate = gate
        self._asset = asset
        self._settlement = settlement
        self._venue = venue

        self._engine = PricingEngine(params)
        self._state = TradeState()
        self._fees = FeeLedger(fee_config, fee_collector)
        self._events = EventLog()
        self._guard = ReentrancyGuard.shared(asset, settlement, venue)

        self._coordinator = GraduationCoordinator(
            token_address=self._address,
            creator=creator,
            engine=self._engine,
            state=self._state,
            fees=self._fees,
            asset=asset,
            settlement=settlement,
            venue=venue,
            clock=clock or SystemClock(),
            events=self._events,
            slippage_bps=config.liquidity_slippage_bps,
            deadline_seconds=config.liquidity_deadline_seconds,
        )
        self._executor = TradeExecutor(
            token_address=self._address,
            engine=self._engine,
            state=self._state,
            fees=self._fees,
            gate=gate,
            asset=asset,
            settlement=settlement,
            events=self._events,
            coordinator=self._coordinator,
        )
        self._logger = logger.bind(token=self._address, symbol=symbol)

    # ==================== Identity ====================

    @property
    def address(self) -> str:
        return self._address

    @property
    def name(self) -> str:
        return self._name

    @property
    def symbol(self) -> str:
        return self._symbol

    @property
    def creator(self) -> str:
        return self._creator

    @property
    def params(self) -> CurveParameters:
        return self._params

    @property
    def gate(self) -> AccessGate:
        return self._gate

    # ==================== State ====================

    @property
    def total_supply(self) -> int:
        return self._asset.total_supply

    @property
    def total_raised(self) -> int:
        return self._state.total_raised

    @property
    def has_graduated(self) -> bool:
        return self._state.has_graduated

    @property
    def pool_address(self) -> str | None:
        return self._state.pool_address

    @property
    def fee_collector(self) -> str:
        return self._fees.fee_collector

    @property
    def total_fees_collected(self) -> int:
        return self._fees.total_fees_collected

    @property
    def events(self) -> list[CurveEvent]:
        return self._events.all()

    def balance_of(self, account: str) -> int:
        return self._asset.balance_of(account)

    def snapshot(self) -> CurveSnapshot:
        return CurveSnapshot(
            total_supply=self._asset.total_supply,
            total_raised=self._state.total_raised,
            has_graduated=self._state.has_graduated,
            pool_address=self._state.pool_address,
            liquidity_receipt=self._state.liquidity_receipt,
        )

    # ==================== Quotes ====================

    def get_price(self) -> int:
        return self._engine.price(self._asset.total_supply)

    def get_buy_cost(self, amount: int) -> int:
        """Curve cost of buying ``amount`` now, before the buy fee."""
        return self._engine.buy_cost(self._asset.total_supply, amount)

    def get_sell_proceeds(self, amount: int) -> int:
        """Curve proceeds of selling ``amount`` now, before the sell fee."""
        return self._engine.sell_proceeds(self._asset.total_supply, amount)

    def get_market_cap(self) -> int:
        return self._engine.market_cap(self._asset.total_supply)

    def get_graduation_progress(self) -> GraduationProgress:
        return self._coordinator.progress()

    def get_info(self) -> CurveInfo:
        supply = self._asset.total_supply
        progress = self._coordinator.progress()
        return CurveInfo(
            price=self._engine.price(supply),
            supply=supply,
            market_cap=self._engine.market_cap(supply),
            progress_bps=progress.progress_bps,
            remaining=progress.remaining,
            graduated=self._state.has_graduated,
            pool_address=self._state.pool_address,
        )

    def get_trading_fees(self) -> tuple[int, int]:
        return self._fees.trading_fees()

    def get_fee_distribution(self) -> tuple[int, int, int]:
        return self._fees.fee_distribution()

    # ==================== Operations ====================

    def _participants(self) -> list[Snapshottable]:
        participants: list[Snapshottable] = [
            self._asset,
            self._settlement,
            self._state,
            self._fees,
            self._events,
        ]
        if isinstance(self._venue, Snapshottable):
            participants.append(self._venue)
        return participants

    @asynccontextmanager
    async def _operation(self, name: str) -> AsyncIterator[None]:
        async with self._guard.hold(name):
            async with atomic(*self._participants(), operation=name):
                yield

    def _require_privileged(self, caller: str, action: str) -> None:
        if not self._gate.is_privileged(caller):
            self._logger.warning("unauthorized_call", caller=caller, action=action)
            raise UnauthorizedError(f"{caller} is not allowed to {action}")

    async def buy(self, buyer: str, amount: int, payment: int) -> TradeResult:
        """Buy ``amount`` tokens, paying at most ``payment`` settlement units."""
        async with self._operation("buy"):
            return await self._executor.buy(buyer, amount, payment)

    async def sell(self, seller: str, amount: int, min_proceeds: int = 0) -> SaleResult:
        """Sell ``amount`` tokens back to the curve."""
        async with self._operation("sell"):
            return await self._executor.sell(seller, amount, min_proceeds)

    async def force_graduate(self, caller: str) -> GraduationResult:
        """
        Migrate liquidity regardless of market cap.

        Only privileged callers (the registry, the gate owner) may force
        graduation. Raises ExternalVenueFailure if the venue rejects the
        migration; the instance is then unchanged.
        """
        self._require_privileged(caller, "force graduation")
        async with self._operation("force_graduate"):
            return await self._coordinator.force_graduate()

    async def update_trading_fees(self, caller: str, buy_fee_bps: int, sell_fee_bps: int) -> None:
        """Change trading fees for subsequent trades. Privileged callers only."""
        self._require_privileged(caller, "update trading fees")
        async with self._operation("update_trading_fees"):
            self._fees.update_trading_fees(buy_fee_bps, sell_fee_bps)
            self._events.append(
                TradingFeesUpdated(
                    token_address=self._address,
                    buy_fee_bps=buy_fee_bps,
                    sell_fee_bps=sell_fee_bps,
                )
            )

    async def set_fee_collector(self, caller: str, fee_collector: str) -> None:
        self._require_privileged(caller, "set the fee collector")
        async with self._operation("set_fee_collector"):
            self._fees.fee_collector = fee_collector
        self._logger.info("fee_collector_updated", fee_collector=fee_collector)
