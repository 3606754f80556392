"""
Graduation Coordinator

Watches the market-cap threshold and performs the one-shot migration of a
curve's capital into the external liquidity venue.

Migration is two-phase with explicit compensation:

1. Prepare: mint the liquidity tokens to the instance account and approve
   the venue for those tokens and the liquidity share of raised capital.
2. Commit: call the venue. If the call raises, issues no receipt, or uses
   less than the slippage-bounded minimums, every prepared step is undone
   (liquidity the venue did take is removed, minted tokens are burned,
   allowances revoked) and ExternalVenueFailure is raised. Supply, raised
   capital and status are then exactly what they were before.

On success the instance flips to GRADUATED permanently and the residual
capital is paid to the creator and the platform fee collector.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from ..clock import Clock, to_datetime
from ..errors import ExternalVenueFailure, InvariantViolation, StateError
from ..fees.ledger import FeeLedger
from ..ledger.base import FungibleLedger
from ..models.base import CurveStatus
from ..models.curve import GraduationProgress, TradeState
from ..models.records import (
    GraduationFailed,
    GraduationResult,
    GraduationTriggered,
    LiquidityAdded,
)
from ..monitoring.logging import log_duration
from ..pricing.engine import BPS_DENOMINATOR, PricingEngine, mul_div
from ..venue.base import AddLiquidityRequest, LiquidityResult, LiquidityVenue, VenueError

if TYPE_CHECKING:
    from ..curve.events import EventLog

logger = structlog.get_logger(__name__)


class GraduationCoordinator:
    """
    Active -> Graduated state machine of one curve instance.

    Example:
        ```python
        result = await coordinator.check_graduation()
        if result:
            print(f"Migrated into {result.pool_address}")
        ```
    """

    def __init__(
        self,
        *,
        token_address: str,
        creator: str,
        engine: PricingEngine,
        state: TradeState,
        fees: FeeLedger,
        asset: FungibleLedger,
        settlement: FungibleLedger,
        venue: LiquidityVenue,
        clock: Clock,
        events: EventLog,
        slippage_bps: int = 500,
        deadline_seconds: int = 300,
    ):
        self._address = token_address
        self._creator = creator
        self._engine = engine
        self._state = state
        self._fees = fees
        self._asset = asset
        self._settlement = settlement
        self._venue = venue
        self._clock = clock
        self._events = events
        self._slippage_bps = slippage_bps
        self._deadline_seconds = deadline_seconds
        self._logger = logger.bind(token=token_address)

    def progress(self) -> GraduationProgress:
        """Progress toward the threshold; complete once graduated."""
        if self._state.has_graduated:
            return GraduationProgress(progress_bps=BPS_DENOMINATOR, remaining=0)
        return self._engine.graduation_progress(self._asset.total_supply)

    # ==================== Triggers ====================

    async def check_graduation(self) -> GraduationResult | None:
        """
        Migrate if the threshold is reached. Called at the end of every buy.

        A venue failure here does not abort the trade that triggered the
        check: the attempt is compensated, recorded as a GraduationFailed
        event and retried on the next check.
        """
        if self._state.has_graduated:
            return None
        if not self._engine.reaches_threshold(self._asset.total_supply):
            return None
        if self._fees.liquidity_capital(self._state.total_raised) == 0:
            self._logger.warning("graduation_skipped", reason="no liquidity capital")
            return None

        try:
            return await self.migrate()
        except ExternalVenueFailure as e:
            self._logger.warning("graduation_deferred", reason=str(e))
            self._events.append(GraduationFailed(token_address=self._address, reason=str(e)))
            return None

    async def force_graduate(self) -> GraduationResult:
        """Migrate regardless of market cap. Authorization is the caller's concern."""
        if self._state.has_graduated:
            raise StateError("Token has already graduated")
        return await self.migrate(forced=True)

    # ==================== Migration ====================

    def _minimum(self, desired: int) -> int:
        return mul_div(desired, BPS_DENOMINATOR - self._slippage_bps, BPS_DENOMINATOR)

    async def migrate(self, forced: bool = False) -> GraduationResult:
        if self._state.has_graduated:
            raise StateError("Token has already graduated")

        supply = self._asset.total_supply
        raised = self._state.total_raised
        if supply == 0:
            raise StateError("Cannot graduate with zero supply")
        capital = self._fees.liquidity_capital(raised)
        if capital == 0:
            raise StateError("Cannot graduate with zero liquidity capital")

        retained = self._settlement.balance_of(self._address)
        if retained < raised:
            raise InvariantViolation(f"Retained capital {retained} below total raised {raised}")

        market_cap = self._engine.market_cap(supply)

        try:
            pool_address = await self._venue.resolve_or_create_pool(
                self._asset.asset_id, self._settlement.asset_id
            )
        except Exception as e:
            self._logger.error("pool_resolution_failed", error=str(e))
            raise ExternalVenueFailure(f"Could not resolve liquidity pool: {e}") from e

        # Phase 1: prepare
        token_amount = supply
        await self._asset.mint(self._address, token_amount)
        await self._asset.approve(self._address, self._venue.address, token_amount)
        await self._settlement.approve(self._address, self._venue.address, capital)

        request = AddLiquidityRequest(
            pool_address=pool_address,
            token_a=self._asset.asset_id,
            token_b=self._settlement.asset_id,
            amount_a_desired=token_amount,
            amount_b_desired=capital,
            amount_a_min=self._minimum(token_amount),
            amount_b_min=self._minimum(capital),
            payer=self._address,
            recipient=self._address,
            deadline=self._clock.now() + self._deadline_seconds,
        )

        # Phase 2: commit or compensate
        result: LiquidityResult | None = None
        try:
            with log_duration(self._logger, "venue_add_liquidity", pool=pool_address):
                result = await self._venue.add_liquidity(request)
            self._verify(request, result)
        except Exception as e:
            await self._compensate(pool_address, result, supply, retained)
            self._logger.error(
                "liquidity_migration_failed",
                pool=pool_address,
                error=str(e),
                forced=forced,
            )
            raise ExternalVenueFailure(f"Liquidity venue rejected migration: {e}") from e

        return await self._finalize(
            pool_address=pool_address,
            result=result,
            token_amount=token_amount,
            supply=supply,
            raised=raised,
            market_cap=market_cap,
            forced=forced,
        )

    @staticmethod
    def _verify(request: AddLiquidityRequest, result: LiquidityResult) -> None:
        if result.receipt <= 0:
            raise VenueError(f"Venue issued a non-positive receipt ({result.receipt})")
        if result.amount_a < request.amount_a_min or result.amount_b < request.amount_b_min:
            raise VenueError(
                f"Venue used {result.amount_a}/{result.amount_b}, "
                f"below minimums {request.amount_a_min}/{request.amount_b_min}"
            )
        if result.amount_a > request.amount_a_desired or result.amount_b > request.amount_b_desired:
            raise VenueError("Venue used more than the desired amounts")

    async def _revoke_allowances(self) -> None:
        await self._asset.approve(self._address, self._venue.address, 0)
        await self._settlement.approve(self._address, self._venue.address, 0)

    async def _compensate(
        self,
        pool_address: str,
        result: LiquidityResult | None,
        supply_before: int,
        retained_before: int,
    ) -> None:
        """Undo every prepared step of a failed migration."""
        try:
            if result is not None and result.receipt > 0:
                await self._venue.remove_liquidity(
                    pool_address, result.receipt, self._address, self._address
                )
            leftover = self._asset.balance_of(self._address)
            if leftover > 0:
                await self._asset.burn(self._address, leftover)
            await self._revoke_allowances()
        except Exception as e:
            self._logger.critical("migration_compensation_failed", error=str(e))
            raise InvariantViolation(f"Could not compensate failed migration: {e}") from e

        supply_after = self._asset.total_supply
        retained_after = self._settlement.balance_of(self._address)
        if supply_after != supply_before or retained_after != retained_before:
            self._logger.critical(
                "migration_compensation_incomplete",
                supply_before=supply_before,
                supply_after=supply_after,
                retained_before=retained_before,
                retained_after=retained_after,
            )
            raise InvariantViolation(
                f"Compensation left supply {supply_after} (expected {supply_before}) "
                f"and capital {retained_after} (expected {retained_before})"
            )
        self._logger.info("migration_compensated", pool=pool_address)

    async def _finalize(
        self,
        *,
        pool_address: str,
        result: LiquidityResult,
        token_amount: int,
        supply: int,
        raised: int,
        market_cap: int,
        forced: bool,
    ) -> GraduationResult:
        # tokens the venue did not take stay with the instance; supply stays doubled
        unused = token_amount - result.amount_a
        await self._revoke_allowances()

        self._state.status = CurveStatus.GRADUATED
        self._state.pool_address = pool_address
        self._state.liquidity_receipt = result.receipt
        self._state.graduated_at = to_datetime(self._clock.now())

        residual = raised - result.amount_b
        creator_amount = min(self._fees.creator_share(raised), residual)
        platform_amount = residual - creator_amount

        self._events.append(
            GraduationTriggered(
                token_address=self._address,
                supply=supply,
                market_cap=market_cap,
                pool_address=pool_address,
                liquidity_amount=result.amount_b,
                forced=forced,
            )
        )
        self._events.append(
            LiquidityAdded(
                token_address=self._address,
                pool_address=pool_address,
                token_amount=result.amount_a,
                capital_amount=result.amount_b,
                receipt=result.receipt,
            )
        )

        if creator_amount > 0:
            await self._settlement.transfer(self._address, self._creator, creator_amount)
        if platform_amount > 0:
            await self._settlement.transfer(
                self._address, self._fees.fee_collector, platform_amount
            )

        self._logger.info(
            "token_graduated",
            pool=pool_address,
            supply=supply,
            market_cap=market_cap,
            liquidity_tokens=result.amount_a,
            liquidity_capital=result.amount_b,
            creator_amount=creator_amount,
            platform_amount=platform_amount,
            forced=forced,
        )

        return GraduationResult(
            pool_address=pool_address,
            liquidity_token_amount=result.amount_a,
            liquidity_capital=result.amount_b,
            receipt=result.receipt,
            creator_amount=creator_amount,
            platform_amount=platform_amount,
            unused_tokens_retained=unused,
        )
