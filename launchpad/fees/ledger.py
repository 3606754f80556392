"""
Fee Ledger

Holds and validates the basis-point fee configuration of one curve
instance and computes fee amounts:

- Trading fees (buy/sell) are charged on top of curve cost or taken out of
  curve proceeds, routed to the platform fee collector immediately and never
  counted in raised capital. They can be changed after creation by a
  privileged party and apply prospectively.
- The graduation split (liquidity / creator / platform) divides raised
  capital at migration time. It is fixed when the instance is created.

Misconfiguration is rejected when written, never clamped and never deferred
to a later read.
"""

from typing import Any, Final

import structlog
from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

from ..errors import ValidationError
from ..models.base import describe_errors
from ..pricing.engine import BPS_DENOMINATOR, mul_div

logger = structlog.get_logger(__name__)

MAX_TRADING_FEE_BPS: Final[int] = 1_000  # 10%
MIN_LIQUIDITY_BPS: Final[int] = 5_000  # 50%
MAX_PLATFORM_BPS: Final[int] = 3_000  # 30%


class FeeConfig(BaseModel):
    """
    Trading fees and graduation split of one instance.

    Standard distribution is 80% liquidity, 10% creator, 10% platform with
    1% trading fees in both directions. Rejected values raise launchpad
    ValidationError.
    """

    buy_fee_bps: int = Field(default=100, description="Fee on buy cost")
    sell_fee_bps: int = Field(default=100, description="Fee on sell proceeds")
    liquidity_bps: int = Field(default=8000, ge=0, description="Share paired into the pool")
    creator_bps: int = Field(default=1000, ge=0, description="Share paid to the creator")
    platform_bps: int = Field(default=1000, ge=0, description="Share paid to the platform")

    model_config = {"frozen": True}

    @field_validator("buy_fee_bps", "sell_fee_bps")
    @classmethod
    def validate_trading_fee(cls, v: int) -> int:
        """Trading fees are capped at 10%."""
        if v < 0 or v > MAX_TRADING_FEE_BPS:
            raise ValueError(f"trading fee must be within [0, {MAX_TRADING_FEE_BPS}] bps")
        return v

    @model_validator(mode="after")
    def validate_split(self) -> "FeeConfig":
        """Ensure the graduation split is complete and within bounds."""
        total = self.liquidity_bps + self.creator_bps + self.platform_bps
        if total != BPS_DENOMINATOR:
            raise ValueError(f"graduation split must sum to {BPS_DENOMINATOR} bps, got {total}")
        if self.liquidity_bps < MIN_LIQUIDITY_BPS:
            raise ValueError(f"liquidity share must be at least {MIN_LIQUIDITY_BPS} bps")
        if self.platform_bps > MAX_PLATFORM_BPS:
            raise ValueError(f"platform share cannot exceed {MAX_PLATFORM_BPS} bps")
        return self

    def __init__(self, **data: Any):
        try:
            super().__init__(**data)
        except PydanticValidationError as e:
            raise ValidationError(describe_errors(type(self), e)) from e


class FeeLedger:
    """
    Per-instance fee configuration and fee accounting.

    Authorization of fee updates is the caller's concern (the curve token
    checks its access gate); the ledger only guarantees that every config it
    holds is valid.
    """

    def __init__(self, config: FeeConfig, fee_collector: str):
        if not fee_collector:
            raise ValidationError("fee collector address is required")
        self._config = config
        self._fee_collector = fee_collector
        self._total_fees_collected = 0

    # ==================== Configuration ====================

    @property
    def config(self) -> FeeConfig:
        return self._config

    @property
    def fee_collector(self) -> str:
        return self._fee_collector

    @fee_collector.setter
    def fee_collector(self, address: str) -> None:
        if not address:
            raise ValidationError("fee collector address is required")
        self._fee_collector = address

    @property
    def total_fees_collected(self) -> int:
        return self._total_fees_collected

    def trading_fees(self) -> tuple[int, int]:
        """(buy_fee_bps, sell_fee_bps)."""
        return self._config.buy_fee_bps, self._config.sell_fee_bps

    def fee_distribution(self) -> tuple[int, int, int]:
        """(liquidity_bps, creator_bps, platform_bps)."""
        return (
            self._config.liquidity_bps,
            self._config.creator_bps,
            self._config.platform_bps,
        )

    def update_trading_fees(self, buy_fee_bps: int, sell_fee_bps: int) -> FeeConfig:
        """
        Replace the trading fees, keeping the graduation split.

        The new config is fully validated before it replaces the old one, so a
        rejected update leaves the ledger unchanged.
        """
        updated = FeeConfig(
            **{
                **self._config.model_dump(),
                "buy_fee_bps": buy_fee_bps,
                "sell_fee_bps": sell_fee_bps,
            }
        )
        self._config = updated
        logger.info(
            "trading_fees_updated",
            buy_fee_bps=buy_fee_bps,
            sell_fee_bps=sell_fee_bps,
        )
        return updated

    # ==================== Amounts ====================

    def buy_fee(self, cost: int) -> int:
        return mul_div(cost, self._config.buy_fee_bps, BPS_DENOMINATOR)

    def sell_fee(self, proceeds: int) -> int:
        return mul_div(proceeds, self._config.sell_fee_bps, BPS_DENOMINATOR)

    def liquidity_capital(self, total_raised: int) -> int:
        """Raised capital paired into the venue at graduation."""
        return mul_div(total_raised, self._config.liquidity_bps, BPS_DENOMINATOR)

    def creator_share(self, total_raised: int) -> int:
        """Raised capital owed to the creator at graduation."""
        return mul_div(total_raised, self._config.creator_bps, BPS_DENOMINATOR)

    def record_collected(self, amount: int) -> None:
        """Account for fees routed to the collector."""
        if amount < 0:
            raise ValidationError("collected fee cannot be negative")
        self._total_fees_collected += amount

    # ==================== Atomic scope support ====================

    def snapshot(self) -> tuple[FeeConfig, str, int]:
        return self._config, self._fee_collector, self._total_fees_collected

    def restore(self, snapshot: tuple[FeeConfig, str, int]) -> None:
        self._config, self._fee_collector, self._total_fees_collected = snapshot
