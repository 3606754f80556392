"""
Curve Models

Parameters, mutable trade state and read-side views of a single bonding
curve instance.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from ..config import WAD
from .base import CurveStatus


class CurveParameters(BaseModel):
    """
    Immutable pricing parameters of one instance.

    All values are integers in the fixed-point scale.
    """

    slope: int = Field(gt=0, description="Price increase per whole unit of supply")
    base_price: int = Field(gt=0, description="Price at zero supply")
    graduation_threshold: int = Field(
        gt=0, description="Market cap at which liquidity migrates to the venue"
    )
    scale: int = Field(default=WAD, gt=0, description="Fixed-point denominator")

    model_config = {"frozen": True}


class TradeState(BaseModel):
    """
    Mutable per-instance trade state.

    Supply is not stored here: the asset ledger is the single source of truth
    for balances and total supply.
    """

    total_raised: int = Field(
        default=0, ge=0, description="Net curve capital held, trading fees excluded"
    )
    status: CurveStatus = Field(default=CurveStatus.ACTIVE)
    pool_address: str | None = Field(
        default=None, description="Venue pool address, set on graduation"
    )
    liquidity_receipt: int = Field(
        default=0, ge=0, description="Liquidity receipt amount returned by the venue"
    )
    graduated_at: datetime | None = None

    model_config = {"validate_assignment": True}

    @property
    def has_graduated(self) -> bool:
        return self.status == CurveStatus.GRADUATED

    def snapshot(self) -> "TradeState":
        return self.model_copy()

    def restore(self, snapshot: "TradeState") -> None:
        for name in type(self).model_fields:
            setattr(self, name, getattr(snapshot, name))


class CurveSnapshot(BaseModel):
    """Point-in-time view used to compare state across an operation."""

    total_supply: int
    total_raised: int
    has_graduated: bool
    pool_address: str | None = None
    liquidity_receipt: int = 0

    model_config = {"frozen": True}


class GraduationProgress(BaseModel):
    """Progress toward the graduation threshold."""

    progress_bps: int = Field(ge=0, le=10_000, description="Progress in basis points")
    remaining: int = Field(ge=0, description="Market cap still needed to graduate")

    model_config = {"frozen": True}


class CurveInfo(BaseModel):
    """Aggregate read-side view of an instance."""

    price: int
    supply: int
    market_cap: int
    progress_bps: int
    remaining: int
    graduated: bool
    pool_address: str | None = None
