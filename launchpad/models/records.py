"""
Records emitted and returned by curve operations.

Events are appended to an instance's event log only when the operation that
produced them commits.
"""

from datetime import UTC, datetime

from pydantic import BaseModel, Field

from .base import CurveEventType, LaunchpadBaseModel


class CurveEvent(BaseModel):
    """Base class for events emitted by a curve instance."""

    event_type: CurveEventType
    token_address: str = Field(description="Instance that emitted the event")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))


class TokensPurchased(CurveEvent):
    """Purchase record: (buyer, amount, cost, new_supply)."""

    event_type: CurveEventType = CurveEventType.TOKENS_PURCHASED
    buyer: str
    amount: int
    cost: int
    fee: int = 0
    new_supply: int


class TokensSold(CurveEvent):
    """Sale record: (seller, amount, proceeds, new_supply)."""

    event_type: CurveEventType = CurveEventType.TOKENS_SOLD
    seller: str
    amount: int
    proceeds: int
    fee: int = 0
    net_proceeds: int
    new_supply: int


class GraduationTriggered(CurveEvent):
    """Emitted once, when the curve closes and liquidity is migrated."""

    event_type: CurveEventType = CurveEventType.GRADUATION_TRIGGERED
    supply: int = Field(description="Supply before the liquidity mint")
    market_cap: int
    pool_address: str
    liquidity_amount: int = Field(description="Settlement capital paired into the pool")
    forced: bool = False


class LiquidityAdded(CurveEvent):
    """Amounts accepted by the venue during graduation."""

    event_type: CurveEventType = CurveEventType.LIQUIDITY_ADDED
    pool_address: str
    token_amount: int
    capital_amount: int
    receipt: int


class GraduationFailed(CurveEvent):
    """A trade-triggered migration attempt was rejected and compensated."""

    event_type: CurveEventType = CurveEventType.GRADUATION_FAILED
    reason: str


class TradingFeesUpdated(CurveEvent):
    """Trading fee change applied by a privileged caller."""

    event_type: CurveEventType = CurveEventType.TRADING_FEES_UPDATED
    buy_fee_bps: int
    sell_fee_bps: int


class TradeResult(BaseModel):
    """Outcome of a buy."""

    minted: int
    cost: int
    fee: int
    refund: int
    new_supply: int
    graduated: bool = Field(default=False, description="Whether this buy triggered graduation")


class SaleResult(BaseModel):
    """Outcome of a sell."""

    burned: int
    proceeds: int
    fee: int
    net_proceeds: int
    new_supply: int


class GraduationResult(BaseModel):
    """Outcome of a successful migration."""

    pool_address: str
    liquidity_token_amount: int
    liquidity_capital: int
    receipt: int
    creator_amount: int
    platform_amount: int
    unused_tokens_retained: int = 0


class TokenRecord(LaunchpadBaseModel):
    """
    Registry listing of a created instance.

    Mirrors the factory's per-token info: identity, curve parameters,
    creator and graduation outcome.
    """

    token_address: str
    name: str
    symbol: str
    slope: int
    base_price: int
    graduation_threshold: int
    creator: str
    has_graduated: bool = False
    pool_address: str | None = None
