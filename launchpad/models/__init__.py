"""
Launchpad Models

Data structures shared across pricing, trading, graduation and the registry.
"""

from .base import (
    CurveEventType,
    CurveStatus,
    LaunchpadBaseModel,
    new_address,
    validated,
)
from .curve import (
    CurveInfo,
    CurveParameters,
    CurveSnapshot,
    GraduationProgress,
    TradeState,
)
from .records import (
    CurveEvent,
    GraduationFailed,
    GraduationResult,
    GraduationTriggered,
    LiquidityAdded,
    SaleResult,
    TokenRecord,
    TokensPurchased,
    TokensSold,
    TradeResult,
    TradingFeesUpdated,
)

__all__ = [
    # Base
    "CurveEventType",
    "CurveStatus",
    "LaunchpadBaseModel",
    "new_address",
    "validated",
    # Curve
    "CurveInfo",
    "CurveParameters",
    "CurveSnapshot",
    "GraduationProgress",
    "TradeState",
    # Records
    "CurveEvent",
    "GraduationFailed",
    "GraduationResult",
    "GraduationTriggered",
    "LiquidityAdded",
    "SaleResult",
    "TokenRecord",
    "TokensPurchased",
    "TokensSold",
    "TradeResult",
    "TradingFeesUpdated",
]
