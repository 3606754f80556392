"""
Fees Package

Basis-point trading fees and the graduation capital split.
"""

from .ledger import (
    MAX_PLATFORM_BPS,
    MAX_TRADING_FEE_BPS,
    MIN_LIQUIDITY_BPS,
    FeeConfig,
    FeeLedger,
)

__all__ = [
    "MAX_PLATFORM_BPS",
    "MAX_TRADING_FEE_BPS",
    "MIN_LIQUIDITY_BPS",
    "FeeConfig",
    "FeeLedger",
]
