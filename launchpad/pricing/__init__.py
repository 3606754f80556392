"""
Pricing Package

Closed-form linear bonding curve math with protocol-favouring rounding.
"""

from .engine import (
    BPS_DENOMINATOR,
    UINT256_MAX,
    PricingEngine,
    buy_cost,
    checked_add,
    checked_mul,
    graduation_progress,
    market_cap,
    mul_div,
    mul_div_rounding_up,
    sell_proceeds,
    spot_price,
)

__all__ = [
    "BPS_DENOMINATOR",
    "UINT256_MAX",
    "PricingEngine",
    "buy_cost",
    "checked_add",
    "checked_mul",
    "graduation_progress",
    "market_cap",
    "mul_div",
    "mul_div_rounding_up",
    "sell_proceeds",
    "spot_price",
]
