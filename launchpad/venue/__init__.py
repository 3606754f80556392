"""
Venue Package

External liquidity venue interface and an in-memory constant-product pool.
"""

from .base import AddLiquidityRequest, LiquidityResult, LiquidityVenue, VenueError
from .constant_product import ConstantProductVenue, Pool

__all__ = [
    "AddLiquidityRequest",
    "ConstantProductVenue",
    "LiquidityResult",
    "LiquidityVenue",
    "Pool",
    "VenueError",
]
