"""
Trading Package

Buy/sell orchestration and the per-instance reentrancy guard.
"""

from .executor import TradeExecutor
from .guard import ReentrancyGuard

__all__ = ["ReentrancyGuard", "TradeExecutor"]
