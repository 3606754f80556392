"""
Curve Package

The bonding-curve token facade and its event log.
"""

from .events import EventLog
from .token import BondingCurveToken

__all__ = ["BondingCurveToken", "EventLog"]
