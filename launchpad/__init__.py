"""
Launchpad - Bonding Curve Token Launches

Prices and trades fungible assets against a linear supply-dependent curve,
then migrates the accumulated capital into a pooled liquidity venue once a
market-cap threshold is reached ("graduation").

Main entry points:
- TokenRegistry: create and administer curve instances
- BondingCurveToken: buy, sell, quote and graduate a single instance
- PricingEngine: pure integer curve math

Configuration is read from LAUNCHPAD_* environment variables via
get_launchpad_config().
"""

from .access import AccessGate, InMemoryAccessGate
from .clock import Clock, FixedClock, SystemClock
from .config import LaunchpadConfig, configure_launchpad, get_launchpad_config
from .curve import BondingCurveToken
from .errors import (
    ArithmeticOverflow,
    ExternalVenueFailure,
    InsufficientFunds,
    InvariantViolation,
    LaunchpadError,
    SlippageExceeded,
    StateError,
    UnauthorizedError,
    ValidationError,
)
from .fees import FeeConfig, FeeLedger
from .ledger import FungibleLedger, InMemoryLedger
from .models import CurveParameters, CurveSnapshot, GraduationProgress
from .pricing import PricingEngine
from .registry import TokenRegistry
from .venue import ConstantProductVenue, LiquidityVenue

__version__ = "0.1.0"

__all__ = [
    # Core
    "BondingCurveToken",
    "PricingEngine",
    "TokenRegistry",
    # Models
    "CurveParameters",
    "CurveSnapshot",
    "FeeConfig",
    "FeeLedger",
    "GraduationProgress",
    # Collaborators
    "AccessGate",
    "Clock",
    "ConstantProductVenue",
    "FixedClock",
    "FungibleLedger",
    "InMemoryAccessGate",
    "InMemoryLedger",
    "LiquidityVenue",
    "SystemClock",
    # Configuration
    "LaunchpadConfig",
    "configure_launchpad",
    "get_launchpad_config",
    # Errors
    "ArithmeticOverflow",
    "ExternalVenueFailure",
    "InsufficientFunds",
    "InvariantViolation",
    "LaunchpadError",
    "SlippageExceeded",
    "StateError",
    "UnauthorizedError",
    "ValidationError",
]
