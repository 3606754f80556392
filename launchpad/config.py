"""
Launchpad Configuration

This module defines the configuration settings for bonding-curve launches:
fixed-point scale, default trading fees and graduation split, creation fee,
and the parameters of the liquidity migration (slippage bound and deadline).

Configuration is loaded from environment variables with sensible defaults
for local development. All settings can be overridden via environment
variables prefixed with LAUNCHPAD_, e.g. LAUNCHPAD_CREATION_FEE.
"""

import logging
from enum import Enum

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)

# 1e18 fixed-point denominator
WAD = 10**18


class LaunchpadEnvironment(str, Enum):
    """Deployment environment."""

    PRODUCTION = "production"
    TESTNET = "testnet"
    LOCAL = "local"


class LaunchpadConfig(BaseSettings):
    """
    Main configuration class for the launchpad.

    Fee defaults apply to instances created after the registry starts; each
    instance validates its own copy at creation time.
    """

    environment: LaunchpadEnvironment = Field(
        default=LaunchpadEnvironment.LOCAL,
        description="Deployment environment (production, testnet, local)",
    )

    # Pricing
    fixed_point_scale: int = Field(
        default=WAD, description="Fixed-point denominator for prices and amounts"
    )

    # Trading fees (basis points)
    default_buy_fee_bps: int = Field(default=100, description="Buy fee charged on curve cost")
    default_sell_fee_bps: int = Field(
        default=100, description="Sell fee charged on curve proceeds"
    )

    # Graduation split (basis points, must sum to 10000)
    default_liquidity_bps: int = Field(
        default=8000, description="Share of raised capital paired into the venue pool"
    )
    default_creator_bps: int = Field(
        default=1000, description="Share of raised capital paid to the token creator"
    )
    default_platform_bps: int = Field(
        default=1000, description="Share of raised capital paid to the platform"
    )

    # Registry
    creation_fee: int = Field(
        default=10**16, description="Settlement units charged to create a token (0.01 at WAD)"
    )
    settlement_asset: str = Field(
        default="WETH", description="Asset identifier of the settlement currency"
    )

    # Liquidity migration
    liquidity_slippage_bps: int = Field(
        default=500, description="Maximum shortfall accepted on add-liquidity (5% default)"
    )
    liquidity_deadline_seconds: int = Field(
        default=300, description="Validity window of the add-liquidity call"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Root log level")
    json_logs: bool = Field(default=False, description="Render logs as JSON")

    @field_validator("fixed_point_scale", "liquidity_deadline_seconds")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        """Scale and deadline must be strictly positive."""
        if v <= 0:
            raise ValueError("must be greater than zero")
        return v

    @field_validator("creation_fee")
    @classmethod
    def validate_creation_fee(cls, v: int) -> int:
        """Creation fee cannot be negative."""
        if v < 0:
            raise ValueError("creation fee cannot be negative")
        return v

    @field_validator("liquidity_slippage_bps")
    @classmethod
    def validate_slippage(cls, v: int) -> int:
        """Slippage bound is a fraction of 10000 bps."""
        if v < 0 or v >= 10000:
            raise ValueError("liquidity slippage must be in [0, 10000) bps")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize and check the log level name."""
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level: {v}")
        return level

    model_config = {
        "env_prefix": "LAUNCHPAD_",
        "env_file": ".env",
        "extra": "ignore",
    }


# Singleton instance for global access
_config: LaunchpadConfig | None = None


def get_launchpad_config() -> LaunchpadConfig:
    """
    Get the global launchpad configuration instance.

    Loaded lazily from the environment on first use.
    """
    global _config
    if _config is None:
        _config = LaunchpadConfig()
        logger.debug("Loaded launchpad configuration (%s)", _config.environment.value)
    return _config


def configure_launchpad(config: LaunchpadConfig) -> None:
    """
    Set a custom configuration instance.

    Useful for testing or when configuration needs to be loaded
    from a non-standard source.
    """
    global _config
    _config = config
