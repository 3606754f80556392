"""
Shared fixtures for launchpad tests.

Most curve tests run at SCALE=1 with base_price=1000 and slope=100 so that
amounts stay small and hand-checkable.
"""

from __future__ import annotations

from typing import Callable

import pytest
import pytest_asyncio

from launchpad.access import InMemoryAccessGate
from launchpad.clock import FixedClock
from launchpad.config import LaunchpadConfig
from launchpad.curve import BondingCurveToken
from launchpad.fees import FeeConfig
from launchpad.ledger import InMemoryLedger
from launchpad.models import CurveParameters, new_address
from launchpad.venue import ConstantProductVenue

ADMIN = "0x" + "a" * 40
CREATOR = "0x" + "c" * 40
PLATFORM = "0x" + "f" * 40
ALICE = "0x" + "1" * 40
BOB = "0x" + "2" * 40

FUNDING = 10**12

# price(s) = 1000 + 100*s, market cap at s=100 is 1_100_000
SMALL_PARAMS = CurveParameters(
    slope=100, base_price=1000, graduation_threshold=1_100_000, scale=1
)

ZERO_TRADING_FEES = FeeConfig(buy_fee_bps=0, sell_fee_bps=0)


# ==================== Fixtures ====================


@pytest.fixture
def clock():
    """Deterministic clock."""
    return FixedClock(start=1_700_000_000)


@pytest.fixture
def config():
    """Configuration with no creation fee and default migration bounds."""
    return LaunchpadConfig(creation_fee=0, liquidity_slippage_bps=500, liquidity_deadline_seconds=300)


@pytest.fixture
def settlement():
    """Settlement currency ledger."""
    return InMemoryLedger("WETH")


@pytest.fixture
def venue(settlement, clock):
    """In-memory constant-product venue trading against the settlement asset."""
    return ConstantProductVenue([settlement], clock=clock)


@pytest.fixture
def gate():
    """Access gate owned by ADMIN."""
    return InMemoryAccessGate(owner=ADMIN)


@pytest.fixture
def make_token(settlement, venue, clock, config) -> Callable[..., BondingCurveToken]:
    """Factory for curve instances wired to the shared collaborators."""

    def _make(
        params: CurveParameters = SMALL_PARAMS,
        fee_config: FeeConfig | None = None,
        gate: InMemoryAccessGate | None = None,
        venue_override=None,
    ) -> BondingCurveToken:
        asset = InMemoryLedger(new_address(), symbol="TST")
        target_venue = venue_override or venue
        register = getattr(target_venue, "register_ledger", None)
        if register is not None:
            register(asset)
        return BondingCurveToken(
            name="Test Token",
            symbol="TST",
            creator=CREATOR,
            params=params,
            fee_config=fee_config or FeeConfig(),
            fee_collector=PLATFORM,
            gate=gate or InMemoryAccessGate(owner=ADMIN),
            asset=asset,
            settlement=settlement,
            venue=target_venue,
            clock=clock,
            config=config,
        )

    return _make


@pytest.fixture
def token(make_token):
    """Default small-scale token with 1% trading fees."""
    return make_token()


@pytest.fixture
def fee_free_token(make_token):
    """Small-scale token with zero trading fees."""
    return make_token(fee_config=ZERO_TRADING_FEES)


@pytest_asyncio.fixture
async def funded(settlement):
    """Give the trading accounts settlement balance."""
    for account in (ALICE, BOB, CREATOR):
        await settlement.mint(account, FUNDING)
    return settlement
