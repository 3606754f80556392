"""
In-Memory Constant-Product Venue

A pooled x*y=k AMM with router-style liquidity provisioning:

- the first deposit into a pool uses the desired amounts exactly and mints
  isqrt(a * b) - MINIMUM_LIQUIDITY shares, locking MINIMUM_LIQUIDITY forever;
- later deposits are quoted at the current reserve ratio and must stay above
  the caller's minimums;
- every call fails once its deadline has passed.

Both sides are pulled from the payer through ledger allowances granted to
the venue address. All checks run before any value moves, so a rejected
call leaves balances untouched.
"""

import copy
import math
from dataclasses import dataclass, field
from typing import Iterable

import structlog

from ..clock import Clock, SystemClock
from ..ledger.base import FungibleLedger
from ..models.base import new_address
from .base import AddLiquidityRequest, LiquidityResult, VenueError

logger = structlog.get_logger(__name__)

ZERO_ADDRESS = "0x" + "0" * 40


@dataclass
class Pool:
    """Reserves and share book of one pair. Tokens are kept in sorted order."""

    address: str
    token0: str
    token1: str
    reserve0: int = 0
    reserve1: int = 0
    total_shares: int = 0
    shares: dict[str, int] = field(default_factory=dict)

    def reserves_for(self, token_a: str) -> tuple[int, int]:
        """Reserves ordered as (token_a side, other side)."""
        if token_a == self.token0:
            return self.reserve0, self.reserve1
        return self.reserve1, self.reserve0


class ConstantProductVenue:
    """
    Process-local pooled AMM.

    Example:
        ```python
        venue = ConstantProductVenue([asset_ledger, weth_ledger], clock=clock)
        pool = await venue.resolve_or_create_pool(asset_ledger.asset_id, "WETH")
        ```
    """

    MINIMUM_LIQUIDITY = 1000

    def __init__(
        self,
        ledgers: Iterable[FungibleLedger] = (),
        clock: Clock | None = None,
        address: str | None = None,
    ):
        self._address = address or new_address()
        self._clock = clock or SystemClock()
        self._ledgers: dict[str, FungibleLedger] = {}
        self._pools: dict[str, Pool] = {}
        self._pairs: dict[tuple[str, str], str] = {}
        for ledger in ledgers:
            self.register_ledger(ledger)

    @property
    def address(self) -> str:
        return self._address

    def register_ledger(self, ledger: FungibleLedger) -> None:
        """Make an asset tradable on this venue."""
        self._ledgers[ledger.asset_id] = ledger

    def get_pool(self, pool_address: str) -> Pool:
        pool = self._pools.get(pool_address)
        if pool is None:
            raise VenueError(f"Unknown pool {pool_address}")
        return pool

    def _ledger(self, asset_id: str) -> FungibleLedger:
        ledger = self._ledgers.get(asset_id)
        if ledger is None:
            raise VenueError(f"Asset {asset_id} is not registered with the venue")
        return ledger

    # ==================== Pools ====================

    async def resolve_or_create_pool(self, token_a: str, token_b: str) -> str:
        if token_a == token_b:
            raise VenueError("Identical assets")
        self._ledger(token_a)
        self._ledger(token_b)

        token0, token1 = sorted((token_a, token_b))
        existing = self._pairs.get((token0, token1))
        if existing is not None:
            return existing

        pool = Pool(address=new_address(), token0=token0, token1=token1)
        self._pools[pool.address] = pool
        self._pairs[(token0, token1)] = pool.address
        logger.info("pool_created", pool=pool.address, token0=token0, token1=token1)
        return pool.address

    # ==================== Liquidity ====================

    def _quote(self, pool: Pool, request: AddLiquidityRequest) -> tuple[int, int]:
        reserve_a, reserve_b = pool.reserves_for(request.token_a)
        if reserve_a == 0 and reserve_b == 0:
            return request.amount_a_desired, request.amount_b_desired

        optimal_b = request.amount_a_desired * reserve_b // reserve_a
        if optimal_b <= request.amount_b_desired:
            if optimal_b < request.amount_b_min:
                raise VenueError("Insufficient B amount")
            return request.amount_a_desired, optimal_b

        optimal_a = request.amount_b_desired * reserve_a // reserve_b
        if optimal_a < request.amount_a_min:
            raise VenueError("Insufficient A amount")
        return optimal_a, request.amount_b_desired

    def _mint_shares(self, pool: Pool, amount_a: int, amount_b: int, token_a: str) -> int:
        if pool.total_shares == 0:
            shares = math.isqrt(amount_a * amount_b) - self.MINIMUM_LIQUIDITY
            if shares <= 0:
                raise VenueError("Insufficient liquidity minted")
            return shares
        reserve_a, reserve_b = pool.reserves_for(token_a)
        shares = min(
            amount_a * pool.total_shares // reserve_a,
            amount_b * pool.total_shares // reserve_b,
        )
        if shares <= 0:
            raise VenueError("Insufficient liquidity minted")
        return shares

    def _require_pullable(self, ledger: FungibleLedger, payer: str, amount: int) -> None:
        if ledger.allowance(payer, self._address) < amount:
            raise VenueError(f"Allowance for {ledger.asset_id} below {amount}")
        if ledger.balance_of(payer) < amount:
            raise VenueError(f"Balance of {ledger.asset_id} below {amount}")

    async def add_liquidity(self, request: AddLiquidityRequest) -> LiquidityResult:
        if request.deadline < self._clock.now():
            raise VenueError("Expired")

        pool = self.get_pool(request.pool_address)
        if {request.token_a, request.token_b} != {pool.token0, pool.token1}:
            raise VenueError("Assets do not match pool")

        amount_a, amount_b = self._quote(pool, request)
        if amount_a < request.amount_a_min or amount_b < request.amount_b_min:
            raise VenueError("Insufficient amounts")

        shares = self._mint_shares(pool, amount_a, amount_b, request.token_a)

        ledger_a = self._ledger(request.token_a)
        ledger_b = self._ledger(request.token_b)
        self._require_pullable(ledger_a, request.payer, amount_a)
        self._require_pullable(ledger_b, request.payer, amount_b)

        await ledger_a.transfer_from(self._address, request.payer, pool.address, amount_a)
        await ledger_b.transfer_from(self._address, request.payer, pool.address, amount_b)

        if pool.total_shares == 0:
            pool.shares[ZERO_ADDRESS] = self.MINIMUM_LIQUIDITY
            pool.total_shares = self.MINIMUM_LIQUIDITY
        pool.shares[request.recipient] = pool.shares.get(request.recipient, 0) + shares
        pool.total_shares += shares
        if request.token_a == pool.token0:
            pool.reserve0 += amount_a
            pool.reserve1 += amount_b
        else:
            pool.reserve0 += amount_b
            pool.reserve1 += amount_a

        logger.info(
            "liquidity_added",
            pool=pool.address,
            amount_a=amount_a,
            amount_b=amount_b,
            shares=shares,
        )
        return LiquidityResult(amount_a=amount_a, amount_b=amount_b, receipt=shares)

    async def remove_liquidity(
        self, pool_address: str, receipt: int, owner: str, recipient: str
    ) -> dict[str, int]:
        pool = self.get_pool(pool_address)
        held = pool.shares.get(owner, 0)
        if receipt <= 0 or held < receipt:
            raise VenueError(f"{owner} holds {held} shares, cannot burn {receipt}")

        amount0 = receipt * pool.reserve0 // pool.total_shares
        amount1 = receipt * pool.reserve1 // pool.total_shares

        pool.shares[owner] = held - receipt
        pool.total_shares -= receipt
        pool.reserve0 -= amount0
        pool.reserve1 -= amount1

        await self._ledger(pool.token0).transfer(pool.address, recipient, amount0)
        await self._ledger(pool.token1).transfer(pool.address, recipient, amount1)

        logger.info("liquidity_removed", pool=pool.address, shares=receipt)
        return {pool.token0: amount0, pool.token1: amount1}

    def shares_of(self, pool_address: str, account: str) -> int:
        return self.get_pool(pool_address).shares.get(account, 0)

    # ==================== Atomic scope support ====================

    def snapshot(self) -> tuple[dict[str, Pool], dict[tuple[str, str], str]]:
        return copy.deepcopy(self._pools), dict(self._pairs)

    def restore(self, snapshot: tuple[dict[str, Pool], dict[tuple[str, str], str]]) -> None:
        pools, pairs = snapshot
        self._pools = copy.deepcopy(pools)
        self._pairs = dict(pairs)
