"""
Liquidity Venue Interface

A pooled AMM that receives the graduated asset and its paired capital.
The venue is the only fallible external dependency of a curve: any of its
calls may raise VenueError (or anything else), return less than desired, or
expire past its deadline.
"""

from typing import Protocol, runtime_checkable

from pydantic import BaseModel, Field


class VenueError(Exception):
    """Raised by venue implementations when a pool operation is rejected."""

    pass


class AddLiquidityRequest(BaseModel):
    """Arguments of an add-liquidity call, router style."""

    pool_address: str
    token_a: str = Field(description="Asset id of the first side")
    token_b: str = Field(description="Asset id of the second side")
    amount_a_desired: int = Field(ge=0)
    amount_b_desired: int = Field(ge=0)
    amount_a_min: int = Field(ge=0)
    amount_b_min: int = Field(ge=0)
    payer: str = Field(description="Account the venue pulls both sides from via allowances")
    recipient: str = Field(description="Account credited with the liquidity receipt")
    deadline: int = Field(description="Unix time after which the call must fail")


class LiquidityResult(BaseModel):
    """Amounts the venue actually used and the receipt it issued."""

    amount_a: int = Field(ge=0)
    amount_b: int = Field(ge=0)
    receipt: int = Field(description="Liquidity shares credited to the recipient")


@runtime_checkable
class LiquidityVenue(Protocol):
    """External venue consumed by the graduation coordinator."""

    @property
    def address(self) -> str: ...

    async def resolve_or_create_pool(self, token_a: str, token_b: str) -> str: ...

    async def add_liquidity(self, request: AddLiquidityRequest) -> LiquidityResult: ...

    async def remove_liquidity(
        self, pool_address: str, receipt: int, owner: str, recipient: str
    ) -> dict[str, int]: ...
