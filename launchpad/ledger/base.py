"""
Ledger Interfaces

The fungible ledger owns balances and total supply; curve instances only
ask it to mint, burn and move value. Mutators are coroutines because a
transfer to an untrusted recipient may run arbitrary recipient code.
"""

from typing import Any, Awaitable, Callable, Protocol, runtime_checkable

# Called after a recipient is credited: (sender, amount)
ReceiveHook = Callable[[str, int], Awaitable[None]]


@runtime_checkable
class FungibleLedger(Protocol):
    """Balance storage with standard conservation semantics."""

    @property
    def asset_id(self) -> str: ...

    @property
    def total_supply(self) -> int: ...

    def balance_of(self, account: str) -> int: ...

    def allowance(self, owner: str, spender: str) -> int: ...

    async def mint(self, to: str, amount: int) -> None: ...

    async def burn(self, from_: str, amount: int) -> None: ...

    async def transfer(self, from_: str, to: str, amount: int) -> None: ...

    async def approve(self, owner: str, spender: str, amount: int) -> None: ...

    async def transfer_from(self, spender: str, from_: str, to: str, amount: int) -> None: ...


@runtime_checkable
class Snapshottable(Protocol):
    """State holder that can take part in an atomic scope."""

    def snapshot(self) -> Any: ...

    def restore(self, snapshot: Any) -> None: ...
