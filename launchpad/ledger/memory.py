"""
In-Memory Fungible Ledger

Process-local balance book used for both the launched asset and the
settlement currency. Supports allowances (the venue pulls liquidity through
them), recipient hooks (to model recipients that run code when paid) and
snapshot/restore so it can take part in an atomic scope.
"""

import structlog

from ..errors import InsufficientFunds, ValidationError
from .base import ReceiveHook

logger = structlog.get_logger(__name__)


class InMemoryLedger:
    """
    Balance book for a single asset.

    Invariant: the sum of all balances always equals total_supply.
    """

    def __init__(self, asset_id: str, symbol: str | None = None):
        if not asset_id:
            raise ValidationError("asset id is required")
        self._asset_id = asset_id
        self._symbol = symbol or asset_id
        self._balances: dict[str, int] = {}
        self._allowances: dict[tuple[str, str], int] = {}
        self._total_supply = 0
        self._receive_hooks: dict[str, ReceiveHook] = {}
        self._logger = logger.bind(asset=self._symbol)

    @property
    def asset_id(self) -> str:
        return self._asset_id

    @property
    def symbol(self) -> str:
        return self._symbol

    @property
    def total_supply(self) -> int:
        return self._total_supply

    def balance_of(self, account: str) -> int:
        return self._balances.get(account, 0)

    def allowance(self, owner: str, spender: str) -> int:
        return self._allowances.get((owner, spender), 0)

    def holders(self) -> dict[str, int]:
        """Accounts with a non-zero balance."""
        return {account: bal for account, bal in self._balances.items() if bal > 0}

    def set_receive_hook(self, account: str, hook: ReceiveHook | None) -> None:
        """Install (or clear with None) code that runs when `account` is credited."""
        if hook is None:
            self._receive_hooks.pop(account, None)
        else:
            self._receive_hooks[account] = hook

    # ==================== Mutations ====================

    @staticmethod
    def _check(account: str, amount: int) -> None:
        if not account:
            raise ValidationError("account address is required")
        if amount < 0:
            raise ValidationError(f"amount cannot be negative, got {amount}")

    def _debit(self, account: str, amount: int) -> None:
        balance = self.balance_of(account)
        if balance < amount:
            raise InsufficientFunds(
                f"{account} holds {balance} {self._symbol}, needs {amount}"
            )
        self._balances[account] = balance - amount

    async def _notify(self, sender: str, recipient: str, amount: int) -> None:
        hook = self._receive_hooks.get(recipient)
        if hook is not None and amount > 0:
            await hook(sender, amount)

    async def mint(self, to: str, amount: int) -> None:
        self._check(to, amount)
        self._balances[to] = self.balance_of(to) + amount
        self._total_supply += amount
        self._logger.debug("minted", to=to, amount=amount, total_supply=self._total_supply)

    async def burn(self, from_: str, amount: int) -> None:
        self._check(from_, amount)
        self._debit(from_, amount)
        self._total_supply -= amount
        self._logger.debug("burned", account=from_, amount=amount, total_supply=self._total_supply)

    async def transfer(self, from_: str, to: str, amount: int) -> None:
        self._check(from_, amount)
        self._check(to, amount)
        self._debit(from_, amount)
        self._balances[to] = self.balance_of(to) + amount
        await self._notify(from_, to, amount)

    async def approve(self, owner: str, spender: str, amount: int) -> None:
        self._check(owner, amount)
        self._check(spender, amount)
        self._allowances[(owner, spender)] = amount

    async def transfer_from(self, spender: str, from_: str, to: str, amount: int) -> None:
        self._check(spender, amount)
        allowed = self.allowance(from_, spender)
        if allowed < amount:
            raise InsufficientFunds(
                f"{spender} may move {allowed} {self._symbol} from {from_}, needs {amount}"
            )
        if self.balance_of(from_) < amount:
            raise InsufficientFunds(
                f"{from_} holds {self.balance_of(from_)} {self._symbol}, needs {amount}"
            )
        self._allowances[(from_, spender)] = allowed - amount
        await self.transfer(from_, to, amount)

    # ==================== Atomic scope support ====================

    def snapshot(self) -> tuple[dict[str, int], dict[tuple[str, str], int], int]:
        return dict(self._balances), dict(self._allowances), self._total_supply

    def restore(self, snapshot: tuple[dict[str, int], dict[tuple[str, str], int], int]) -> None:
        balances, allowances, total_supply = snapshot
        self._balances = dict(balances)
        self._allowances = dict(allowances)
        self._total_supply = total_supply
