"""
Access Gate

Pause, blocklist, ownership and privilege checks consulted by curve
operations as preconditions. The curve holds a gate by composition and only
ever queries it; administering the flags belongs to the gate's owner.
"""

from typing import Iterable, Protocol, runtime_checkable

import structlog

from ..errors import UnauthorizedError, ValidationError

logger = structlog.get_logger(__name__)


@runtime_checkable
class AccessGate(Protocol):
    """Read-only capability consulted before every state change."""

    def is_paused(self) -> bool: ...

    def is_blocked(self, account: str) -> bool: ...

    def is_owner(self, caller: str) -> bool: ...

    def is_privileged(self, caller: str) -> bool: ...


class InMemoryAccessGate:
    """
    Process-local access gate.

    The owner administers pause and blocklist flags. Privileged callers (the
    registry that created an instance) may force graduation and change
    trading fees; the owner is always privileged.
    """

    def __init__(self, owner: str, privileged: Iterable[str] = ()):
        if not owner:
            raise ValidationError("gate owner address is required")
        self._owner = owner
        self._privileged = set(privileged)
        self._paused = False
        self._blocked: set[str] = set()

    # ==================== Queries ====================

    def is_paused(self) -> bool:
        return self._paused

    def is_blocked(self, account: str) -> bool:
        return account in self._blocked

    def is_owner(self, caller: str) -> bool:
        return caller == self._owner

    def is_privileged(self, caller: str) -> bool:
        return caller == self._owner or caller in self._privileged

    # ==================== Administration ====================

    def _require_owner(self, caller: str) -> None:
        if not self.is_owner(caller):
            raise UnauthorizedError(f"{caller} is not the gate owner")

    def pause(self, caller: str) -> None:
        self._require_owner(caller)
        self._paused = True
        logger.warning("gate_paused", caller=caller)

    def unpause(self, caller: str) -> None:
        self._require_owner(caller)
        self._paused = False
        logger.info("gate_unpaused", caller=caller)

    def block_account(self, caller: str, account: str) -> None:
        self._require_owner(caller)
        if not account:
            raise ValidationError("account address is required")
        self._blocked.add(account)
        logger.warning("account_blocked", account=account)

    def unblock_account(self, caller: str, account: str) -> None:
        self._require_owner(caller)
        self._blocked.discard(account)
        logger.info("account_unblocked", account=account)

    def grant_privilege(self, caller: str, account: str) -> None:
        self._require_owner(caller)
        self._privileged.add(account)
