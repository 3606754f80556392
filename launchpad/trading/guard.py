"""
Reentrancy guard.

One guard per lock domain: every curve instance that shares a settlement
ledger or venue with another holds the same guard, and so does the registry
that created them. The task holding the guard may not enter it again, so a
recipient hook that calls back into any instance of the domain while a
transfer is in flight gets a StateError. Other tasks wait for the lock, so
no operation of the domain runs inside another one's atomic scope.
"""

import asyncio
import weakref
from contextlib import asynccontextmanager
from typing import AsyncIterator

import structlog

from ..errors import StateError, ValidationError

logger = structlog.get_logger(__name__)

_domains: "weakref.WeakKeyDictionary[object, ReentrancyGuard]" = weakref.WeakKeyDictionary()


class ReentrancyGuard:
    """asyncio.Lock with an owner-task check."""

    def __init__(self, name: str = "curve"):
        self._name = name
        self._lock = asyncio.Lock()
        self._owner: asyncio.Task | None = None
        self._operation: str | None = None

    @classmethod
    def shared(cls, *resources: object, name: str = "launchpad") -> "ReentrancyGuard":
        """
        Guard of the lock domain the given resources belong to.

        Resources seen for the first time join the domain of the others, or
        a new one if none has a guard yet. Resources already bound to two
        different domains cannot be combined.
        """
        found: dict[int, ReentrancyGuard] = {}
        for resource in resources:
            guard = _domains.get(resource)
            if guard is not None:
                found[id(guard)] = guard
        if len(found) > 1:
            raise ValidationError("Resources already belong to different lock domains")

        guard = next(iter(found.values())) if found else cls(name)
        for resource in resources:
            _domains[resource] = guard
        return guard

    @property
    def locked(self) -> bool:
        return self._lock.locked()

    @property
    def operation(self) -> str | None:
        """Operation currently holding the guard."""
        return self._operation

    @asynccontextmanager
    async def hold(self, operation: str) -> AsyncIterator[None]:
        task = asyncio.current_task()
        if self._owner is not None and self._owner is task:
            logger.warning(
                "reentrant_call_rejected",
                guard=self._name,
                operation=operation,
                active=self._operation,
            )
            raise StateError(
                f"Re-entrant call to {operation} while {self._operation} is in progress"
            )

        async with self._lock:
            self._owner = task
            self._operation = operation
            try:
                yield
            finally:
                self._owner = None
                self._operation = None
