"""
Atomic execution scope.

Models the all-or-nothing execution the settlement environment gives every
public operation: each participant is snapshotted on entry and restored, in
reverse order, if the body raises.
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator

import structlog

from ..errors import ValidationError
from .base import Snapshottable

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def atomic(*participants: Snapshottable, operation: str = "operation") -> AsyncIterator[None]:
    """
    Run a block so that either all participant changes persist or none do.

    Usage:
        async with atomic(asset_ledger, settlement_ledger, state, operation="buy"):
            ...
    """
    for participant in participants:
        if not isinstance(participant, Snapshottable):
            raise ValidationError(
                f"{type(participant).__name__} cannot take part in an atomic scope"
            )

    snapshots = [(participant, participant.snapshot()) for participant in participants]
    try:
        yield
    except BaseException as e:
        for participant, snapshot in reversed(snapshots):
            participant.restore(snapshot)
        logger.debug("atomic_scope_reverted", operation=operation, error=type(e).__name__)
        raise
