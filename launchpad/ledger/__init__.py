"""
Ledger Package

Fungible balance books and the atomic scope used by curve operations.
"""

from .atomic import atomic
from .base import FungibleLedger, ReceiveHook, Snapshottable
from .memory import InMemoryLedger

__all__ = [
    "FungibleLedger",
    "InMemoryLedger",
    "ReceiveHook",
    "Snapshottable",
    "atomic",
]
