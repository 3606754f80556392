"""Access control capability consumed by curve instances."""

from .gate import AccessGate, InMemoryAccessGate

__all__ = ["AccessGate", "InMemoryAccessGate"]
