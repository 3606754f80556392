"""
Registry Package

Token factory: creation, listing and administration of curve instances.
"""

from .service import TokenRegistry

__all__ = ["TokenRegistry"]
