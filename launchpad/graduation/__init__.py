"""
Graduation Package

Threshold watch and one-shot liquidity migration.
"""

from .coordinator import GraduationCoordinator

__all__ = ["GraduationCoordinator"]
