"""
Launchpad - Monitoring Module

Structured logging setup and helpers.
"""

from .logging import (
    bind_context,
    clear_context,
    configure_logging,
    log_duration,
)

__all__ = [
    "bind_context",
    "clear_context",
    "configure_logging",
    "log_duration",
]
