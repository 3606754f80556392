"""
Launchpad Error Taxonomy

Every public operation either succeeds with its stated postconditions or
raises one of the exceptions below with zero side effects. Callers can catch
LaunchpadError to handle every failure raised by this package.
"""


class LaunchpadError(Exception):
    """Base exception for all launchpad errors."""

    pass


class ValidationError(LaunchpadError, ValueError):
    """Raised for zero amounts, empty identifiers or out-of-bounds fee bps."""

    pass


class InsufficientFunds(LaunchpadError):
    """Raised when a payment or balance is below the quoted requirement."""

    pass


class SlippageExceeded(LaunchpadError):
    """Raised when quoted proceeds fall below the caller's floor."""

    pass


class StateError(LaunchpadError):
    """Raised when an operation is not allowed in the current state.

    Covers already graduated, not yet graduated, paused, blocked accounts
    and re-entrant calls.
    """

    pass


class UnauthorizedError(StateError):
    """Raised when a caller lacks the privilege an operation requires."""

    pass


class ExternalVenueFailure(LaunchpadError):
    """Raised when the liquidity venue rejects or mishandles a migration.

    The migration that raised it has been fully compensated: no minted
    supply remains and the curve state is unchanged.
    """

    pass


class ArithmeticOverflow(LaunchpadError):
    """Raised when pricing math exceeds the 256-bit unsigned bound."""

    pass


class InvariantViolation(LaunchpadError):
    """Raised when internal accounting is inconsistent. Always fatal."""

    pass


__all__ = [
    "LaunchpadError",
    "ValidationError",
    "InsufficientFunds",
    "SlippageExceeded",
    "StateError",
    "UnauthorizedError",
    "ExternalVenueFailure",
    "ArithmeticOverflow",
    "InvariantViolation",
]
