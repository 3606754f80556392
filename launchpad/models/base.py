"""
Base Models for the Launchpad

This module defines the fundamental enums, base classes and helpers shared
by curve, fee and registry models.
"""

import secrets
from datetime import UTC, datetime
from enum import Enum
from typing import Any, TypeVar

from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from ..errors import ValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)


class CurveStatus(str, Enum):
    """
    Lifecycle status of a bonding curve instance.

    The only transition is ACTIVE -> GRADUATED, and it happens once.
    """

    ACTIVE = "active"  # Trading on the curve
    GRADUATED = "graduated"  # Liquidity migrated to the venue, curve closed


class CurveEventType(str, Enum):
    """Types of records emitted by a curve instance."""

    TOKENS_PURCHASED = "tokens_purchased"
    TOKENS_SOLD = "tokens_sold"
    GRADUATION_TRIGGERED = "graduation_triggered"
    LIQUIDITY_ADDED = "liquidity_added"
    GRADUATION_FAILED = "graduation_failed"
    TRADING_FEES_UPDATED = "trading_fees_updated"


class LaunchpadBaseModel(BaseModel):
    """
    Base model for persisted launchpad records.

    Provides common identity and timestamp fields.
    """

    id: str = Field(
        default_factory=lambda: secrets.token_hex(16), description="Unique identifier"
    )
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC), description="Timestamp of record creation"
    )
    metadata: dict[str, Any] = Field(
        default_factory=dict, description="Extensible metadata storage"
    )


def new_address() -> str:
    """Generate a fresh 20-byte hex account address."""
    return "0x" + secrets.token_hex(20)


def validated(model: type[ModelT], **data: Any) -> ModelT:
    """
    Build a model, reporting schema failures as launchpad ValidationError.

    Keeps pydantic's error type from leaking through public operations.
    """
    try:
        return model(**data)
    except PydanticValidationError as e:
        raise ValidationError(describe_errors(model, e)) from e


def describe_errors(model: type[BaseModel], error: PydanticValidationError) -> str:
    """One-line summary of a pydantic error, field by field."""
    details = "; ".join(
        f"{'.'.join(str(p) for p in err['loc']) or model.__name__}: {err['msg']}"
        for err in error.errors()
    )
    return f"Invalid {model.__name__}: {details}"
