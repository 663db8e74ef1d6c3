"""Common error classes used across layers.

Usage:
    from sse_bridge.core.errors import ValidationError
    from sse_bridge.core.enums import ErrorCode
    from sse_bridge.core.result import Failure

    return Failure(error=ValidationError(
        code=ErrorCode.INVALID_CHANNEL_COMPONENT,
        message="domain must not contain ':'",
        field="domain",
    ))
"""

from dataclasses import dataclass

from sse_bridge.core.errors.domain_error import DomainError


@dataclass(frozen=True, slots=True, kw_only=True)
class ValidationError(DomainError):
    """Input validation failure.

    Attributes:
        code: ErrorCode enum.
        message: Human-readable message.
        field: Field name that failed validation.
        details: Additional context.
    """

    field: str | None = None
