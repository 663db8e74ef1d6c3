"""Validation helpers for input arriving at the HTTP edge.

All validation functions return Result types for consistent error handling.
Channel formatting itself never validates; callers that build channels
from untrusted input validate the components here first.

Usage:
    from sse_bridge.core.validation import validate_channel_component
    from sse_bridge.core.result import Success, Failure

    match validate_channel_component("game", "domain"):
        case Success(value):
            ...
        case Failure(error):
            print(error.message)
"""

from typing import Any

from sse_bridge.core.constants import CHANNEL_DELIMITER
from sse_bridge.core.errors import ErrorCode, ValidationError
from sse_bridge.core.result import Failure, Result, Success


def validate_not_empty(value: Any, field_name: str) -> Result[Any, ValidationError]:
    """Validate that a value is not empty.

    Args:
        value: Value to validate.
        field_name: Name of the field being validated.

    Returns:
        Success with value if not empty, Failure with ValidationError otherwise.
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        return Failure(
            error=ValidationError(
                code=ErrorCode.VALIDATION_FAILED,
                message=f"{field_name} cannot be empty",
                field=field_name,
            )
        )
    return Success(value=value)


def validate_channel_component(
    value: str, field_name: str
) -> Result[str, ValidationError]:
    """Validate one component of a channel name.

    A component must be non-empty and must not contain the channel
    delimiter, otherwise two different component tuples could format
    to the same channel string.

    Args:
        value: Component to validate (domain, identifier or event type).
        field_name: Name of the field being validated.

    Returns:
        Success with the component, Failure with ValidationError otherwise.
    """
    match validate_not_empty(value, field_name):
        case Failure() as failure:
            return failure

    if CHANNEL_DELIMITER in value:
        return Failure(
            error=ValidationError(
                code=ErrorCode.INVALID_CHANNEL_COMPONENT,
                message=f"{field_name} must not contain '{CHANNEL_DELIMITER}'",
                field=field_name,
            )
        )
    return Success(value=value)


def validate_channel_components(
    **components: str | None,
) -> Result[dict[str, str], ValidationError]:
    """Validate several channel components, stopping at the first failure.

    None values are skipped (optional components).

    Args:
        **components: Field name to component value.

    Returns:
        Success with the validated (non-None) components, or the first Failure.
    """
    validated: dict[str, str] = {}
    for field_name, value in components.items():
        if value is None:
            continue
        match validate_channel_component(value, field_name):
            case Success(value=ok):
                validated[field_name] = ok
            case Failure() as failure:
                return failure
    return Success(value=validated)
