"""Core errors package.

Usage:
    from sse_bridge.core.errors import DomainError, ValidationError
"""

from sse_bridge.core.enums import ErrorCode
from sse_bridge.core.errors.common_errors import ValidationError
from sse_bridge.core.errors.domain_error import DomainError

__all__ = [
    "DomainError",
    "ErrorCode",
    "ValidationError",
]
