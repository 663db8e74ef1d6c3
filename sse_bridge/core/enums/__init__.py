"""Core enums package."""

from sse_bridge.core.enums.backplane_kind import BackplaneKind
from sse_bridge.core.enums.environment import Environment
from sse_bridge.core.enums.error_code import ErrorCode

__all__ = [
    "BackplaneKind",
    "Environment",
    "ErrorCode",
]
