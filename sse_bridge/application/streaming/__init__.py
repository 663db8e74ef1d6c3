"""Streaming application layer.

Exports:
    StreamingSession: Per-connection session state machine
    SessionState: Session lifecycle states
    CloseReason: Why a session closed
    InitialState: Initial-state frame configuration
    StateProviderRegistry: Initial-state providers by (domain, event_name)
"""

from sse_bridge.application.streaming.session import (
    CloseReason,
    InitialState,
    SessionState,
    StreamingSession,
)
from sse_bridge.application.streaming.state_registry import (
    StateProvider,
    StateProviderRegistry,
)

__all__ = [
    "CloseReason",
    "InitialState",
    "SessionState",
    "StateProvider",
    "StateProviderRegistry",
    "StreamingSession",
]
