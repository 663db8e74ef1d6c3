"""Machine-readable error codes.

Error codes follow ENTITY_ACTION_REASON naming convention.
Shared by Result-based validation errors and the streaming
exception hierarchy.

Categories:
- Validation errors (INVALID_*, VALIDATION_*)
- Streaming lifecycle errors (STREAM_*)
- Backplane errors (BACKPLANE_*)
"""

from enum import Enum


class ErrorCode(Enum):
    """Domain-level error codes (machine-readable)."""

    # Validation errors
    VALIDATION_FAILED = "validation_failed"
    INVALID_CHANNEL_COMPONENT = "invalid_channel_component"

    # Streaming lifecycle errors
    STREAM_FAILED = "stream_failed"
    STREAM_SUBSCRIBE_FAILED = "stream_subscribe_failed"
    STREAM_INITIAL_STATE_FAILED = "stream_initial_state_failed"
    STREAM_MESSAGE_ENCODING_FAILED = "stream_message_encoding_failed"
    STREAM_MESSAGE_DECODING_FAILED = "stream_message_decoding_failed"
    STREAM_CLIENT_DISCONNECTED = "stream_client_disconnected"

    # Backplane errors
    BACKPLANE_UNAVAILABLE = "backplane_unavailable"
