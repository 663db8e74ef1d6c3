"""Centralized constants for internal implementation details.

This module contains constants that are internal implementation details,
NOT environment-specific configuration. For environment-specific settings,
use `sse_bridge/core/config.py` instead.

Categories:
- Channel naming: delimiter and reserved identifiers shared by producers
  and consumers (inter-process contract, must stay stable)
- Wire format: SSE framing and envelope keys
- Response headers: event-stream framing headers
"""

# =============================================================================
# Channel Naming
# =============================================================================

CHANNEL_DELIMITER: str = ":"
"""Separator between channel components (domain:identifier[:event_type])."""

BROADCAST_IDENTIFIER: str = "all"
"""Reserved identifier meaning every identifier within a domain."""


# =============================================================================
# Wire Format
# =============================================================================

SSE_DATA_PREFIX: str = "data: "
"""Field prefix for an SSE data line."""

SSE_FRAME_TERMINATOR: str = "\n\n"
"""Blank line that dispatches an SSE message on the client."""

ENVELOPE_TYPE_KEY: str = "Type"
"""Envelope key holding the event name (also the typed-filter tag)."""

ENVELOPE_DATA_KEY: str = "Data"
"""Envelope key holding the payload."""

JSON_SEPARATORS: tuple[str, str] = (",", ":")
"""Compact JSON separators used for every frame payload."""


# =============================================================================
# Response Headers
# =============================================================================

SSE_MEDIA_TYPE: str = "text/event-stream; charset=utf-8"
"""Content type of an event-stream response."""

SSE_RESPONSE_HEADERS: dict[str, str] = {
    "Content-Type": SSE_MEDIA_TYPE,
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",  # Disable nginx/Traefik buffering
}
"""Headers committed once, before the first body byte of a stream."""


# =============================================================================
# Problem Details
# =============================================================================

PROBLEM_TYPE_BASE_URL: str = "https://sse-bridge.dev/errors"
"""Base URI for RFC 7807 problem types."""
