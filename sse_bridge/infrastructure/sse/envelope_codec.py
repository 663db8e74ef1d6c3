"""Envelope codec: JSON encoding of stream payloads and SSE framing.

Wire Format (one message):
    data: <compact json>\n\n

Initial-state frames carry an envelope:
    data: {"Type":"game_state","Data":{"score":0}}\n\n

Encoding always completes before a frame is handed to the sink, so an
unencodable payload never produces a partial frame.

Reference:
    - https://html.spec.whatwg.org/multipage/server-sent-events.html
"""

import dataclasses
import json
from typing import Any

from pydantic import BaseModel

from sse_bridge.core.constants import (
    ENVELOPE_TYPE_KEY,
    JSON_SEPARATORS,
    SSE_DATA_PREFIX,
    SSE_FRAME_TERMINATOR,
)
from sse_bridge.domain.errors import MessageDecodingError, MessageEncodingError
from sse_bridge.domain.value_objects.envelope import Envelope

# Plain JSON values carry no type of their own.
_JSON_VALUE_TYPES = (str, bytes, int, float, bool, list, tuple)


def _to_jsonable(value: Any) -> Any:
    """json.dumps default hook for structured payload types.

    Raises:
        TypeError: If the value has no JSON representation.
    """
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    to_dict = getattr(value, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def encode_message(message: Any) -> str:
    """Encode a backplane message to JSON text without wrapping it.

    Args:
        message: Decoded message (any JSON-compatible value, dataclass,
            pydantic model, or object with to_dict()).

    Returns:
        Compact JSON text.

    Raises:
        MessageEncodingError: If the message cannot be serialized, or
            contains NaN or Infinity (not valid JSON).
    """
    try:
        return json.dumps(
            message,
            default=_to_jsonable,
            separators=JSON_SEPARATORS,
            ensure_ascii=False,
            allow_nan=False,
        )
    except (TypeError, ValueError) as e:
        raise MessageEncodingError(f"Cannot encode message: {e}") from e


def encode_envelope(event_name: str, state: Any) -> str:
    """Wrap a value in an Envelope and encode it.

    Args:
        event_name: Envelope type tag.
        state: Payload.

    Returns:
        Compact JSON text of {"Type": event_name, "Data": state}.

    Raises:
        MessageEncodingError: If the payload cannot be serialized.
    """
    return encode_message(Envelope(type=event_name, data=state).to_wire())


def format_frame(payload: str) -> str:
    """Frame encoded JSON as one SSE message.

    Args:
        payload: Encoded JSON text (single line).

    Returns:
        "data: <payload>\\n\\n".
    """
    return f"{SSE_DATA_PREFIX}{payload}{SSE_FRAME_TERMINATOR}"


def format_retry(retry_ms: int) -> str:
    """Format a reconnection-interval hint.

    The hint is a field-only block; clients update their retry delay and
    dispatch no message event.

    Args:
        retry_ms: Reconnection delay in milliseconds.

    Returns:
        "retry: <ms>\\n\\n".
    """
    return f"retry: {retry_ms}{SSE_FRAME_TERMINATOR}"


def decode_message(raw: str | bytes) -> Any:
    """Decode raw backplane payload.

    Args:
        raw: JSON text or UTF-8 bytes.

    Returns:
        Decoded value.

    Raises:
        MessageDecodingError: If the payload is not valid JSON (NaN and
            Infinity literals included).
    """
    try:
        return json.loads(raw, parse_constant=_reject_constant)
    except ValueError as e:
        # JSONDecodeError and UnicodeDecodeError are both ValueErrors
        raise MessageDecodingError(f"Invalid message payload: {e}") from e


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not valid JSON")


def message_type(message: Any) -> str | None:
    """Read the type tag of a message for typed filtering.

    Decoded JSON objects are tagged by their "Type" key. Typed objects
    (as delivered by the in-memory backplane) are tagged by their class
    name, matching ChannelKeys.event_name().

    Args:
        message: Decoded message or typed object.

    Returns:
        The tag, or None for untagged JSON values.

    Example:
        >>> message_type({"Type": "Moved", "Data": {}})
        'Moved'
        >>> message_type(Moved(to="e4"))
        'Moved'
        >>> message_type([1, 2]) is None
        True
    """
    if isinstance(message, dict):
        tag = message.get(ENVELOPE_TYPE_KEY)
        return tag if isinstance(tag, str) else None
    if message is None or isinstance(message, _JSON_VALUE_TYPES):
        return None
    return type(message).__name__
