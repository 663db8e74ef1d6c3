"""Envelope wrapping a typed payload for the wire.

The envelope tags a payload with its event name. It is used for the
initial-state frame of a stream; publishers may also use it so that
typed streams can filter on the tag. Ordinary backplane messages are
forwarded as published and never re-wrapped.

Wire shape:
    {"Type": "<event name>", "Data": <payload>}
"""

from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from sse_bridge.core.constants import ENVELOPE_DATA_KEY, ENVELOPE_TYPE_KEY

T = TypeVar("T")


@dataclass(frozen=True, slots=True, kw_only=True)
class Envelope(Generic[T]):
    """Tagged wrapper around a payload.

    Attributes:
        type: Event name.
        data: Payload (must be JSON serializable once converted).
    """

    type: str
    data: T

    def to_wire(self) -> dict[str, Any]:
        """Convert to the wire dictionary.

        Returns:
            Dictionary with "Type" and "Data" keys.
        """
        return {ENVELOPE_TYPE_KEY: self.type, ENVELOPE_DATA_KEY: self.data}
