"""Channel name value object.

A channel is an opaque topic string shared by publishers and subscribers.
ChannelName keeps the components that produced it so that equality is
defined on the component tuple, and formats to the wire string with str().

Format:
    {domain}:{identifier}
    {domain}:{identifier}:{event_type}
"""

from typing import NamedTuple

from sse_bridge.core.constants import CHANNEL_DELIMITER


class ChannelName(NamedTuple):
    """Components of a pub/sub channel.

    Attributes:
        domain: Top-level grouping (e.g. "game").
        identifier: Entity within the domain (e.g. "abc123"), or "all".
        event_type: Optional event type narrowing the channel.

    Example:
        >>> str(ChannelName("game", "abc123"))
        'game:abc123'
        >>> str(ChannelName("game", "abc123", "Moved"))
        'game:abc123:Moved'
    """

    domain: str
    identifier: str
    event_type: str | None = None

    def __str__(self) -> str:
        parts = [self.domain, self.identifier]
        if self.event_type is not None:
            parts.append(self.event_type)
        return CHANNEL_DELIMITER.join(parts)
