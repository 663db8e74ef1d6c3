"""Channel naming conventions for pub/sub.

Centralized channel name generation so producers and consumers agree
on topic strings. This is the only inter-process naming contract; the
formats below must stay stable.

Channel Patterns:
    {domain}:{identifier}                - Entity channel
    {domain}:{identifier}:{event_type}   - Entity channel narrowed to one event
    {domain}:all                         - Domain-wide broadcast channel

Note:
    Formatting does not validate or escape. Components must be non-empty
    and must not contain ':' (see sse_bridge/core/validation.py).
"""

from sse_bridge.core.constants import BROADCAST_IDENTIFIER, CHANNEL_DELIMITER
from sse_bridge.domain.value_objects.channel_name import ChannelName


class ChannelKeys:
    """Centralized channel name generation.

    Example:
        >>> ChannelKeys.channel("game", "abc123")
        'game:abc123'
        >>> ChannelKeys.broadcast_channel("game")
        'game:all'
    """

    @staticmethod
    def channel(domain: str, identifier: str, event_type: str | None = None) -> str:
        """Get channel for an entity, optionally narrowed to an event type.

        Args:
            domain: Domain component.
            identifier: Identifier component.
            event_type: Optional event type component.

        Returns:
            "{domain}:{identifier}" or "{domain}:{identifier}:{event_type}".
        """
        return str(ChannelName(domain, identifier, event_type))

    @staticmethod
    def event_channel(domain: str, identifier: str, event_type: type | str) -> str:
        """Get channel narrowed to an event class.

        Args:
            domain: Domain component.
            identifier: Identifier component.
            event_type: Event class (its short name is used) or event name.

        Returns:
            "{domain}:{identifier}:{event name}".

        Example:
            >>> class ScoreChanged: ...
            >>> ChannelKeys.event_channel("game", "abc123", ScoreChanged)
            'game:abc123:ScoreChanged'
        """
        return ChannelKeys.channel(domain, identifier, ChannelKeys.event_name(event_type))

    @staticmethod
    def broadcast_channel(domain: str) -> str:
        """Get broadcast channel for a domain.

        Args:
            domain: Domain component.

        Returns:
            "{domain}:all".
        """
        return ChannelKeys.channel(domain, BROADCAST_IDENTIFIER)

    @staticmethod
    def event_name(event_type: type | str) -> str:
        """Resolve the canonical short name of an event type.

        Args:
            event_type: Event class or an already-resolved name.

        Returns:
            Class __name__, or the string unchanged.
        """
        if isinstance(event_type, str):
            return event_type
        return event_type.__name__

    @staticmethod
    def parse(channel: str) -> ChannelName | None:
        """Split a channel string back into its components.

        Args:
            channel: Channel string.

        Returns:
            ChannelName for 2- or 3-component channels with non-empty
            components, None otherwise.

        Example:
            >>> ChannelKeys.parse("game:abc123:Moved")
            ChannelName(domain='game', identifier='abc123', event_type='Moved')
            >>> ChannelKeys.parse("nonsense") is None
            True
        """
        parts = channel.split(CHANNEL_DELIMITER)
        if len(parts) not in (2, 3) or not all(parts):
            return None
        return ChannelName(*parts)

    @staticmethod
    def is_broadcast_channel(channel: str) -> bool:
        """Check if channel is a domain broadcast channel.

        Args:
            channel: Channel name to check.

        Returns:
            True if the channel is "{domain}:all", False otherwise.
        """
        parsed = ChannelKeys.parse(channel)
        return (
            parsed is not None
            and parsed.identifier == BROADCAST_IDENTIFIER
            and parsed.event_type is None
        )
