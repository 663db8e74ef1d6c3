"""Domain value objects."""

from sse_bridge.domain.value_objects.channel_name import ChannelName
from sse_bridge.domain.value_objects.envelope import Envelope
from sse_bridge.domain.value_objects.subscription import Subscription

__all__ = [
    "ChannelName",
    "Envelope",
    "Subscription",
]
