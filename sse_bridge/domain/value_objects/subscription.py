"""Subscription value object.

The live binding between one streaming session and one channel on the
backplane. Created by BackplaneProtocol.subscribe() and released by
BackplaneProtocol.unsubscribe(channel, subscriber_id).
"""

from collections.abc import AsyncIterator
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True, kw_only=True)
class Subscription:
    """Handle returned by the backplane for one subscribe call.

    Attributes:
        channel: Channel subscribed to.
        subscriber_id: Opaque backplane-assigned id, unique per subscribe call.
        messages: Lazy, potentially infinite, non-restartable message source.
            Owned by exactly one session.
    """

    channel: str
    subscriber_id: str
    messages: AsyncIterator[Any]
