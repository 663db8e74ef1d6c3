"""Registry of initial-state providers.

A provider answers "what is the current state of <domain>/<identifier>"
for one event name. The HTTP layer looks one up when a client connects
to an event channel and, when found, sends its result as the first frame.

Usage:
    registry = get_state_registry()

    async def load_game_state(identifier: str) -> dict[str, int]:
        return {"score": 0}

    registry.register("game", "game_state", load_game_state)
"""

from collections.abc import Awaitable, Callable
from typing import Any

StateProvider = Callable[[str], Awaitable[Any]]


class StateProviderRegistry:
    """Providers keyed by (domain, event_name).

    Not thread-safe; register providers at startup.
    """

    def __init__(self) -> None:
        self._providers: dict[tuple[str, str], StateProvider] = {}

    def register(self, domain: str, event_name: str, provider: StateProvider) -> None:
        """Register (or replace) the provider for a domain event.

        Args:
            domain: Channel domain.
            event_name: Envelope type tag of the initial-state frame.
            provider: Coroutine function taking the channel identifier.
        """
        self._providers[(domain, event_name)] = provider

    def get(self, domain: str, event_name: str) -> StateProvider | None:
        """Return the provider for a domain event, or None."""
        return self._providers.get((domain, event_name))

    def __len__(self) -> int:
        return len(self._providers)
