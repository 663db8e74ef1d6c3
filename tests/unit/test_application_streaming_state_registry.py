"""Unit tests for StateProviderRegistry."""

import pytest

from sse_bridge.application.streaming import StateProviderRegistry


async def load_game(identifier: str) -> dict[str, str]:
    return {"id": identifier}


async def load_other(identifier: str) -> None:
    return None


@pytest.mark.unit
class TestStateProviderRegistry:
    """Test register() / get()."""

    def test_get_registered_provider(self):
        registry = StateProviderRegistry()
        registry.register("game", "game_state", load_game)

        assert registry.get("game", "game_state") is load_game
        assert len(registry) == 1

    def test_get_unknown_provider_is_none(self):
        registry = StateProviderRegistry()
        registry.register("game", "game_state", load_game)

        assert registry.get("game", "other") is None
        assert registry.get("chat", "game_state") is None

    def test_register_replaces_existing(self):
        registry = StateProviderRegistry()
        registry.register("game", "game_state", load_game)
        registry.register("game", "game_state", load_other)

        assert registry.get("game", "game_state") is load_other
        assert len(registry) == 1

    async def test_provider_receives_identifier(self):
        registry = StateProviderRegistry()
        registry.register("game", "game_state", load_game)

        provider = registry.get("game", "game_state")

        assert await provider("abc123") == {"id": "abc123"}
