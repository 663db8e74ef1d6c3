"""Container module - Centralized dependency injection.

All factories are plain functions cached with lru_cache, so FastAPI
routes can depend on them and tests can override them through
app.dependency_overrides or cache_clear().

    from sse_bridge.core.container import get_backplane, get_logger

Modules:
- infrastructure: logging
- backplane: pub/sub engine and initial-state providers
"""

from sse_bridge.core.container.backplane import get_backplane, get_state_registry
from sse_bridge.core.container.infrastructure import get_logger

__all__ = [
    "get_backplane",
    "get_logger",
    "get_state_registry",
]
