"""System router for non-versioned application endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends

from sse_bridge.core.config import Settings, get_settings

system_router = APIRouter(tags=["System"])


@system_router.get("/health")
async def health(
    settings: Annotated[Settings, Depends(get_settings)],
) -> dict[str, str]:
    """Health check endpoint for monitoring and load balancers.

    Returns:
        dict[str, str]: Health status and configured backplane kind.
    """
    return {"status": "healthy", "backplane": settings.backplane.value}
