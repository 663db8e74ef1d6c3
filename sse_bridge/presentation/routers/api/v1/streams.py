"""Event stream endpoints.

Each endpoint validates its path components, resolves the channel and
hands over to an entry point. The returned response subscribes when
called, so a backplane outage still yields a 503 before any stream
bytes.

Channels:
    GET /streams/{domain}                                  -> domain:all
    GET /streams/{domain}/{identifier}                     -> domain:identifier
    GET /streams/{domain}/{identifier}/events/{event_name} -> domain:identifier:event_name
"""

from functools import partial
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import Response

from sse_bridge.application.streaming.state_registry import StateProviderRegistry
from sse_bridge.core.config import Settings, get_settings
from sse_bridge.core.container import get_backplane, get_logger, get_state_registry
from sse_bridge.core.result import Failure
from sse_bridge.core.validation import validate_channel_components
from sse_bridge.domain.protocols.backplane_protocol import BackplaneProtocol
from sse_bridge.domain.protocols.logger_protocol import LoggerProtocol
from sse_bridge.infrastructure.sse.channel_keys import ChannelKeys
from sse_bridge.presentation.routers.api.v1.errors import ErrorResponseBuilder
from sse_bridge.presentation.sse import (
    EventStreamResponse,
    stream_channel,
    stream_events,
    stream_with_initial_state,
)

streams_router = APIRouter(prefix="/streams", tags=["Streams"])

BackplaneDep = Annotated[BackplaneProtocol, Depends(get_backplane)]
LoggerDep = Annotated[LoggerProtocol, Depends(get_logger)]
SettingsDep = Annotated[Settings, Depends(get_settings)]


@streams_router.get(
    "/{domain}",
    response_class=EventStreamResponse,
    summary="Stream every broadcast message of a domain",
)
async def stream_domain(
    request: Request,
    domain: str,
    backplane: BackplaneDep,
    logger: LoggerDep,
    settings: SettingsDep,
) -> Response:
    match validate_channel_components(domain=domain):
        case Failure(error=error):
            return ErrorResponseBuilder.from_domain_error(error, request.url.path)

    return stream_channel(
        backplane,
        ChannelKeys.broadcast_channel(domain),
        logger=logger,
        timeout_seconds=settings.sse_stream_timeout_seconds,
        retry_ms=settings.sse_retry_interval_ms,
    )


@streams_router.get(
    "/{domain}/{identifier}",
    response_class=EventStreamResponse,
    summary="Stream messages of one entity",
)
async def stream_entity(
    request: Request,
    domain: str,
    identifier: str,
    backplane: BackplaneDep,
    logger: LoggerDep,
    settings: SettingsDep,
    event_type: Annotated[
        str | None,
        Query(description="Forward only messages whose Type tag equals this name"),
    ] = None,
) -> Response:
    """Stream ``domain:identifier``, optionally filtered by message type.

    Filtered messages are forwarded unchanged.
    """
    match validate_channel_components(
        domain=domain, identifier=identifier, event_type=event_type
    ):
        case Failure(error=error):
            return ErrorResponseBuilder.from_domain_error(error, request.url.path)

    channel = ChannelKeys.channel(domain, identifier)

    if event_type is not None:
        return stream_events(
            backplane,
            channel,
            event_type,
            logger=logger,
            timeout_seconds=settings.sse_stream_timeout_seconds,
            retry_ms=settings.sse_retry_interval_ms,
        )

    return stream_channel(
        backplane,
        channel,
        logger=logger,
        timeout_seconds=settings.sse_stream_timeout_seconds,
        retry_ms=settings.sse_retry_interval_ms,
    )


@streams_router.get(
    "/{domain}/{identifier}/events/{event_name}",
    response_class=EventStreamResponse,
    summary="Stream one event channel of an entity",
)
async def stream_entity_event(
    request: Request,
    domain: str,
    identifier: str,
    event_name: str,
    backplane: BackplaneDep,
    logger: LoggerDep,
    settings: SettingsDep,
    registry: Annotated[StateProviderRegistry, Depends(get_state_registry)],
) -> Response:
    """Stream ``domain:identifier:event_name``.

    When a state provider is registered for (domain, event_name), its
    result is sent first as ``{"Type": event_name, "Data": <state>}``.
    """
    match validate_channel_components(
        domain=domain, identifier=identifier, event_name=event_name
    ):
        case Failure(error=error):
            return ErrorResponseBuilder.from_domain_error(error, request.url.path)
    channel = ChannelKeys.event_channel(domain, identifier, event_name)
    provider = registry.get(domain, event_name)

    if provider is None:
        return stream_channel(
            backplane,
            channel,
            logger=logger,
            timeout_seconds=settings.sse_stream_timeout_seconds,
            retry_ms=settings.sse_retry_interval_ms,
        )

    return stream_with_initial_state(
        backplane,
        channel,
        event_name,
        partial(provider, identifier),
        logger=logger,
        timeout_seconds=settings.sse_stream_timeout_seconds,
        retry_ms=settings.sse_retry_interval_ms,
    )
