"""Health and messaging status endpoints.

- /health - relay liveness, messaging connection and processed-set size
- /messaging/status - WhatsApp session state and connected account
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from sentwatch.api.dependencies import get_context
from sentwatch.api.models import ChannelInfoResponse, HealthResponse, MessagingStatusResponse
from sentwatch.relay.context import RelayContext

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(context: RelayContext = Depends(get_context)) -> HealthResponse:
    """Health check endpoint. Makes no external calls."""
    return HealthResponse(
        status="running",
        messaging_connected=context.channel.is_ready,
        processed_count=len(context.processed),
    )


@router.get(
    "/messaging/status",
    response_model=MessagingStatusResponse,
    response_model_exclude_none=True,
)
async def messaging_status(
    context: RelayContext = Depends(get_context),
) -> MessagingStatusResponse:
    """Connection status; `info` only present while connected."""
    info = context.channel.info
    if not context.channel.is_ready or info is None:
        return MessagingStatusResponse(connected=False)

    return MessagingStatusResponse(
        connected=True,
        info=ChannelInfoResponse(name=info.name, identifier=info.identifier),
    )
