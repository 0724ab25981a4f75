"""
Gmail credential endpoints.

Secrets are write-only: GET reports whether all three values are present,
never the values themselves.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from sentwatch.api.dependencies import get_context
from sentwatch.api.models import (
    CredentialsRequest,
    CredentialsStatusResponse,
    OperationResponse,
)
from sentwatch.observability.logging import get_logger
from sentwatch.observability.telemetry import counter
from sentwatch.relay.context import RelayContext
from sentwatch.storage.models import GmailCredentials

router = APIRouter(prefix="/credentials", tags=["credentials"])
logger = get_logger(__name__)


@router.get("", response_model=CredentialsStatusResponse)
async def get_credentials_status(
    context: RelayContext = Depends(get_context),
) -> CredentialsStatusResponse:
    return CredentialsStatusResponse(configured=context.credentials.is_configured())


@router.post("", response_model=OperationResponse, response_model_exclude_none=True)
async def update_credentials(
    body: CredentialsRequest,
    context: RelayContext = Depends(get_context),
) -> OperationResponse | JSONResponse:
    """Save Gmail credentials and reconfigure the Gmail client.

    Side Effects:
        - Rewrites the credentials file
        - Drops the cached Gmail service so the next poll uses the new values
    """
    missing = body.missing_fields()
    if missing:
        counter("api.credentials.rejected")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"success": False, "error": "All Gmail credentials are required"},
        )

    creds = GmailCredentials(
        client_id=body.client_id,
        client_secret=body.client_secret,
        refresh_token=body.refresh_token,
    )
    if not context.update_credentials(creds):
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"success": False, "error": "Failed to save credentials"},
        )

    logger.info("Gmail credentials updated")
    return OperationResponse(success=True)
