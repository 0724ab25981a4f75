"""FastAPI dependencies shared by the routers."""

from __future__ import annotations

from fastapi import HTTPException, Request, status

from sentwatch.relay.context import RelayContext


def get_context(request: Request) -> RelayContext:
    """Return the RelayContext attached to the app at startup.

    Raises:
        HTTPException: 503 if the app has not finished starting
    """
    context = getattr(request.app.state, "context", None)
    if context is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service is starting",
        )
    return context
