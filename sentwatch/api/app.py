"""FastAPI server for the SentWatch relay"""

from __future__ import annotations

from typing import Any

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from sentwatch.api.routes.contacts import router as contacts_router
from sentwatch.api.routes.credentials import router as credentials_router
from sentwatch.api.routes.health import router as health_router
from sentwatch.config import API_HOST, API_PORT, APP_VERSION, ENV, SERVICE_NAME
from sentwatch.observability.logging import get_logger
from sentwatch.observability.telemetry import counter, log_event
from sentwatch.relay.context import RelayContext
from sentwatch.utils.redaction import redact

logger = get_logger(__name__)


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """
    Validation error handler that reports field names only, never values.

    Side Effects:
        - Logs validation errors (URL redacted)
        - Increments validation error counter
    """
    logger.warning("Validation error on %s: %s", redact(str(request.url)), exc.errors())
    counter("api.validation_errors")

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "success": False,
            "error": "Invalid request format. Please check your request and try again.",
            "invalid_fields": [str(err["loc"][-1]) for err in exc.errors()],
        },
    )


def create_app(context: RelayContext | None = None, start_relay: bool = True) -> FastAPI:
    """
    Build the API app.

    Args:
        context: Pre-built relay context (tests); built from config at startup when None
        start_relay: Connect the messaging channel and start the scheduler on startup
    """
    app = FastAPI(title=f"{SERVICE_NAME} API", version=APP_VERSION)
    app.state.context = context
    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    @app.on_event("startup")
    async def start_relay_context() -> None:
        """Build the relay context and start monitoring once messaging is ready.

        Side Effects:
            - Loads the processed set and stores from DATA_DIR
            - Connects the WhatsApp channel
            - Starts the poll/flush timers when the channel is ready
        """
        if app.state.context is None:
            app.state.context = RelayContext.from_settings()
        if start_relay:
            await app.state.context.start()
        log_event("api.startup", service="sentwatch", version=APP_VERSION)

    @app.on_event("shutdown")
    async def stop_relay_context() -> None:
        """Stop timers and perform the final processed-set flush."""
        if app.state.context is not None:
            await app.state.context.close()
        log_event("api.shutdown", service="sentwatch")

    app.include_router(health_router)
    app.include_router(credentials_router)
    app.include_router(contacts_router)

    @app.get("/")
    def root() -> dict[str, Any]:
        return {
            "service": SERVICE_NAME,
            "version": APP_VERSION,
            "environment": ENV,
            "status": "running",
            "endpoints": {
                "health": "/health",
                "messaging_status": "/messaging/status",
                "credentials": "/credentials",
                "contacts": "/contacts",
            },
        }

    return app


app = create_app()


def main() -> None:
    """Run the API and relay with uvicorn."""
    logger.info("Server running on port %d", API_PORT)
    uvicorn.run(app, host=API_HOST, port=API_PORT)


if __name__ == "__main__":
    main()
