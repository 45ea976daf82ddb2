"""FastAPI application entry point.

This module builds the FastAPI application with:
- Application metadata and OpenAPI documentation
- Middleware (CORS, RequestID, Timing, ErrorLogging)
- Exception handlers rendering the uniform response envelope
- API routers (/api/notifications, /api/emails, /api/journeys) and /health

The OneSignal client is constructed once per application, so missing
credentials fail at startup rather than per request.
"""

from typing import Optional

import httpx
import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from onesignal_gateway.api import health
from onesignal_gateway.api.router import router as api_router
from onesignal_gateway.clients.onesignal_client import OneSignalClient
from onesignal_gateway.config import Settings, get_settings
from onesignal_gateway.core.delay import Clock, utc_now
from onesignal_gateway.middleware import setup_middleware
from onesignal_gateway.utils.errors import DeliveryError, GatewayException, ProviderError
from onesignal_gateway.utils.logging import get_logger, log_error, setup_logging

logger = get_logger("main")


def register_exception_handlers(app: FastAPI, settings: Settings) -> None:
    """Install handlers that render every failure as the response envelope."""

    @app.exception_handler(GatewayException)
    async def gateway_exception_handler(
        request: Request, exc: GatewayException
    ) -> JSONResponse:
        """Handle client input, provider and configuration errors."""
        if isinstance(exc, (DeliveryError, ProviderError)):
            # Picked up by TimingMiddleware for the access log
            remote_status = exc.details.get("remoteStatus")
            request.state.provider_status = remote_status if remote_status is not None else "unreachable"

        if exc.status_code < 500:
            logger.warning(
                f"Rejected {request.method} {request.url.path}: {exc.message}",
                extra={"extra_fields": {"code": exc.code, "status_code": exc.status_code}},
            )
        else:
            log_error(
                exc,
                context={
                    "method": request.method,
                    "path": request.url.path,
                    "status_code": exc.status_code,
                    "code": exc.code,
                },
                exc_info=False,
            )
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Malformed JSON and wrongly typed fields are client errors (400)."""
        errors = [
            {
                "field": ".".join(str(loc) for loc in error.get("loc", []) if loc != "body"),
                "message": error.get("msg"),
                "type": error.get("type"),
            }
            for error in exc.errors()
        ]
        logger.warning(
            f"Validation error: {request.method} {request.url.path}",
            extra={"extra_fields": {"validation_errors": errors}},
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "error": "Invalid request body",
                "code": "INVALID_REQUEST",
                "validationErrors": errors,
                "success": False,
            },
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        """Handle HTTP exceptions (404, 405, etc.)."""
        if exc.status_code == 404:
            logger.warning(f"404 Not Found: {request.method} {request.url.path}")
        else:
            log_error(
                exc,
                context={"method": request.method, "path": request.url.path},
                exc_info=False,
            )
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail, "code": "HTTP_ERROR", "success": False},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Handle all other unhandled exceptions."""
        log_error(
            exc,
            context={"method": request.method, "path": request.url.path, "unhandled": True},
        )
        # Don't expose internal error details in production
        message = "An internal server error occurred" if settings.is_production else str(exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": "Internal server error",
                "message": message,
                "code": "INTERNAL_SERVER_ERROR",
                "success": False,
            },
        )


def create_app(
    settings: Optional[Settings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    clock: Optional[Clock] = None,
) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        settings: Explicit settings; defaults to the process-wide settings from the environment
        transport: Optional httpx transport for every OneSignal call
        clock: Optional clock used for scheduling and timestamps

    Raises:
        ConfigurationError: If the OneSignal app id or API key is missing
    """
    settings = settings or get_settings()
    setup_logging(settings)

    onesignal_client = OneSignalClient(settings.onesignal, transport=transport)

    app = FastAPI(
        title="OneSignal Gateway",
        description=(
            "Forwards push notifications, transactional emails and journey user "
            "management to the OneSignal REST API."
        ),
        version="0.1.0",
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
        debug=settings.debug,
        openapi_tags=[
            {"name": "health", "description": "Liveness endpoints"},
            {"name": "notifications", "description": "Push notifications"},
            {"name": "emails", "description": "Transactional emails"},
            {"name": "journeys", "description": "Journey users and diagnostics"},
        ],
    )
    app.state.settings = settings
    app.state.onesignal_client = onesignal_client
    app.state.clock = clock or utc_now

    setup_middleware(app, settings)
    register_exception_handlers(app, settings)

    app.include_router(health.router)
    app.include_router(api_router)

    logger.info(
        f"OneSignal Gateway ready: app_id={onesignal_client.app_id}, api_url={onesignal_client.base_url}"
    )
    return app


def run() -> None:
    """Run the service with uvicorn."""
    settings = get_settings()
    uvicorn.run(
        "onesignal_gateway.main:create_app",
        factory=True,
        host=settings.server.host,
        port=settings.server.port,
        reload=settings.server.reload,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
