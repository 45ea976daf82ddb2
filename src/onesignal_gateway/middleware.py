"""Custom middleware for FastAPI."""

import time
import uuid
from typing import Callable

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from onesignal_gateway.config import Settings
from onesignal_gateway.utils.logging import get_logger, log_error, log_request, set_request_id

logger = get_logger("middleware")

ROUTE_GROUPS = frozenset(["notifications", "emails", "journeys", "health"])


def route_group(path: str) -> str:
    """Subsystem a path belongs to: notifications, emails, journeys, health or other."""
    parts = [part for part in path.split("/") if part]
    if len(parts) >= 2 and parts[0] == "api":
        group = parts[1]
    elif parts:
        group = parts[0]
    else:
        return "other"
    return group if group in ROUTE_GROUPS else "other"


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Middleware to add request ID to all requests."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        # Generate or get request ID from header
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        set_request_id(request_id)
        request.state.request_id = request_id

        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id

        return response


class TimingMiddleware(BaseHTTPMiddleware):
    """Log each request with its subsystem and, when OneSignal failed, the provider status."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.perf_counter()

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000
        extra = {"route_group": route_group(request.url.path)}
        # Set by the gateway exception handler on provider failures
        provider_status = getattr(request.state, "provider_status", None)
        if provider_status is not None:
            extra["provider_status"] = provider_status

        log_request(
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration_ms=duration_ms,
            client_ip=request.client.host if request.client else None,
            **extra,
        )
        response.headers["X-Process-Time"] = f"{duration_ms:.2f}ms"

        return response


class ErrorLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware to log exceptions that escaped every exception handler."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            return await call_next(request)
        except Exception as e:
            log_error(
                e,
                context={
                    "method": request.method,
                    "path": request.url.path,
                    "route_group": route_group(request.url.path),
                    "request_id": getattr(request.state, "request_id", None),
                },
            )
            raise


def setup_cors_middleware(app: FastAPI, settings: Settings) -> None:
    """Set up CORS middleware."""
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors.origins,
        allow_credentials=settings.cors.allow_credentials,
        allow_methods=settings.cors.allow_methods,
        allow_headers=settings.cors.allow_headers,
        max_age=settings.cors.max_age,
    )
    logger.info(
        f"CORS middleware configured: origins={settings.cors.origins}, "
        f"methods={settings.cors.allow_methods}"
    )


def setup_middleware(app: FastAPI, settings: Settings) -> None:
    """Set up all middleware for the FastAPI application.

    The last middleware added is the outermost, so execution order is:
    1. CORS - handles preflight
    2. RequestID - sets the request ID before anything logs
    3. Timing - logs request duration
    4. ErrorLogging - logs unhandled errors
    """
    app.add_middleware(ErrorLoggingMiddleware)
    app.add_middleware(TimingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    setup_cors_middleware(app, settings)

    logger.info("Middleware configured: CORS, RequestID, Timing, ErrorLogging")
