"""
FastAPI Application Entry Point

MailSink HTTP application with:
- Captured email API
- SMTP listener lifecycle
- Permissive CORS
- Optional basic-auth gate
- Error handling
- Metrics collection
- Structured logging

Run with:
    python -m mailsink.main
"""

import sys
import time
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from prometheus_client import make_asgi_app
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.routing import Match, Mount

from mailsink import __version__
from mailsink.api import health
from mailsink.api.router import api_router
from mailsink.config import Settings, get_settings
from mailsink.core.exceptions import MailSinkException
from mailsink.core.logging import setup_logging, get_logger
from mailsink.core.metrics import record_request
from mailsink.core.security import authenticate_request, challenge_headers
from mailsink.services.message_store import MessageStore
from mailsink.services.sender_policy import SenderPolicy
from mailsink.smtp.handler import MailSinkHandler
from mailsink.smtp.server import SMTPListener

logger = get_logger(__name__)

CORS_ALLOW_HEADERS = "Origin, X-Requested-With, Content-Type, Accept"


def route_label(request: Request) -> str:
    """
    Metric label for a request: the matched route template, never the raw path.

    Anything served by the UI mount is bucketed as "static"; paths no
    route matches are bucketed as "unmatched".
    """
    partial = None
    for route in request.app.router.routes:
        match, _ = route.matches(request.scope)
        if match == Match.FULL:
            if isinstance(route, Mount) and route.name == "ui":
                return "static"
            return getattr(route, "path", None) or "/"
        if match == Match.PARTIAL and partial is None:
            # Right path, wrong method.
            partial = route.path
    return partial or "unmatched"


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[MessageStore] = None,
    start_smtp: bool = True,
) -> FastAPI:
    """
    Build the HTTP application and its SMTP listener.

    Args:
        settings: Application settings (defaults to environment)
        store: Message store shared with the SMTP handler
        start_smtp: Start the SMTP listener during the lifespan

    Returns:
        FastAPI: Configured application
    """
    settings = settings or get_settings()
    if store is None:
        store = MessageStore(capacity=settings.MAX_EMAILS)
    sender_policy = SenderPolicy(settings.whitelist_addresses)
    smtp_handler = MailSinkHandler(
        store=store,
        sender_policy=sender_policy,
        include_headers=settings.HEADERS,
    )
    smtp_listener = SMTPListener(smtp_handler, settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator:
        """
        Application lifespan handler.

        Starts the SMTP listener on startup and stops it on shutdown.
        """
        logger.info("Starting MailSink")
        if settings.whitelist_addresses:
            logger.info(f"Accepting mail only from: {sorted(settings.whitelist_addresses)}")
        logger.info(f"Keeping at most {store.capacity} messages")

        if start_smtp:
            smtp_listener.start()

        yield

        logger.info("Shutting down MailSink")
        smtp_listener.stop()

    app = FastAPI(
        title="MailSink API",
        description="Disposable SMTP capture server",
        version=__version__,
        lifespan=lifespan,
    )

    app.state.store = store
    app.state.smtp_listener = smtp_listener

    # ===================================
    # Request/Response Middleware
    # ===================================

    @app.middleware("http")
    async def basic_auth_gate(request: Request, call_next):
        """
        Require the configured credentials on every request, UI included.
        """
        try:
            await authenticate_request(request, settings.auth_credentials)
        except MailSinkException as exc:
            logger.warning(
                f"Unauthenticated request: {exc.message}",
                extra={"path": request.url.path, "method": request.method},
            )
            return JSONResponse(
                status_code=exc.status_code,
                content={"error": exc.error_code, "message": exc.message, "detail": exc.detail},
                headers=challenge_headers(),
            )
        return await call_next(request)

    @app.middleware("http")
    async def add_cors_headers(request: Request, call_next):
        """
        Add permissive cross-origin headers to all responses.
        """
        response = await call_next(request)
        response.headers["Access-Control-Allow-Origin"] = "*"
        response.headers["Access-Control-Allow-Headers"] = CORS_ALLOW_HEADERS
        return response

    @app.middleware("http")
    async def metrics_middleware(request: Request, call_next):
        """
        Collect Prometheus metrics for all requests.
        """
        start_time = time.time()
        endpoint = route_label(request)
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
        finally:
            record_request(request.method, endpoint, status_code, time.time() - start_time)
        return response

    # Preflight requests are answered here, before the auth gate.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "DELETE", "OPTIONS"],
        allow_headers=[header.strip() for header in CORS_ALLOW_HEADERS.split(",")],
    )

    # ===================================
    # Exception Handlers
    # ===================================

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """
        Handle HTTP exceptions.
        """
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": "http_error", "message": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """
        Handle request validation errors.
        """
        logger.warning(
            "Request validation failed",
            extra={"path": request.url.path, "method": request.method},
        )
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={"error": "validation_error", "message": "Invalid request data", "detail": exc.errors()},
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """
        Handle unexpected exceptions.
        """
        logger.error(
            f"Unexpected exception: {str(exc)}",
            exc_info=True,
            extra={"path": request.url.path, "method": request.method},
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "internal_error", "message": "Internal server error"},
        )

    # ===================================
    # Routes
    # ===================================

    app.include_router(api_router, prefix="/api")
    app.include_router(health.router, tags=["health"])

    if settings.ENABLE_METRICS:
        app.mount("/metrics", make_asgi_app())
        logger.info("Prometheus metrics enabled at /metrics")

    # The UI mount catches everything else, so it goes last.
    static_dir = Path(settings.STATIC_DIR)
    if static_dir.is_dir():
        app.mount("/", StaticFiles(directory=static_dir, html=True), name="ui")
    else:
        logger.warning(f"Static UI directory not found: {static_dir}")

    return app


def run():
    """
    Load settings, then serve HTTP (and SMTP from the lifespan).

    Exits with status 1 on invalid configuration, before anything binds.
    """
    try:
        settings = Settings()
    except ValidationError as e:
        setup_logging(Settings.model_construct(LOG_LEVEL="INFO", LOG_FORMAT="text", LOG_FILE=None))
        logger.error(f"Invalid configuration: {e}")
        sys.exit(1)

    setup_logging(settings)

    import uvicorn

    app = create_app(settings)
    logger.info(f"HTTP server listening on http://{settings.HTTP_HOST}:{settings.HTTP_PORT}")
    uvicorn.run(
        app,
        host=settings.HTTP_HOST,
        port=settings.HTTP_PORT,
        log_config=None,  # Use our custom logging
    )


if __name__ == "__main__":
    run()
