"""
Tappr — FastAPI Application Entry Point

Application with:
- Async lifespan management (document store, question bank, services,
  background expiry sweep)
- CORS and structured-logging middleware
- One exception handler mapping ``TapprError`` to JSON responses
- Health-check endpoints (liveness + deep readiness)
"""

from __future__ import annotations

import asyncio
import logging
import time
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from tappr.config import Settings, get_settings
from tappr.errors import TapprError
from tappr.services.card_service import CardService
from tappr.services.connection_service import ConnectionService
from tappr.services.discovery_service import DiscoveryService
from tappr.services.question_bank import QuestionBank
from tappr.store import DocumentStore, create_document_store

logger: structlog.stdlib.BoundLogger = structlog.get_logger("tappr")

# ---------------------------------------------------------------------------
# Structured logging configuration
# ---------------------------------------------------------------------------


def _level_number(level: str) -> int:
    number = logging.getLevelName(level.upper())
    return number if isinstance(number, int) else logging.INFO


def configure_logging(level: str = "INFO") -> None:
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(_level_number(level)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


# ---------------------------------------------------------------------------
# Background expiry sweep
# ---------------------------------------------------------------------------

async def _run_expiry_sweep(service: DiscoveryService, interval_seconds: int) -> None:
    """Expire stale sessions every ``interval_seconds`` until cancelled."""
    while True:
        await asyncio.sleep(interval_seconds)
        try:
            await service.sweep_expired_sessions()
        except Exception:
            # A failed pass is retried on the next tick.
            logger.exception("expiry_sweep_failed")


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage startup and shutdown of long-lived resources."""
    settings: Settings = app.state.settings

    # -- Startup --------------------------------------------------------- #
    logger.info(
        "startup_begin",
        environment=settings.ENVIRONMENT,
        log_level=settings.LOG_LEVEL,
        store_backend=settings.STORE_BACKEND,
    )

    # 1. Document store (tests may install their own before startup)
    store: Optional[DocumentStore] = getattr(app.state, "store", None)
    if store is None:
        store = create_document_store(settings)
        app.state.store = store

    # 2. Question bank and services
    question_bank: Optional[QuestionBank] = getattr(app.state, "question_bank", None)
    if question_bank is None:
        question_bank = QuestionBank()
        app.state.question_bank = question_bank

    card_service = CardService(store, base_url=settings.CARD_BASE_URL)
    app.state.card_service = card_service
    app.state.connection_service = ConnectionService(store, card_service)
    app.state.discovery_service = DiscoveryService(
        store,
        question_bank,
        question_count=settings.DISCOVERY_QUESTION_COUNT,
        ttl_hours=settings.DISCOVERY_SESSION_TTL_HOURS,
    )

    # 3. Periodic expiry sweep
    sweep_task: Optional[asyncio.Task] = None
    if settings.EXPIRY_SWEEP_INTERVAL_SECONDS > 0:
        sweep_task = asyncio.create_task(
            _run_expiry_sweep(
                app.state.discovery_service, settings.EXPIRY_SWEEP_INTERVAL_SECONDS
            )
        )
        logger.info(
            "expiry_sweep_scheduled",
            interval_seconds=settings.EXPIRY_SWEEP_INTERVAL_SECONDS,
        )

    logger.info("startup_complete")

    yield

    # -- Shutdown -------------------------------------------------------- #
    logger.info("shutdown_begin")

    if sweep_task is not None:
        sweep_task.cancel()
        try:
            await sweep_task
        except asyncio.CancelledError:
            pass

    await store.close()
    logger.info("document_store_closed")

    logger.info("shutdown_complete")


# ---------------------------------------------------------------------------
# Middleware classes
# ---------------------------------------------------------------------------

class StructuredLoggingMiddleware(BaseHTTPMiddleware):
    """Log every request with method, path, status code, and duration."""

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        start = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception:
            duration_ms = (time.perf_counter() - start) * 1000
            logger.exception(
                "request_error",
                method=request.method,
                path=request.url.path,
                duration_ms=round(duration_ms, 2),
            )
            raise

        duration_ms = (time.perf_counter() - start) * 1000
        logger.info(
            "request_handled",
            method=request.method,
            path=request.url.path,
            status=response.status_code,
            duration_ms=round(duration_ms, 2),
        )
        return response


# ---------------------------------------------------------------------------
# Exception handling
# ---------------------------------------------------------------------------

async def tappr_error_handler(request: Request, exc: TapprError) -> JSONResponse:
    logger.info(
        "request_rejected",
        method=request.method,
        path=request.url.path,
        error=exc.error_code,
        status=exc.status_code,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "error": exc.error_code},
    )


# ---------------------------------------------------------------------------
# Application factory
# ---------------------------------------------------------------------------

def create_app(
    settings: Optional[Settings] = None,
    store: Optional[DocumentStore] = None,
    question_bank: Optional[QuestionBank] = None,
) -> FastAPI:
    """Build the application.

    ``store`` and ``question_bank`` override what the lifespan would build
    from settings.
    """
    settings = settings or get_settings()
    configure_logging(settings.LOG_LEVEL)

    app = FastAPI(
        title="Tappr",
        description="Tap-a-card connections and compatibility discovery",
        version="1.0.0",
        lifespan=lifespan,
        docs_url="/docs" if not settings.is_production else None,
        redoc_url="/redoc" if not settings.is_production else None,
    )
    app.state.settings = settings
    if store is not None:
        app.state.store = store
    if question_bank is not None:
        app.state.question_bank = question_bank

    # -- Middleware (applied in reverse order — last added runs first) ------ #

    app.add_middleware(StructuredLoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(TapprError, tappr_error_handler)

    # -- Health-check endpoints -------------------------------------------- #

    @app.get("/health", tags=["health"])
    async def health_liveness() -> dict:
        """Lightweight liveness probe — always returns healthy if the process is
        running."""
        return {"status": "healthy"}

    @app.get("/health/deep", tags=["health"])
    async def health_deep(request: Request) -> dict:
        """Deep readiness probe — verifies the document store and the question bank."""
        result: dict = {
            "status": "healthy",
            "store": "connected",
            "questionBank": "valid",
        }

        try:
            await request.app.state.store.ping()
        except Exception as exc:
            logger.error("health_store_failure", error=str(exc))
            result["store"] = f"error: {exc}"
            result["status"] = "degraded"

        system = request.app.state.discovery_service.system_health()
        if not system.ready:
            result["questionBank"] = {"errors": system.question_bank.errors}
            result["status"] = "degraded"

        return result

    # -- API router --------------------------------------------------------- #

    from tappr.api.router import router as api_router

    app.include_router(api_router, prefix="/api/v1")

    return app


app = create_app()
