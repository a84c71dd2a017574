"""FastAPI application factory and startup configuration.

Reads (search, listings, analytics, tools) are public. Create, update and delete
on properties carry ``RequireApiKey`` at the route level, so /health and /docs
stay open for container healthchecks and local development.
"""
from contextlib import asynccontextmanager
from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from app.config import settings
from app.core.exceptions import (
    DuplicateError,
    NotFoundError,
    ValidationError,
)
from app.core.logging import get_logger, set_correlation_id, setup_logging
from app.api.v1.analytics import router as analytics_router
from app.api.v1.properties import router as properties_router
from app.api.v1.search import router as search_router
from app.api.v1.tools import router as tools_router
from app.api.responses import fail, ok

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan — startup and shutdown events."""
    setup_logging()
    logger.info("Starting %s v%s", settings.app_name, settings.app_version)

    if not settings.api_key:
        logger.warning(
            "API_KEY not configured, property writes will be rejected. "
            "Set API_KEY in .env before going to production."
        )

    yield

    logger.info("Shutting down %s", settings.app_name)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    application = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Property marketplace API — search, browse and analyze real estate listings.",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @application.middleware("http")
    async def add_trace_id(request: Request, call_next):
        request.state.trace_id = str(uuid4())
        set_correlation_id(request.state.trace_id)
        response = await call_next(request)
        response.headers["X-Trace-Id"] = request.state.trace_id
        return response

    @application.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        trace_id = getattr(request.state, "trace_id", None)
        logger.exception("Unhandled exception [trace_id=%s]", trace_id, exc_info=exc)
        return fail(500, "Internal error", request, errors=["Internal server error"])

    @application.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError):
        return fail(404, str(exc), request)

    @application.exception_handler(DuplicateError)
    async def duplicate_handler(request: Request, exc: DuplicateError):
        return fail(409, str(exc), request)

    @application.exception_handler(ValidationError)
    async def validation_handler(request: Request, exc: ValidationError):
        errors = exc.detail if isinstance(exc.detail, list) else [{"field": exc.field, "message": str(exc)}]
        logger.info("Rejected input: %s", str(exc))
        return fail(400, str(exc), request, errors=errors)

    application.include_router(properties_router, prefix="/api/v1/properties", tags=["properties"])
    application.include_router(search_router, prefix="/api/v1/search", tags=["search"])
    application.include_router(tools_router, prefix="/api/v1/tools", tags=["tools"])
    application.include_router(analytics_router, prefix="/api/v1/analytics", tags=["analytics"])

    @application.get("/health", tags=["system"])
    async def health_check(request: Request):
        from sqlalchemy import text
        from app.database import async_session_factory

        db_status = "ok"
        try:
            async with async_session_factory() as session:
                await session.execute(text("SELECT 1"))
        except Exception as e:
            db_status = f"error: {str(e)}"

        return ok(
            {
                "status": "healthy" if db_status == "ok" else "unhealthy",
                "version": settings.app_version,
                "database": db_status,
            },
            "Health check completed",
            request,
        )

    return application


app = create_app()
