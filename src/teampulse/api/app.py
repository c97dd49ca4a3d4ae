"""FastAPI application factory."""

import logging
import time
import traceback
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, NoResultFound
from starlette.exceptions import HTTPException as StarletteHTTPException

from teampulse import __version__
from teampulse.api.routes import (
    activities_router,
    auth_router,
    budgets_router,
    comments_router,
    feedback_router,
    health_router,
    kudos_router,
    notifications_router,
    teams_router,
    users_router,
    vouchers_router,
)
from teampulse.config import Settings, get_settings
from teampulse.database import create_schema, get_engine, get_session_factory
from teampulse.errors import AppError
from teampulse.services.auth_service import LoginRateLimiter

logger = logging.getLogger(__name__)

UNIQUE_VIOLATION = "23505"
FOREIGN_KEY_VIOLATION = "23503"


def _check_production(settings: Settings) -> None:
    if not settings.is_production:
        return
    if not settings.jwt_secret:
        raise RuntimeError("JWT_SECRET must be set in production")
    if settings.database_url.startswith("sqlite"):
        raise RuntimeError("SQLite is not supported in production")


def classify_integrity_error(exc: IntegrityError) -> tuple[int, str]:
    """Map a database constraint failure to a status code and message."""
    orig = exc.orig
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    text = str(orig).lower()
    if code == UNIQUE_VIOLATION or "unique" in text or "duplicate key" in text:
        return status.HTTP_409_CONFLICT, "Resource already exists"
    if code == FOREIGN_KEY_VIOLATION or "foreign key" in text:
        return status.HTTP_400_BAD_REQUEST, "Invalid foreign key reference"
    return status.HTTP_400_BAD_REQUEST, "Database operation failed"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    # Startup
    settings: Settings = app.state.settings
    if settings.database_url.startswith("sqlite"):
        await create_schema(app.state.engine)
    logger.info("TeamPulse API started (env=%s)", settings.env)
    yield
    # Shutdown
    await app.state.engine.dispose()


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = settings or get_settings()
    _check_production(settings)
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(
        title="TeamPulse API",
        description="Employee recognition: kudos, feedback, budgets and vouchers",
        version=__version__,
        lifespan=lifespan,
        debug=settings.debug,
    )
    engine = get_engine(settings)
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = get_session_factory(engine)
    app.state.rate_limiter = LoginRateLimiter(settings.login_rate_limit, settings.login_rate_window)
    app.state.started_at = time.monotonic()

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[origin.strip() for origin in settings.cors_origin.split(",")],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    def error_response(
        status_code: int,
        message: str,
        exc: BaseException | None = None,
        details: Any = None,
    ) -> JSONResponse:
        error: dict[str, Any] = {"message": message}
        if details is not None:
            error["details"] = details
        if settings.is_development and exc is not None:
            error["stack"] = "".join(traceback.format_exception(exc))
        return JSONResponse(status_code=status_code, content=jsonable_encoder({"error": error}))

    # Exception handlers
    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
        return error_response(exc.status_code, exc.message, exc)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return error_response(
            status.HTTP_400_BAD_REQUEST,
            "Validation failed",
            details=exc.errors(),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        return error_response(exc.status_code, str(exc.detail))

    @app.exception_handler(IntegrityError)
    async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
        status_code, message = classify_integrity_error(exc)
        logger.warning("Integrity error on %s %s: %s", request.method, request.url.path, exc.orig)
        return error_response(status_code, message, exc)

    @app.exception_handler(NoResultFound)
    async def no_result_handler(request: Request, exc: NoResultFound) -> JSONResponse:
        return error_response(status.HTTP_404_NOT_FOUND, "Resource not found", exc)

    @app.exception_handler(Exception)
    async def general_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        """Handle unexpected exceptions."""
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Internal server error",
            exc,
        )

    # Include routers
    app.include_router(health_router)
    app.include_router(auth_router, prefix="/api")
    app.include_router(users_router, prefix="/api")
    app.include_router(kudos_router, prefix="/api")
    app.include_router(budgets_router, prefix="/api")
    app.include_router(feedback_router, prefix="/api")
    app.include_router(comments_router, prefix="/api")
    app.include_router(notifications_router, prefix="/api")
    app.include_router(activities_router, prefix="/api")
    app.include_router(vouchers_router, prefix="/api")
    app.include_router(teams_router, prefix="/api")

    return app
