"""
FastAPI main application
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import Settings, get_settings
from app.api.router import api_router
from app.db.database import Database
from app.domain.exceptions import DomainError, AccountLockedError
from app.infrastructure.external_services.email_service import EmailService
from app.infrastructure.external_services.mpesa_service import MpesaService
from app.infrastructure.external_services.notification_dispatcher import NotificationDispatcher

# Import all ORM models to ensure relationships are resolved
import app.infrastructure.orm  # noqa: F401

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="[%(levelname)s] %(name)s: %(message)s",
    )


def _format_validation_errors(exc: RequestValidationError) -> list:
    errors = []
    for error in exc.errors():
        location = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path", "header")]
        field = ".".join(location)
        errors.append(f"{field}: {error.get('msg')}" if field else error.get("msg"))
    return errors


def register_exception_handlers(app: FastAPI) -> None:

    @app.exception_handler(DomainError)
    async def domain_error_handler(request: Request, exc: DomainError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %r", request.method, request.url.path, exc)
        headers = None
        if isinstance(exc, AccountLockedError):
            headers = {"Retry-After": str(exc.retry_after_seconds)}
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "message": "Validation failed",
                "code": "validation_error",
                "errors": _format_validation_errors(exc),
            },
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"message": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(SQLAlchemyError)
    async def database_error_handler(request: Request, exc: SQLAlchemyError):
        # Store failures are logged with context; callers only see a generic error
        logger.error("Database error on %s %s: %s", request.method, request.url.path, exc, exc_info=exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"message": "Server error", "code": "server_error"},
        )


def create_app(
    settings: Optional[Settings] = None,
    mpesa_service: Optional[MpesaService] = None,
    email_service: Optional[EmailService] = None,
) -> FastAPI:
    """Build the application with its settings and services on ``app.state``"""
    settings = settings or get_settings()
    configure_logging(settings)

    database = Database(settings)
    email_service = email_service or EmailService(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan events"""
        logger.info("Starting %s (%s)", settings.PROJECT_NAME, settings.ENVIRONMENT)
        if settings.DATABASE_URL.startswith("sqlite"):
            # Local development without migrations
            await database.create_all()
        yield
        logger.info("Shutting down %s", settings.PROJECT_NAME)
        await database.dispose()

    app = FastAPI(
        title=settings.PROJECT_NAME,
        description=settings.DESCRIPTION,
        version=settings.VERSION,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.database = database
    app.state.email_service = email_service
    app.state.mpesa_service = mpesa_service or MpesaService(settings)
    app.state.notification_dispatcher = NotificationDispatcher(
        database.session_factory, email_service, settings
    )

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_HOSTS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)
    app.include_router(api_router, prefix=settings.API_PREFIX)

    @app.get(f"{settings.API_PREFIX}/health")
    async def health_check():
        """Health check endpoint that verifies database connectivity"""
        try:
            async with database.session_factory() as session:
                await session.execute(text("SELECT 1"))
            db_status = "healthy"
        except SQLAlchemyError as e:
            logger.error("Database health check failed: %s", e)
            db_status = "unhealthy"

        return {
            "status": "healthy" if db_status == "healthy" else "degraded",
            "database": db_status,
            "version": settings.VERSION,
        }

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="info"
    )
