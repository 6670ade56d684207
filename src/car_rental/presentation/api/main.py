"""FastAPI main application module."""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from ...domain.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    DuplicateError,
    NotFoundError,
)
from ...infrastructure.logging import LoggingConfig, get_logger
from ...infrastructure.services import ServiceFactory
from .config import Settings, get_settings
from .middleware.logging import RequestResponseLoggingMiddleware
from .routes import auth, booked_cars, bookings, cars, health, users


logger = get_logger(__name__)


def _error(status_code: int, detail: str, error_type: str, **extra) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"detail": detail, "type": error_type, **extra}
    )


def add_exception_handlers(app: FastAPI) -> None:
    """Map domain and infrastructure errors to HTTP responses."""

    @app.exception_handler(AuthenticationError)
    async def authentication_error_handler(request: Request, exc: AuthenticationError):
        logger.warning(f"Authentication error on {request.url.path}: {exc}")
        return JSONResponse(
            status_code=401,
            content={
                "detail": str(exc),
                "type": "authentication_error"
            },
            headers={"WWW-Authenticate": "Bearer"}
        )

    @app.exception_handler(AuthorizationError)
    async def authorization_error_handler(request: Request, exc: AuthorizationError):
        logger.warning(f"Authorization error on {request.url.path}: {exc}")
        return _error(403, str(exc), "authorization_error")

    @app.exception_handler(NotFoundError)
    async def not_found_error_handler(request: Request, exc: NotFoundError):
        return _error(404, str(exc), "not_found")

    @app.exception_handler(ConflictError)
    async def conflict_error_handler(request: Request, exc: ConflictError):
        """Booking conflicts are client errors that name every unavailable car."""
        return _error(400, str(exc), "booking_conflict", unavailable_cars=exc.unavailable_car_ids)

    @app.exception_handler(DuplicateError)
    async def duplicate_error_handler(request: Request, exc: DuplicateError):
        return _error(400, str(exc), "duplicate_error")

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError):
        """Handle validation errors from business logic."""
        logger.warning(f"Validation error on {request.url.path}: {exc}")
        return _error(400, str(exc), "validation_error")

    @app.exception_handler(RequestValidationError)
    async def request_validation_error_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content={
                "detail": jsonable_encoder(exc.errors()),
                "type": "validation_error"
            }
        )

    @app.exception_handler(SQLAlchemyError)
    async def database_error_handler(request: Request, exc: SQLAlchemyError):
        logger.error(f"Database error on {request.url.path}", exc_info=exc)
        return _error(500, "Internal server error occurred", "database_error")

    @app.exception_handler(RuntimeError)
    async def runtime_error_handler(request: Request, exc: RuntimeError):
        """Handle runtime errors from business logic."""
        logger.error(f"Runtime error on {request.url.path}", exc_info=exc)
        return _error(500, "Internal server error occurred", "runtime_error")


def create_app(
    settings: Optional[Settings] = None,
    service_factory: Optional[ServiceFactory] = None
) -> FastAPI:
    """Create and configure FastAPI application.

    ``service_factory`` defaults to a database-backed factory built from
    the settings; tests pass an in-memory one instead.
    """
    settings = settings or get_settings()
    service_factory = service_factory or ServiceFactory.from_settings(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan management."""
        LoggingConfig(
            log_level=settings.log_level,
            log_dir=settings.log_dir,
            enable_console=settings.log_enable_console,
            enable_file=settings.log_enable_file
        ).setup_logging()

        logger.info("Starting Car Rental API")
        await app.state.service_factory.initialize()

        yield

        logger.info("Shutting down Car Rental API")
        await app.state.service_factory.shutdown()

    app = FastAPI(
        title="Car Rental API",
        description="API for reserving rental cars over date ranges",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan
    )
    app.state.service_factory = service_factory

    add_exception_handlers(app)

    app.add_middleware(RequestResponseLoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=settings.allowed_methods,
        allow_headers=settings.allowed_headers,
    )

    prefix = settings.api_prefix
    app.include_router(health.router, prefix=prefix, tags=["health"])
    app.include_router(auth.router, prefix=f"{prefix}/auth", tags=["authentication"])
    app.include_router(users.router, prefix=f"{prefix}/users", tags=["users"])
    app.include_router(cars.router, prefix=f"{prefix}/cars", tags=["cars"])
    app.include_router(bookings.router, prefix=f"{prefix}/bookings", tags=["bookings"])
    app.include_router(booked_cars.router, prefix=f"{prefix}/booked-cars", tags=["booked cars"])

    return app


app = create_app()
