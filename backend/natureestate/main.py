from contextlib import asynccontextmanager
from typing import Optional
import logging
import time

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from natureestate.api.routers import (
    auth, dashboard, inquiries, notifications, properties, saved, search_history, users,
)
from natureestate.core.config import Settings, get_settings
from natureestate.core.database import create_db_engine, create_session_factory
from natureestate.core.errors import MarketplaceError

logger = logging.getLogger(__name__)


def _error_location(loc) -> str:
    # Drop the "body"/"query" prefix FastAPI puts in front of the field path
    parts = [str(part) for part in loc if part not in ("body", "query", "path", "header")]
    return ".".join(parts) or "request"


def _first_error_per_field(errors) -> list:
    seen = {}
    for error in errors:
        field = _error_location(error.get("loc", ()))
        seen.setdefault(field, error.get("msg", "Invalid value"))
    return [{"field": field, "message": message} for field, message in seen.items()]


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(MarketplaceError)
    async def marketplace_error_handler(request: Request, exc: MarketplaceError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content=exc.to_payload())

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "success": False,
                "message": "Invalid input data",
                "errors": _first_error_per_field(exc.errors()),
            },
        )

    @app.exception_handler(PydanticValidationError)
    async def pydantic_validation_handler(request: Request, exc: PydanticValidationError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "success": False,
                "message": "Invalid input data",
                "errors": _first_error_per_field(exc.errors()),
            },
        )

    @app.exception_handler(SQLAlchemyError)
    async def database_error_handler(request: Request, exc: SQLAlchemyError):
        logger.error(f"Database error on {request.method} {request.url.path}: {exc}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"success": False, "message": "Internal server error"},
        )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the application with its own engine and session factory"""
    settings = settings or get_settings()

    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    engine = create_db_engine(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Application startup completed successfully")
        yield
        engine.dispose()
        logger.info("Application shutdown completed successfully")

    app = FastAPI(
        title="NatureEstate Marketplace API",
        description="API for listing, searching and inquiring about nature properties",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - started) * 1000
        logger.info(f"{request.method} {request.url.path} -> {response.status_code} ({duration_ms:.1f}ms)")
        return response

    register_exception_handlers(app)

    # Include routers
    app.include_router(auth.router, prefix="/auth", tags=["auth"])
    app.include_router(users.router, prefix="/users", tags=["users"])
    app.include_router(properties.router, prefix="/properties", tags=["properties"])
    app.include_router(inquiries.router, prefix="/inquiries", tags=["inquiries"])
    app.include_router(saved.saved_properties_router, prefix="/saved-properties", tags=["saved-properties"])
    app.include_router(saved.saved_searches_router, prefix="/saved-searches", tags=["saved-searches"])
    app.include_router(notifications.router, prefix="/notifications", tags=["notifications"])
    app.include_router(dashboard.router, prefix="/dashboard", tags=["dashboard"])
    app.include_router(search_history.router, prefix="/search-history", tags=["search-history"])

    @app.get("/")
    async def root():
        return {"message": "NatureEstate Marketplace API"}

    @app.get("/health")
    async def health_check(request: Request):
        """Health check endpoint that verifies the database connection"""
        try:
            with request.app.state.session_factory() as db:
                db.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            logger.error(f"Health check failed: {e}")
            return JSONResponse(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                content={"status": "unhealthy", "database": "disconnected", "error": str(e)},
            )
        return {"status": "healthy", "database": "connected"}

    return app


app = create_app()
