"""
DBWorks - FastAPI Main Application
"""
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from contextlib import asynccontextmanager
from sqlalchemy.exc import SQLAlchemyError
import logging
import structlog
import time

from dbworks.config import settings
from dbworks.database import Base, app_engine, get_app_db_context
from dbworks.connections import ConnectionRegistry
from dbworks.core.crypto import Encryptor
from dbworks.core.exceptions import DBWorksError


def configure_logging() -> None:
    """Configure structlog on top of the stdlib logging module."""
    logging.basicConfig(
        format="%(message)s",
        level=logging.DEBUG if settings.DEBUG else logging.INFO,
    )
    renderer = structlog.processors.JSONRenderer() if settings.LOG_JSON else structlog.dev.ConsoleRenderer()
    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.stdlib.add_log_level,
            renderer
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
    )


configure_logging()
logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    logger.info("application_startup", version=settings.APP_VERSION)

    try:
        Base.metadata.create_all(bind=app_engine)
        logger.info("database_initialized")
    except SQLAlchemyError as e:
        logger.warning("database_init_failed", error=str(e))

    if settings.LOAD_SAVED_CONNECTIONS:
        try:
            with get_app_db_context() as db:
                loaded = app.state.registry.load_saved_connections(db, app.state.encryptor)
            logger.info("saved_connections_loaded", count=loaded)
        except SQLAlchemyError as e:
            logger.warning("saved_connections_unavailable", error=str(e))

    yield

    app.state.registry.close_all()
    logger.info("application_shutdown")


def create_app() -> FastAPI:
    """Build the FastAPI application with a fresh connection registry."""
    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="Permission-gated CRUD over registered relational connections",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan
    )
    app.state.registry = ConnectionRegistry()
    app.state.encryptor = Encryptor.from_settings() if settings.ENCRYPTION_KEY else None

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Request timing middleware
    @app.middleware("http")
    async def add_process_time_header(request: Request, call_next):
        """Add request timing to response headers."""
        start_time = time.time()
        response = await call_next(request)
        process_time = time.time() - start_time
        response.headers["X-Process-Time"] = str(process_time)
        return response

    # Exception handlers
    @app.exception_handler(DBWorksError)
    async def dbworks_exception_handler(request: Request, exc: DBWorksError):
        """Map domain errors to their HTTP status."""
        log = logger.error if exc.status_code >= 500 else logger.info
        log("request_failed", status=exc.status_code, error=exc.message, path=request.url.path)
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Handle validation errors."""
        logger.warning("validation_error", errors=exc.errors(), path=request.url.path)
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={
                "detail": exc.errors(),
                "error": "Validation error"
            }
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle general exceptions."""
        logger.error("unhandled_exception", error=str(exc), path=request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": str(exc) if settings.DEBUG else "Internal server error"}
        )

    # Health check endpoint
    @app.get("/health", tags=["System"])
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "version": settings.APP_VERSION,
            "app": settings.APP_NAME,
            "connections": len(app.state.registry.list())
        }

    from dbworks.api import connections, data, permissions

    app.include_router(connections.router, prefix="/api/connections", tags=["Connections"])
    app.include_router(data.router, prefix="/api/connections", tags=["Data"])
    app.include_router(permissions.router, prefix="/api/connections", tags=["Permissions"])

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "dbworks.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG
    )
