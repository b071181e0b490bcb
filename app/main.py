"""
Campus Recruitment API - Main Application

FastAPI backend with:
- MongoDB through a shared, lazily connected AsyncMongoClient
- CORS, rate limiting and security headers
- Static serving of uploaded files
- Health and database diagnostic endpoints

Two deployment modes (DEPLOYMENT_MODE):
- server: connect at startup; a database failure aborts startup
- serverless: connect on the first request that needs the database;
  a failure only fails that request (see app/serverless.py)

Run: uvicorn app.main:app --reload
"""

import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.routes import api_router
from app.api.routes.upload_routes import UPLOAD_MOUNTS
from app.core.config import Settings, get_settings
from app.core.logging import configure_logging
from app.core.middleware import BodyLimitMiddleware, SecurityHeadersMiddleware
from app.core.rate_limit import RateLimitMiddleware, build_rate_limit_rules
from app.db.mongodb import (
    DatabaseConnectionError,
    MongoConnectionManager,
    get_connection_manager,
)
from app.utils.process import utc_timestamp

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    manager: MongoConnectionManager = app.state.db_manager

    if settings.deployment_mode == "server":
        try:
            await manager.ensure_connected()
        except DatabaseConnectionError as e:
            logger.critical("Database unavailable at startup (%s), exiting", e.kind.value)
            raise
    logger.info(
        "Campus Recruitment API ready (environment=%s, mode=%s)",
        settings.environment, settings.deployment_mode
    )

    yield

    # serverless containers are frozen between invocations, not shut down;
    # the cached client has to outlive any lifespan cycle
    if settings.deployment_mode == "server":
        await manager.close()


def _mount_uploads(app: FastAPI, settings: Settings) -> None:
    """Serve upload directories that exist; missing ones are skipped."""
    if os.path.isdir(settings.upload_dir):
        app.mount("/uploads", StaticFiles(directory=settings.upload_dir), name="uploads")

    for mount_path, subdir in UPLOAD_MOUNTS.items():
        directory = os.path.join(settings.upload_dir, subdir)
        if os.path.isdir(directory):
            app.mount(mount_path, StaticFiles(directory=directory), name=f"upload-{subdir}")


def _register_error_handlers(app: FastAPI, settings: Settings) -> None:

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code in (404, 405) and exc.detail in ("Not Found", "Method Not Allowed"):
            return JSONResponse(status_code=404, content={"success": False, "message": "Route not found"})
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "message": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(DatabaseConnectionError)
    async def database_error_handler(request: Request, exc: DatabaseConnectionError):
        return JSONResponse(
            status_code=500,
            content={
                "success": False,
                "message": "Database connection failed",
                "error": exc.kind.value,
                "timestamp": utc_timestamp(),
            },
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content={
                "success": False,
                "message": "Something went wrong!",
                "error": str(exc) if settings.is_development else "Internal server error",
            },
        )


def create_app(
    settings: Optional[Settings] = None,
    manager: Optional[MongoConnectionManager] = None
) -> FastAPI:
    """Build the FastAPI application."""
    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(
        title="Campus Recruitment API",
        description="""
        REST API backend for the campus recruitment platform.

        ## Diagnostics
        - **/api/health**: process health and database readiness
        - **/api/test-db**: connect and list collections
        - **/api/db-status**: connection details and database stats
        """,
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.db_manager = manager or get_connection_manager()

    # Added innermost first: request passes headers -> CORS -> limits -> body size
    app.add_middleware(BodyLimitMiddleware, max_bytes=settings.max_body_size_mb * 1024 * 1024)
    app.add_middleware(RateLimitMiddleware, rules=build_rate_limit_rules(settings))
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(SecurityHeadersMiddleware)

    app.include_router(api_router, prefix="/api")
    _mount_uploads(app, settings)
    _register_error_handlers(app, settings)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=get_settings().port)
