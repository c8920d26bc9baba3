"""
Kerala IT Jobs API - Main FastAPI application
"""
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
import structlog

from jobboard.core.config import Settings, settings as default_settings
from jobboard.core.database import Database, create_database
from jobboard.core.logging_config import configure_logging
from jobboard.core.middleware import (
    CorrelationIDMiddleware,
    LoggingMiddleware,
    ExceptionHandlerMiddleware,
)
from jobboard.core.exceptions import JobBoardException, MethodNotAllowedError
from jobboard.core.redis_client import JobCache
from jobboard.jobs.router import router as jobs_router
from jobboard.jobs.service import ListingResolver

logger = structlog.get_logger()

CORS_ALLOW_METHODS = ["GET", "OPTIONS", "PATCH", "DELETE", "POST", "PUT"]
CORS_ALLOW_HEADERS = [
    "X-CSRF-Token",
    "X-Requested-With",
    "Accept",
    "Accept-Version",
    "Content-Length",
    "Content-MD5",
    "Content-Type",
    "Date",
    "X-Api-Version",
]


def create_app(
    config: Optional[Settings] = None,
    database: Optional[Database] = None,
    cache: Optional[JobCache] = None,
) -> FastAPI:
    """Build the application with its long-lived resources attached"""
    config = config or default_settings

    app = FastAPI(
        title=config.APP_NAME,
        version=config.APP_VERSION,
        description="IT job postings from Kerala tech parks",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    app.state.database = database or create_database(config)
    app.state.cache = cache or JobCache.from_settings(config)
    app.state.listing_resolver = ListingResolver(app.state.cache, page_size=config.JOBS_PAGE_SIZE)

    # Add middleware
    app.add_middleware(CorrelationIDMiddleware)
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(ExceptionHandlerMiddleware)

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins_list,
        allow_credentials=config.CORS_ALLOW_CREDENTIALS,
        allow_methods=CORS_ALLOW_METHODS,
        allow_headers=CORS_ALLOW_HEADERS,
    )

    @app.exception_handler(JobBoardException)
    async def jobboard_exception_handler(request: Request, exc: JobBoardException):
        """Render domain errors without leaking details"""
        if exc.status_code >= 500:
            logger.error("request_error", path=request.url.path, error=exc.message, details=exc.details)
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """Routing errors use the same {"error": ...} body"""
        message = MethodNotAllowedError().message if exc.status_code == 405 else exc.detail
        return JSONResponse(status_code=exc.status_code, content={"error": message}, headers=exc.headers)

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {
            "status": "healthy",
            "service": config.APP_NAME,
            "version": config.APP_VERSION,
        }

    app.include_router(jobs_router)

    @app.on_event("startup")
    async def startup_event():
        logger.info("application_starting", version=config.APP_VERSION, environment=config.ENVIRONMENT)

    @app.on_event("shutdown")
    async def shutdown_event():
        """Release the cache client and the connection pool"""
        logger.info("application_shutting_down")
        app.state.cache.close()
        app.state.database.dispose()

    return app


configure_logging()
app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "jobboard.main:app",
        host="0.0.0.0",
        port=8000,
        reload=default_settings.DEBUG,
    )
