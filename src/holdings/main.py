"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from holdings.config.settings import get_settings
from holdings.config.logging_config import setup_logging
from holdings.repositories.sqlalchemy.database import init_db
from holdings.api.routers import imports_router, portfolio_router
from holdings.core.exceptions import AppError

logger = logging.getLogger(__name__)

# Error code -> HTTP status; anything else is a 400
ERROR_STATUS_CODES = {
    "NOT_FOUND": 404,
    "APPLY_FAILED": 409,
    "DUPLICATE_SYMBOL": 500,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup
    setup_logging()
    init_db()
    yield
    # Shutdown (nothing to clean up)


settings = get_settings()

app = FastAPI(
    title=settings.app_name,
    description="Brokerage CSV import and holdings reconciliation",
    version=settings.app_version,
    lifespan=lifespan,
)

# Include routers
app.include_router(imports_router)
app.include_router(portfolio_router)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Global handler for application errors."""
    status_code = ERROR_STATUS_CODES.get(exc.code, 400)
    if status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=status_code,
        content={"error": exc.code, "message": exc.message},
    )


@app.get("/health")
def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy"}


@app.get("/")
def root() -> dict[str, str]:
    """Root endpoint with API info."""
    return {
        "app": settings.app_name,
        "version": settings.app_version,
        "docs": "/docs",
    }
