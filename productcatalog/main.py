"""Product Catalog API main application module.

This module initializes the FastAPI application and configures
core middleware, routers, and startup/shutdown events.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from productcatalog.api.health import router as health_router
from productcatalog.api.middleware import setup_middleware
from productcatalog.api.products import router as products_router
from productcatalog.domain.exceptions import (
    AlreadyExistsError,
    CatalogError,
    ConfigurationError,
    ConflictError,
    HydrationError,
    IndexQueryError,
    InvalidCursorError,
    NotFoundError,
)
from productcatalog.infrastructure import get_storage_client
from productcatalog.infrastructure.config import settings
from productcatalog.infrastructure.logging_config import configure_logging

configure_logging(settings.log_level, json_output=not settings.debug)

logger = structlog.get_logger()

ERROR_STATUS_CODES: dict[type[CatalogError], int] = {
    ConfigurationError: status.HTTP_400_BAD_REQUEST,
    InvalidCursorError: status.HTTP_400_BAD_REQUEST,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    AlreadyExistsError: status.HTTP_409_CONFLICT,
    ConflictError: status.HTTP_409_CONFLICT,
    HydrationError: status.HTTP_502_BAD_GATEWAY,
    IndexQueryError: status.HTTP_502_BAD_GATEWAY,
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle application startup and shutdown events.

    Args:
        app: The FastAPI application instance.

    Yields:
        None after startup, cleanup happens after yield.
    """
    logger.info(
        "Starting Product Catalog API",
        version=settings.api_version,
        debug=settings.debug,
        storage_backend=settings.storage_backend,
        table=settings.table_name,
    )

    get_storage_client()

    yield

    logger.info("Shutting down Product Catalog API")


app = FastAPI(
    title="Product Catalog API",
    description="Product catalog with multi-index filtering",
    version=settings.api_version,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

setup_middleware(app)

app.include_router(health_router, tags=["Health"])
app.include_router(products_router)


# ============================================================================
# Custom Exception Handlers
# ============================================================================


def status_for(exc: CatalogError) -> int:
    """HTTP status code for a catalog error."""
    for error_type in type(exc).__mro__:
        if error_type in ERROR_STATUS_CODES:
            return ERROR_STATUS_CODES[error_type]
    return status.HTTP_500_INTERNAL_SERVER_ERROR


@app.exception_handler(CatalogError)
async def catalog_exception_handler(request: Request, exc: CatalogError) -> JSONResponse:
    """Handle catalog errors with consistent format."""
    request_id = getattr(request.state, "request_id", None)
    status_code = status_for(exc)

    log = logger.warning if status_code < 500 else logger.error
    log(
        "Catalog error",
        path=request.url.path,
        error_code=exc.error_code,
        error=exc.message,
    )

    return JSONResponse(
        status_code=status_code,
        content={
            "error_code": exc.error_code,
            "message": exc.message,
            "details": exc.details,
            "request_id": request_id,
        },
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle request validation errors with consistent format."""
    request_id = getattr(request.state, "request_id", None)

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error_code": "VALIDATION_ERROR",
            "message": "Request validation failed",
            "details": [
                {
                    "field": ".".join(str(p) for p in err.get("loc", ())) or None,
                    "message": err.get("msg", ""),
                }
                for err in exc.errors()
            ],
            "request_id": request_id,
        },
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Handle HTTP exceptions with consistent format."""
    request_id = getattr(request.state, "request_id", None)

    detail = exc.detail
    if isinstance(detail, dict):
        error_code = detail.get("error_code", "ERROR")
        message = detail.get("message", str(detail))
        details = detail.get("details", [])
    else:
        error_code = "ERROR"
        message = str(detail)
        details = []

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error_code": error_code,
            "message": message,
            "details": details,
            "request_id": request_id,
        },
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle uncaught exceptions with consistent format."""
    request_id = getattr(request.state, "request_id", None)

    logger.exception(
        "Unhandled exception in handler",
        path=request.url.path,
        method=request.method,
        error=str(exc),
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error_code": "INTERNAL_ERROR",
            "message": "An internal error occurred",
            "details": [],
            "request_id": request_id,
        },
    )
