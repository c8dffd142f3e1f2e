"""API middleware for the product catalog.

Provides:
- Request ID correlation, with the catalog fields of the request bound
  into the completion log line
- Error handling
"""

import time
from typing import Any, Callable
from uuid import uuid4

import structlog
from fastapi import FastAPI, Request, Response, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

logger = structlog.get_logger()

# Listing query parameters worth seeing in the access log.
FILTER_LOG_PARAMS = {
    "brand": "brand",
    "category": "category",
    "productName": "product_name",
    "orderBy": "order_by",
    "page": "page",
}


def catalog_log_fields(request: Request) -> dict[str, Any]:
    """Catalog context of a routed request.

    Path parameters are only known once routing has run, so this is
    read after the downstream app returns.
    """
    fields: dict[str, Any] = {}
    sku = request.path_params.get("sku")
    if sku is not None:
        fields["sku"] = sku
    for param, name in FILTER_LOG_PARAMS.items():
        value = request.query_params.get(param)
        if value is not None:
            fields[name] = value
    return fields


# ============================================================================
# Request ID Middleware
# ============================================================================


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Correlate requests and log one line per catalog call.

    The request ID is taken from ``X-Request-ID`` or generated, stored on
    ``request.state``, bound into the structlog context for the duration
    of the call and echoed back on the response.
    """

    HEADER_NAME = "X-Request-ID"

    async def dispatch(
        self, request: Request, call_next: Callable
    ) -> Response:
        request_id = request.headers.get(self.HEADER_NAME) or str(uuid4())
        request.state.request_id = request_id
        structlog.contextvars.bind_contextvars(request_id=request_id)

        start_time = time.perf_counter()
        response = None

        try:
            response = await call_next(request)
        finally:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.info(
                "Catalog request completed",
                method=request.method,
                route=_route_path(request),
                status_code=getattr(response, "status_code", 500),
                duration_ms=round(duration_ms, 2),
                **catalog_log_fields(request),
            )
            structlog.contextvars.unbind_contextvars("request_id")

        response.headers[self.HEADER_NAME] = request_id
        return response


def _route_path(request: Request) -> str:
    # Templated path ("/products/{sku}") once routed, raw path otherwise.
    route = request.scope.get("route")
    return getattr(route, "path", request.url.path)


# ============================================================================
# Error Handling Middleware
# ============================================================================


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Turn unhandled exceptions into the standard error body with a 500."""

    async def dispatch(
        self, request: Request, call_next: Callable
    ) -> Response:
        try:
            return await call_next(request)
        except Exception as e:
            request_id = getattr(request.state, "request_id", None)

            logger.exception(
                "Unhandled exception",
                path=request.url.path,
                method=request.method,
                error=str(e),
                **catalog_log_fields(request),
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


# ============================================================================
# Middleware Setup
# ============================================================================


def setup_middleware(app: FastAPI) -> None:
    """Configure all middleware for the application.

    Middleware is added in reverse order (last added = first executed).
    """
    # Error handling (inside request ID so errors carry the ID)
    app.add_middleware(ErrorHandlerMiddleware)

    # Request ID correlation (outermost)
    app.add_middleware(RequestIdMiddleware)
