"""Catalog exceptions.

Every error raised by the query engine, the storage clients and the
application services derives from ``CatalogError`` so the API layer can
map the whole family to responses in one place.
"""

from typing import Any


class CatalogError(Exception):
    """Base class for all catalog exceptions.

    Attributes:
        message: Human-readable error message.
        details: Additional error context.
    """

    error_code = "CATALOG_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize catalog error.

        Args:
            message: Human-readable error message.
            details: Optional dictionary with additional error context.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


# ============================================================================
# Query Engine Errors
# ============================================================================


class ConfigurationError(CatalogError):
    """Raised when a filter query carries no usable criterion.

    No store call is made when this is raised.
    """

    error_code = "CONFIGURATION_ERROR"

    def __init__(
        self,
        message: str = "at least one filter criterion required",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)


class IndexQueryError(CatalogError):
    """Raised when a single secondary index query fails.

    The executor recovers from it locally; it is logged and excluded
    from the merged result.
    """

    error_code = "INDEX_QUERY_FAILED"

    def __init__(self, index_name: str, reason: str) -> None:
        """Initialize index query error.

        Args:
            index_name: Name of the index that was queried.
            reason: Underlying failure description.
        """
        super().__init__(
            f"Failed to query {index_name}: {reason}",
            details={"index_name": index_name, "reason": reason},
        )
        self.index_name = index_name


class HydrationError(CatalogError):
    """Raised when fetching full records for matched ids fails."""

    error_code = "HYDRATION_FAILED"

    def __init__(self, reason: str, batch_size: int = 0, failed_batches: int = 1) -> None:
        """Initialize hydration error.

        Args:
            reason: Underlying failure description.
            batch_size: Number of ids in the failing batch.
            failed_batches: Number of batches that failed.
        """
        super().__init__(
            f"Failed to hydrate products: {reason}",
            details={
                "reason": reason,
                "batch_size": batch_size,
                "failed_batches": failed_batches,
            },
        )


class InvalidCursorError(CatalogError):
    """Raised when a continuation cursor cannot be decoded."""

    error_code = "INVALID_CURSOR"

    def __init__(self, cursor: str) -> None:
        super().__init__(
            "Malformed continuation cursor",
            details={"cursor": cursor},
        )


# ============================================================================
# Record Errors
# ============================================================================


class AlreadyExistsError(CatalogError):
    """Raised when creating a product whose sku is already stored."""

    error_code = "PRODUCT_ALREADY_EXISTS"

    def __init__(self, sku: str) -> None:
        super().__init__(
            f"Product {sku} already exists",
            details={"sku": sku},
        )
        self.sku = sku


class ConflictError(CatalogError):
    """Raised when a product changed between being read and written.

    Composite keys are rebuilt from the values that were read, so the
    write is rejected rather than storing keys that disagree with the
    stored attributes.
    """

    error_code = "PRODUCT_CONFLICT"

    def __init__(self, sku: str, attempts: int = 1) -> None:
        super().__init__(
            f"Product {sku} was modified concurrently",
            details={"sku": sku, "attempts": attempts},
        )
        self.sku = sku


class NotFoundError(CatalogError):
    """Raised when a product is not found."""

    error_code = "PRODUCT_NOT_FOUND"

    def __init__(self, sku: str) -> None:
        super().__init__(
            f"Product not found: {sku}",
            details={"sku": sku},
        )
        self.sku = sku
