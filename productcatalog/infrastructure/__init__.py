"""Infrastructure layer: configuration, logging and storage clients."""

from productcatalog.infrastructure.config import Settings, settings
from productcatalog.infrastructure.dynamodb import DynamoDBStorageClient
from productcatalog.infrastructure.memory import InMemoryStorageClient
from productcatalog.infrastructure.storage import StorageClient

# Global storage client instance
_storage_client: StorageClient | None = None


def get_storage_client() -> StorageClient:
    """Get the storage client singleton for the configured backend.

    Returns:
        Storage client instance.
    """
    global _storage_client
    if _storage_client is None:
        if settings.storage_backend == "memory":
            _storage_client = InMemoryStorageClient()
        else:
            _storage_client = DynamoDBStorageClient.from_settings(settings)
    return _storage_client


def set_storage_client(client: StorageClient | None) -> None:
    """Replace the storage client singleton (``None`` resets it)."""
    global _storage_client
    _storage_client = client


__all__ = [
    "DynamoDBStorageClient",
    "InMemoryStorageClient",
    "Settings",
    "StorageClient",
    "get_storage_client",
    "set_storage_client",
    "settings",
]
