"""Application configuration.

Loads settings from environment variables with sensible defaults.
"""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API
    api_version: str = "0.1.0"
    debug: bool = False

    # Storage
    storage_backend: Literal["dynamodb", "memory"] = "dynamodb"
    table_name: str = "products"
    aws_region: str = "us-east-1"
    dynamodb_endpoint_url: str | None = None
    dynamodb_max_attempts: int = Field(default=3, ge=1)

    # Query engine
    hydration_batch_size: int = Field(default=100, ge=1, le=100)
    default_page_size: int = Field(default=20, ge=1)
    max_page_size: int = Field(default=100, ge=1)

    # Logging
    log_level: str = "INFO"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


settings = Settings()
