"""Configuration management using Pydantic Settings."""

from pathlib import Path
from typing import Literal, Optional
from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings with environment variable support.

    All settings can be overridden using environment variables or .env file.
    """

    # Storage Configuration
    data_dir: Path = Field(
        default=Path("data"),
        description="Base directory holding the truck documents and images"
    )
    storage_backend: Literal["index", "per_record", "local", "remote"] = Field(
        default="index",
        description="Storage backend: single index file, one file per record, local key-value storage or remote API"
    )
    index_file_name: str = Field(
        default="index.json",
        description="File name of the single index document inside the trucks directory"
    )
    record_file_prefix: str = Field(
        default="truck",
        description="Prefix used for per-record JSON files and record-owned image files"
    )
    local_storage_path: Optional[Path] = Field(
        default=None,
        description="File persisting the local key-value storage. In-memory when not set"
    )
    local_storage_key: str = Field(
        default="truck_sales_data",
        description="Key of the truck document inside the local key-value storage"
    )

    # Remote Storage Configuration
    api_base_url: str = Field(
        default="http://localhost:3001/api",
        description="Base URL of the truck API used by the remote backend"
    )
    request_timeout: float = Field(
        default=10.0,
        gt=0,
        description="Timeout in seconds for requests made by the remote backend"
    )

    # Images
    upload_url_prefix: str = Field(
        default="/data/trucks/images",
        description="Public URL prefix under which truck images are served"
    )

    # API Configuration
    api_key: Optional[str] = Field(
        default=None,
        description="API key for admin operations. If neither this nor admin_password is set, admin checks are disabled (dev mode)"
    )
    admin_username: str = Field(
        default="admin",
        description="Username of the single administrator account"
    )
    admin_password: Optional[str] = Field(
        default=None,
        description="Password of the administrator account. Login is rejected when not set"
    )

    # Application Settings
    app_name: str = Field(
        default="Truck Marketplace API",
        description="Application name"
    )
    app_version: str = Field(
        default="1.0.0",
        description="Application version"
    )
    port: int = Field(
        default=3001,
        description="Port the API server listens on"
    )
    debug: bool = Field(
        default=False,
        description="Debug mode flag"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    log_file: str = Field(
        default="logs/api.log",
        description="Path to log file"
    )

    @property
    def trucks_dir(self) -> Path:
        return self.data_dir / "trucks"

    @property
    def images_dir(self) -> Path:
        return self.trucks_dir / "images"

    @property
    def index_file(self) -> Path:
        return self.trucks_dir / self.index_file_name

    class Config:
        """Pydantic config."""
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False

        # Allow extra fields from environment
        extra = "ignore"

        # Example values for documentation
        json_schema_extra = {
            "example": {
                "data_dir": "data",
                "storage_backend": "index",
                "api_base_url": "http://localhost:3001/api",
                "api_key": "your_api_key_here",
                "admin_username": "admin",
                "debug": False,
                "log_level": "INFO"
            }
        }


# Create a singleton instance
settings = Settings()
