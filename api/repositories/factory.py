from functools import lru_cache
from typing import Optional

from config import Settings, settings as default_settings
from database import BaseRepository, FileKeyValueStorage, MemoryKeyValueStorage
from repositories.index_file_repository import IndexFileTruckRepository
from repositories.local_repository import LocalTruckRepository
from repositories.per_record_repository import PerRecordTruckRepository
from repositories.remote_repository import RemoteTruckRepository
from services.truck_api_client import TruckApiClient


def create_repository(config: Optional[Settings] = None, backend: Optional[str] = None) -> BaseRepository:
    """Build the truck repository for the configured storage backend.

    Args:
        config: Settings to use, defaults to the application settings
        backend: Overrides config.storage_backend

    Returns:
        A repository instance
    """
    config = config or default_settings
    backend = backend or config.storage_backend
    common = {"images_dir": config.images_dir, "file_prefix": config.record_file_prefix}

    if backend == "index":
        return IndexFileTruckRepository(config.index_file, **common)
    if backend == "per_record":
        return PerRecordTruckRepository(config.trucks_dir, **common)
    if backend == "local":
        storage = (
            FileKeyValueStorage(config.local_storage_path)
            if config.local_storage_path else MemoryKeyValueStorage()
        )
        return LocalTruckRepository(storage=storage, storage_key=config.local_storage_key, **common)
    if backend == "remote":
        client = TruckApiClient(
            config.api_base_url,
            api_key=config.api_key,
            timeout=config.request_timeout
        )
        return RemoteTruckRepository(client, file_prefix=config.record_file_prefix)
    raise ValueError(f"Unknown storage backend: {backend}")


@lru_cache()
def get_truck_repository() -> BaseRepository:
    """Shared repository of the application (FastAPI dependency)."""
    return create_repository()
