"""
Shared pytest configuration for all tests.
Sets up an isolated data directory per test and common fixtures.
"""
import os
import sys
import tempfile
from pathlib import Path

import pytest

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

# Load test environment variables before any imports
from dotenv import load_dotenv

# Load test-specific environment variables
test_env_path = Path(__file__).parent.parent / ".env.test"
if test_env_path.exists():
    load_dotenv(test_env_path, override=True)
else:
    # Fallback to hardcoded test values if .env.test doesn't exist
    test_root = Path(tempfile.mkdtemp(prefix="truck-api-tests-"))
    os.environ["DATA_DIR"] = str(test_root / "data")
    os.environ["LOG_FILE"] = str(test_root / "logs" / "api.log")
    os.environ["STORAGE_BACKEND"] = "index"
    os.environ["API_KEY"] = "test-api-key"
    os.environ["ADMIN_USERNAME"] = "admin"
    os.environ["ADMIN_PASSWORD"] = "test-password"

from config import settings
from database import MemoryKeyValueStorage
from repositories.factory import create_repository, get_truck_repository
from repositories.index_file_repository import IndexFileTruckRepository
from repositories.local_repository import LocalTruckRepository
from repositories.per_record_repository import PerRecordTruckRepository

ADMIN_HEADERS = {"X-API-Key": "test-api-key"}

PETERBILT = {
    "make": "Peterbilt",
    "model": "579",
    "year": 2019,
    "price": 85000,
    "mileage": 450000,
    "condition": "excellent",
    "fuel_type": "diesel",
    "features": ["APU", "Custom Exhaust", "Navigation System"],
    "location": "Sacramento, CA",
    "latitude": 38.5816,
    "longitude": -121.4944
}

FREIGHTLINER = {
    "make": "Freightliner",
    "model": "Cascadia",
    "year": 2020,
    "price": 95000,
    "mileage": 380000,
    "condition": "excellent",
    "fuel_type": "diesel",
    "company_inspected": True,
    "inspection_date": "2024-01-15T00:00:00Z",
    "inspection_notes": "Recently inspected and approved.",
    "location": "Fresno, CA"
}


@pytest.fixture
def data_dir(tmp_path, monkeypatch):
    """Point the application settings at a fresh data directory."""
    monkeypatch.setattr(settings, "data_dir", tmp_path / "data")
    settings.images_dir.mkdir(parents=True, exist_ok=True)
    return settings.data_dir


@pytest.fixture
def images_dir(data_dir):
    return settings.images_dir


def build_repository(backend: str, data_dir: Path):
    trucks_dir = data_dir / "trucks"
    images_dir = trucks_dir / "images"
    if backend == "index":
        return IndexFileTruckRepository(trucks_dir / "index.json", images_dir=images_dir)
    if backend == "per_record":
        return PerRecordTruckRepository(trucks_dir, images_dir=images_dir)
    if backend == "local":
        return LocalTruckRepository(storage=MemoryKeyValueStorage(), images_dir=images_dir)
    raise ValueError(backend)


@pytest.fixture(params=["index", "per_record", "local"])
def repo(request, data_dir):
    """A repository for every local storage backend."""
    return build_repository(request.param, data_dir)


@pytest.fixture
def index_repo(data_dir):
    return create_repository(settings, backend="index")


@pytest.fixture
def client(index_repo):
    """API test client backed by an index file repository in a fresh data directory."""
    from fastapi.testclient import TestClient
    from main import app

    app.dependency_overrides[get_truck_repository] = lambda: index_repo
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
