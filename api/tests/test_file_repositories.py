"""
Tests specific to the file and key-value backed repositories: on-disk
layout, corrupt documents and failed writes.
"""

import json
import os
from unittest.mock import patch

import pytest

from config import settings
from database import FileKeyValueStorage, MemoryKeyValueStorage
from errors import StoreUnavailableError, TruckNotFoundError
from repositories.factory import create_repository
from repositories.index_file_repository import IndexFileTruckRepository
from repositories.local_repository import LocalTruckRepository
from repositories.per_record_repository import PerRecordTruckRepository
from repositories.remote_repository import RemoteTruckRepository


class TestIndexFileRepository:
    """One JSON document holding every truck."""

    def test_document_layout(self, index_repo):
        truck = index_repo.create({"make": "Mack"})

        document = json.loads(settings.index_file.read_text(encoding="utf-8"))
        assert [stored["id"] for stored in document["trucks"]] == [truck["id"]]
        assert document["lastUpdated"]

    def test_missing_file_is_empty_store(self, index_repo):
        assert not settings.index_file.exists()
        assert index_repo.list() == []
        assert index_repo.get_stats()["status"] == "healthy"

    def test_corrupt_document_degrades_reads(self, index_repo):
        settings.index_file.parent.mkdir(parents=True, exist_ok=True)
        settings.index_file.write_text("{not json", encoding="utf-8")

        assert index_repo.list() == []
        assert index_repo.filter({"make": "Mack"}) == []
        with pytest.raises(StoreUnavailableError):
            index_repo.get_by_id("anything")
        with pytest.raises(StoreUnavailableError):
            index_repo.create({"make": "Mack"})
        assert index_repo.get_stats()["status"] == "error"

    def test_failed_write_leaves_document_intact(self, index_repo):
        truck = index_repo.create({"make": "Mack"})
        before = settings.index_file.read_text(encoding="utf-8")

        with patch("utils.jsonio.os.replace", side_effect=OSError("disk full")):
            with pytest.raises(StoreUnavailableError):
                index_repo.update(truck["id"], {"price": 1})

        assert settings.index_file.read_text(encoding="utf-8") == before
        assert index_repo.get_by_id(truck["id"]).get("price") is None
        leftovers = [path for path in settings.trucks_dir.iterdir() if path.name != "index.json" and path.is_file()]
        assert leftovers == []

    def test_file_is_utf8_and_indented(self, index_repo):
        index_repo.create({"make": "Scania", "location": "Malmö"})
        text = settings.index_file.read_text(encoding="utf-8")

        assert "Malmö" in text
        assert "\n  " in text


class TestPerRecordRepository:
    """One JSON file per truck."""

    @pytest.fixture
    def per_record_repo(self, data_dir):
        return create_repository(settings, backend="per_record")

    def test_each_truck_has_own_file(self, per_record_repo):
        first = per_record_repo.create({"make": "Mack"})
        second = per_record_repo.create({"make": "Volvo"})

        assert (settings.trucks_dir / f"truck_{first['id']}.json").is_file()
        assert (settings.trucks_dir / f"truck_{second['id']}.json").is_file()
        assert sorted(per_record_repo.list_ids()) == sorted([first["id"], second["id"]])

    def test_unrelated_files_are_ignored(self, per_record_repo):
        per_record_repo.create({"make": "Mack"})
        (settings.trucks_dir / "notes.txt").write_text("hello", encoding="utf-8")
        (settings.trucks_dir / "index.json").write_text("{}", encoding="utf-8")

        assert len(per_record_repo.list()) == 1

    def test_import_removes_files_not_in_document(self, per_record_repo):
        old = per_record_repo.create({"make": "Old"})
        per_record_repo.import_data({"trucks": [{"id": "new1", "make": "New"}]})

        assert not (settings.trucks_dir / f"truck_{old['id']}.json").exists()
        assert per_record_repo.list_ids() == ["new1"]

    def test_path_like_id_is_not_found(self, per_record_repo):
        with pytest.raises(TruckNotFoundError):
            per_record_repo.get_by_id("../index")
        with pytest.raises(TruckNotFoundError):
            per_record_repo.update("a/b", {"price": 1})

    def test_corrupt_record_degrades_list(self, per_record_repo):
        truck = per_record_repo.create({"make": "Mack"})
        (settings.trucks_dir / f"truck_{truck['id']}.json").write_text("[oops", encoding="utf-8")

        assert per_record_repo.list() == []
        with pytest.raises(StoreUnavailableError):
            per_record_repo.get_by_id(truck["id"])


class TestLocalRepository:
    """Key-value storage entry holding all trucks."""

    def test_entry_layout_and_sequence(self):
        storage = MemoryKeyValueStorage()
        repo = LocalTruckRepository(storage=storage)

        first = repo.create({"make": "Mack"})
        repo.create({"make": "Volvo"})
        repo.delete(first["id"])

        document = json.loads(storage.get_item("truck_sales_data"))
        assert document["version"] == "1.0"
        assert list(document["trucks"].keys()) == repo.list_ids()
        assert document["sequence"] == 2
        assert repo.sequence == 2

    def test_import_resets_sequence(self):
        repo = LocalTruckRepository(storage=MemoryKeyValueStorage())
        repo.create({"make": "Mack"})
        repo.import_data({"trucks": [{"id": "a"}, {"id": "b"}, {"id": "c"}]})

        assert repo.sequence == 3

    def test_corrupt_entry_degrades_reads(self):
        storage = MemoryKeyValueStorage()
        storage.set_item("truck_sales_data", "not json")
        repo = LocalTruckRepository(storage=storage)

        assert repo.list() == []
        with pytest.raises(StoreUnavailableError):
            repo.get_by_id("a")

    def test_failed_save_raises(self):
        storage = MemoryKeyValueStorage()
        repo = LocalTruckRepository(storage=storage)

        with patch.object(storage, "set_item", side_effect=OSError("quota exceeded")):
            with pytest.raises(StoreUnavailableError) as exc_info:
                repo.create({"make": "Mack"})

        assert exc_info.value.message == "Failed to save data"
        assert repo.list() == []

    def test_file_storage_persists_between_instances(self, tmp_path):
        path = tmp_path / "local-storage.json"
        truck = LocalTruckRepository(storage=FileKeyValueStorage(path)).create({"make": "Mack"})

        reopened = LocalTruckRepository(storage=FileKeyValueStorage(path))
        assert reopened.get_by_id(truck["id"])["make"] == "Mack"

    def test_storage_key_is_configurable(self):
        storage = MemoryKeyValueStorage()
        LocalTruckRepository(storage=storage, storage_key="other").create({"make": "Mack"})

        assert storage.get_item("truck_sales_data") is None
        assert storage.get_item("other") is not None


class TestFactory:
    """Backend selection."""

    @pytest.mark.parametrize("backend,expected", [
        ("index", IndexFileTruckRepository),
        ("per_record", PerRecordTruckRepository),
        ("local", LocalTruckRepository),
        ("remote", RemoteTruckRepository),
    ])
    def test_backend_selection(self, data_dir, backend, expected):
        assert isinstance(create_repository(settings, backend=backend), expected)

    def test_unknown_backend(self, data_dir):
        with pytest.raises(ValueError):
            create_repository(settings, backend="mongo")

    def test_local_backend_uses_file_when_configured(self, data_dir, monkeypatch, tmp_path):
        monkeypatch.setattr(settings, "local_storage_path", tmp_path / "kv.json")
        repo = create_repository(settings, backend="local")

        repo.create({"make": "Mack"})
        assert os.path.exists(tmp_path / "kv.json")
