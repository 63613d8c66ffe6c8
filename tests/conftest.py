"""
Shared fixtures: in-memory stand-ins for the models table and bucket, and a
test application wired to them.
"""

import os
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from typing import Dict, List, Optional
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

# Importing mlshelf.main builds the module-level app; keep it off the disk and configured.
os.environ.setdefault("LOG_DIR", "")
os.environ.setdefault("SUPABASE_URL", "https://project.supabase.co")
os.environ.setdefault("SUPABASE_ANON_KEY", "anon-key")

from mlshelf import deps
from mlshelf.core.config import Settings
from mlshelf.domain.models import ModelRecord
from mlshelf.domain.repos import ModelRepo
from mlshelf.domain.shelf import ModelShelf
from mlshelf.domain.storage import BlobStore
from mlshelf.main import create_app


class FakeRepo(ModelRepo):
    """Models table kept in a dict."""

    def __init__(self):
        self.records: Dict[str, ModelRecord] = {}
        self.insert_calls: List[dict] = []
        self.fail_insert: Optional[Exception] = None
        self.fail_list: Optional[Exception] = None
        self.fail_update: Optional[Exception] = None
        self._clock = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def add(self, **fields) -> ModelRecord:
        self._clock += timedelta(minutes=1)
        record = ModelRecord(
            id=fields.pop("id", str(len(self.records) + 1)),
            user_id=fields.pop("user_id", "user-1"),
            name=fields.pop("name", "model"),
            file_path=fields.pop("file_path", "abc-model.onnx"),
            size_bytes=fields.pop("size_bytes", 1024),
            created_at=self._clock,
            **fields,
        )
        self.records[record.id] = record
        return record

    def list_all(self) -> List[ModelRecord]:
        if self.fail_list:
            raise self.fail_list
        return sorted(self.records.values(), key=lambda r: r.created_at, reverse=True)

    def list_by_owner(self, user_id: str) -> List[ModelRecord]:
        return [r for r in self.list_all() if r.user_id == user_id]

    def get(self, record_id: str) -> Optional[ModelRecord]:
        return self.records.get(record_id)

    def insert(self, row: dict) -> ModelRecord:
        self.insert_calls.append(row)
        if self.fail_insert:
            raise self.fail_insert
        return self.add(**row)

    def increment_downloads(self, record: ModelRecord) -> int:
        if self.fail_update:
            raise self.fail_update
        stored = self.records[record.id]
        stored.downloads = record.downloads + 1
        return stored.downloads


class FakeBlobStore(BlobStore):
    """Bucket kept in a dict; records every call."""

    def __init__(self):
        self.blobs: Dict[str, bytes] = {}
        self.upload_calls: List[str] = []
        self.remove_calls: List[List[str]] = []
        self.signed_calls: List[tuple] = []
        self.fail_upload: Optional[Exception] = None
        self.fail_remove: Optional[Exception] = None
        self.fail_sign: Optional[Exception] = None

    def upload(self, key, data, content_type=None):
        self.upload_calls.append(key)
        if self.fail_upload:
            raise self.fail_upload
        self.blobs[key] = data
        return key

    def signed_url(self, key, expires_in, download_as=None):
        self.signed_calls.append((key, expires_in, download_as))
        if self.fail_sign:
            raise self.fail_sign
        return f"https://storage.example/models/{key}?token=t&download={download_as}"

    def remove(self, keys):
        self.remove_calls.append(list(keys))
        if self.fail_remove:
            raise self.fail_remove
        for key in keys:
            self.blobs.pop(key, None)


def make_session(user_id: str = "user-1", email: str = "ada@example.com"):
    return SimpleNamespace(
        access_token="access-token",
        refresh_token="refresh-token",
        user=SimpleNamespace(id=user_id, email=email),
    )


@pytest.fixture
def repo():
    return FakeRepo()


@pytest.fixture
def blobs():
    return FakeBlobStore()


@pytest.fixture
def shelf(repo, blobs):
    return ModelShelf(repo, blobs)


@pytest.fixture
def settings():
    return Settings(
        SUPABASE_URL="https://project.supabase.co",
        SUPABASE_ANON_KEY="anon-key",
        LOG_DIR="",
    )


@pytest.fixture
def backend_client():
    client = MagicMock()
    client.auth.get_session.return_value = None
    return client


@pytest.fixture
def signed_in(backend_client):
    session = make_session()
    backend_client.auth.get_session.return_value = session
    return session


@pytest.fixture
def app(settings, backend_client, repo, blobs):
    application = create_app(settings)
    application.dependency_overrides[deps.get_backend_client] = lambda: backend_client
    application.dependency_overrides[deps.get_repo] = lambda: repo
    application.dependency_overrides[deps.get_blob_store] = lambda: blobs
    return application


@pytest.fixture
def client(app):
    return TestClient(app, follow_redirects=False)
