from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

import pytest
from fastapi.testclient import TestClient
from google.api_core.exceptions import NotFound

from app.config import Settings
from app.main import create_app
from app.services.storage import PhotoStore


class FakeBlob:
    """In-memory stand-in for ``google.cloud.storage.Blob``."""

    def __init__(self, bucket: "FakeBucket", name: str) -> None:
        self.bucket = bucket
        self.name = name
        self.metadata: Optional[dict] = None
        self.content_type: Optional[str] = None
        self.data: Optional[bytes] = None
        self.time_created: Optional[datetime] = None
        self.is_public = False

    @property
    def size(self) -> Optional[int]:
        return None if self.data is None else len(self.data)

    @property
    def public_url(self) -> str:
        return f"https://storage.googleapis.com/{self.bucket.name}/{self.name}"

    def upload_from_string(self, data: bytes, content_type: str) -> None:
        if self.bucket.fail_with is not None:
            raise self.bucket.fail_with
        self.data = data
        self.content_type = content_type
        self.time_created = datetime.now(timezone.utc)
        self.bucket.objects[self.name] = self

    def make_public(self) -> None:
        failure = self.bucket.fail_with or self.bucket.fail_public_with
        if failure is not None:
            raise failure
        self.is_public = True

    def delete(self) -> None:
        failure = self.bucket.fail_with or self.bucket.fail_delete_with
        if failure is not None:
            raise failure
        if self.name not in self.bucket.objects:
            raise NotFound(f"No such object: {self.bucket.name}/{self.name}")
        del self.bucket.objects[self.name]


class FakeBucket:
    def __init__(self, name: str) -> None:
        self.name = name
        self.objects: dict[str, FakeBlob] = {}
        self.fail_with: Optional[Exception] = None
        self.fail_public_with: Optional[Exception] = None
        self.fail_delete_with: Optional[Exception] = None

    def blob(self, name: str) -> FakeBlob:
        return self.objects.get(name) or FakeBlob(self, name)

    def exists(self) -> bool:
        return True

    def list_blobs(self, prefix: str = ""):
        if self.fail_with is not None:
            raise self.fail_with
        return [blob for name, blob in sorted(self.objects.items()) if name.startswith(prefix)]

    def fetch(self, public_url: str) -> tuple[bytes, str]:
        """Resolve a public URL the way an anonymous HTTP GET would."""

        base = f"https://storage.googleapis.com/{self.name}/"
        assert public_url.startswith(base)
        blob = self.objects[public_url[len(base):]]
        assert blob.is_public
        return blob.data, blob.content_type


class FakeClient:
    def __init__(self) -> None:
        self.buckets: dict[str, FakeBucket] = {}

    def bucket(self, name: str) -> FakeBucket:
        return self.buckets.setdefault(name, FakeBucket(name))


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None, bucket_name="test-bucket", upload_prefix="wedding-photos")


@pytest.fixture
def fake_client() -> FakeClient:
    return FakeClient()


@pytest.fixture
def bucket(fake_client: FakeClient, settings: Settings) -> FakeBucket:
    return fake_client.bucket(settings.bucket_name)


@pytest.fixture
def store(settings: Settings, fake_client: FakeClient) -> PhotoStore:
    return PhotoStore(settings, client=fake_client)


@pytest.fixture
def app(settings: Settings, store: PhotoStore):
    return create_app(settings, photo_store=store)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client
