from __future__ import annotations

import logging
import re
from datetime import datetime, timezone

import pytest
from google.api_core.exceptions import Forbidden, ServiceUnavailable

from app.errors import PhotoNotFoundError, StorageError
from app.models import PhotoArtifact
from app.services.storage import PhotoStore, build_storage_key

KEY_PATTERN = re.compile(r"^wedding-photos/\d{4}-\d{2}-\d{2}T\d{2}-\d{2}-\d{2}-\d{3}Z_[0-9a-f]{8}\.jpg$")


def test_storage_key_format():
    now = datetime(2025, 8, 15, 18, 30, 12, 345678, tzinfo=timezone.utc)
    key = build_storage_key("wedding-photos", "IMG_0001.JPG", "image/jpeg", now=now)
    assert key.startswith("wedding-photos/2025-08-15T18-30-12-345Z_")
    assert KEY_PATTERN.match(key)


@pytest.mark.parametrize(
    "original_name, content_type, expected",
    [
        ("photo.png", "image/png", ".png"),
        ("photo", "image/webp", ".webp"),
        (None, "image/png", ".png"),
        ("blob", "image/x-unknown", ".jpg"),
        ("weird.name with spaces", "image/jpeg", ".jpg"),
    ],
)
def test_storage_key_extension(original_name, content_type, expected):
    assert build_storage_key("p", original_name, content_type).endswith(expected)


def test_storage_keys_in_same_millisecond_are_distinct():
    now = datetime(2025, 8, 15, 18, 30, 12, 345000, tzinfo=timezone.utc)
    keys = {build_storage_key("wedding-photos", "a.jpg", "image/jpeg", now=now) for _ in range(2000)}
    assert len(keys) == 2000


def test_upload_photo_stores_bytes_metadata_and_acl(store: PhotoStore, bucket):
    artifact = PhotoArtifact(data=b"\xff\xd8jpeg-bytes", content_type="image/jpeg", original_name="guest.jpg")

    result = store.upload_photo(artifact)

    assert result.success is True
    assert result.size == len(artifact.data)
    assert KEY_PATTERN.match(result.filename)
    assert result.public_url == f"https://storage.googleapis.com/test-bucket/{result.filename}"
    blob = bucket.objects[result.filename]
    assert blob.is_public
    assert blob.metadata["originalName"] == "guest.jpg"
    assert blob.metadata["source"] == "wedding-photos-app"
    assert bucket.fetch(result.public_url) == (artifact.data, "image/jpeg")


def test_upload_photo_private_when_public_images_disabled(settings, fake_client, bucket):
    store = PhotoStore(settings.model_copy(update={"public_images": False}), client=fake_client)
    result = store.upload_photo(PhotoArtifact(data=b"x", content_type="image/png", original_name="a.png"))
    assert bucket.objects[result.filename].is_public is False


def test_upload_photo_wraps_storage_failures(store: PhotoStore, bucket):
    bucket.fail_with = ServiceUnavailable("backend down")

    with pytest.raises(StorageError) as excinfo:
        store.upload_photo(PhotoArtifact(data=b"x", content_type="image/jpeg"))

    assert excinfo.value.error == "Failed to upload photo"
    assert "backend down" in excinfo.value.details
    assert bucket.objects == {}


def test_list_and_delete(store: PhotoStore, bucket):
    first = store.upload_photo(PhotoArtifact(data=b"one", content_type="image/jpeg", original_name="1.jpg"))
    store.upload_photo(PhotoArtifact(data=b"two!", content_type="image/png", original_name="2.png"))

    photos = store.list_photos()
    assert sorted(p.size for p in photos) == [3, 4]
    assert {p.content_type for p in photos} == {"image/jpeg", "image/png"}

    store.delete_photo(first.filename.split("/", 1)[1])
    remaining = store.list_photos()
    assert len(remaining) == 1
    assert remaining[0].name != first.filename


def test_delete_missing_photo(store: PhotoStore):
    with pytest.raises(PhotoNotFoundError):
        store.delete_photo("nope.jpg")


def test_delete_wraps_storage_failures(store: PhotoStore, bucket):
    bucket.fail_with = Forbidden("no delete permission")
    with pytest.raises(StorageError) as excinfo:
        store.delete_photo("any.jpg")
    assert excinfo.value.error == "Failed to delete photo"


def test_failed_make_public_removes_private_object(store: PhotoStore, bucket):
    bucket.fail_public_with = Forbidden("uniform bucket-level access")

    with pytest.raises(StorageError) as excinfo:
        store.upload_photo(PhotoArtifact(data=b"x", content_type="image/jpeg", original_name="a.jpg"))

    assert excinfo.value.error == "Failed to upload photo"
    assert bucket.objects == {}


def test_failed_cleanup_logs_orphaned_key(store: PhotoStore, bucket, caplog):
    bucket.fail_public_with = Forbidden("uniform bucket-level access")
    bucket.fail_delete_with = Forbidden("no delete permission")

    with caplog.at_level(logging.ERROR, logger="app.services.storage"):
        with pytest.raises(StorageError):
            store.upload_photo(PhotoArtifact(data=b"x", content_type="image/jpeg", original_name="a.jpg"))

    [orphan] = bucket.objects
    assert any("Orphaned" in r.getMessage() and orphan in r.getMessage() for r in caplog.records)
