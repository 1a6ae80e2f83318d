"""
Blob store backends, storage paths and tag helpers
"""
from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from app.core.tags import clean_tags, split_tags
from app.services.photo_service import build_blob_key, build_folder
from app.services.storage_service import LocalBlobStore, S3BlobStore, StorageError


def test_folder_convention():
    folder = build_folder("user-1", datetime(2024, 3, 15, tzinfo=timezone.utc))
    assert folder == "mehndi-album/user-1/2024-03"


def test_blob_keys_are_unique_and_keep_extension():
    keys = {build_blob_key("Design.PNG") for _ in range(50)}
    assert len(keys) == 50
    assert all(key.endswith(".png") for key in keys)
    assert build_blob_key("").endswith(".jpg")


class TestLocalBlobStore:

    def test_upload_and_destroy(self, tmp_path):
        store = LocalBlobStore(str(tmp_path), "/uploads")

        blob = store.upload(b"henna", "mehndi-album/u1/2024-03", "k.png", "image/png")

        assert blob.public_id == "mehndi-album/u1/2024-03/k.png"
        assert blob.url == "/uploads/mehndi-album/u1/2024-03/k.png"
        assert (tmp_path / blob.public_id).read_bytes() == b"henna"

        store.destroy(blob.public_id)
        assert not store.exists(blob.public_id)

    def test_destroy_missing_is_ok(self, tmp_path):
        LocalBlobStore(str(tmp_path), "/uploads").destroy("mehndi-album/u1/2024-03/gone.png")

    def test_rejects_path_escape(self, tmp_path):
        store = LocalBlobStore(str(tmp_path / "root"), "/uploads")
        with pytest.raises(StorageError):
            store.destroy("../outside.png")


class TestS3BlobStore:

    def test_upload_uses_public_read(self):
        client = MagicMock()
        store = S3BlobStore("bucket", "https://cdn.mehndi.app/", client=client)

        blob = store.upload(b"henna", "mehndi-album/u1/2024-03", "k.webp", "image/webp")

        assert blob.url == "https://cdn.mehndi.app/mehndi-album/u1/2024-03/k.webp"
        client.put_object.assert_called_once_with(
            Bucket="bucket",
            Key="mehndi-album/u1/2024-03/k.webp",
            Body=b"henna",
            ContentType="image/webp",
            ACL="public-read",
        )

    def test_client_errors_become_storage_errors(self):
        client = MagicMock()
        client.delete_object.side_effect = ClientError({"Error": {"Code": "500", "Message": "boom"}}, "DeleteObject")
        store = S3BlobStore("bucket", "https://cdn.mehndi.app", client=client)

        with pytest.raises(StorageError):
            store.destroy("mehndi-album/u1/2024-03/k.webp")


def test_clean_tags():
    assert clean_tags([" a", "", "a", '"b"', None, "c "]) == ["a", "b", "c"]
    assert clean_tags(None) == []


def test_split_tags():
    assert split_tags("bridal, arabic,,bridal , ") == ["bridal", "arabic"]
    assert split_tags("") == []
