import asyncio

import pytest

from media.storage import LocalStorage, S3Storage, StorageError


def test_local_upload_list_remove(tmp_path):
    storage = LocalStorage(str(tmp_path), "/media/")
    asyncio.run(storage.upload("media", "uploads/a b.png", b"png-bytes", "image/png"))

    files = storage.list("media")
    assert [f.name for f in files] == ["uploads/a b.png"]
    assert files[0].size == len(b"png-bytes")
    assert files[0].type == "image/png"
    assert files[0].url == "/media/media/uploads/a%20b.png"

    storage.remove("media", ["uploads/a b.png"])
    assert storage.list("media") == []


def test_local_rejects_existing_and_escaping_paths(tmp_path):
    storage = LocalStorage(str(tmp_path), "/media")
    asyncio.run(storage.upload("media", "a.png", b"1", "image/png"))

    with pytest.raises(StorageError):
        asyncio.run(storage.upload("media", "a.png", b"2", "image/png"))
    with pytest.raises(StorageError):
        asyncio.run(storage.upload("media", "../outside.png", b"3", "image/png"))
    with pytest.raises(StorageError):
        storage.remove("media", ["missing.png"])


def test_list_of_missing_bucket_is_empty(tmp_path):
    assert LocalStorage(str(tmp_path), "/media").list("nothing") == []


def test_s3_public_url_uses_cdn():
    storage = S3Storage("https://s3.example.com", "us-east-1", "key", "secret", cdn_url="https://cdn.example.com/")
    assert storage.public_url("media", "uploads/x.png") == "https://cdn.example.com/media/uploads/x.png"

    direct = S3Storage("https://s3.example.com", "us-east-1", "key", "secret")
    assert direct.public_url("media", "x.png") == "https://s3.example.com/media/x.png"


def test_s3_signed_headers():
    storage = S3Storage("https://s3.example.com", "us-east-1", "AKID", "secret")
    headers = storage._create_auth_headers(
        "PUT", "/media/x.png", "", "abc", "image/png", "20240101T000000Z", "20240101", 3
    )
    assert headers["Authorization"].startswith("AWS4-HMAC-SHA256 Credential=AKID/20240101/us-east-1/s3/aws4_request")
    assert headers["Content-Type"] == "image/png"
    assert headers["Content-Length"] == "3"
