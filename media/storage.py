# src/media/storage.py
import hashlib
import hmac
import logging
import mimetypes
import os
import urllib.parse
import xml.etree.ElementTree as ET
from datetime import datetime
from pathlib import Path
from typing import Iterable, List, Optional

import aiofiles
import requests
from pydantic import BaseModel

from config import settings

logger = logging.getLogger(__name__)

S3_NAMESPACE = {"s3": "http://s3.amazonaws.com/doc/2006-03-01/"}


class StorageError(Exception):
    """Raised when the object store rejects or fails a request."""


class StoredFile(BaseModel):
    """A file held in a storage bucket."""
    name: str
    url: str
    size: int
    type: str
    created_at: Optional[datetime] = None


class StorageService:
    """Bucket-oriented file storage: upload, list, remove, public URL."""

    async def upload(self, bucket: str, path: str, data: bytes, content_type: str) -> str:
        raise NotImplementedError

    def list(self, bucket: str, prefix: str = "", limit: int = 100) -> List[StoredFile]:
        raise NotImplementedError

    def remove(self, bucket: str, paths: Iterable[str]) -> None:
        raise NotImplementedError

    def public_url(self, bucket: str, path: str) -> str:
        raise NotImplementedError


class LocalStorage(StorageService):
    """Buckets are directories under MEDIA_ROOT, served at MEDIA_URL."""

    def __init__(self, root: str, base_url: str):
        self.root = Path(root)
        self.base_url = base_url.rstrip("/")

    def _resolve(self, bucket: str, path: str) -> Path:
        bucket_dir = (self.root / bucket).resolve()
        target = (bucket_dir / path).resolve()
        if bucket_dir != target and bucket_dir not in target.parents:
            raise StorageError(f"Invalid path: {path}")
        return target

    async def upload(self, bucket: str, path: str, data: bytes, content_type: str) -> str:
        target = self._resolve(bucket, path)
        if target.exists():
            raise StorageError(f"File already exists: {path}")
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(target, "wb") as f:
                await f.write(data)
        except OSError as e:
            logger.error(f"Local upload failed for {bucket}/{path}: {str(e)}", exc_info=True)
            raise StorageError(str(e)) from e
        return path

    def list(self, bucket: str, prefix: str = "", limit: int = 100) -> List[StoredFile]:
        bucket_dir = self.root / bucket
        if not bucket_dir.exists():
            return []
        files = []
        for file_path in bucket_dir.rglob("*"):
            if not file_path.is_file():
                continue
            name = file_path.relative_to(bucket_dir).as_posix()
            if not name.startswith(prefix):
                continue
            stat = file_path.stat()
            files.append(StoredFile(
                name=name,
                url=self.public_url(bucket, name),
                size=stat.st_size,
                type=mimetypes.guess_type(name)[0] or "unknown",
                created_at=datetime.utcfromtimestamp(stat.st_mtime),
            ))
        files.sort(key=lambda f: f.created_at, reverse=True)
        return files[:limit]

    def remove(self, bucket: str, paths: Iterable[str]) -> None:
        for path in paths:
            target = self._resolve(bucket, path)
            if not target.is_file():
                raise StorageError(f"File not found: {path}")
            os.remove(target)

    def public_url(self, bucket: str, path: str) -> str:
        return f"{self.base_url}/{bucket}/{urllib.parse.quote(path)}"


class S3Storage(StorageService):
    """S3-compatible object store accessed with SigV4-signed requests."""

    def __init__(self, endpoint_url: str, region: str, access_key: str, secret_key: str,
                 cdn_url: str = "", timeout: float = 60):
        self.endpoint_url = endpoint_url.rstrip("/")
        self.host = urllib.parse.urlparse(self.endpoint_url).netloc
        self.region = region
        self.access_key = access_key
        self.secret_key = secret_key
        self.cdn_url = cdn_url.rstrip("/")
        self.timeout = timeout

    async def upload(self, bucket: str, path: str, data: bytes, content_type: str) -> str:
        response = self._request("PUT", bucket, path, data=data, content_type=content_type)
        if response.status_code != 200:
            logger.error(f"S3 upload failed: {response.status_code} - {response.text}")
            raise StorageError(f"Upload failed: {response.status_code}")
        return path

    def list(self, bucket: str, prefix: str = "", limit: int = 100) -> List[StoredFile]:
        query = {"list-type": "2", "max-keys": str(limit)}
        if prefix:
            query["prefix"] = prefix
        response = self._request("GET", bucket, "", query=query)
        if response.status_code != 200:
            logger.error(f"S3 list failed: {response.status_code} - {response.text}")
            raise StorageError(f"List failed: {response.status_code}")

        root = ET.fromstring(response.content)
        files = []
        for item in root.findall("s3:Contents", S3_NAMESPACE):
            name = item.findtext("s3:Key", default="", namespaces=S3_NAMESPACE)
            modified = item.findtext("s3:LastModified", default="", namespaces=S3_NAMESPACE)
            files.append(StoredFile(
                name=name,
                url=self.public_url(bucket, name),
                size=int(item.findtext("s3:Size", default="0", namespaces=S3_NAMESPACE)),
                type=mimetypes.guess_type(name)[0] or "unknown",
                created_at=datetime.strptime(modified[:19], "%Y-%m-%dT%H:%M:%S") if modified else None,
            ))
        files.sort(key=lambda f: f.created_at or datetime.min, reverse=True)
        return files

    def remove(self, bucket: str, paths: Iterable[str]) -> None:
        for path in paths:
            response = self._request("DELETE", bucket, path)
            if response.status_code not in (200, 204):
                logger.error(f"S3 delete failed: {response.status_code} - {response.text}")
                raise StorageError(f"Delete failed: {response.status_code}")

    def public_url(self, bucket: str, path: str) -> str:
        key = urllib.parse.quote(path)
        if self.cdn_url:
            return f"{self.cdn_url}/{bucket}/{key}"
        return f"{self.endpoint_url}/{bucket}/{key}"

    def _request(self, method: str, bucket: str, path: str, data: bytes = b"",
                 content_type: Optional[str] = None, query: Optional[dict] = None) -> requests.Response:
        canonical_uri = f"/{bucket}/{urllib.parse.quote(path)}" if path else f"/{bucket}"
        querystring = urllib.parse.urlencode(sorted((query or {}).items()), quote_via=urllib.parse.quote)
        now = datetime.utcnow()
        headers = self._create_auth_headers(
            method, canonical_uri, querystring, hashlib.sha256(data).hexdigest(),
            content_type, now.strftime("%Y%m%dT%H%M%SZ"), now.strftime("%Y%m%d"), len(data)
        )
        url = f"{self.endpoint_url}{canonical_uri}"
        if querystring:
            url = f"{url}?{querystring}"
        try:
            return requests.request(method, url, data=data or None, headers=headers, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error(f"S3 {method} {canonical_uri} failed: {str(e)}", exc_info=True)
            raise StorageError(str(e)) from e

    def _create_auth_headers(
            self, method: str, canonical_uri: str, querystring: str, payload_hash: str,
            content_type: Optional[str], amz_date: str, date_stamp: str, size: int
    ) -> dict:
        """Create AWS Signature V4 headers."""
        def sign(key, msg):
            return hmac.new(key, msg.encode("utf-8"), hashlib.sha256).digest()

        service = "s3"
        canonical_headers = f"host:{self.host}\nx-amz-content-sha256:{payload_hash}\nx-amz-date:{amz_date}\n"
        signed_headers = "host;x-amz-content-sha256;x-amz-date"
        canonical_request = f"{method}\n{canonical_uri}\n{querystring}\n{canonical_headers}\n{signed_headers}\n{payload_hash}"
        algorithm = "AWS4-HMAC-SHA256"
        credential_scope = f"{date_stamp}/{self.region}/{service}/aws4_request"
        string_to_sign = f"{algorithm}\n{amz_date}\n{credential_scope}\n{hashlib.sha256(canonical_request.encode('utf-8')).hexdigest()}"

        k_date = sign(("AWS4" + self.secret_key).encode("utf-8"), date_stamp)
        k_region = sign(k_date, self.region)
        k_service = sign(k_region, service)
        signing_key = sign(k_service, "aws4_request")
        signature = hmac.new(signing_key, string_to_sign.encode("utf-8"), hashlib.sha256).hexdigest()

        headers = {
            "Authorization": f"{algorithm} Credential={self.access_key}/{credential_scope}, "
                             f"SignedHeaders={signed_headers}, Signature={signature}",
            "x-amz-content-sha256": payload_hash,
            "x-amz-date": amz_date,
        }
        if method == "PUT":
            headers["Content-Type"] = content_type or "application/octet-stream"
            headers["Content-Length"] = str(size)
        return headers


_storage: Optional[StorageService] = None


def get_storage() -> StorageService:
    """Storage backend selected by STORAGE_BACKEND; usable as a dependency."""
    global _storage
    if _storage is None:
        if settings.STORAGE_BACKEND == "s3":
            _storage = S3Storage(
                settings.S3_ENDPOINT_URL, settings.S3_REGION_NAME,
                settings.S3_ACCESS_KEY, settings.S3_SECRET_KEY,
                settings.CDN_URL, settings.HTTP_TIMEOUT_SEC,
            )
        else:
            _storage = LocalStorage(settings.MEDIA_ROOT, settings.MEDIA_URL)
    return _storage
