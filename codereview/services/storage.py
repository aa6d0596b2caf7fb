"""Object storage for uploaded files and profile pictures.

Two backends share the :class:`StorageHandler` interface: a directory on local disk
and a MinIO/S3 bucket. Keys are slash-separated paths such as
``project-files/<project id>/<uuid>-<name>``.
"""

from __future__ import annotations

import io
import os
import uuid
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from minio import Minio
from minio.error import S3Error

from codereview.core import NotFoundError, get_config, get_logger
from codereview.core.settings import CodeReviewSettings

logger = get_logger("services.storage")

PROJECT_FILES_PREFIX = "project-files"
PROFILE_IMAGES_PREFIX = "profile-images"


def build_key(prefix: str, filename: str) -> str:
    """``<prefix>/<uuid>-<basename>``; directory parts of ``filename`` are dropped."""
    safe_name = os.path.basename(filename.replace("\\", "/")) or "file"
    return f"{prefix}/{uuid.uuid4()}-{safe_name}"


class StorageHandler(ABC):
    """Abstract interface all storage providers must implement."""

    @abstractmethod
    def put(self, data: bytes, key: str, content_type: str = "application/octet-stream") -> str:
        """Store ``data`` under ``key`` and return the key."""

    @abstractmethod
    def get(self, key: str) -> bytes:
        """Return the stored bytes; raises NotFoundError when missing."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove ``key``; deleting a missing key is not an error."""


class LocalStorageHandler(StorageHandler):
    """Stores objects as files below ``root``."""

    def __init__(self, root: str | Path):
        self.root = Path(root).expanduser()
        self.root.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        path = (self.root / key).resolve()
        if self.root.resolve() not in path.parents:
            raise NotFoundError(f"Object not found: {key}")
        return path

    def put(self, data: bytes, key: str, content_type: str = "application/octet-stream") -> str:
        path = self._path(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        return key

    def get(self, key: str) -> bytes:
        path = self._path(key)
        if not path.is_file():
            raise NotFoundError(f"Object not found: {key}")
        return path.read_bytes()

    def delete(self, key: str) -> None:
        try:
            self._path(key).unlink(missing_ok=True)
        except NotFoundError:
            return


class MinioStorageHandler(StorageHandler):
    """A thin wrapper around Minio SDK APIs for S3-compatible storage."""

    def __init__(
        self,
        bucket_name: str,
        *,
        endpoint: str,
        access_key: str,
        secret_key: str,
        secure: bool = True,
        ensure_bucket: bool = True,
        create_if_missing: bool = True,
        region: Optional[str] = None,
    ) -> None:
        """Initialize a MinioStorageHandler.

        Args:
            bucket_name: Name of the S3 bucket.
            endpoint: Minio/S3 server endpoint (e.g., "localhost:9000").
            access_key: Access key for authentication.
            secret_key: Secret key for authentication.
            secure: Whether to use HTTPS (default True).
            ensure_bucket: If True, check bucket exists on init.
            create_if_missing: If True, create the bucket if it does not exist.
            region: Optional region for bucket creation.
        """
        self.client = Minio(
            endpoint=endpoint,
            access_key=access_key,
            secret_key=secret_key,
            secure=secure,
            region=region,
        )
        self.bucket_name = bucket_name
        self.region = region

        if ensure_bucket:
            self._ensure_bucket(create_if_missing)

    def _ensure_bucket(self, create: bool) -> None:
        """Ensure the bucket exists, creating it if necessary."""
        if self.client.bucket_exists(self.bucket_name):
            return
        if not create:
            raise FileNotFoundError(f"Bucket {self.bucket_name!r} not found")
        self.client.make_bucket(self.bucket_name, location=self.region)
        logger.info("bucket_created", bucket=self.bucket_name)

    def put(self, data: bytes, key: str, content_type: str = "application/octet-stream") -> str:
        self.client.put_object(self.bucket_name, key, io.BytesIO(data), len(data), content_type=content_type)
        return key

    def get(self, key: str) -> bytes:
        try:
            response = self.client.get_object(self.bucket_name, key)
        except S3Error as e:
            if e.code == "NoSuchKey":
                raise NotFoundError(f"Object not found: {key}")
            raise
        try:
            return response.read()
        finally:
            response.close()
            response.release_conn()

    def delete(self, key: str) -> None:
        try:
            self.client.remove_object(self.bucket_name, key)
        except S3Error as e:
            if e.code != "NoSuchKey":
                raise


def create_storage(config: Optional[CodeReviewSettings] = None) -> StorageHandler:
    """Build the storage backend selected by ``STORAGE.BACKEND``."""
    config = config or get_config()
    storage = config.STORAGE
    if storage.BACKEND == "minio":
        return MinioStorageHandler(
            storage.BUCKET,
            endpoint=storage.ENDPOINT,
            access_key=storage.ACCESS_KEY,
            secret_key=storage.SECRET_KEY.get_secret_value(),
            secure=storage.SECURE,
            region=storage.REGION,
        )
    return LocalStorageHandler(config.storage_dir)
