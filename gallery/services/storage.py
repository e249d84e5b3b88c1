"""
Binary storage for uploaded images.

Two interchangeable backends: files on local disk, or objects in an S3 bucket.
The backend is chosen once at startup by ``create_storage``. Backend errors are
logged here with full detail and surfaced as ``StorageFailure``.
"""

import mimetypes
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Optional
from urllib.parse import quote
from uuid import uuid4

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from fastapi.responses import FileResponse, RedirectResponse
from loguru import logger

from gallery.core.config import Settings
from gallery.core.errors import NotFound, StorageFailure


@dataclass(frozen=True)
class StoredObject:
    ref: str                         # relative path or object URL
    file_name: str
    public_id: Optional[str] = None  # remote deletion handle


def make_file_name(filename: str, content_type: str) -> str:
    ext = Path(filename or "").suffix.lower()
    if not ext:
        ext = mimetypes.guess_extension(content_type or "") or ""
    return f"{int(time.time())}_{uuid4().hex}{ext}"


class Storage(ABC):
    name = "storage"

    @abstractmethod
    def save(self, content: bytes, filename: str, content_type: str) -> StoredObject:
        ...

    @abstractmethod
    def delete(self, ref: str, public_id: Optional[str] = None) -> None:
        ...

    @abstractmethod
    def download_response(self, image):
        """Build the HTTP response that hands ``image`` to the client."""


class LocalStorage(Storage):
    name = "local"

    def __init__(self, upload_dir):
        self.upload_dir = Path(upload_dir).resolve()
        self.upload_dir.mkdir(parents=True, exist_ok=True)

    def path_for(self, ref: str) -> Path:
        path = (self.upload_dir / ref).resolve()
        if path.parent != self.upload_dir:
            raise NotFound("Image not found")
        return path

    def save(self, content: bytes, filename: str, content_type: str) -> StoredObject:
        file_name = make_file_name(filename, content_type)
        try:
            (self.upload_dir / file_name).write_bytes(content)
        except OSError as e:
            logger.error("Failed to write {} to {}: {}", file_name, self.upload_dir, e)
            raise StorageFailure("Failed to upload image")
        return StoredObject(ref=file_name, file_name=file_name)

    def delete(self, ref: str, public_id: Optional[str] = None) -> None:
        try:
            # Already gone is fine: nothing is left orphaned
            self.path_for(ref).unlink(missing_ok=True)
        except OSError as e:
            logger.error("Failed to delete {} from {}: {}", ref, self.upload_dir, e)
            raise StorageFailure("Failed to delete image")

    def download_response(self, image):
        path = self.path_for(image.storage_ref)
        if not path.is_file():
            logger.error("Image {} missing on disk at {}", image.id, path)
            raise NotFound("Image file missing")
        return FileResponse(
            path,
            media_type=image.content_type,
            filename=image.original_name,
        )


class S3Storage(Storage):
    name = "s3"

    def __init__(
        self,
        bucket: str,
        region: str,
        prefix: str = "",
        access_key_id: str = None,
        secret_access_key: str = None,
        url_expires_seconds: int = 300,
        client=None,
    ):
        self.bucket = bucket
        self.region = region
        self.prefix = prefix.strip("/")
        self.url_expires_seconds = url_expires_seconds
        self.s3 = client or boto3.client(
            "s3",
            aws_access_key_id=access_key_id,
            aws_secret_access_key=secret_access_key,
            region_name=region,
        )

    def object_url(self, key: str) -> str:
        return f"https://{self.bucket}.s3.{self.region}.amazonaws.com/{quote(key)}"

    def save(self, content: bytes, filename: str, content_type: str) -> StoredObject:
        file_name = make_file_name(filename, content_type)
        key = f"{self.prefix}/{file_name}" if self.prefix else file_name

        try:
            self.s3.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=content,
                ContentType=content_type or "application/octet-stream",
            )
        except (BotoCoreError, ClientError) as e:
            logger.error("S3 upload of {} to {} failed: {}", key, self.bucket, e)
            raise StorageFailure("Failed to upload image")

        return StoredObject(ref=self.object_url(key), file_name=file_name, public_id=key)

    def delete(self, ref: str, public_id: Optional[str] = None) -> None:
        if not public_id:
            logger.error("Cannot delete {} from S3: no object key recorded", ref)
            raise StorageFailure("Failed to delete image")

        try:
            self.s3.delete_object(Bucket=self.bucket, Key=public_id)
        except (BotoCoreError, ClientError) as e:
            logger.error("S3 delete of {} from {} failed: {}", public_id, self.bucket, e)
            raise StorageFailure("Failed to delete image")

    def download_response(self, image):
        if not image.storage_public_id:
            return RedirectResponse(url=image.storage_ref, status_code=302)

        disposition = f"attachment; filename*=UTF-8''{quote(image.original_name)}"
        try:
            url = self.s3.generate_presigned_url(
                "get_object",
                Params={
                    "Bucket": self.bucket,
                    "Key": image.storage_public_id,
                    "ResponseContentDisposition": disposition,
                },
                ExpiresIn=self.url_expires_seconds,
            )
        except (BotoCoreError, ClientError) as e:
            logger.error("Presigning {} failed: {}", image.storage_public_id, e)
            raise StorageFailure("Failed to download image")
        return RedirectResponse(url=url, status_code=302)


def create_storage(settings: Settings) -> Storage:
    backend = settings.resolved_storage_backend
    if backend == "local":
        return LocalStorage(settings.upload_dir)
    if backend == "s3":
        if not settings.aws_s3_bucket_name:
            raise ValueError("AWS_S3_BUCKET_NAME is required for the s3 storage backend")
        return S3Storage(
            bucket=settings.aws_s3_bucket_name,
            region=settings.aws_region,
            prefix=settings.aws_s3_prefix,
            access_key_id=settings.aws_access_key_id,
            secret_access_key=settings.aws_secret_access_key,
            url_expires_seconds=settings.download_url_expires_seconds,
        )
    raise ValueError(f"Unknown storage backend: {backend!r}")
