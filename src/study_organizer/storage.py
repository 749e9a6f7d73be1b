import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from .config import OrganizerSettings
from .errors import ConfigurationError, StorageError

logger = logging.getLogger(__name__)


class StorageBackend(ABC):
    """What the organizer needs from an object store.

    Backends that can write-if-absent atomically set ``supports_conditional_put``
    and implement ``put_if_absent``; the key allocator prefers that path.
    """

    supports_conditional_put = False

    @abstractmethod
    def exists(self, key: str) -> bool: ...

    @abstractmethod
    def put(self, key: str, data: bytes, content_type: str) -> None: ...

    @abstractmethod
    def copy(self, src: str, dst: str) -> None: ...

    @abstractmethod
    def delete(self, key: str) -> None: ...

    # returns False instead of writing when the key is already taken
    def put_if_absent(self, key: str, data: bytes, content_type: str) -> bool:
        raise NotImplementedError(f"{type(self).__name__} has no conditional put")


@dataclass
class StoredObject:
    data: bytes
    content_type: str


class MemoryStorage(StorageBackend):
    supports_conditional_put = True

    def __init__(self, objects: Optional[dict[str, StoredObject]] = None):
        self.objects = dict(objects or {})

    def exists(self, key: str) -> bool:
        return key in self.objects

    def put(self, key: str, data: bytes, content_type: str) -> None:
        self.objects[key] = StoredObject(data, content_type)

    def put_if_absent(self, key: str, data: bytes, content_type: str) -> bool:
        if key in self.objects:
            return False
        self.put(key, data, content_type)
        return True

    def copy(self, src: str, dst: str) -> None:
        if src not in self.objects:
            raise StorageError(f"No such object: {src}", key=src)
        original = self.objects[src]
        self.objects[dst] = StoredObject(original.data, original.content_type)

    def delete(self, key: str) -> None:
        self.objects.pop(key, None)

    def keys(self) -> list[str]:
        return sorted(self.objects)


class S3Storage(StorageBackend):
    """S3 or Cloudflare R2 (point ``endpoint_url`` at the account's R2 endpoint)."""

    supports_conditional_put = True

    def __init__(self, bucket: str, prefix: str = "", endpoint_url: Optional[str] = None, client=None):
        self.bucket = bucket
        self.prefix = prefix.strip('/')
        self.client = client or boto3.client('s3', endpoint_url=endpoint_url)

    def _full_key(self, key: str) -> str:
        return f"{self.prefix}/{key}" if self.prefix else key

    def exists(self, key: str) -> bool:
        try:
            self.client.head_object(Bucket=self.bucket, Key=self._full_key(key))
            return True
        except ClientError as e:
            if _error_code(e) in ('404', 'NoSuchKey', 'NotFound'):
                return False
            raise StorageError(f"Failed to check s3://{self.bucket}/{key}: {e}", key=key) from e
        except BotoCoreError as e:
            raise StorageError(f"Failed to check s3://{self.bucket}/{key}: {e}", key=key) from e

    def put(self, key: str, data: bytes, content_type: str) -> None:
        try:
            self.client.put_object(
                Bucket=self.bucket, Key=self._full_key(key), Body=data, ContentType=content_type
            )
        except (ClientError, BotoCoreError) as e:
            raise StorageError(f"Failed to write s3://{self.bucket}/{key}: {e}", key=key) from e
        logger.info("Stored s3://%s/%s (%d bytes)", self.bucket, key, len(data))

    def put_if_absent(self, key: str, data: bytes, content_type: str) -> bool:
        try:
            self.client.put_object(
                Bucket=self.bucket,
                Key=self._full_key(key),
                Body=data,
                ContentType=content_type,
                IfNoneMatch='*',
            )
        except ClientError as e:
            if _error_code(e) in ('PreconditionFailed', '412', 'ConditionalRequestConflict', '409'):
                return False
            raise StorageError(f"Failed to write s3://{self.bucket}/{key}: {e}", key=key) from e
        except BotoCoreError as e:
            raise StorageError(f"Failed to write s3://{self.bucket}/{key}: {e}", key=key) from e
        logger.info("Stored s3://%s/%s (%d bytes)", self.bucket, key, len(data))
        return True

    def copy(self, src: str, dst: str) -> None:
        try:
            self.client.copy_object(
                Bucket=self.bucket,
                Key=self._full_key(dst),
                CopySource={'Bucket': self.bucket, 'Key': self._full_key(src)},
            )
        except (ClientError, BotoCoreError) as e:
            raise StorageError(f"Failed to copy {src} -> {dst}: {e}", key=src) from e

    def delete(self, key: str) -> None:
        try:
            self.client.delete_object(Bucket=self.bucket, Key=self._full_key(key))
        except (ClientError, BotoCoreError) as e:
            raise StorageError(f"Failed to delete s3://{self.bucket}/{key}: {e}", key=key) from e


def _error_code(error: ClientError) -> str:
    return str(error.response.get('Error', {}).get('Code', ''))


def create_storage(settings: OrganizerSettings) -> StorageBackend:
    if settings.storage == 'memory':
        return MemoryStorage()

    if settings.storage == 's3':
        if not settings.s3_bucket:
            raise ConfigurationError("STUDY_S3_BUCKET must be set to use the s3 backend")
        return S3Storage(settings.s3_bucket, settings.s3_prefix, settings.s3_endpoint_url)

    # import here so the Google client libraries load only when used
    from .auth import get_drive_service
    from .drive_client import DriveStorage

    service = get_drive_service(settings.drive_credentials, settings.drive_token)
    return DriveStorage(service, root_id=settings.drive_root_id)
