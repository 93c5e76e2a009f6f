"""MinIO implementation of the StorageClient interface."""

import itertools
import json
from urllib.parse import quote

from minio import Minio

from speech_archiver.config import StorageConnection
from speech_archiver.domain.models import ObjectPage, StoredObject
from speech_archiver.exceptions import (
    StorageContainerError,
    StorageDeleteError,
    StorageDownloadError,
    StorageListError,
    StorageUploadError,
)
from speech_archiver.interfaces import StorageClient
from speech_archiver.logging import setup_logging

logger = setup_logging()


def _public_read_policy(bucket_name: str) -> str:
    return json.dumps(
        {
            "Version": "2012-10-17",
            "Statement": [
                {
                    "Effect": "Allow",
                    "Principal": {"AWS": ["*"]},
                    "Action": ["s3:GetObject"],
                    "Resource": [f"arn:aws:s3:::{bucket_name}/*"],
                }
            ],
        }
    )


class MinioStorageClient(StorageClient):
    """Handles transcript storage operations using MinIO."""

    def __init__(self, client: Minio, base_url: str):
        self._client = client
        self._base_url = base_url.rstrip("/")

    @classmethod
    def from_connection(cls, connection: StorageConnection) -> "MinioStorageClient":
        client = Minio(
            endpoint=connection.endpoint,
            access_key=connection.access_key,
            secret_key=connection.secret_key,
            secure=connection.secure,
            region=connection.region,
        )
        scheme = "https" if connection.secure else "http"
        return cls(client, f"{scheme}://{connection.endpoint}")

    def object_url(self, bucket_name: str, object_name: str) -> str:
        return f"{self._base_url}/{bucket_name}/{quote(object_name)}"

    def ensure_container_exists(self, container_name: str) -> bool:
        try:
            if self._client.bucket_exists(bucket_name=container_name):
                logger.info("Bucket already exists", extra={"bucket_name": container_name})
                return False
            self._client.make_bucket(bucket_name=container_name)
        except Exception as e:
            logger.exception(
                "MinIO bucket setup failed", extra={"bucket_name": container_name}
            )
            raise StorageContainerError(container_name, e) from e

        logger.info("Bucket created", extra={"bucket_name": container_name})
        return True

    def set_public_read(self, container_name: str) -> None:
        try:
            self._client.set_bucket_policy(
                bucket_name=container_name,
                policy=_public_read_policy(container_name),
            )
            logger.info("Bucket made public-read", extra={"bucket_name": container_name})
        except Exception as e:
            logger.exception(
                "MinIO bucket policy update failed", extra={"bucket_name": container_name}
            )
            raise StorageContainerError(container_name, e) from e

    def upload_file(
        self,
        container_name: str,
        object_name: str,
        file_path: str,
        content_type: str,
    ) -> None:
        try:
            self._client.fput_object(
                bucket_name=container_name,
                object_name=object_name,
                file_path=file_path,
                content_type=content_type,
            )
            logger.info(
                "File uploaded to MinIO",
                extra={
                    "bucket_name": container_name,
                    "object_name": object_name,
                },
            )
        except Exception as e:
            logger.exception(
                "MinIO upload failed",
                extra={"bucket_name": container_name, "object_name": object_name},
            )
            raise StorageUploadError(object_name, e) from e

    def list_page(
        self,
        container_name: str,
        continuation_token: str | None,
        page_size: int,
    ) -> ObjectPage:
        """
        Lists up to ``page_size`` objects after the continuation token.

        The token is the name of the last object of the previous page and is
        passed to MinIO as ``start_after``. One extra object is read ahead to
        tell whether another page exists.
        """
        try:
            listing = self._client.list_objects(
                bucket_name=container_name,
                recursive=True,
                start_after=continuation_token,
            )
            fetched = list(itertools.islice(listing, page_size + 1))
        except Exception as e:
            logger.exception(
                "MinIO listing failed", extra={"bucket_name": container_name}
            )
            raise StorageListError(container_name, e) from e

        items = tuple(
            StoredObject(
                name=obj.object_name,
                url=self.object_url(container_name, obj.object_name),
                size=obj.size,
            )
            for obj in fetched[:page_size]
        )
        next_token = items[-1].name if len(fetched) > page_size else None
        return ObjectPage(items=items, continuation_token=next_token)

    def download_file(self, container_name: str, object_name: str, file_path: str) -> None:
        try:
            self._client.fget_object(
                bucket_name=container_name,
                object_name=object_name,
                file_path=file_path,
            )
            logger.info(
                "File downloaded from MinIO",
                extra={"bucket_name": container_name, "object_name": object_name},
            )
        except Exception as e:
            logger.exception(
                "MinIO download failed",
                extra={"bucket_name": container_name, "object_name": object_name},
            )
            raise StorageDownloadError(object_name, e) from e

    def delete_object(self, container_name: str, object_name: str) -> None:
        try:
            self._client.remove_object(bucket_name=container_name, object_name=object_name)
            logger.info(
                "Object deleted",
                extra={"bucket_name": container_name, "object_name": object_name},
            )
        except Exception as e:
            raise StorageDeleteError(object_name, e) from e

    def delete_container(self, container_name: str) -> None:
        try:
            self._client.remove_bucket(bucket_name=container_name)
            logger.info("Bucket deleted", extra={"bucket_name": container_name})
        except Exception as e:
            raise StorageDeleteError(container_name, e) from e
