"""Handler for archiving transcripts in object storage."""

import asyncio
import tempfile
import uuid
from collections.abc import Callable
from pathlib import Path

from speech_archiver.config import StorageConfig, StorageConnection
from speech_archiver.domain import ArchiveRecord, StoredObject, TranscriptBuilder
from speech_archiver.exceptions import (
    ConfigurationError,
    StorageDeleteError,
    StorageError,
    StorageListError,
)
from speech_archiver.interfaces import StorageClient
from speech_archiver.logging import setup_logging

logger = setup_logging()

StorageFactory = Callable[[StorageConnection], StorageClient]

CONTENT_TYPE = "text/plain"


class ArchiveUploader:
    """Uploads a transcript, lists its container and verifies the round trip."""

    def __init__(
        self,
        config: StorageConfig,
        storage_factory: StorageFactory,
        transcript_builder: TranscriptBuilder | None = None,
    ):
        self._config = config
        self._storage_factory = storage_factory
        self._transcript_builder = transcript_builder or TranscriptBuilder()

    async def archive(self, text: str) -> ArchiveRecord | None:
        """
        Archives a transcript and downloads it back for verification.

        Args:
            text: The transcript to archive.

        Returns:
            The ArchiveRecord of the operation, with ``error`` set when a
            storage call failed, or None when storage is not configured.

        Raises:
            OSError: If the local temporary file cannot be written.
        """
        try:
            connection = StorageConnection.parse(self._config.connection_string)
        except ConfigurationError as e:
            logger.error(
                "Archive skipped: storage is not configured",
                extra={"setting": e.setting, "error": e.reason},
            )
            return None

        storage = self._storage_factory(connection)
        record = self._new_record()
        created = False
        uploaded = False

        logger.info(
            "Archiving transcript",
            extra={
                "container_name": record.container_name,
                "object_name": record.remote_object_name,
            },
        )

        try:
            created = await asyncio.to_thread(
                storage.ensure_container_exists, record.container_name
            )
            if created and self._config.public_read:
                await asyncio.to_thread(storage.set_public_read, record.container_name)

            record.local_source_path.write_text(text, encoding="utf-8")

            await asyncio.to_thread(
                storage.upload_file,
                record.container_name,
                record.remote_object_name,
                str(record.local_source_path),
                CONTENT_TYPE,
            )
            uploaded = True

            listed = await self._list_all(storage, record.container_name)
            for obj in listed:
                logger.info(
                    "Container object",
                    extra={"object_name": obj.name, "url": obj.url, "size": obj.size},
                )

            await asyncio.to_thread(
                storage.download_file,
                record.container_name,
                record.remote_object_name,
                str(record.local_destination_path),
            )
            verified = (
                record.local_destination_path.read_bytes()
                == record.local_source_path.read_bytes()
            )
            if not verified:
                logger.warning(
                    "Downloaded transcript differs from the uploaded file",
                    extra={"object_name": record.remote_object_name},
                )

            record = record.model_copy(
                update={
                    "container_created": created,
                    "listed_objects": tuple(listed),
                    "verified": verified,
                }
            )
            logger.info(
                "Transcript archived",
                extra={
                    "container_name": record.container_name,
                    "object_name": record.remote_object_name,
                    "verified": verified,
                },
            )
            return record

        except StorageError as e:
            logger.error(
                "Archive failed",
                extra={"container_name": record.container_name, "error": str(e)},
            )
            return record.model_copy(
                update={"container_created": created, "error": str(e)}
            )

        finally:
            await self._cleanup(storage, record, created, uploaded)

    def _new_record(self) -> ArchiveRecord:
        work_dir = Path(self._config.work_dir or tempfile.gettempdir())
        object_name = f"transcript_{uuid.uuid4().hex}.txt"
        download_name = self._transcript_builder.derive_download_name(
            object_name, self._config.download_suffix
        )

        container_name = self._config.container_name
        if self._config.container_mode == "fresh":
            container_name = f"{container_name}-{uuid.uuid4().hex[:12]}"

        return ArchiveRecord(
            local_source_path=work_dir / object_name,
            remote_object_name=object_name,
            local_destination_path=work_dir / download_name,
            container_name=container_name,
        )

    async def _list_all(
        self, storage: StorageClient, container_name: str
    ) -> list[StoredObject]:
        """Follows continuation tokens until the last page."""
        objects: list[StoredObject] = []
        seen_tokens: set[str] = set()
        token = None

        while True:
            page = await asyncio.to_thread(
                storage.list_page, container_name, token, self._config.list_page_size
            )
            objects.extend(page.items)
            token = page.continuation_token
            if token is None:
                return objects
            if token in seen_tokens:
                raise StorageListError(
                    container_name,
                    RuntimeError(f"continuation token '{token}' returned twice"),
                )
            seen_tokens.add(token)

    async def _cleanup(
        self,
        storage: StorageClient,
        record: ArchiveRecord,
        created: bool,
        uploaded: bool,
    ) -> None:
        for path in (record.local_source_path, record.local_destination_path):
            try:
                path.unlink(missing_ok=True)
            except OSError:
                logger.warning("Could not delete local file", extra={"path": str(path)})

        if not self._config.delete_remote:
            return

        if uploaded:
            await self._delete_remote(
                storage.delete_object, record.container_name, record.remote_object_name
            )
        if created:
            await self._delete_remote(storage.delete_container, record.container_name)

    async def _delete_remote(self, delete, container_name: str, *args) -> None:
        try:
            await asyncio.to_thread(delete, container_name, *args)
        except StorageDeleteError as e:
            logger.warning(
                "Remote cleanup failed",
                extra={"container_name": container_name, "error": str(e)},
            )
