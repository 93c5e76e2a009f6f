from __future__ import annotations

import threading
from pathlib import Path

import pytest

from speech_archiver.config import StorageConfig
from speech_archiver.domain.models import ObjectPage, StoredObject
from speech_archiver.exceptions import (
    StorageContainerError,
    StorageDeleteError,
    StorageDownloadError,
    StorageListError,
    StorageUploadError,
)
from speech_archiver.interfaces import SpeechRecognizer, StorageClient

CONNECTION_STRING = "Endpoint=localhost:9000;AccessKey=key;SecretKey=secret;Secure=false"


class ScriptedRecognizer(SpeechRecognizer):
    """Emits a fixed list of events from a background thread."""

    def __init__(self, events, late_events=()):
        self.events = list(events)
        self.late_events = list(late_events)
        self.on_event = None
        self.started_with = None
        self.stop_calls = 0
        self._thread: threading.Thread | None = None

    def start(self, source, on_event, continuous):
        self.started_with = (source, continuous)
        self.on_event = on_event
        self._thread = threading.Thread(target=self._emit, daemon=True)
        self._thread.start()

    def _emit(self):
        for event in self.events:
            self.on_event(event)

    def stop(self):
        self.stop_calls += 1
        if self._thread is not None:
            self._thread.join()
        # Events still in flight while the backend shuts down.
        for event in self.late_events:
            self.on_event(event)


_ERRORS = {
    "ensure_container_exists": StorageContainerError,
    "set_public_read": StorageContainerError,
    "upload_file": StorageUploadError,
    "list_page": StorageListError,
    "download_file": StorageDownloadError,
    "delete_object": StorageDeleteError,
    "delete_container": StorageDeleteError,
}


class InMemoryStorage(StorageClient):
    """StorageClient keeping containers in dictionaries and recording calls."""

    def __init__(self, containers=None, fail_on=None):
        self.containers: dict[str, dict[str, bytes]] = containers or {}
        self.public: set[str] = set()
        self.calls: list[str] = []
        self.fail_on = fail_on

    def _record(self, operation: str, name: str) -> None:
        self.calls.append(operation)
        if self.fail_on == operation:
            raise _ERRORS[operation](name, RuntimeError("service unavailable"))

    def ensure_container_exists(self, container_name):
        self._record("ensure_container_exists", container_name)
        if container_name in self.containers:
            return False
        self.containers[container_name] = {}
        return True

    def set_public_read(self, container_name):
        self._record("set_public_read", container_name)
        self.public.add(container_name)

    def upload_file(self, container_name, object_name, file_path, content_type):
        self._record("upload_file", object_name)
        self.containers[container_name][object_name] = Path(file_path).read_bytes()

    def list_page(self, container_name, continuation_token, page_size):
        self._record("list_page", container_name)
        names = sorted(self.containers[container_name])
        if continuation_token is not None:
            names = [n for n in names if n > continuation_token]
        page = names[:page_size]
        token = page[-1] if len(names) > page_size else None
        items = tuple(
            StoredObject(name=n, url=f"http://localhost:9000/{container_name}/{n}")
            for n in page
        )
        return ObjectPage(items=items, continuation_token=token)

    def download_file(self, container_name, object_name, file_path):
        self._record("download_file", object_name)
        Path(file_path).write_bytes(self.containers[container_name][object_name])

    def delete_object(self, container_name, object_name):
        self._record("delete_object", object_name)
        del self.containers[container_name][object_name]

    def delete_container(self, container_name):
        self._record("delete_container", container_name)
        del self.containers[container_name]


@pytest.fixture
def work_dir(tmp_path: Path) -> Path:
    """Provide an isolated directory for temporary transcript files."""
    d = tmp_path / "work"
    d.mkdir()
    return d


@pytest.fixture
def storage_config(work_dir: Path) -> StorageConfig:
    return StorageConfig(
        connection_string=CONNECTION_STRING,
        container_name="transcripts",
        work_dir=str(work_dir),
    )
