"""Domain models for recognition sessions and transcript archives."""

from datetime import timedelta
from enum import Enum
from pathlib import Path
from typing import Literal, Union

from pydantic import BaseModel, model_validator


class RecognitionStatus(str, Enum):
    """Outcome of recognizing a single utterance."""

    RECOGNIZED = "Recognized"
    NO_MATCH = "NoMatch"
    INITIAL_SILENCE_TIMEOUT = "InitialSilenceTimeout"
    INITIAL_BABBLE_TIMEOUT = "InitialBabbleTimeout"
    CANCELED = "Canceled"


class AudioSource(BaseModel, frozen=True):
    """The device or file a recognizer reads audio from."""

    kind: Literal["microphone", "file"]
    path: str | None = None

    @model_validator(mode="after")
    def _check_path(self) -> "AudioSource":
        if self.kind == "file" and not self.path:
            raise ValueError("file audio source requires a path")
        return self

    @classmethod
    def microphone(cls) -> "AudioSource":
        return cls(kind="microphone")

    @classmethod
    def from_file(cls, path: str | Path) -> "AudioSource":
        return cls(kind="file", path=str(path))

    def describe(self) -> str:
        return self.path if self.kind == "file" else "default microphone"


class TranscriptResult(BaseModel, frozen=True):
    """Final recognition result for one utterance."""

    status: RecognitionStatus
    text: str = ""
    offset: timedelta = timedelta(0)
    duration: timedelta = timedelta(0)
    failure_reason: str | None = None

    @property
    def is_recognized(self) -> bool:
        return self.status == RecognitionStatus.RECOGNIZED


class IntermediateResult(BaseModel, frozen=True):
    """Partial hypothesis for the utterance currently being spoken."""

    kind: Literal["intermediate"] = "intermediate"
    text: str


class FinalResult(BaseModel, frozen=True):
    """Final result for one utterance."""

    kind: Literal["final"] = "final"
    result: TranscriptResult


class RecognitionError(BaseModel, frozen=True):
    """Terminal failure reported by the recognition service."""

    kind: Literal["error"] = "error"
    status: RecognitionStatus = RecognitionStatus.CANCELED
    reason: str


class SessionStarted(BaseModel, frozen=True):
    kind: Literal["started"] = "started"


class SessionStopped(BaseModel, frozen=True):
    kind: Literal["stopped"] = "stopped"


SessionEvent = Union[
    IntermediateResult, FinalResult, RecognitionError, SessionStarted, SessionStopped
]

TERMINAL_EVENTS = (RecognitionError, SessionStopped)


class StoredObject(BaseModel, frozen=True):
    """An object listed in a storage container."""

    name: str
    url: str
    size: int | None = None


class ObjectPage(BaseModel, frozen=True):
    """One page of a container listing."""

    items: tuple[StoredObject, ...] = ()
    continuation_token: str | None = None


class ArchiveRecord(BaseModel, frozen=True):
    """Result of archiving one transcript."""

    local_source_path: Path
    remote_object_name: str
    local_destination_path: Path
    container_name: str
    container_created: bool = False
    listed_objects: tuple[StoredObject, ...] = ()
    verified: bool = False
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None and self.verified
