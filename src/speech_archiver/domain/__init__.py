"""Domain layer exports."""

from .models import (
    ArchiveRecord,
    AudioSource,
    FinalResult,
    IntermediateResult,
    ObjectPage,
    RecognitionError,
    RecognitionStatus,
    SessionEvent,
    SessionStarted,
    SessionStopped,
    StoredObject,
    TranscriptResult,
)
from .transcript_builder import TranscriptBuilder

__all__ = [
    "ArchiveRecord",
    "AudioSource",
    "FinalResult",
    "IntermediateResult",
    "ObjectPage",
    "RecognitionError",
    "RecognitionStatus",
    "SessionEvent",
    "SessionStarted",
    "SessionStopped",
    "StoredObject",
    "TranscriptResult",
    "TranscriptBuilder",
]
