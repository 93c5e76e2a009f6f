"""Dependency injection configuration for the speech archiver."""

from speech_archiver.config import load_config
from speech_archiver.domain import TranscriptBuilder
from speech_archiver.handlers import ArchiveUploader, RecognitionSession
from speech_archiver.handlers.recognition_session import SessionListener
from speech_archiver.infrastructure import (
    AssemblyAIRecognizer,
    AzureSpeechRecognizer,
    MinioStorageClient,
)
from speech_archiver.interfaces import SpeechRecognizer
from speech_archiver.logging import setup_logging
from speech_archiver.pipeline import TranscribeArchivePipeline

logger = setup_logging()

_config = load_config()


def get_recognizer() -> SpeechRecognizer:
    """Returns the recognizer for the configured speech provider."""
    if _config.speech.provider == "assemblyai":
        return AssemblyAIRecognizer(_config.speech)
    return AzureSpeechRecognizer(_config.speech)


def get_transcript_builder() -> TranscriptBuilder:
    """Returns a transcript builder using the configured separator."""
    return TranscriptBuilder(separator=_config.pipeline.separator)


def get_uploader() -> ArchiveUploader:
    """Returns the archive uploader backed by MinIO."""
    return ArchiveUploader(
        _config.storage,
        MinioStorageClient.from_connection,
        get_transcript_builder(),
    )


def get_pipeline(listener: SessionListener | None = None) -> TranscribeArchivePipeline:
    """Returns the configured transcribe-then-archive pipeline."""
    logger.info(
        "Pipeline configured",
        extra={
            "provider": _config.speech.provider,
            "mode": _config.pipeline.mode,
            "container_mode": _config.storage.container_mode,
        },
    )
    return TranscribeArchivePipeline(
        RecognitionSession(get_recognizer(), listener),
        get_uploader(),
        get_transcript_builder(),
        _config.pipeline,
    )


def wait_for_key() -> bool:
    return _config.pipeline.wait_for_key
