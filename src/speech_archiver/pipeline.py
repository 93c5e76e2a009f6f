"""Pipeline that transcribes one audio source and archives the transcript."""

from speech_archiver.config import PipelineConfig
from speech_archiver.domain import (
    ArchiveRecord,
    AudioSource,
    RecognitionStatus,
    TranscriptBuilder,
    TranscriptResult,
)
from speech_archiver.handlers import ArchiveUploader, RecognitionSession
from speech_archiver.logging import setup_logging

logger = setup_logging()


class TranscribeArchivePipeline:
    """Runs a recognition session to completion, then archives its text."""

    def __init__(
        self,
        session: RecognitionSession,
        uploader: ArchiveUploader,
        transcript_builder: TranscriptBuilder,
        config: PipelineConfig,
    ):
        self._session = session
        self._uploader = uploader
        self._transcript_builder = transcript_builder
        self._config = config

    def audio_source(self) -> AudioSource:
        if self._config.audio_file:
            return AudioSource.from_file(self._config.audio_file)
        return AudioSource.microphone()

    async def run(self) -> ArchiveRecord | None:
        """
        Transcribes the configured source and archives the transcript.

        Returns:
            The archive record, or None when nothing was archived.
        """
        source = self.audio_source()
        if self._config.mode == "continuous":
            text = await self._recognize_continuous(source)
        else:
            text = await self._recognize_once(source)

        if not text:
            logger.info("Nothing to archive")
            return None

        record = await self._uploader.archive(text)
        if record is not None and record.error is None:
            logger.info(
                "Pipeline finished",
                extra={
                    "container_name": record.container_name,
                    "object_name": record.remote_object_name,
                    "verified": record.verified,
                },
            )
        return record

    async def _recognize_once(self, source: AudioSource) -> str:
        result = await self._session.recognize_once(source)
        if not result.is_recognized:
            self._report_failure(result)
            return ""

        logger.info("Speech recognized", extra={"text": result.text})
        return result.text

    async def _recognize_continuous(self, source: AudioSource) -> str:
        results = await self._session.recognize_continuous(source)

        failed = [r for r in results if r.status == RecognitionStatus.CANCELED]
        if failed:
            self._report_failure(failed[-1])
            return ""

        text = self._transcript_builder.build(results)
        logger.info(
            "Continuous recognition finished",
            extra={
                "utterances": sum(1 for r in results if r.is_recognized),
                "text": text,
            },
        )
        return text

    def _report_failure(self, result: TranscriptResult) -> None:
        if result.status == RecognitionStatus.CANCELED:
            logger.warning(
                "Recognition canceled",
                extra={"status": result.status.value, "reason": result.failure_reason},
            )
        else:
            logger.warning(
                "No speech could be recognized",
                extra={"status": result.status.value},
            )
