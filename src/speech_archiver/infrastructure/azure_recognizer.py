"""Azure Speech implementation of the SpeechRecognizer interface."""

from datetime import timedelta

import azure.cognitiveservices.speech as speechsdk

from speech_archiver.config import SpeechConfig
from speech_archiver.domain.models import (
    AudioSource,
    FinalResult,
    IntermediateResult,
    RecognitionError,
    RecognitionStatus,
    SessionStarted,
    SessionStopped,
    TranscriptResult,
)
from speech_archiver.interfaces import EventCallback, SpeechRecognizer
from speech_archiver.logging import setup_logging

logger = setup_logging()

_NO_MATCH_STATUSES = {
    speechsdk.NoMatchReason.InitialSilenceTimeout: RecognitionStatus.INITIAL_SILENCE_TIMEOUT,
    speechsdk.NoMatchReason.InitialBabbleTimeout: RecognitionStatus.INITIAL_BABBLE_TIMEOUT,
}


def _ticks(value: int) -> timedelta:
    # The SDK reports offsets and durations in 100-nanosecond ticks.
    return timedelta(microseconds=(value or 0) / 10)


def to_transcript_result(result) -> TranscriptResult:
    """Converts an SDK recognition result into a TranscriptResult."""
    if result.reason == speechsdk.ResultReason.RecognizedSpeech:
        return TranscriptResult(
            status=RecognitionStatus.RECOGNIZED,
            text=result.text or "",
            offset=_ticks(result.offset),
            duration=_ticks(result.duration),
        )

    status = RecognitionStatus.NO_MATCH
    if result.reason == speechsdk.ResultReason.NoMatch:
        details = result.no_match_details
        status = _NO_MATCH_STATUSES.get(details.reason, RecognitionStatus.NO_MATCH)
    return TranscriptResult(
        status=status,
        offset=_ticks(result.offset),
        duration=_ticks(result.duration),
    )


def to_recognition_error(evt) -> RecognitionError | None:
    """Maps a canceled event; end of stream is a normal stop, not an error."""
    details = evt.cancellation_details
    if details.reason == speechsdk.CancellationReason.EndOfStream:
        return None
    reason = details.error_details or str(details.reason)
    return RecognitionError(status=RecognitionStatus.CANCELED, reason=reason)


class AzureSpeechRecognizer(SpeechRecognizer):
    """Recognizes speech with the Azure Speech service."""

    def __init__(self, config: SpeechConfig):
        self._speech_config = speechsdk.SpeechConfig(
            subscription=config.api_key, region=config.region
        )
        self._speech_config.speech_recognition_language = config.language
        self._recognizer: speechsdk.SpeechRecognizer | None = None
        self._once_future = None
        self._continuous = False

    def start(
        self, source: AudioSource, on_event: EventCallback, continuous: bool
    ) -> None:
        if source.kind == "file":
            audio_config = speechsdk.audio.AudioConfig(filename=source.path)
        else:
            audio_config = speechsdk.audio.AudioConfig(use_default_microphone=True)

        recognizer = speechsdk.SpeechRecognizer(
            speech_config=self._speech_config, audio_config=audio_config
        )
        recognizer.recognizing.connect(
            lambda evt: on_event(IntermediateResult(text=evt.result.text))
        )
        recognizer.recognized.connect(
            lambda evt: on_event(FinalResult(result=to_transcript_result(evt.result)))
        )
        recognizer.session_started.connect(lambda evt: on_event(SessionStarted()))
        recognizer.session_stopped.connect(lambda evt: on_event(SessionStopped()))
        recognizer.canceled.connect(lambda evt: self._on_canceled(evt, on_event))

        self._recognizer = recognizer
        self._continuous = continuous
        if continuous:
            recognizer.start_continuous_recognition_async().get()
        else:
            self._once_future = recognizer.recognize_once_async()
        logger.info(
            "Azure recognition started",
            extra={"source": source.describe(), "continuous": continuous},
        )

    def _on_canceled(self, evt, on_event: EventCallback) -> None:
        error = to_recognition_error(evt)
        if error is not None:
            on_event(error)

    def stop(self) -> None:
        recognizer = self._recognizer
        if recognizer is None:
            return

        if self._continuous:
            recognizer.stop_continuous_recognition_async().get()
        elif self._once_future is not None:
            self._once_future.get()

        for signal in (
            recognizer.recognizing,
            recognizer.recognized,
            recognizer.session_started,
            recognizer.session_stopped,
            recognizer.canceled,
        ):
            signal.disconnect_all()

        self._recognizer = None
        self._once_future = None
        logger.info("Azure recognition stopped")
