"""AssemblyAI streaming implementation of the SpeechRecognizer interface."""

import threading
from collections.abc import Iterable, Iterator
from datetime import timedelta

import assemblyai as aai
from assemblyai.streaming.v3 import (
    StreamingClient,
    StreamingClientOptions,
    StreamingEvents,
    StreamingParameters,
)

from speech_archiver.config import SpeechConfig
from speech_archiver.domain.models import (
    AudioSource,
    FinalResult,
    IntermediateResult,
    RecognitionError,
    RecognitionStatus,
    SessionEvent,
    SessionStarted,
    SessionStopped,
    TranscriptResult,
)
from speech_archiver.interfaces import EventCallback, SpeechRecognizer
from speech_archiver.logging import setup_logging

logger = setup_logging()

STREAMING_HOST = "streaming.assemblyai.com"


def to_transcript_result(turn) -> TranscriptResult:
    """Converts a finished turn into a TranscriptResult."""
    text = (turn.transcript or "").strip()
    if not text:
        return TranscriptResult(status=RecognitionStatus.NO_MATCH)

    words = turn.words or []
    offset = duration = timedelta(0)
    if words:
        offset = timedelta(milliseconds=words[0].start)
        duration = timedelta(milliseconds=words[-1].end - words[0].start)
    return TranscriptResult(
        status=RecognitionStatus.RECOGNIZED,
        text=text,
        offset=offset,
        duration=duration,
    )


def to_session_event(turn) -> SessionEvent:
    """
    Maps a turn event.

    Turns are formatted, so the service sends an unformatted end-of-turn
    before the final formatted one; only the latter closes the utterance.
    """
    if turn.end_of_turn and turn.turn_is_formatted:
        return FinalResult(result=to_transcript_result(turn))
    return IntermediateResult(text=turn.transcript or "")


class AssemblyAIRecognizer(SpeechRecognizer):
    """Recognizes speech with the AssemblyAI streaming service."""

    def __init__(self, config: SpeechConfig):
        self._api_key = config.api_key
        self._sample_rate = config.sample_rate
        self._client: StreamingClient | None = None
        self._microphone = None
        self._thread: threading.Thread | None = None
        self._stopped = threading.Event()
        self._disconnect_lock = threading.Lock()
        self._connected = False

    def start(
        self, source: AudioSource, on_event: EventCallback, continuous: bool
    ) -> None:
        client = StreamingClient(
            StreamingClientOptions(api_key=self._api_key, api_host=STREAMING_HOST)
        )
        client.on(StreamingEvents.Begin, lambda _client, event: on_event(SessionStarted()))
        client.on(
            StreamingEvents.Turn, lambda _client, event: on_event(to_session_event(event))
        )
        client.on(
            StreamingEvents.Termination, lambda _client, event: on_event(SessionStopped())
        )
        client.on(
            StreamingEvents.Error,
            lambda _client, error: on_event(RecognitionError(reason=str(error))),
        )

        self._stopped.clear()
        self._client = client
        client.connect(StreamingParameters(sample_rate=self._sample_rate, format_turns=True))
        self._connected = True

        if source.kind == "file":
            audio = aai.extras.stream_file(filepath=source.path, sample_rate=self._sample_rate)
        else:
            self._microphone = aai.extras.MicrophoneStream(sample_rate=self._sample_rate)
            audio = self._microphone

        self._thread = threading.Thread(
            target=self._stream,
            args=(audio, source.kind == "file", on_event),
            name="assemblyai-stream",
            daemon=True,
        )
        self._thread.start()
        logger.info(
            "AssemblyAI streaming started",
            extra={"source": source.describe(), "continuous": continuous},
        )

    def _until_stopped(self, chunks: Iterable[bytes]) -> Iterator[bytes]:
        for chunk in chunks:
            if self._stopped.is_set():
                return
            yield chunk

    def _stream(self, audio: Iterable[bytes], ends: bool, on_event: EventCallback) -> None:
        try:
            self._client.stream(self._until_stopped(audio))
        except Exception as e:
            if self._stopped.is_set():
                return
            logger.exception("AssemblyAI streaming failed")
            on_event(RecognitionError(reason=str(e)))
            return

        # A file has been fully sent; ask the service to finish the session.
        if ends and not self._stopped.is_set():
            self._disconnect()

    def _disconnect(self) -> None:
        with self._disconnect_lock:
            if not self._connected or self._client is None:
                return
            self._connected = False
            self._client.disconnect(terminate=True)

    def stop(self) -> None:
        self._stopped.set()
        if self._microphone is not None:
            self._microphone.close()
            self._microphone = None

        self._disconnect()

        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join(timeout=5)
        self._thread = None
        self._client = None
        logger.info("AssemblyAI streaming stopped")
