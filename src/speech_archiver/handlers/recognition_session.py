"""Completion protocol that turns recognizer callbacks into awaitable results."""

import asyncio
from collections.abc import Callable

from speech_archiver.domain.models import (
    TERMINAL_EVENTS,
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
from speech_archiver.interfaces import SpeechRecognizer
from speech_archiver.logging import setup_logging

logger = setup_logging()

SessionListener = Callable[[SessionEvent], None]


class RecognitionSession:
    """
    Runs one recognition session against a SpeechRecognizer.

    Events arrive on the recognizer's own thread and are handed to the event
    loop with ``call_soon_threadsafe``. The loop-side handler is the only
    writer of the collected results and resolves a single future once a
    terminal event is seen. The caller awaits that future, then stops the
    recognizer; anything dispatched after the stop acknowledgement is dropped.
    """

    def __init__(
        self,
        recognizer: SpeechRecognizer,
        listener: SessionListener | None = None,
    ):
        self._recognizer = recognizer
        self._listener = listener
        self._loop: asyncio.AbstractEventLoop | None = None
        self._terminal: asyncio.Future | None = None
        self._results: list[TranscriptResult] = []
        self._continuous = False
        self._accepting = False
        self._terminal_forwarded = False
        self._active = False

    async def recognize_once(self, source: AudioSource) -> TranscriptResult:
        """
        Recognizes a single utterance.

        Returns the first final result. A service error is returned as a
        Canceled result carrying the failure reason; a session that ends
        without any result yields NoMatch.
        """
        terminal = await self._run(source, continuous=False)

        if isinstance(terminal, RecognitionError):
            return TranscriptResult(status=terminal.status, failure_reason=terminal.reason)
        if isinstance(terminal, FinalResult):
            return terminal.result
        if self._results:
            return self._results[0]
        return TranscriptResult(status=RecognitionStatus.NO_MATCH)

    async def recognize_continuous(self, source: AudioSource) -> list[TranscriptResult]:
        """
        Recognizes utterances until the service stops the session.

        Returns every final result in arrival order. If the session ended
        with a service error, a Canceled result is appended last.
        """
        terminal = await self._run(source, continuous=True)

        results = list(self._results)
        if isinstance(terminal, RecognitionError):
            results.append(
                TranscriptResult(status=terminal.status, failure_reason=terminal.reason)
            )
        return results

    async def _run(self, source: AudioSource, continuous: bool) -> SessionEvent:
        if self._active:
            raise RuntimeError("Recognition session is already running")
        self._active = True

        self._loop = asyncio.get_running_loop()
        self._terminal = self._loop.create_future()
        self._results = []
        self._continuous = continuous
        self._terminal_forwarded = False
        self._accepting = True

        logger.info(
            "Recognition session starting",
            extra={"source": source.describe(), "continuous": continuous},
        )

        try:
            await asyncio.to_thread(
                self._recognizer.start, source, self._dispatch, continuous
            )
            terminal = await self._terminal
        finally:
            await asyncio.to_thread(self._recognizer.stop)
            self._accepting = False
            self._active = False

        if not self._terminal_forwarded:
            self._forward(SessionStopped())

        logger.info(
            "Recognition session finished",
            extra={"terminal": terminal.kind, "results": len(self._results)},
        )
        return terminal

    def _dispatch(self, event: SessionEvent) -> None:
        """Receives an event on the recognizer thread."""
        loop = self._loop
        if loop is None or loop.is_closed():
            return
        try:
            loop.call_soon_threadsafe(self._handle, event)
        except RuntimeError:
            # Loop shut down between the check and the call.
            logger.debug("Dropped recognizer event after loop shutdown")

    def _handle(self, event: SessionEvent) -> None:
        if not self._accepting:
            return
        # Once resolved, only a terminal event may still be forwarded.
        if self._terminal.done() and not isinstance(event, TERMINAL_EVENTS):
            return

        if isinstance(event, IntermediateResult):
            logger.debug("Intermediate result", extra={"text": event.text})
        elif isinstance(event, FinalResult):
            self._results.append(event.result)
        elif isinstance(event, RecognitionError):
            logger.warning(
                "Recognition failed",
                extra={"status": event.status.value, "reason": event.reason},
            )
        elif isinstance(event, (SessionStarted, SessionStopped)):
            logger.info("Recognition session event", extra={"event": event.kind})

        if isinstance(event, TERMINAL_EVENTS):
            if self._terminal_forwarded:
                return
            self._terminal_forwarded = True
            self._resolve(event)
            self._forward(event)
            return

        if isinstance(event, FinalResult) and not self._continuous:
            self._resolve(event)

        self._forward(event)

    def _resolve(self, event: SessionEvent) -> None:
        if self._terminal is not None and not self._terminal.done():
            self._terminal.set_result(event)

    def _forward(self, event: SessionEvent) -> None:
        if self._listener is None:
            return
        try:
            self._listener(event)
        except Exception:
            logger.exception("Session listener failed", extra={"event": event.kind})
