"""Abstract interface for speech recognition backends."""

from abc import ABC, abstractmethod
from collections.abc import Callable

from speech_archiver.domain.models import AudioSource, SessionEvent

EventCallback = Callable[[SessionEvent], None]


class SpeechRecognizer(ABC):
    """Abstract base class for event-driven speech recognizers."""

    @abstractmethod
    def start(
        self, source: AudioSource, on_event: EventCallback, continuous: bool
    ) -> None:
        """
        Starts recognizing audio from the given source.

        Returns once the session has been started. Events are delivered to
        ``on_event`` from a thread owned by the backend.

        Args:
            source: The microphone or file to read audio from.
            on_event: Called for every session event.
            continuous: Keep recognizing utterances until the audio ends,
                instead of stopping after the first one.
        """

    @abstractmethod
    def stop(self) -> None:
        """
        Stops the session and releases the audio handle.

        Blocks until the backend has acknowledged the stop. ``on_event`` is
        not called again once this returns.
        """
