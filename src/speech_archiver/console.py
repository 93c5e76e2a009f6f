"""Console echo of recognition progress."""

from speech_archiver.domain import (
    FinalResult,
    IntermediateResult,
    RecognitionError,
    SessionEvent,
)


def print_event(event: SessionEvent) -> None:
    """Prints recognition progress and outcomes for the person speaking."""
    if isinstance(event, IntermediateResult):
        print(f"Recognizing: {event.text}")
    elif isinstance(event, FinalResult):
        result = event.result
        if result.is_recognized:
            print(f"We recognized: {result.text}")
        else:
            print(f"Recognition status: {result.status.value}")
            print("No speech could be recognized.")
    elif isinstance(event, RecognitionError):
        print(f"Recognition status: {event.status.value}")
        print(f"There was an error, reason: {event.reason}")
