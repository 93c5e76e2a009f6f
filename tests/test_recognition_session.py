from __future__ import annotations

import asyncio
from datetime import timedelta

import pytest
from conftest import ScriptedRecognizer

from speech_archiver.domain import (
    AudioSource,
    FinalResult,
    IntermediateResult,
    RecognitionError,
    RecognitionStatus,
    SessionStarted,
    SessionStopped,
    TranscriptResult,
)
from speech_archiver.handlers import RecognitionSession


def _final(text: str, status=RecognitionStatus.RECOGNIZED) -> FinalResult:
    return FinalResult(result=TranscriptResult(status=status, text=text))


def _terminal_count(events) -> int:
    return sum(isinstance(e, (SessionStopped, RecognitionError)) for e in events)


class TestRecognizeOnce:
    async def test_returns_first_final_result(self):
        result = TranscriptResult(
            status=RecognitionStatus.RECOGNIZED,
            text="hello",
            offset=timedelta(seconds=1),
            duration=timedelta(milliseconds=500),
        )
        recognizer = ScriptedRecognizer(
            [
                SessionStarted(),
                IntermediateResult(text="hel"),
                FinalResult(result=result),
                SessionStopped(),
            ]
        )
        session = RecognitionSession(recognizer)

        assert await session.recognize_once(AudioSource.microphone()) == result
        assert recognizer.started_with == (AudioSource.microphone(), False)
        assert recognizer.stop_calls == 1

    async def test_no_match_is_returned_as_is(self):
        recognizer = ScriptedRecognizer(
            [SessionStarted(), _final("", RecognitionStatus.NO_MATCH), SessionStopped()]
        )
        result = await RecognitionSession(recognizer).recognize_once(
            AudioSource.from_file("speech.wav")
        )
        assert result.status == RecognitionStatus.NO_MATCH

    async def test_initial_silence_timeout(self):
        recognizer = ScriptedRecognizer(
            [_final("", RecognitionStatus.INITIAL_SILENCE_TIMEOUT), SessionStopped()]
        )
        result = await RecognitionSession(recognizer).recognize_once(
            AudioSource.microphone()
        )
        assert result.status == RecognitionStatus.INITIAL_SILENCE_TIMEOUT
        assert not result.is_recognized

    async def test_cancellation_carries_failure_reason(self):
        recognizer = ScriptedRecognizer(
            [SessionStarted(), RecognitionError(reason="401 invalid subscription key")]
        )
        result = await RecognitionSession(recognizer).recognize_once(
            AudioSource.microphone()
        )
        assert result.status == RecognitionStatus.CANCELED
        assert result.failure_reason == "401 invalid subscription key"

    async def test_stop_without_result_is_no_match(self):
        recognizer = ScriptedRecognizer([SessionStarted(), SessionStopped()])
        result = await RecognitionSession(recognizer).recognize_once(
            AudioSource.microphone()
        )
        assert result.status == RecognitionStatus.NO_MATCH

    async def test_synthetic_stop_when_backend_sends_none(self):
        received = []
        recognizer = ScriptedRecognizer([SessionStarted(), _final("hello")])
        session = RecognitionSession(recognizer, listener=received.append)

        await session.recognize_once(AudioSource.microphone())

        assert _terminal_count(received) == 1
        assert isinstance(received[-1], SessionStopped)


class TestRecognizeContinuous:
    async def test_concatenates_in_arrival_order(self):
        recognizer = ScriptedRecognizer(
            [
                SessionStarted(),
                IntermediateResult(text="hel"),
                IntermediateResult(text="hello"),
                _final("hello"),
                IntermediateResult(text="wor"),
                _final("world"),
                SessionStopped(),
            ]
        )
        results = await RecognitionSession(recognizer).recognize_continuous(
            AudioSource.from_file("speech.wav")
        )

        assert [r.text for r in results] == ["hello", "world"]
        assert recognizer.started_with[1] is True

    async def test_error_is_appended_as_canceled_result(self):
        recognizer = ScriptedRecognizer(
            [_final("hello"), RecognitionError(reason="connection lost"), SessionStopped()]
        )
        results = await RecognitionSession(recognizer).recognize_continuous(
            AudioSource.microphone()
        )

        assert [r.status for r in results] == [
            RecognitionStatus.RECOGNIZED,
            RecognitionStatus.CANCELED,
        ]
        assert results[-1].failure_reason == "connection lost"

    async def test_exactly_one_terminal_event_is_forwarded(self):
        received = []
        recognizer = ScriptedRecognizer(
            [
                SessionStarted(),
                _final("hello"),
                RecognitionError(reason="quota exceeded"),
                SessionStopped(),
            ]
        )
        session = RecognitionSession(recognizer, listener=received.append)

        await session.recognize_continuous(AudioSource.microphone())

        assert _terminal_count(received) == 1
        assert isinstance(received[-1], RecognitionError)

    async def test_results_after_terminal_are_ignored(self):
        recognizer = ScriptedRecognizer(
            [_final("hello"), SessionStopped()],
            late_events=[_final("late")],
        )
        results = await RecognitionSession(recognizer).recognize_continuous(
            AudioSource.microphone()
        )
        assert [r.text for r in results] == ["hello"]

    async def test_no_events_after_stop_acknowledged(self):
        received = []
        recognizer = ScriptedRecognizer([_final("hello"), SessionStopped()])
        session = RecognitionSession(recognizer, listener=received.append)

        await session.recognize_continuous(AudioSource.microphone())
        delivered = list(received)

        recognizer.on_event(_final("after stop"))
        recognizer.on_event(SessionStopped())
        await asyncio.sleep(0.01)

        assert received == delivered

    async def test_session_can_run_again_after_completion(self):
        recognizer = ScriptedRecognizer([_final("again"), SessionStopped()])
        session = RecognitionSession(recognizer)

        first = await session.recognize_continuous(AudioSource.microphone())
        second = await session.recognize_continuous(AudioSource.microphone())

        assert [r.text for r in first] == [r.text for r in second] == ["again"]
        assert recognizer.stop_calls == 2


async def test_start_failure_still_stops_recognizer():
    class BrokenRecognizer(ScriptedRecognizer):
        def start(self, source, on_event, continuous):
            raise RuntimeError("no microphone")

    recognizer = BrokenRecognizer([])
    with pytest.raises(RuntimeError, match="no microphone"):
        await RecognitionSession(recognizer).recognize_once(AudioSource.microphone())
    assert recognizer.stop_calls == 1


class TestFailingListener:
    @staticmethod
    def _raising_on(event_type):
        def listener(event):
            if isinstance(event, event_type):
                raise UnicodeEncodeError("ascii", "caf\xe9", 3, 4, "ordinal not in range")

        return listener

    async def test_listener_error_on_terminal_does_not_hang(self, caplog):
        recognizer = ScriptedRecognizer([_final("hi"), SessionStopped()])
        session = RecognitionSession(recognizer, listener=self._raising_on(SessionStopped))

        results = await asyncio.wait_for(
            session.recognize_continuous(AudioSource.microphone()), 2
        )

        assert [r.text for r in results] == ["hi"]
        assert recognizer.stop_calls == 1
        assert "Session listener failed" in caplog.text

    async def test_listener_error_on_single_shot_result_does_not_hang(self):
        recognizer = ScriptedRecognizer([_final("caf\xe9"), SessionStopped()])
        session = RecognitionSession(recognizer, listener=self._raising_on(FinalResult))

        result = await asyncio.wait_for(
            session.recognize_once(AudioSource.microphone()), 2
        )

        assert result.text == "caf\xe9"
        assert recognizer.stop_calls == 1
