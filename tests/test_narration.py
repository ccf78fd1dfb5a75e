"""
Tests for the narration queue, synthesizers and loader.
"""

import asyncio
from unittest.mock import Mock, patch

import pytest

from ablelink.accessibility import MemoryKeyValueStore, SettingsStore
from ablelink.config import NarrationConfig
from ablelink.narration import (
    EspeakSynthesizer,
    MockSynthesizer,
    NarrationQueue,
    NarrationState,
    NarrationStatus,
    NullSynthesizer,
    Utterance,
    list_synthesizers,
    load_synthesizer,
)

from tests.conftest import settle


class TestSpeakSequence:
    """Tests for ordered playback."""

    def test_plays_in_order_then_idles(self, settings, narration_config):
        synth = MockSynthesizer(auto_complete=True)

        async def scenario():
            queue = NarrationQueue(settings, synth, narration_config)
            task = queue.speak_sequence(["a", "b", "c"])
            await task
            return queue

        queue = asyncio.run(scenario())
        assert synth.spoken == ["a", "b", "c"]
        assert synth.completed == ["a", "b", "c"]
        assert queue.state == NarrationState.IDLE
        assert queue.current_index is None

    def test_index_advances_per_fragment(self, settings, narration_config):
        synth = MockSynthesizer(auto_complete=True)
        statuses = []

        async def scenario():
            queue = NarrationQueue(settings, synth, narration_config)
            queue.add_listener(statuses.append)
            await queue.speak_sequence(["a", "b", "c"])

        asyncio.run(scenario())
        assert statuses == [
            NarrationStatus(NarrationState.SPEAKING, 0, 3),
            NarrationStatus(NarrationState.SPEAKING, 1, 3),
            NarrationStatus(NarrationState.SPEAKING, 2, 3),
            NarrationStatus(),
        ]

    def test_one_fragment_at_a_time(self, queue, synth):
        async def scenario():
            queue.speak_sequence(["a", "b"])
            await settle()
            assert synth.current == "a"
            assert synth.spoken == ["a"]
            assert queue.current_index == 0

            synth.finish()
            await settle()
            assert synth.current == "b"
            assert queue.current_index == 1

            synth.finish()
            await settle()
            assert queue.state == NarrationState.IDLE

        asyncio.run(scenario())

    def test_blank_fragments_skipped(self, settings, narration_config):
        synth = MockSynthesizer(auto_complete=True)

        async def scenario():
            queue = NarrationQueue(settings, synth, narration_config)
            await queue.speak_sequence(["a", "", "   ", "b"])

        asyncio.run(scenario())
        assert synth.spoken == ["a", "b"]

    def test_empty_sequence_returns_none(self, queue):
        async def scenario():
            return queue.speak_sequence([])

        assert asyncio.run(scenario()) is None
        assert queue.state == NarrationState.IDLE

    def test_utterance_uses_config(self, settings, synth):
        async def scenario():
            queue = NarrationQueue(settings, synth, NarrationConfig(rate=0.8, pitch=1.2))
            queue.speak_sequence(["hello"])
            await settle()
            queue.cancel()

        asyncio.run(scenario())
        utterance = synth.calls[-2].utterance
        assert utterance == Utterance("hello", rate=0.8, pitch=1.2, language="en")


class TestCancellation:
    """Tests for cancel and preemption."""

    def test_cancel_before_first_fragment_completes(self, queue, synth):
        async def scenario():
            task = queue.speak_sequence(["a", "b", "c"])
            await settle()
            assert synth.current == "a"

            queue.cancel()
            assert queue.state == NarrationState.IDLE
            assert not synth.is_speaking

            with pytest.raises(asyncio.CancelledError):
                await task
            await settle()

        asyncio.run(scenario())
        assert synth.spoken == ["a"]
        assert synth.stopped == ["a"]
        assert synth.completed == []
        assert queue.state == NarrationState.IDLE

    def test_cancel_is_idempotent(self, queue):
        queue.cancel()
        queue.cancel()
        assert queue.state == NarrationState.IDLE

    def test_mock_reset_clears_history(self, queue, synth):
        async def scenario():
            queue.speak_one("hello")
            await settle()
            assert synth.is_speaking
            synth.reset()

        asyncio.run(scenario())
        assert synth.spoken == []
        assert synth.completed == []

    def test_speak_one_preempts_sequence(self, queue, synth):
        async def scenario():
            task = queue.speak_sequence(["a", "b", "c"])
            await settle()
            synth.finish()
            await settle()
            assert synth.current == "b"

            queue.speak_one("x")
            assert queue.state == NarrationState.IDLE
            assert synth.current == "x"

            synth.finish()
            await settle()
            assert task.cancelled()

        asyncio.run(scenario())
        assert synth.spoken == ["a", "b", "x"]
        assert synth.completed == ["a", "x"]
        assert "c" not in synth.spoken

    def test_restart_cancels_previous_sequence(self, queue, synth):
        async def scenario():
            first = queue.speak_sequence(["a", "b"])
            await settle()
            second = queue.speak_sequence(["x", "y"])
            await settle()
            assert first.cancelled()
            assert synth.current == "x"
            assert queue.status == NarrationStatus(NarrationState.SPEAKING, 0, 2)

            synth.finish()
            await settle()
            synth.finish()
            await second

        asyncio.run(scenario())
        assert synth.spoken == ["a", "x", "y"]
        assert synth.stopped == ["a"]

    def test_late_completion_after_cancel_is_ignored(self, queue, synth):
        """A stale on_done must not advance a newer sequence."""
        async def scenario():
            queue.speak_sequence(["a", "b"])
            await settle()
            stale = synth._on_done

            queue.speak_sequence(["x", "y"])
            await settle()
            stale(True)
            await settle()
            assert synth.current == "x"
            assert queue.current_index == 0
            queue.cancel()

        asyncio.run(scenario())

    def test_external_stop_ends_sequence(self, queue, synth):
        async def scenario():
            task = queue.speak_sequence(["a", "b"])
            await settle()
            synth.stop()
            await task

        asyncio.run(scenario())
        assert synth.spoken == ["a"]
        assert queue.state == NarrationState.IDLE

    def test_disabling_narration_cancels(self, queue, synth, settings):
        async def scenario():
            queue.speak_sequence(["a", "b"])
            await settle()
            settings.update(screen_reader_narration=False)
            await settle()

        asyncio.run(scenario())
        assert queue.state == NarrationState.IDLE
        assert synth.stopped == ["a"]


class TestToggle:
    """Tests for the global read/pause control."""

    def test_toggle_starts_then_stops(self, queue, synth):
        async def scenario():
            task = queue.toggle(["a", "b"])
            assert task is not None
            await settle()
            assert queue.is_reading

            assert queue.toggle(["a", "b"]) is None
            assert not queue.is_reading
            await settle()

        asyncio.run(scenario())
        assert synth.spoken == ["a"]


class TestSilentDegradation:
    """Narration is a no-op when disabled or unavailable."""

    def test_disabled_in_settings(self, synth, narration_config):
        store = SettingsStore(MemoryKeyValueStore())
        store.load()
        queue = NarrationQueue(store, synth, narration_config)

        async def scenario():
            queue.speak_one("hello")
            return queue.speak_sequence(["a", "b"])

        assert asyncio.run(scenario()) is None
        assert synth.spoken == []
        assert not queue.audible

    def test_no_speech_capability(self, settings, narration_config):
        queue = NarrationQueue(settings, NullSynthesizer(), narration_config)

        async def scenario():
            queue.speak_one("hello")
            task = queue.speak_sequence(["a"])
            queue.cancel()
            return task

        assert asyncio.run(scenario()) is None
        assert queue.state == NarrationState.IDLE

    def test_unavailable_mock(self, settings, narration_config):
        synth = MockSynthesizer(available=False)
        queue = NarrationQueue(settings, synth, narration_config)
        queue.speak_one("hello")
        assert synth.spoken == []

    def test_blank_speak_one(self, queue, synth):
        queue.speak_one("   ")
        assert synth.spoken == []

    def test_speak_one_outside_loop(self, queue, synth):
        queue.speak_one("Sign out")
        assert synth.spoken == ["Sign out"]


class TestListeners:
    """Tests for status listeners."""

    def test_failing_listener_is_skipped(self, settings, narration_config):
        synth = MockSynthesizer(auto_complete=True)
        good = Mock()

        async def scenario():
            queue = NarrationQueue(settings, synth, narration_config)
            queue.add_listener(Mock(side_effect=RuntimeError("boom")))
            queue.add_listener(good)
            await queue.speak_sequence(["a"])

        asyncio.run(scenario())
        assert good.call_count == 2

    def test_remove_listener(self, queue, synth):
        listener = Mock()
        queue.add_listener(listener)
        queue.remove_listener(listener)

        async def scenario():
            queue.speak_sequence(["a"])
            queue.cancel()

        asyncio.run(scenario())
        listener.assert_not_called()

    def test_close_detaches_from_settings(self, settings, synth, narration_config):
        queue = NarrationQueue(settings, synth, narration_config)
        queue.close()
        with patch.object(queue, "cancel") as cancel:
            settings.update(screen_reader_narration=False)
        cancel.assert_not_called()


class TestLoader:
    """Tests for synthesizer loading."""

    def test_load_mock(self):
        synth = load_synthesizer("mock")
        assert isinstance(synth, MockSynthesizer)
        assert synth.auto_complete

    def test_load_none(self):
        assert isinstance(load_synthesizer("none"), NullSynthesizer)

    def test_unknown_backend(self):
        with pytest.raises(ValueError):
            load_synthesizer("festival")

    def test_auto_falls_back_to_null(self):
        with patch("ablelink.narration.backends.espeak.find_executable", return_value=None):
            synth = load_synthesizer("auto")
        assert isinstance(synth, NullSynthesizer)
        assert not synth.available

    def test_auto_prefers_espeak(self):
        with patch("ablelink.narration.backends.espeak.find_executable", return_value="/usr/bin/espeak-ng"):
            synth = load_synthesizer("auto")
            assert "espeak" in list_synthesizers()
        assert isinstance(synth, EspeakSynthesizer)


class TestEspeakSynthesizer:
    """Tests for the espeak backend, with the process mocked."""

    def test_command_line(self):
        synth = EspeakSynthesizer(executable="espeak-ng")
        process = Mock()
        process.wait.return_value = 0
        done = Mock()

        with patch("ablelink.narration.backends.espeak.subprocess.Popen", return_value=process) as popen:
            synth.speak(Utterance("Hello", rate=0.8, pitch=1.0), done)

        command = popen.call_args[0][0]
        assert command == ["espeak-ng", "-s", "140", "-p", "50", "-v", "en", "Hello"]

    def test_stop_terminates_running_process(self):
        synth = EspeakSynthesizer(executable="espeak-ng")
        process = Mock()
        process.poll.return_value = None
        synth._process = process

        synth.stop()
        process.terminate.assert_called_once()

    def test_start_failure_reports_not_completed(self):
        synth = EspeakSynthesizer(executable="espeak-ng")
        done = Mock()
        with patch("ablelink.narration.backends.espeak.subprocess.Popen", side_effect=OSError("missing")):
            synth.speak(Utterance("Hello"), done)
        done.assert_called_once_with(False)

    def test_unavailable_without_executable(self):
        with patch("ablelink.narration.backends.espeak.find_executable", return_value=None):
            synth = EspeakSynthesizer()
        assert not synth.available
