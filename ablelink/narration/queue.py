"""
Narration Queue - Single-flight, cancellable sequential speech.

State machine:

    IDLE ──speak_sequence──▶ SPEAKING(0)
    SPEAKING(i) ──fragment i completes──▶ SPEAKING(i+1)
    SPEAKING(last) ──completes──▶ IDLE
    SPEAKING(i) ──cancel / speak_one / speak_sequence──▶ IDLE (then restart)

At most one sequence is ever active. Every new request bumps a
generation counter; a sequence task only touches state while its
generation is current, so the newest call always wins.

Narration is audible only when the settings store has narration
enabled and the synthesizer is available; otherwise every call is a
silent no-op.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Callable, Optional, Sequence

from ablelink.config import NarrationConfig
from ablelink.monitoring.logging import StructuredLogger, get_logger
from ablelink.narration.base import NullSynthesizer, SpeechSynthesizer, Utterance

if TYPE_CHECKING:
    from ablelink.accessibility.settings import AccessibilitySettings, SettingsStore

logger = logging.getLogger(__name__)


class NarrationState(Enum):
    """Narration queue states."""
    IDLE = "idle"
    SPEAKING = "speaking"


@dataclass(frozen=True)
class NarrationStatus:
    """Snapshot of the queue, for progress display.

    Attributes:
        state: IDLE or SPEAKING
        index: Fragment being spoken (None when idle)
        total: Fragment count of the active sequence (0 when idle)
    """
    state: NarrationState = NarrationState.IDLE
    index: Optional[int] = None
    total: int = 0

    @property
    def is_reading(self) -> bool:
        return self.state == NarrationState.SPEAKING


StatusListener = Callable[[NarrationStatus], None]


class NarrationQueue:
    """Deterministic, interruptible spoken playback.

    Example:
        queue = NarrationQueue(store, load_synthesizer())

        queue.speak_one("Sign out")             # fire-and-forget

        task = queue.speak_sequence(["You have 3 tasks.", "Eat breakfast."])
        queue.status.index                      # 0
        queue.cancel()                          # back to IDLE immediately
    """

    def __init__(
        self,
        settings: "SettingsStore",
        synthesizer: Optional[SpeechSynthesizer] = None,
        config: Optional[NarrationConfig] = None,
        events: Optional[StructuredLogger] = None,
    ) -> None:
        self._settings = settings
        self._synth = synthesizer or NullSynthesizer()
        self.config = config or NarrationConfig()
        self._events = events or get_logger()

        self._status = NarrationStatus()
        self._generation = 0
        self._task: Optional[asyncio.Task] = None
        self._listeners: list[StatusListener] = []

        self._unsubscribe = settings.subscribe(self._on_settings_changed)

    @property
    def status(self) -> NarrationStatus:
        return self._status

    @property
    def state(self) -> NarrationState:
        return self._status.state

    @property
    def current_index(self) -> Optional[int]:
        return self._status.index

    @property
    def is_reading(self) -> bool:
        return self._status.is_reading

    @property
    def audible(self) -> bool:
        """Whether calls will produce speech right now."""
        return self._synth.available and self._settings.narration_enabled

    def speak_one(self, text: str) -> None:
        """Speak one utterance now, preempting anything in flight.

        Fire-and-forget: returns without waiting for the speech to end.
        """
        if not self.audible or not text.strip():
            return

        self._interrupt(reason="preempted")
        self._synth.speak(self._utterance(text), self._one_shot_done)

    def speak_sequence(self, fragments: Sequence[str]) -> Optional[asyncio.Task]:
        """Read fragments strictly in order, one at a time.

        Any active sequence is cancelled first. Must be called from a
        running event loop.

        Args:
            fragments: Ordered text fragments; blank ones are skipped

        Returns:
            The playback task (awaiting it raises CancelledError if the
            sequence is preempted), or None when there is nothing to play
            or narration is not audible.
        """
        items = tuple(f for f in fragments if f and f.strip())
        self._interrupt(reason="restarted")

        if not self.audible or not items:
            return None

        loop = asyncio.get_running_loop()
        generation = self._generation
        self._set_status(NarrationStatus(NarrationState.SPEAKING, 0, len(items)))
        self._task = loop.create_task(self._play(generation, items))
        return self._task

    def toggle(self, fragments: Sequence[str]) -> Optional[asyncio.Task]:
        """Global read/pause: cancel when reading, otherwise start reading."""
        if self.is_reading:
            self.cancel()
            return None
        return self.speak_sequence(fragments)

    def cancel(self) -> None:
        """Stop speech immediately and return to IDLE. Idempotent."""
        self._interrupt(reason="cancelled")

    def add_listener(self, listener: StatusListener) -> None:
        """Add a listener for status changes."""
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove_listener(self, listener: StatusListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def close(self) -> None:
        """Cancel playback and detach from the settings store."""
        self.cancel()
        self._unsubscribe()

    async def _play(self, generation: int, items: tuple[str, ...]) -> None:
        self._events.narration_started(len(items))
        finished = False
        try:
            for i, text in enumerate(items):
                completed = await self._speak_fragment(text)
                if not completed:
                    # Stopped from outside the queue
                    break
                if i + 1 < len(items):
                    self._set_status(NarrationStatus(NarrationState.SPEAKING, i + 1, len(items)))
                    await asyncio.sleep(self.config.fragment_pause_s)
            else:
                finished = True
        finally:
            if generation == self._generation:
                self._task = None
                self._set_status(NarrationStatus())
                if finished:
                    self._events.narration_finished(len(items))

    async def _speak_fragment(self, text: str) -> bool:
        loop = asyncio.get_running_loop()
        done: asyncio.Future[bool] = loop.create_future()

        def on_done(completed: bool) -> None:
            if not loop.is_closed():
                loop.call_soon_threadsafe(_resolve, done, completed)

        self._synth.speak(self._utterance(text), on_done)
        return await done

    def _interrupt(self, reason: str) -> None:
        was_reading = self.is_reading
        index = self._status.index

        self._generation += 1
        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()

        self._synth.stop()
        self._set_status(NarrationStatus())

        if was_reading:
            self._events.narration_cancelled(index, reason)

    def _utterance(self, text: str) -> Utterance:
        return Utterance(
            text=text,
            rate=self.config.rate,
            pitch=self.config.pitch,
            language=self.config.language,
        )

    def _one_shot_done(self, completed: bool) -> None:
        logger.debug(f"One-shot utterance {'finished' if completed else 'stopped'}")

    def _set_status(self, status: NarrationStatus) -> None:
        if status == self._status:
            return
        self._status = status
        for listener in list(self._listeners):
            try:
                listener(status)
            except Exception as e:
                logger.warning(f"Narration listener {listener!r} failed: {e}")

    def _on_settings_changed(self, settings: "AccessibilitySettings") -> None:
        if not settings.screen_reader_narration:
            self.cancel()


def _resolve(future: asyncio.Future, completed: bool) -> None:
    if not future.done():
        future.set_result(completed)
