"""State machine governing microphone capture and hand-off to the pipeline."""

from __future__ import annotations

import logging
from typing import Callable, Optional

from errors import VoiceQAError
from interfaces import ExchangeRunner, Recorder
from models import AudioClip, Exchange, RecordingState

logger = logging.getLogger(__name__)

StateCallback = Callable[[RecordingState, RecordingState], None]
ErrorCallback = Callable[[str, str], None]


class RecordingController:
    """Drives ``IDLE -> RECORDING -> STOPPING -> IDLE``.

    All methods are meant to be called from the one event loop that also runs
    the pipeline, so state changes never interleave. A ``start_recording``
    while a capture or an exchange is already in progress is ignored.
    """

    def __init__(
        self,
        recorder: Recorder,
        pipeline: ExchangeRunner,
        on_state_change: Optional[StateCallback] = None,
        on_error: Optional[ErrorCallback] = None,
    ) -> None:
        self._recorder = recorder
        self._pipeline = pipeline
        self._on_state_change = on_state_change
        self._on_error = on_error
        self._state = RecordingState.IDLE

    @property
    def state(self) -> RecordingState:
        return self._state

    async def start_recording(self) -> bool:
        if self._state != RecordingState.IDLE:
            logger.debug("start_recording ignored in state %s", self._state.value)
            return False
        if self._pipeline.busy:
            logger.info("start_recording ignored: previous answer still streaming")
            return False
        self._pipeline.reset()
        try:
            self._recorder.start()
        except VoiceQAError as exc:
            logger.warning("Cannot start recording: %s", exc)
            self._emit_error(exc.code, str(exc))
            return False
        self._transition(RecordingState.RECORDING)
        return True

    async def stop_recording(self) -> Optional[Exchange]:
        """Finish capture and run the exchange; returns None if nothing ran."""
        if self._state != RecordingState.RECORDING:
            return None
        self._transition(RecordingState.STOPPING)
        clip: Optional[AudioClip] = None
        try:
            clip = self._recorder.stop()
        except VoiceQAError as exc:
            logger.warning("Capture could not be finalized: %s", exc)
            self._emit_error(exc.code, str(exc))
        finally:
            self._transition(RecordingState.IDLE)
        if clip is None:
            return None
        try:
            return await self._pipeline.run(clip)
        except VoiceQAError as exc:
            logger.warning("Exchange failed (%s): %s", exc.code, exc)
            self._emit_error(exc.code, str(exc))
            return None

    async def toggle_recording(self) -> None:
        """Start when idle, stop when recording, otherwise do nothing."""
        if self._state == RecordingState.IDLE:
            await self.start_recording()
        elif self._state == RecordingState.RECORDING:
            await self.stop_recording()
        else:
            logger.debug("toggle ignored in state %s", self._state.value)

    def cancel_recording(self, reason: str) -> None:
        if self._state == RecordingState.IDLE:
            return
        logger.info("Recording cancelled: %s", reason)
        try:
            self._recorder.discard()
        finally:
            self._transition(RecordingState.IDLE)

    def _emit_error(self, code: str, message: str) -> None:
        if self._on_error:
            self._on_error(code, message)

    def _transition(self, to_state: RecordingState) -> None:
        from_state = self._state
        if from_state == to_state:
            return
        self._state = to_state
        if self._on_state_change:
            self._on_state_change(from_state, to_state)
