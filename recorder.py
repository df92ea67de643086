"""Microphone recorder adapter."""

from __future__ import annotations

import io
import logging
import threading
import wave
from typing import Any

from errors import DeviceError
from models import AudioClip

try:
    import numpy as np
except ImportError:  # pragma: no cover
    np = None  # type: ignore

try:
    import sounddevice as sd
except (ImportError, OSError):  # pragma: no cover - PortAudio missing
    sd = None  # type: ignore

logger = logging.getLogger(__name__)


def _pcm_to_wav_bytes(
    pcm: bytes,
    sample_rate: int = 16000,
    channels: int = 1,
    sample_width: int = 2,
) -> bytes:
    """Wrap raw int16 PCM in a WAV container."""
    buf = io.BytesIO()
    with wave.open(buf, "wb") as wf:
        wf.setnchannels(channels)
        wf.setsampwidth(sample_width)
        wf.setframerate(sample_rate)
        wf.writeframes(pcm)
    return buf.getvalue()


class SoundDeviceRecorder:
    def __init__(
        self,
        sample_rate: int = 16000,
        channels: int = 1,
        chunk_ms: int = 100,
        max_seconds: float = 300.0,
    ) -> None:
        self.sample_rate = sample_rate
        self.channels = channels
        self.chunk_ms = chunk_ms
        self._max_bytes = int(max_seconds * sample_rate) * channels * 2
        self._stream: Any = None
        self._running = False
        self._lock = threading.Lock()
        self._frames: list[bytes] = []
        self._captured_bytes = 0
        self.dropped_chunks = 0

    @property
    def active(self) -> bool:
        return self._running

    def start(self) -> None:
        """Open the default input device; raises DeviceError if unavailable."""
        with self._lock:
            if self._running:
                return
            if sd is None or np is None:
                raise DeviceError("sounddevice is not installed")
            self._frames = []
            self._captured_bytes = 0
            self.dropped_chunks = 0
            blocksize = int(self.sample_rate * (self.chunk_ms / 1000.0))
            try:
                stream = sd.InputStream(
                    samplerate=self.sample_rate,
                    channels=self.channels,
                    dtype="int16",
                    blocksize=blocksize,
                    callback=self._on_audio,
                )
                stream.start()
            except (sd.PortAudioError, ValueError) as exc:
                raise DeviceError(f"cannot open microphone: {exc}") from exc
            self._stream = stream
            self._running = True
            logger.info("Microphone opened (%d Hz, %d ch)", self.sample_rate, self.channels)

    def stop(self) -> AudioClip:
        """Release the device and return everything captured as a WAV clip."""
        self._release()
        with self._lock:
            pcm = b"".join(self._frames)
            self._frames = []
        logger.info("Captured %d bytes of audio (%d chunks dropped)", len(pcm), self.dropped_chunks)
        return AudioClip(
            data=_pcm_to_wav_bytes(pcm, self.sample_rate, self.channels),
            content_type="audio/wav",
        )

    def discard(self) -> None:
        self._release()
        with self._lock:
            self._frames = []

    def _release(self) -> None:
        # PortAudio waits for the callback to return, so the stream must be
        # stopped without holding the lock the callback takes.
        with self._lock:
            self._running = False
            stream, self._stream = self._stream, None
        if stream is None:
            return
        try:
            stream.stop()
        except sd.PortAudioError as exc:
            logger.warning("Error stopping input stream: %s", exc)
        try:
            stream.close()
        except sd.PortAudioError as exc:
            logger.warning("Error closing input stream: %s", exc)

    def _on_audio(self, indata: Any, frames: int, time_info: Any, status: Any) -> None:
        if not self._running or np is None:
            return
        payload = np.asarray(indata, dtype=np.int16).tobytes()
        with self._lock:
            if self._captured_bytes + len(payload) > self._max_bytes:
                self.dropped_chunks += 1
                return
            self._frames.append(payload)
            self._captured_bytes += len(payload)
