"""Core data models for the app."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

_EXTENSIONS = {
    "audio/wav": "wav",
    "audio/x-wav": "wav",
    "audio/webm": "webm",
    "audio/ogg": "ogg",
    "audio/mpeg": "mp3",
    "audio/mp4": "m4a",
}


class RecordingState(str, Enum):
    IDLE = "IDLE"
    RECORDING = "RECORDING"
    STOPPING = "STOPPING"


class StreamEventKind(str, Enum):
    DELTA = "delta"
    DONE = "done"


@dataclass(frozen=True)
class StreamEvent:
    kind: StreamEventKind
    text: str = ""

    @classmethod
    def delta(cls, text: str) -> "StreamEvent":
        return cls(kind=StreamEventKind.DELTA, text=text)

    @classmethod
    def done(cls) -> "StreamEvent":
        return cls(kind=StreamEventKind.DONE)


@dataclass(frozen=True)
class AudioClip:
    data: bytes
    content_type: str = "audio/wav"

    @property
    def filename(self) -> str:
        base_type = self.content_type.split(";", 1)[0].strip().lower()
        return f"audio.{_EXTENSIONS.get(base_type, 'bin')}"


@dataclass(frozen=True)
class Exchange:
    id: str
    question: str
    answer: str
    completed_at_ms: int


@dataclass(frozen=True)
class RenderState:
    """Everything the renderer needs for one tick."""

    transcription: str = ""
    answer: str = ""
    history: tuple[Exchange, ...] = field(default_factory=tuple)
    loading: bool = False
    streaming: bool = False
