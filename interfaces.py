"""Protocol interfaces used by RecordingController and ExchangePipeline."""

from __future__ import annotations

from typing import AsyncContextManager, AsyncIterator, Protocol

from models import AudioClip, Exchange


class Recorder(Protocol):
    def start(self) -> None: ...

    def stop(self) -> AudioClip: ...

    def discard(self) -> None: ...


class TranscriptionService(Protocol):
    async def transcribe(self, clip: AudioClip) -> str: ...


class ChatService(Protocol):
    def open_stream(self, question: str) -> AsyncContextManager[AsyncIterator[bytes]]: ...


class ExchangeRunner(Protocol):
    @property
    def busy(self) -> bool: ...

    def reset(self) -> None: ...

    async def run(self, clip: AudioClip) -> Exchange: ...

