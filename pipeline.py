"""One question/answer exchange: transcribe, stream the answer, record it."""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional

from accumulator import AnswerAccumulator
from errors import REQUEST_FAILED_PLACEHOLDER, ChatRequestError, StreamTransportError, TranscriptionError
from history import ExchangeIdGenerator, HistoryStore
from interfaces import ChatService, TranscriptionService
from models import AudioClip, Exchange, RenderState, StreamEventKind
from stream_parser import StreamFrameParser

logger = logging.getLogger(__name__)

RenderCallback = Callable[[RenderState], None]


class ExchangePipeline:
    def __init__(
        self,
        transcriber: TranscriptionService,
        chat: ChatService,
        history: HistoryStore,
        typing_delay_ms: int = 0,
        id_generator: Optional[ExchangeIdGenerator] = None,
        on_render: Optional[RenderCallback] = None,
    ) -> None:
        self._transcriber = transcriber
        self._chat = chat
        self._history = history
        self._typing_delay_s = max(typing_delay_ms, 0) / 1000.0
        self._ids = id_generator or ExchangeIdGenerator()
        self._on_render = on_render

        self._current_transcription = ""
        self._current_answer = ""
        self._loading = False
        self._streaming = False
        self._busy = False

    @property
    def busy(self) -> bool:
        return self._busy

    @property
    def current_transcription(self) -> str:
        return self._current_transcription

    @property
    def current_answer(self) -> str:
        return self._current_answer

    @property
    def history(self) -> HistoryStore:
        return self._history

    def snapshot(self) -> RenderState:
        return RenderState(
            transcription=self._current_transcription,
            answer=self._current_answer,
            history=self._history.list(),
            loading=self._loading,
            streaming=self._streaming,
        )

    def reset(self) -> None:
        """Clear the transient text left over from the previous exchange."""
        self._current_transcription = ""
        self._current_answer = ""
        self._loading = False
        self._streaming = False
        self._render()

    async def run(self, clip: AudioClip) -> Exchange:
        """Run one exchange and commit it to history.

        Raises TranscriptionError or ChatRequestError when the exchange has to
        be abandoned; nothing is added to history in that case. A stream that
        breaks off part way still commits the answer received so far.
        """
        self._busy = True
        try:
            self.reset()
            self._loading = True
            self._render()
            question = await self._transcribe(clip)
            answer = await self._stream_answer(question)
            exchange = self._commit(question, answer)
        finally:
            self._loading = False
            self._streaming = False
            self._busy = False
            self._render()
        return exchange

    async def _transcribe(self, clip: AudioClip) -> str:
        try:
            question = await self._transcriber.transcribe(clip)
        except TranscriptionError:
            self._current_answer = REQUEST_FAILED_PLACEHOLDER
            raise
        self._current_transcription = question
        self._render()
        return question

    async def _stream_answer(self, question: str) -> str:
        accumulator = AnswerAccumulator()
        parser = StreamFrameParser()
        try:
            async with self._chat.open_stream(question) as chunks:
                self._loading = False
                self._streaming = True
                self._render()
                try:
                    async for event in parser.iter_events(chunks):
                        self._current_answer = accumulator.apply(event)
                        self._render()
                        if event.kind == StreamEventKind.DELTA and self._typing_delay_s:
                            await asyncio.sleep(self._typing_delay_s)
                except StreamTransportError as exc:
                    logger.warning("Answer stream interrupted, keeping %d chars: %s", len(accumulator.text), exc)
        except ChatRequestError:
            self._current_answer = REQUEST_FAILED_PLACEHOLDER
            raise
        if parser.parse_errors:
            logger.info("Stream finished with %d malformed line(s) skipped", parser.parse_errors)
        return accumulator.finish()

    def _commit(self, question: str, answer: str) -> Exchange:
        exchange_id, completed_at_ms = self._ids.next_id()
        exchange = Exchange(
            id=exchange_id,
            question=question,
            answer=answer,
            completed_at_ms=completed_at_ms,
        )
        self._history.append(exchange)
        logger.info("Committed exchange %s (%d chars)", exchange.id, len(answer))
        return exchange

    def _render(self) -> None:
        if self._on_render:
            self._on_render(self.snapshot())
