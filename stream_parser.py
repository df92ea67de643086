"""Incremental parser for chat-completion server-sent event streams.

Chunks arrive in network order and are not aligned to line boundaries, so
the parser keeps both a UTF-8 decoder state (a multi-byte character may be
split between chunks) and the trailing partial line.
"""

from __future__ import annotations

import codecs
import json
import logging
from typing import AsyncIterator, Callable, Optional

from errors import ParseError
from models import StreamEvent

logger = logging.getLogger(__name__)

DATA_PREFIX = "data: "
DONE_SENTINEL = "[DONE]"

ParseErrorCallback = Callable[[ParseError], None]


class StreamFrameParser:
    def __init__(self, on_parse_error: Optional[ParseErrorCallback] = None) -> None:
        self._on_parse_error = on_parse_error
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._buffer = ""
        self._done = False
        self.parse_errors = 0

    @property
    def done(self) -> bool:
        return self._done

    def feed(self, chunk: bytes) -> list[StreamEvent]:
        """Consume one raw chunk and return the events of its complete lines."""
        if self._done:
            return []
        self._buffer += self._decoder.decode(chunk)
        if "\n" not in self._buffer:
            return []
        *lines, self._buffer = self._buffer.split("\n")
        return self._process_lines(lines)

    def flush(self) -> list[StreamEvent]:
        """Process whatever is left once the stream has ended."""
        if self._done:
            return []
        tail = self._buffer + self._decoder.decode(b"", final=True)
        self._buffer = ""
        return self._process_lines([tail])

    async def iter_events(self, chunks: AsyncIterator[bytes]) -> AsyncIterator[StreamEvent]:
        """Yield events lazily; stop pulling chunks once ``[DONE]`` is seen."""
        async for chunk in chunks:
            for event in self.feed(chunk):
                yield event
            if self._done:
                return
        for event in self.flush():
            yield event

    def _process_lines(self, lines: list[str]) -> list[StreamEvent]:
        events: list[StreamEvent] = []
        for raw in lines:
            event = self._parse_line(raw.strip())
            if event is None:
                continue
            events.append(event)
            if self._done:
                # Anything after the sentinel is ignored.
                self._buffer = ""
                break
        return events

    def _parse_line(self, line: str) -> Optional[StreamEvent]:
        if not line or not line.startswith(DATA_PREFIX):
            return None
        payload = line[len(DATA_PREFIX):]
        if payload == DONE_SENTINEL:
            self._done = True
            return StreamEvent.done()
        try:
            text = _extract_delta_text(payload)
        except ParseError as exc:
            self._report(exc)
            return None
        if not text:
            return None
        return StreamEvent.delta(text)

    def _report(self, exc: ParseError) -> None:
        self.parse_errors += 1
        logger.warning("Skipping malformed stream line: %s (%r)", exc, exc.line[:200])
        if self._on_parse_error:
            self._on_parse_error(exc)


def _extract_delta_text(payload: str) -> str:
    """Pull ``choices[0].delta.content`` from one event payload."""
    try:
        data = json.loads(payload)
    except json.JSONDecodeError as exc:
        raise ParseError(f"invalid JSON: {exc.msg}", line=payload) from exc
    if not isinstance(data, dict):
        raise ParseError("payload is not an object", line=payload)
    choices = data.get("choices")
    if not isinstance(choices, list):
        raise ParseError("payload has no choices list", line=payload)
    if not choices or not isinstance(choices[0], dict):
        return ""
    delta = choices[0].get("delta")
    if not isinstance(delta, dict):
        return ""
    content = delta.get("content")
    if not isinstance(content, str):
        return ""
    return content
