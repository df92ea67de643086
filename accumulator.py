"""Folds stream events into the growing answer text."""

from __future__ import annotations

import logging

from models import StreamEvent, StreamEventKind

logger = logging.getLogger(__name__)


class AnswerAccumulator:
    """Append-only answer buffer.

    Every snapshot returned by :meth:`apply` extends the previous one; text is
    appended verbatim, without trimming or deduplication.
    """

    def __init__(self) -> None:
        self._text = ""
        self._closed = False

    @property
    def text(self) -> str:
        return self._text

    @property
    def closed(self) -> bool:
        return self._closed

    def apply(self, event: StreamEvent) -> str:
        if self._closed:
            logger.debug("Ignoring %s event after close", event.kind.value)
            return self._text
        if event.kind == StreamEventKind.DONE:
            self._closed = True
            return self._text
        if event.text:
            self._text += event.text
        return self._text

    def finish(self) -> str:
        """Close without a ``[DONE]`` event, e.g. when the transport ended."""
        self._closed = True
        return self._text
