"""Append-only record of completed exchanges."""

from __future__ import annotations

import time
from typing import Callable, Iterator, Optional

from models import Exchange


def now_ms() -> int:
    return int(time.time() * 1000)


class ExchangeIdGenerator:
    """Issues ids from the creation time in milliseconds.

    Two exchanges completed within the same millisecond (or after a clock step
    backwards) get the previous id plus one, so ids stay unique and increasing.
    """

    def __init__(self, clock: Callable[[], int] = now_ms) -> None:
        self._clock = clock
        self._last = 0

    def next_id(self) -> tuple[str, int]:
        """Return ``(id, timestamp_ms)`` for a new exchange."""
        stamp = self._clock()
        value = max(stamp, self._last + 1)
        self._last = value
        return str(value), stamp


class HistoryStore:
    """Exchanges kept oldest-first, in the order they were appended.

    Entries are never updated or removed; :meth:`list` returns an immutable
    copy so callers cannot reorder the store.
    """

    def __init__(self) -> None:
        self._items: list[Exchange] = []

    def append(self, exchange: Exchange) -> None:
        self._items.append(exchange)

    def list(self) -> tuple[Exchange, ...]:
        return tuple(self._items)

    def latest(self) -> Optional[Exchange]:
        return self._items[-1] if self._items else None

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Exchange]:
        return iter(tuple(self._items))
