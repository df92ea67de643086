from __future__ import annotations

import pytest

from accumulator import AnswerAccumulator
from models import StreamEvent


@pytest.mark.parametrize(
    "deltas",
    [
        ["今天", "晴天"],
        ["a", " ", "b", "b", "  "],
        ["# Title\n", "\n", "- item\n"],
        [],
    ],
)
def test_snapshots_are_prefix_extending(deltas: list[str]) -> None:
    acc = AnswerAccumulator()
    previous = ""
    for text in deltas:
        snapshot = acc.apply(StreamEvent.delta(text))
        assert snapshot.startswith(previous)
        assert len(snapshot) == len(previous) + len(text)
        previous = snapshot

    final = acc.apply(StreamEvent.done())
    assert final == previous == "".join(deltas)
    assert acc.closed is True


def test_text_is_appended_verbatim() -> None:
    acc = AnswerAccumulator()
    acc.apply(StreamEvent.delta(" a "))
    acc.apply(StreamEvent.delta(" a "))
    assert acc.text == " a  a "


def test_events_after_done_are_ignored() -> None:
    acc = AnswerAccumulator()
    acc.apply(StreamEvent.delta("x"))
    acc.apply(StreamEvent.done())

    assert acc.apply(StreamEvent.delta("y")) == "x"
    assert acc.text == "x"


def test_finish_closes_with_partial_text() -> None:
    acc = AnswerAccumulator()
    acc.apply(StreamEvent.delta("部分"))

    assert acc.finish() == "部分"
    assert acc.closed is True


def test_starts_empty() -> None:
    acc = AnswerAccumulator()
    assert acc.text == ""
    assert acc.closed is False
    assert acc.finish() == ""
