"""Text shown by the answer window, kept free of Qt so it can be tested."""

from __future__ import annotations

from datetime import datetime
from typing import Iterable

from models import Exchange, RenderState

WAITING_FOR_RECORDING = "等待录音..."
THINKING = "正在思考..."
WAITING_FOR_ANSWER = "等待回答..."
HISTORY_TITLE = "对话记录"
QUESTION_LABEL = "问题"
ANSWER_LABEL = "回答"


def has_current_exchange(state: RenderState) -> bool:
    return bool(state.transcription or state.answer or state.loading)


def transcription_text(state: RenderState) -> str:
    return state.transcription or WAITING_FOR_RECORDING


def answer_markdown(state: RenderState) -> str:
    if state.loading:
        return THINKING
    return state.answer or WAITING_FOR_ANSWER


def format_time(timestamp_ms: int) -> str:
    """Month/day and 24h time in local time, e.g. ``10/18 09:05``."""
    moment = datetime.fromtimestamp(timestamp_ms / 1000)
    return f"{moment.month}/{moment.day} {moment:%H:%M}"


def history_markdown(history: Iterable[Exchange]) -> str:
    """Newest exchange first, one question/answer block per entry."""
    blocks = []
    for exchange in reversed(tuple(history)):
        blocks.append(
            f"#### {QUESTION_LABEL} · {format_time(exchange.completed_at_ms)}\n\n"
            f"{exchange.question}\n\n"
            f"#### {ANSWER_LABEL}\n\n"
            f"{exchange.answer}"
        )
    return "\n\n---\n\n".join(blocks)
