"""Window that renders the current exchange and the history."""

from __future__ import annotations

import presenter
from models import RenderState

try:
    from PySide6.QtCore import Qt, QTimer
    from PySide6.QtWidgets import QLabel, QTextBrowser, QVBoxLayout, QWidget
except ImportError:  # pragma: no cover
    Qt = None  # type: ignore
    QTimer = None  # type: ignore
    QLabel = object  # type: ignore
    QTextBrowser = object  # type: ignore
    QVBoxLayout = object  # type: ignore
    QWidget = object  # type: ignore

_PANEL_STYLE = "color: #e5e7eb; background: #1f2937; border-radius: 8px; padding: 12px;"
_CAPTION_STYLE = "color: #9ca3af; font-size: 12px;"
_ERROR_STYLE = "color: #FF6B6B; font-size: 14px; padding: 8px;"


class AnswerWindow(QWidget):
    def __init__(self) -> None:
        if Qt is None:
            raise RuntimeError("PySide6 is not installed")
        super().__init__()
        self.setWindowTitle("Voice Q&A")
        self.setWindowFlags(self.windowFlags() | Qt.WindowStaysOnTopHint)
        self.resize(640, 720)
        self.setStyleSheet("background: #111827;")

        self._transcription_caption = _caption("当前录音转文字")
        self._transcription = QLabel("")
        self._transcription.setWordWrap(True)
        self._transcription.setStyleSheet(_PANEL_STYLE)

        self._answer_caption = _caption("AI回答")
        self._answer = QTextBrowser()
        self._answer.setStyleSheet(_PANEL_STYLE)

        self._error = QLabel("")
        self._error.setStyleSheet(_ERROR_STYLE)
        self._error.hide()

        self._history_caption = _caption(presenter.HISTORY_TITLE)
        self._history = QTextBrowser()
        self._history.setStyleSheet(_PANEL_STYLE)

        layout = QVBoxLayout()
        for widget in (
            self._error,
            self._transcription_caption,
            self._transcription,
            self._answer_caption,
            self._answer,
            self._history_caption,
            self._history,
        ):
            layout.addWidget(widget)
        self.setLayout(layout)

        self._error_timer: QTimer | None = None
        self._history_size = -1
        self.render(RenderState())

    def render(self, state: RenderState) -> None:
        current = presenter.has_current_exchange(state)
        for widget in (self._transcription_caption, self._transcription, self._answer_caption, self._answer):
            widget.setVisible(current)
        if current:
            self._transcription.setText(presenter.transcription_text(state))
            self._answer.setMarkdown(presenter.answer_markdown(state))
            bar = self._answer.verticalScrollBar()
            bar.setValue(bar.maximum())

        if len(state.history) != self._history_size:
            self._history_size = len(state.history)
            self._history.setMarkdown(presenter.history_markdown(state.history))
            self._history_caption.setVisible(bool(state.history))
            self._history.setVisible(bool(state.history))

    def show_error(self, text: str, hide_after_ms: int = 4000) -> None:
        self._error.setText(f"⚠️ {text}")
        self._error.show()
        if self._error_timer is not None:
            self._error_timer.stop()
        self._error_timer = QTimer()
        self._error_timer.setSingleShot(True)
        self._error_timer.timeout.connect(self._error.hide)
        self._error_timer.start(hide_after_ms)


def _caption(text: str) -> QLabel:
    label = QLabel(text)
    label.setStyleSheet(_CAPTION_STYLE)
    return label
