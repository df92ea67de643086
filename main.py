"""Application entrypoint."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
import threading
from concurrent.futures import Future
from concurrent.futures import TimeoutError as FutureTimeout
from typing import Any, Coroutine, Optional

import httpx

from answer_window import AnswerWindow
from chat import ChatClient
from config import ApiConfig, JsonConfigStore, QueryConfigSource
from errors import ERROR_MESSAGES
from history import HistoryStore
from hotkey import HOLD, TOGGLE, RecordHotkey
from models import RecordingState, RenderState
from pipeline import ExchangePipeline
from recorder import SoundDeviceRecorder
from recording_controller import RecordingController
from transcription import TranscriptionClient

try:
    from PySide6.QtCore import QObject, QSize, Signal
    from PySide6.QtGui import QAction, QBrush, QColor, QIcon, QPainter, QPixmap
    from PySide6.QtWidgets import QApplication, QInputDialog, QMenu, QMessageBox, QSystemTrayIcon
except ImportError as exc:  # pragma: no cover
    raise SystemExit(f"PySide6 is required to run the desktop app: {exc}")

logger = logging.getLogger(__name__)


def _create_icon(color: str = "#888888", size: int = 22) -> QIcon:
    """Generate a simple circular tray icon with the given color."""
    pixmap = QPixmap(QSize(size, size))
    pixmap.fill(QColor(0, 0, 0, 0))
    painter = QPainter(pixmap)
    painter.setRenderHint(QPainter.Antialiasing, True)
    painter.setBrush(QBrush(QColor(color)))
    painter.setPen(QColor(color))
    painter.drawEllipse(2, 2, size - 4, size - 4)
    painter.end()
    return QIcon(pixmap)


ICON_IDLE = "#888888"       # grey
ICON_RECORDING = "#FF4444"  # red
ICON_STOPPING = "#3B82F6"   # blue
ICON_ERROR = "#FF8800"      # orange


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="voice-qa", description="Ask questions by voice, get streamed answers")
    parser.add_argument("--query", default="", help="Settings as a query string, e.g. 'base_url=...&api_key=...'")
    parser.add_argument("--base-url", default=None, help="OpenAI-compatible API base URL")
    parser.add_argument("--api-key", default=None, help="API key sent as a bearer token")
    parser.add_argument("--model", default=None, help="Chat model name")
    parser.add_argument("--mode", choices=[TOGGLE, HOLD], default=TOGGLE, help="Hotkey mode")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


class UIBridge(QObject):
    render_signal = Signal(object)
    error_signal = Signal(str)
    state_signal = Signal(str, str)  # from_state, to_state


class CoreLoop:
    """Event loop thread that owns the controller, pipeline and history."""

    def __init__(self) -> None:
        self.loop = asyncio.new_event_loop()
        self._thread = threading.Thread(target=self._run, name="core-loop", daemon=True)

    def start(self) -> None:
        self._thread.start()

    def submit(self, coro: Coroutine[Any, Any, Any]) -> Future:
        future = asyncio.run_coroutine_threadsafe(coro, self.loop)
        future.add_done_callback(_log_failure)
        return future

    def call(self, callback: Any, *args: Any) -> None:
        self.loop.call_soon_threadsafe(callback, *args)

    def stop(self, timeout_s: float = 2.0) -> None:
        self.loop.call_soon_threadsafe(self.loop.stop)
        self._thread.join(timeout=timeout_s)

    def _run(self) -> None:
        asyncio.set_event_loop(self.loop)
        self.loop.run_forever()


def _log_failure(future: Future) -> None:
    if future.cancelled():
        return
    exc = future.exception()
    if exc is not None:
        logger.error("Background task failed", exc_info=exc)


class App:
    def __init__(self, args: argparse.Namespace) -> None:
        self.app = QApplication(sys.argv)
        self.app.setQuitOnLastWindowClosed(False)
        self.args = args
        self.config_store = JsonConfigStore()
        self.query = QueryConfigSource(args.query)
        self.window = AnswerWindow()
        self.ui = UIBridge()
        self.ui.render_signal.connect(self._on_render_ui)
        self.ui.error_signal.connect(self._on_error_ui)
        self.ui.state_signal.connect(self._on_state_change_ui)

        api_config = self._load_api_config()
        self.core = CoreLoop()
        self.http = httpx.AsyncClient()
        self.transcriber = TranscriptionClient(api_config, self.http)
        self.chat = ChatClient(api_config, self.http)
        self.pipeline = ExchangePipeline(
            transcriber=self.transcriber,
            chat=self.chat,
            history=HistoryStore(),
            typing_delay_ms=api_config.typing_delay_ms,
            on_render=self._on_render,
        )
        self.controller = RecordingController(
            recorder=SoundDeviceRecorder(),
            pipeline=self.pipeline,
            on_state_change=self._on_state_change,
            on_error=self._on_error,
        )
        self.hotkey = RecordHotkey(hotkey_name=self.config_store.get_hotkey(), mode=args.mode)

        self.tray = QSystemTrayIcon()
        self.tray.setIcon(_create_icon(ICON_IDLE))
        self.tray.setToolTip("Voice Q&A — Ready")
        self.tray.activated.connect(self._on_tray_activated)
        self._setup_menu()
        self.tray.show()

    def _load_api_config(self) -> ApiConfig:
        overrides = {
            "base_url": self.args.base_url,
            "api_key": self.args.api_key,
            "model": self.args.model,
        }
        return ApiConfig.from_lookup(overrides.get, self.query.get, self.config_store.get)

    def _setup_menu(self) -> None:
        menu = QMenu()

        record_action = QAction("Start / Stop Recording", menu)
        record_action.triggered.connect(self._toggle_recording)
        menu.addAction(record_action)

        window_action = QAction("Show Window", menu)
        window_action.triggered.connect(self.window.show)
        menu.addAction(window_action)

        menu.addSeparator()
        url_action = QAction("Set Base URL", menu)
        url_action.triggered.connect(self._set_base_url)
        menu.addAction(url_action)

        api_action = QAction("Set API Key", menu)
        api_action.triggered.connect(self._set_api_key)
        menu.addAction(api_action)

        hotkey_action = QAction("Set Hotkey", menu)
        hotkey_action.triggered.connect(self._set_hotkey)
        menu.addAction(hotkey_action)

        menu.addSeparator()
        quit_action = QAction("Quit", menu)
        quit_action.triggered.connect(self.quit)
        menu.addAction(quit_action)

        self.tray.setContextMenu(menu)

    def _set_base_url(self) -> None:
        value, ok = QInputDialog.getText(None, "Base URL", "OpenAI-compatible base URL")
        if not ok:
            return
        self.config_store.set_base_url(value)
        self._apply_api_config()
        QMessageBox.information(None, "Saved", "Base URL saved and applied.")

    def _set_api_key(self) -> None:
        value, ok = QInputDialog.getText(None, "API Key", "API Key")
        if not ok:
            return
        self.config_store.set_api_key(value)
        self._apply_api_config()
        QMessageBox.information(None, "Saved", "API Key saved and applied.")

    def _set_hotkey(self) -> None:
        value, ok = QInputDialog.getText(
            None, "Hotkey", "Use pynput key format, e.g. Key.alt_l"
        )
        if not ok or not value:
            return
        self.config_store.set_hotkey(value)
        QMessageBox.information(None, "Saved", "Hotkey saved. Restart app to apply.")

    def _apply_api_config(self) -> None:
        api_config = self._load_api_config()

        def _swap() -> None:
            self.transcriber.config = api_config
            self.chat.config = api_config

        self.core.call(_swap)

    # ------------------------------------------------------------------
    # Callbacks (called on the core loop thread → emit signals for UI thread)
    # ------------------------------------------------------------------

    def _on_render(self, state: RenderState) -> None:
        self.ui.render_signal.emit(state)

    def _on_state_change(self, from_state: RecordingState, to_state: RecordingState) -> None:
        self.ui.state_signal.emit(from_state.value, to_state.value)

    def _on_error(self, code: str, message: str) -> None:
        logger.debug("Error %s: %s", code, message)
        self.ui.error_signal.emit(ERROR_MESSAGES.get(code, message))

    # ------------------------------------------------------------------
    # UI thread handlers (safe for Qt)
    # ------------------------------------------------------------------

    def _on_render_ui(self, state: RenderState) -> None:
        self.window.render(state)

    def _on_error_ui(self, msg: str) -> None:
        self.tray.setIcon(_create_icon(ICON_ERROR))
        self.window.show_error(msg)

    def _on_state_change_ui(self, from_state: str, to_state: str) -> None:
        if to_state in (RecordingState.RECORDING.value, RecordingState.IDLE.value):
            self.hotkey.sync(to_state == RecordingState.RECORDING.value)
        if to_state == RecordingState.RECORDING.value:
            self.tray.setIcon(_create_icon(ICON_RECORDING))
            self.tray.setToolTip("Voice Q&A — Recording...")
            self.window.show()
        elif to_state == RecordingState.STOPPING.value:
            self.tray.setIcon(_create_icon(ICON_STOPPING))
            self.tray.setToolTip("Voice Q&A — Processing...")
        elif to_state == RecordingState.IDLE.value:
            self.tray.setIcon(_create_icon(ICON_IDLE))
            self.tray.setToolTip("Voice Q&A — Ready")

    # ------------------------------------------------------------------
    # Recording triggers (hotkey thread or UI thread)
    # ------------------------------------------------------------------

    def _on_tray_activated(self, reason: QSystemTrayIcon.ActivationReason) -> None:
        if reason == QSystemTrayIcon.ActivationReason.Trigger:
            self._toggle_recording()

    def _on_hotkey_start(self) -> None:
        future = self.core.submit(self.controller.start_recording())
        future.add_done_callback(self._sync_hotkey)

    def _on_hotkey_stop(self) -> None:
        self.core.submit(self.controller.stop_recording())

    def _toggle_recording(self) -> None:
        self.core.submit(self.controller.toggle_recording())

    def _sync_hotkey(self, future: Future) -> None:
        if future.cancelled() or future.exception() is not None or not future.result():
            self.hotkey.sync(False)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def run(self) -> int:
        self.core.start()
        try:
            self.hotkey.start(on_start=self._on_hotkey_start, on_stop=self._on_hotkey_stop)
        except RuntimeError as exc:
            self.window.show_error(f"Hotkey disabled: {exc}")
        self.window.show()
        return self.app.exec()

    def quit(self) -> None:
        self.hotkey.stop()
        self.core.call(self.controller.cancel_recording, "app quit")
        try:
            self.core.submit(self.http.aclose()).result(timeout=2.0)
        except FutureTimeout:
            logger.warning("HTTP client did not close in time")
        self.core.stop()
        self.app.quit()


def main(argv: Optional[list[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app = App(args)
    return app.run()


if __name__ == "__main__":
    raise SystemExit(main())
