"""Global record hotkey based on pynput."""

from __future__ import annotations

import threading
from typing import Callable, Optional

from config import DEFAULT_HOTKEY

try:
    from pynput import keyboard
except Exception:  # pragma: no cover - no backend on this platform
    keyboard = None  # type: ignore

TOGGLE = "toggle"
HOLD = "hold"


class RecordHotkey:
    """Calls ``on_start``/``on_stop`` from the pynput listener thread.

    In ``toggle`` mode each press alternates between start and stop, like a
    record button. In ``hold`` mode recording lasts while the key is held.
    """

    def __init__(self, hotkey_name: str = DEFAULT_HOTKEY, mode: str = TOGGLE) -> None:
        if mode not in (TOGGLE, HOLD):
            raise ValueError(f"unknown hotkey mode: {mode}")
        self._hotkey_name = hotkey_name
        self._mode = mode
        self._listener: Optional[object] = None
        self._pressed = False
        self._recording = False
        self._lock = threading.Lock()

    def start(self, on_start: Callable[[], None], on_stop: Callable[[], None]) -> None:
        if keyboard is None:
            raise RuntimeError("pynput is not installed")

        def _on_press(key: object) -> None:
            if str(key) != self._hotkey_name:
                return
            with self._lock:
                if self._pressed:
                    return  # auto-repeat
                self._pressed = True
                if self._mode == TOGGLE:
                    self._recording = not self._recording
                    starting = self._recording
                else:
                    starting = True
            (on_start if starting else on_stop)()

        def _on_release(key: object) -> None:
            if str(key) != self._hotkey_name:
                return
            with self._lock:
                if not self._pressed:
                    return
                self._pressed = False
                if self._mode != HOLD:
                    return
            on_stop()

        self._listener = keyboard.Listener(on_press=_on_press, on_release=_on_release)
        self._listener.start()

    def sync(self, recording: bool) -> None:
        """Realign toggle state when recording ended or failed elsewhere."""
        with self._lock:
            self._recording = recording

    def stop(self) -> None:
        listener = self._listener
        if listener is not None:
            listener.stop()
            self._listener = None
