from __future__ import annotations

import types

import pytest

import hotkey
from hotkey import HOLD, TOGGLE, RecordHotkey


class _FakeListener:
    def __init__(self, on_press, on_release) -> None:  # noqa: ANN001
        self.on_press = on_press
        self.on_release = on_release
        self.started = False
        self.stopped = False

    def start(self) -> None:
        self.started = True

    def stop(self) -> None:
        self.stopped = True


@pytest.fixture
def listeners(monkeypatch) -> list[_FakeListener]:  # noqa: ANN001
    created: list[_FakeListener] = []

    def _make(on_press, on_release) -> _FakeListener:  # noqa: ANN001
        listener = _FakeListener(on_press, on_release)
        created.append(listener)
        return listener

    monkeypatch.setattr(hotkey, "keyboard", types.SimpleNamespace(Listener=_make))
    return created


def _start(key: RecordHotkey, calls: list[str]) -> None:
    key.start(on_start=lambda: calls.append("start"), on_stop=lambda: calls.append("stop"))


def test_toggle_mode_alternates(listeners: list[_FakeListener]) -> None:
    calls: list[str] = []
    key = RecordHotkey("Key.alt_l", mode=TOGGLE)
    _start(key, calls)
    listener = listeners[0]

    listener.on_press("Key.alt_l")
    listener.on_release("Key.alt_l")
    listener.on_press("Key.alt_l")
    listener.on_release("Key.alt_l")

    assert listener.started is True
    assert calls == ["start", "stop"]


def test_auto_repeat_is_ignored(listeners: list[_FakeListener]) -> None:
    calls: list[str] = []
    _start(RecordHotkey("Key.alt_l"), calls)
    listener = listeners[0]

    listener.on_press("Key.alt_l")
    listener.on_press("Key.alt_l")
    listener.on_press("Key.alt_l")

    assert calls == ["start"]


def test_hold_mode_records_while_pressed(listeners: list[_FakeListener]) -> None:
    calls: list[str] = []
    _start(RecordHotkey("Key.alt_l", mode=HOLD), calls)
    listener = listeners[0]

    listener.on_press("Key.alt_l")
    listener.on_release("Key.alt_l")

    assert calls == ["start", "stop"]


def test_other_keys_are_ignored(listeners: list[_FakeListener]) -> None:
    calls: list[str] = []
    _start(RecordHotkey("Key.alt_l"), calls)

    listeners[0].on_press("Key.shift")
    listeners[0].on_release("Key.shift")

    assert calls == []


def test_sync_after_failed_start(listeners: list[_FakeListener]) -> None:
    calls: list[str] = []
    key = RecordHotkey("Key.alt_l")
    _start(key, calls)
    listener = listeners[0]

    listener.on_press("Key.alt_l")
    listener.on_release("Key.alt_l")
    key.sync(False)
    listener.on_press("Key.alt_l")

    assert calls == ["start", "start"]


def test_stop_stops_listener(listeners: list[_FakeListener]) -> None:
    key = RecordHotkey()
    _start(key, [])
    key.stop()
    key.stop()

    assert listeners[0].stopped is True


def test_unknown_mode_rejected() -> None:
    with pytest.raises(ValueError):
        RecordHotkey(mode="double-tap")


def test_start_raises_without_pynput(monkeypatch) -> None:  # noqa: ANN001
    monkeypatch.setattr(hotkey, "keyboard", None)

    with pytest.raises(RuntimeError, match="pynput is not installed"):
        RecordHotkey().start(on_start=lambda: None, on_stop=lambda: None)
