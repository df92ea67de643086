"""API settings and the key/value sources they are read from."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, TypeVar
from urllib.parse import parse_qs

DEFAULT_MODEL = "gpt-4o"
DEFAULT_SYSTEM_PROMPT = "你是一个专业的人工智能助手，擅长用清晰简洁的方式解答各种问题。"
DEFAULT_PROMPT = (
    "请用简洁明了的中文回答这个问题，回答需包含清晰的逻辑结构和必要的细节，"
    "同时保持口语化。如果问题涉及步骤指导，请分点列出。"
)
DEFAULT_HOTKEY = "Key.alt_l"

Lookup = Callable[[str], Optional[str]]
N = TypeVar("N", int, float)

logger = logging.getLogger(__name__)


def _parse_number(kind: Callable[[str], N], key: str, raw: str, default: N) -> N:
    if not raw:
        return default
    try:
        return kind(raw)
    except ValueError:
        logger.warning("Ignoring invalid %s=%r, using %s", key, raw, default)
        return default


@dataclass(frozen=True)
class ApiConfig:
    base_url: str = ""
    api_key: str = ""
    model: str = DEFAULT_MODEL
    system_prompt: str = DEFAULT_SYSTEM_PROMPT
    prompt: str = DEFAULT_PROMPT
    timeout_s: float = 60.0
    typing_delay_ms: int = 10

    @classmethod
    def from_lookup(cls, *lookups: Lookup) -> "ApiConfig":
        """Build from one or more lookups; the first non-empty value wins."""

        def pick(key: str, default: str) -> str:
            for lookup in lookups:
                value = lookup(key)
                if value:
                    return value
            return default

        defaults = cls()
        return cls(
            base_url=pick("base_url", defaults.base_url).rstrip("/"),
            api_key=pick("api_key", defaults.api_key),
            model=pick("model", defaults.model),
            system_prompt=pick("system_prompt", defaults.system_prompt),
            prompt=pick("prompt", defaults.prompt),
            timeout_s=_parse_number(float, "timeout_s", pick("timeout_s", ""), defaults.timeout_s),
            typing_delay_ms=_parse_number(
                int, "typing_delay_ms", pick("typing_delay_ms", ""), defaults.typing_delay_ms
            ),
        )

    def endpoint(self, path: str) -> str:
        return f"{self.base_url}{path}"


class QueryConfigSource:
    """Read-only lookup over a URL query string such as ``base_url=...&api_key=...``."""

    def __init__(self, query: str = "") -> None:
        self._values = {k: v[0] for k, v in parse_qs(query.lstrip("?")).items() if v}

    def get(self, key: str) -> Optional[str]:
        return self._values.get(key)


class JsonConfigStore:
    def __init__(self, path: Path | None = None) -> None:
        self._path = path or Path.home() / ".config" / "voice_qa" / "config.json"
        self._path.parent.mkdir(parents=True, exist_ok=True)

    def get(self, key: str) -> Optional[str]:
        value = self._read_all().get(key)
        return None if value is None else str(value)

    def get_api_key(self) -> str:
        return self.get("api_key") or ""

    def set_api_key(self, key: str) -> None:
        self._set("api_key", key)

    def get_base_url(self) -> str:
        return self.get("base_url") or ""

    def set_base_url(self, url: str) -> None:
        self._set("base_url", url.strip().rstrip("/"))

    def get_hotkey(self) -> str:
        return self.get("hotkey") or DEFAULT_HOTKEY

    def set_hotkey(self, hotkey: str) -> None:
        self._set("hotkey", hotkey)

    def _set(self, key: str, value: str) -> None:
        data = self._read_all()
        data[key] = value
        self._write_all(data)

    def _read_all(self) -> dict:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError):
            return {}
        return data if isinstance(data, dict) else {}

    def _write_all(self, data: dict) -> None:
        self._path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
