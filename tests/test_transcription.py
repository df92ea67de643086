"""Tests for TranscriptionClient."""

from __future__ import annotations

from typing import Callable

import httpx
import pytest

from config import ApiConfig
from errors import ASR_PROTOCOL_ERROR, AUTH_FAILED, CONFIG_MISSING, HTTP_ERROR, NETWORK_ERROR, TranscriptionError
from models import AudioClip
from transcription import TranscriptionClient

CONFIG = ApiConfig(base_url="https://api.test", api_key="sk-test")
CLIP = AudioClip(data=b"RIFF....WAVEfmt ", content_type="audio/wav")


def _client(handler: Callable[[httpx.Request], httpx.Response], config: ApiConfig = CONFIG) -> TranscriptionClient:
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return TranscriptionClient(config, http)


@pytest.mark.asyncio
async def test_uploads_clip_as_multipart_file() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"text": "今天天气怎么样"})

    text = await _client(handler).transcribe(CLIP)

    assert text == "今天天气怎么样"
    request = seen[0]
    assert request.method == "POST"
    assert str(request.url) == "https://api.test/v1/audio/transcriptions"
    assert request.headers["Authorization"] == "Bearer sk-test"
    assert request.headers["Content-Type"].startswith("multipart/form-data")
    assert b'name="file"; filename="audio.wav"' in request.content
    assert CLIP.data in request.content


@pytest.mark.asyncio
async def test_empty_transcript_is_returned() -> None:
    client = _client(lambda request: httpx.Response(200, json={"text": ""}))
    assert await client.transcribe(CLIP) == ""


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("status", "code"),
    [(401, AUTH_FAILED), (403, AUTH_FAILED), (429, HTTP_ERROR), (500, HTTP_ERROR)],
)
async def test_http_errors_map_to_codes(status: int, code: str) -> None:
    client = _client(lambda request: httpx.Response(status, json={"error": "nope"}))

    with pytest.raises(TranscriptionError) as excinfo:
        await client.transcribe(CLIP)

    assert excinfo.value.code == code
    assert str(status) in str(excinfo.value)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(200, content=b"<html>oops</html>"),
        httpx.Response(200, json={"result": "no text field"}),
        httpx.Response(200, json={"text": None}),
        httpx.Response(200, json=["text"]),
    ],
)
async def test_unusable_body_is_protocol_error(response: httpx.Response) -> None:
    client = _client(lambda request: response)

    with pytest.raises(TranscriptionError) as excinfo:
        await client.transcribe(CLIP)

    assert excinfo.value.code == ASR_PROTOCOL_ERROR


@pytest.mark.asyncio
async def test_network_error_maps_correctly() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(TranscriptionError) as excinfo:
        await _client(handler).transcribe(CLIP)

    assert excinfo.value.code == NETWORK_ERROR


@pytest.mark.asyncio
@pytest.mark.parametrize("config", [ApiConfig(api_key="sk-test"), ApiConfig(base_url="https://api.test")])
async def test_missing_config_fails_before_request(config: ApiConfig) -> None:
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json={"text": "x"})

    with pytest.raises(TranscriptionError) as excinfo:
        await _client(handler, config).transcribe(CLIP)

    assert excinfo.value.code == CONFIG_MISSING
    assert calls == []
