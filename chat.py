"""Streaming client for an OpenAI-compatible ``/v1/chat/completions`` endpoint."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import httpx

from config import ApiConfig
from errors import CONFIG_MISSING, NETWORK_ERROR, ChatRequestError, StreamTransportError, code_for_status

logger = logging.getLogger(__name__)

CHAT_COMPLETIONS_PATH = "/v1/chat/completions"


def build_chat_payload(config: ApiConfig, question: str) -> dict:
    return {
        "model": config.model,
        "messages": [
            {"role": "system", "content": config.system_prompt},
            {"role": "user", "content": f"{config.prompt}\n\n{question}"},
        ],
        "stream": True,
    }


class ChatClient:
    def __init__(self, config: ApiConfig, http_client: httpx.AsyncClient) -> None:
        self.config = config
        self._http = http_client

    @asynccontextmanager
    async def open_stream(self, question: str) -> AsyncIterator[AsyncIterator[bytes]]:
        """Open the streamed request and yield its raw body chunks.

        Raises ChatRequestError if the stream cannot be opened; read failures
        while iterating surface as StreamTransportError.
        """
        config = self.config
        if not config.base_url or not config.api_key:
            raise ChatRequestError("No base URL or API key configured", code=CONFIG_MISSING)

        try:
            request = self._http.build_request(
                "POST",
                config.endpoint(CHAT_COMPLETIONS_PATH),
                headers={"Authorization": f"Bearer {config.api_key}"},
                json=build_chat_payload(config, question),
                timeout=config.timeout_s,
            )
            response = await self._http.send(request, stream=True)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise ChatRequestError(f"chat request failed: {exc}", code=NETWORK_ERROR) from exc

        try:
            if not response.is_success:
                raise ChatRequestError(
                    f"chat returned HTTP {response.status_code}",
                    code=code_for_status(response.status_code),
                )
            logger.info("Chat stream opened (model=%s)", config.model)
            yield _iter_chunks(response)
        finally:
            await response.aclose()


async def _iter_chunks(response: httpx.Response) -> AsyncIterator[bytes]:
    try:
        async for chunk in response.aiter_bytes():
            yield chunk
    except httpx.HTTPError as exc:
        raise StreamTransportError(f"stream read failed: {exc}") from exc
