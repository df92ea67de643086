"""Client for an OpenAI-compatible ``/v1/audio/transcriptions`` endpoint."""

from __future__ import annotations

import logging

import httpx

from config import ApiConfig
from errors import ASR_PROTOCOL_ERROR, CONFIG_MISSING, NETWORK_ERROR, TranscriptionError, code_for_status
from models import AudioClip

logger = logging.getLogger(__name__)

TRANSCRIPTIONS_PATH = "/v1/audio/transcriptions"


class TranscriptionClient:
    def __init__(self, config: ApiConfig, http_client: httpx.AsyncClient) -> None:
        self.config = config
        self._http = http_client

    async def transcribe(self, clip: AudioClip) -> str:
        """Upload one clip and return the transcript text."""
        config = self.config
        if not config.base_url or not config.api_key:
            raise TranscriptionError("No base URL or API key configured", code=CONFIG_MISSING)

        logger.info("Transcribing %d bytes of %s", len(clip.data), clip.content_type)
        try:
            response = await self._http.post(
                config.endpoint(TRANSCRIPTIONS_PATH),
                headers={"Authorization": f"Bearer {config.api_key}"},
                files={"file": (clip.filename, clip.data, clip.content_type)},
                timeout=config.timeout_s,
            )
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise TranscriptionError(f"transcription request failed: {exc}", code=NETWORK_ERROR) from exc

        if not response.is_success:
            raise TranscriptionError(
                f"transcription returned HTTP {response.status_code}",
                code=code_for_status(response.status_code),
            )

        try:
            data = response.json()
        except ValueError as exc:
            raise TranscriptionError("transcription response is not JSON", code=ASR_PROTOCOL_ERROR) from exc

        text = data.get("text") if isinstance(data, dict) else None
        if not isinstance(text, str):
            raise TranscriptionError("transcription response has no text field", code=ASR_PROTOCOL_ERROR)
        logger.info("Transcript: %d chars", len(text))
        return text
