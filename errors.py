"""Shared error codes, user-facing messages and exception types."""

from __future__ import annotations

PERMISSION_DENIED = "PERMISSION_DENIED"
NETWORK_ERROR = "NETWORK_ERROR"
AUTH_FAILED = "AUTH_FAILED"
CONFIG_MISSING = "CONFIG_MISSING"
HTTP_ERROR = "HTTP_ERROR"
ASR_PROTOCOL_ERROR = "ASR_PROTOCOL_ERROR"
STREAM_PARSE_ERROR = "STREAM_PARSE_ERROR"
STREAM_INTERRUPTED = "STREAM_INTERRUPTED"

ERROR_MESSAGES = {
    PERMISSION_DENIED: "Microphone is unavailable or permission was denied.",
    NETWORK_ERROR: "Network failed, please retry.",
    AUTH_FAILED: "API key is invalid.",
    CONFIG_MISSING: "Base URL or API key is not configured.",
    HTTP_ERROR: "The service returned an error.",
    ASR_PROTOCOL_ERROR: "Transcription response format is invalid.",
    STREAM_PARSE_ERROR: "Skipped a malformed answer chunk.",
    STREAM_INTERRUPTED: "Answer stream was interrupted.",
}

REQUEST_FAILED_PLACEHOLDER = "Error processing your request. Please try again."


def code_for_status(status_code: int) -> str:
    if status_code in (401, 403):
        return AUTH_FAILED
    return HTTP_ERROR


class VoiceQAError(Exception):
    default_code = HTTP_ERROR

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.code = code or self.default_code


class DeviceError(VoiceQAError):
    default_code = PERMISSION_DENIED


class TranscriptionError(VoiceQAError):
    default_code = ASR_PROTOCOL_ERROR


class ChatRequestError(VoiceQAError):
    default_code = HTTP_ERROR


class ParseError(VoiceQAError):
    default_code = STREAM_PARSE_ERROR

    def __init__(self, message: str, line: str = "") -> None:
        super().__init__(message)
        self.line = line


class StreamTransportError(VoiceQAError):
    default_code = STREAM_INTERRUPTED
