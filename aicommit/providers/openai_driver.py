from __future__ import annotations

import logging
from typing import Any

import httpx

from aicommit.config import Config
from aicommit.exceptions import (
    ApiError,
    ConfigError,
    GenerationError,
    MalformedResponse,
)
from aicommit.providers.base import (
    BaseDriver,
    ChatCompletionRequest,
    ChatCompletionResponse,
    ChatError,
)

logger = logging.getLogger(__name__)


def _completion_text(data: Any) -> str:
    """Return ``choices[0].message.content`` or an empty string."""
    if not isinstance(data, dict):
        return ""
    choices = data.get("choices")
    if not isinstance(choices, list) or not choices:
        return ""
    choice0 = choices[0]
    if not isinstance(choice0, dict):
        return ""
    message = choice0.get("message")
    if not isinstance(message, dict):
        return ""
    content = message.get("content")
    if isinstance(content, str):
        return content.strip()
    # Some compatible servers return a list of text fragments
    if isinstance(content, list):
        fragments: list[str] = []
        for part in content:
            if isinstance(part, dict):
                txt = part.get("text") or ""
                fragments.append(str(txt))
            elif isinstance(part, str):
                fragments.append(part)
        return "".join(fragments).strip()
    return ""


def _error_text(data: Any) -> str:
    """Return ``error.message`` or an empty string."""
    if not isinstance(data, dict):
        return ""
    error = data.get("error")
    if isinstance(error, dict):
        message = error.get("message")
        if isinstance(message, str):
            return message.strip()
    return ""


def read_chat_response(data: Any) -> ChatCompletionResponse:
    """Decode a chat-completions body into a ChatCompletionResponse.

    Unknown or missing fields decode to an empty content and no error.
    """
    error_text = _error_text(data)
    return ChatCompletionResponse(
        content=_completion_text(data),
        error=ChatError(error_text) if error_text else None,
    )


def parse_chat_response(data: Any, status_code: int | None = None) -> str:
    """Map a decoded response body to completion text.

    Raises ApiError when the body carries an error message instead of text
    and MalformedResponse when it carries neither.
    """
    response = read_chat_response(data)
    if response.content:
        return response.content
    if response.error is not None:
        raise ApiError(response.error.message, status_code=status_code)
    raise MalformedResponse(
        "Response contained neither completion text nor an error message"
        + (f" (HTTP {status_code})" if status_code else "")
    )


class OpenAIDriver(BaseDriver):
    """Driver for OpenAI and OpenAI-compatible chat-completions endpoints."""

    def __init__(self, config: Config, debug: bool = False) -> None:
        super().__init__(config, debug)
        self._api_key = config.resolve_api_key()
        if not self._api_key:
            raise ConfigError(
                f"Environment variable '{config.api_key_env}' is not set or empty."
            )
        self._request_timeout = config.request_timeout

    @property
    def url(self) -> str:
        return self.config.llm_endpoint.rstrip("/") + "/chat/completions"

    def complete(self, request: ChatCompletionRequest) -> str:
        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }
        if self.debug:
            logger.debug(
                "POST %s model=%s max_tokens=%s payload_len=%s",
                self.url,
                request.model,
                request.max_tokens,
                sum(len(m.content) for m in request.messages),
            )
        try:
            response = httpx.post(
                self.url,
                headers=headers,
                json=request.to_payload(),
                timeout=self._request_timeout,
            )
        except httpx.TimeoutException as e:
            raise GenerationError(
                f"Request timed out after {self._request_timeout:g}s"
            ) from e
        except httpx.HTTPError as e:
            raise GenerationError(f"Network error calling {self.url}: {e}") from e

        status = getattr(response, "status_code", None)
        try:
            data = response.json()
        except ValueError as e:
            raise MalformedResponse(
                f"Response was not valid JSON (HTTP {status})"
            ) from e
        if self.debug:
            logger.debug("Response status=%s", status)
        return parse_chat_response(data, status_code=status)
