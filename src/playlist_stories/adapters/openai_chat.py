"""Chat-completion client for OpenAI-compatible endpoints."""

from __future__ import annotations

import logging

import httpx
from pydantic import BaseModel, ConfigDict, ValidationError

from playlist_stories.domain.errors import UpstreamCallError

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.openai.com/v1"


class _ChatMessage(BaseModel):
    model_config = ConfigDict(extra="ignore")

    role: str
    content: str | None = None


class _ChatChoice(BaseModel):
    model_config = ConfigDict(extra="ignore")

    index: int = 0
    message: _ChatMessage


class ChatCompletionResponse(BaseModel):
    """Subset of the chat completion payload the pipeline reads."""

    model_config = ConfigDict(extra="ignore")

    model: str | None = None
    choices: list[_ChatChoice]


def _response_body(response: httpx.Response) -> object:
    try:
        return response.json()
    except ValueError:
        return response.text


class OpenAIChatClient:
    """``TextGenerator`` backed by ``POST {base_url}/chat/completions``."""

    def __init__(
        self,
        *,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout_seconds: float = 120.0,
        http_client: httpx.Client | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._client = http_client or httpx.Client(timeout=timeout_seconds)
        self._headers = {"Authorization": f"Bearer {api_key}"}

    def close(self) -> None:
        self._client.close()

    def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        model: str,
        max_tokens: int | None = None,
        temperature: float | None = None,
    ) -> str:
        messages: list[dict[str, str]] = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        if user_prompt:
            messages.append({"role": "user", "content": user_prompt})
        payload: dict[str, object] = {"model": model, "messages": messages}
        if max_tokens is not None:
            payload["max_tokens"] = max_tokens
        if temperature is not None:
            payload["temperature"] = temperature

        try:
            response = self._client.post(
                f"{self._base_url}/chat/completions",
                json=payload,
                headers=self._headers,
            )
        except httpx.HTTPError as exc:
            logger.error("openai.transport_error model=%s error=%s", model, exc)
            raise UpstreamCallError(
                f"chat completion request failed: {exc}", service="openai"
            ) from exc

        if response.is_error:
            body = _response_body(response)
            logger.error(
                "openai.http_error model=%s status=%s body=%s", model, response.status_code, body
            )
            raise UpstreamCallError(
                f"chat completion returned HTTP {response.status_code}",
                service="openai",
                status_code=response.status_code,
                response_body=body,
            )

        try:
            parsed = ChatCompletionResponse.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise UpstreamCallError(
                "chat completion response was not understood",
                service="openai",
                status_code=response.status_code,
                response_body=_response_body(response),
            ) from exc
        if not parsed.choices:
            raise UpstreamCallError(
                "chat completion returned no choices",
                service="openai",
                status_code=response.status_code,
                response_body=_response_body(response),
            )
        return (parsed.choices[0].message.content or "").strip()
