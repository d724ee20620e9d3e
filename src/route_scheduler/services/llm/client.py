"""HTTP client for an OpenAI-compatible chat completions endpoint."""

from __future__ import annotations

import logging
from typing import Protocol, Sequence

import httpx

from ...config import settings
from ...errors import ExternalServiceError
from ..external import request_with_retries

logger = logging.getLogger(__name__)


class ChatCompletionService(Protocol):
    def complete(self, messages: Sequence[dict], *, max_tokens: int, temperature: float) -> str:
        ...


class ChatCompletionClient:
    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        model: str | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        backoff_seconds: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.api_key = api_key or settings.openai_api_key
        if not self.api_key:
            raise ValueError("Chat completion API key is not configured.")
        self.base_url = (base_url or settings.openai_base_url).rstrip("/")
        self.model = model or settings.openai_model
        self.timeout = timeout if timeout is not None else settings.http_timeout_seconds
        self.max_retries = max_retries if max_retries is not None else settings.external_max_retries
        self.backoff_seconds = backoff_seconds if backoff_seconds is not None else settings.external_backoff_seconds
        self._transport = transport

    def _get_client(self) -> httpx.Client:
        return httpx.Client(
            timeout=httpx.Timeout(self.timeout, connect=10.0),
            transport=self._transport,
        )

    def complete(self, messages: Sequence[dict], *, max_tokens: int, temperature: float) -> str:
        """Return the text of the first completion choice."""
        payload = {
            "model": self.model,
            "messages": list(messages),
            "max_tokens": max_tokens,
            "temperature": temperature,
        }
        headers = {"Authorization": f"Bearer {self.api_key}"}
        url = f"{self.base_url}/chat/completions"

        client = self._get_client()
        try:
            data = request_with_retries(
                client,
                "POST",
                url,
                service="Chat completion",
                max_retries=self.max_retries,
                backoff_seconds=self.backoff_seconds,
                json=payload,
                headers=headers,
            )
        finally:
            client.close()

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as exc:
            raise ExternalServiceError("Chat completion response malformed", str(exc)) from exc
        if not content:
            raise ExternalServiceError("Chat completion returned no content")
        logger.debug("Chat completion: %s", content[:200])
        return content


def get_chat_client() -> ChatCompletionService:
    try:
        return ChatCompletionClient()
    except ValueError as exc:
        raise ExternalServiceError("Chat completion service is not configured", str(exc)) from exc
