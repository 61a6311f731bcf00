"""Adapter for OpenAI-compatible chat completions."""

from __future__ import annotations

import logging
from typing import Sequence

import httpx

from promptis.config import Settings
from promptis.exceptions import ChatServiceError
from promptis.models import ChatMessage

logger = logging.getLogger(__name__)


class ChatService:
    """Wrapper around the chat completions endpoint."""

    _path = "/chat/completions"

    def __init__(self, client: httpx.AsyncClient, settings: Settings) -> None:
        self._client = client
        self._settings = settings

    @property
    def endpoint(self) -> str:
        return self._settings.openai_base_url.rstrip("/") + self._path

    async def complete(self, messages: Sequence[ChatMessage]) -> str:
        """Generate a chat completion for the given user turns."""

        payload = {
            "model": self._settings.chat_model,
            "messages": [
                {"role": "system", "content": self._settings.chat_system_prompt},
                *({"role": message.role, "content": message.text} for message in messages),
            ],
        }

        headers = {
            "Authorization": f"Bearer {self._settings.openai_api_key}",
            "Content-Type": "application/json",
        }

        try:
            response = await self._client.post(
                self.endpoint,
                headers=headers,
                json=payload,
                timeout=self._settings.chat_timeout,
            )
            response.raise_for_status()
        except httpx.TimeoutException as exc:
            logger.warning("Chat completion timed out", exc_info=exc)
            raise ChatServiceError("Chat service timed out") from exc
        except httpx.HTTPStatusError as exc:
            logger.error(
                "Chat completion failed",
                extra={
                    "status_code": exc.response.status_code,
                    "response_text": exc.response.text,
                },
            )
            raise ChatServiceError(
                "Chat service returned an error",
                status_code=exc.response.status_code,
            ) from exc
        except httpx.HTTPError as exc:
            logger.exception("Unexpected chat HTTP error")
            raise ChatServiceError("Chat service request failed") from exc

        try:
            data = response.json()
            content = data["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            logger.error("Malformed chat response", extra={"raw_response": response.text})
            raise ChatServiceError("Invalid chat response payload") from exc

        if not content:
            raise ChatServiceError("Chat service returned empty content")

        return content.strip()
