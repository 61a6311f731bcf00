"""Submission of ordered chat messages to a language model."""

from __future__ import annotations

import asyncio
import logging
from typing import Protocol, Sequence, runtime_checkable

from promptis.exceptions import ChatServiceError
from promptis.models import ChatMessage, Completion
from promptis.services.chat_service import ChatService

logger = logging.getLogger(__name__)


@runtime_checkable
class ChatChannel(Protocol):
    """Port the batch executor and chat handler submit messages through.

    Implementations return exactly one completion per message, in input
    order, and record a failed message on its completion instead of raising.
    """

    async def submit(
        self,
        messages: Sequence[ChatMessage],
        cancel_event: asyncio.Event | None = None,
    ) -> list[Completion]:
        ...


class ChatServiceChannel:
    """Sends each message as its own single-turn completion request."""

    def __init__(self, chat_service: ChatService) -> None:
        self._chat_service = chat_service

    async def submit(
        self,
        messages: Sequence[ChatMessage],
        cancel_event: asyncio.Event | None = None,
    ) -> list[Completion]:
        completions: list[Completion] = []
        for index, message in enumerate(messages):
            if cancel_event is not None and cancel_event.is_set():
                completions.append(Completion(message=message, error="Cancelled"))
                continue

            try:
                text = await self._chat_service.complete([message])
            except ChatServiceError as exc:
                logger.warning(
                    "Chat submission failed",
                    extra={"index": index, "error": exc.message},
                )
                completions.append(Completion(message=message, error=exc.message))
                continue

            completions.append(Completion(message=message, text=text))
        return completions
