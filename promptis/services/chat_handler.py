"""Request handler for the chat participant."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Protocol, Sequence

from promptis.models import (
    ChatErrorDetails,
    ChatMessage,
    ChatReference,
    ChatRequest,
    ChatResult,
    ChatTurn,
    FileDescriptor,
)
from promptis.services.chat_channel import ChatChannel
from promptis.services.prompt_loader import PromptLoader

logger = logging.getLogger(__name__)


class ChatResponseStream(Protocol):
    def markdown(self, value: str) -> None:
        ...


class BufferedResponseStream:
    """Response stream that keeps every fragment in memory."""

    def __init__(self) -> None:
        self.fragments: list[str] = []

    def markdown(self, value: str) -> None:
        self.fragments.append(value)


class ChatHandler:
    """Handles one chat turn at a time.

    The handler holds no per-conversation state; prior turns are passed in
    by the caller. It never raises to the caller: failures come back as a
    result carrying ``error_details``.
    """

    def __init__(self, loader: PromptLoader, channel: ChatChannel | None = None) -> None:
        self._loader = loader
        self._channel = channel

    async def handle(
        self,
        request: ChatRequest,
        history: Sequence[ChatTurn],
        stream: ChatResponseStream,
        cancel_event: asyncio.Event | None = None,
    ) -> ChatResult:
        if _cancelled(cancel_event):
            return ChatResult()

        try:
            return await self._respond(request, history, stream, cancel_event)
        except Exception as exc:
            logger.exception("Chat request failed", extra={"command": request.command})
            return ChatResult(
                error_details=ChatErrorDetails(message=str(exc) or type(exc).__name__)
            )

    async def _respond(
        self,
        request: ChatRequest,
        history: Sequence[ChatTurn],
        stream: ChatResponseStream,
        cancel_event: asyncio.Event | None,
    ) -> ChatResult:
        references = json.dumps(
            [reference.model_dump(mode="json") for reference in request.references],
            ensure_ascii=False,
        )
        echo = f"Received message: [{request.command}], [{request.prompt}], [{references}]"
        logger.debug(echo, extra={"history_turns": len(history)})
        stream.markdown(echo)

        if self._channel is None:
            return ChatResult()

        resolved: list[tuple[ChatReference, str]] = []
        for reference in request.references:
            if _cancelled(cancel_event):
                return ChatResult()

            path = reference.file_path()
            if path is None:
                continue

            content = await self._loader.load(FileDescriptor.from_path(path))
            if not content.ok:
                stream.markdown(f"Could not read {reference.name or path}: {content.load_error}")
                continue
            resolved.append((reference, content.text or ""))

        text = inline_references(request.prompt, resolved)
        if not text.strip() or _cancelled(cancel_event):
            return ChatResult()

        completions = await self._channel.submit([ChatMessage(text=text)], cancel_event)
        completion = completions[0]
        if not completion.ok:
            return ChatResult(
                error_details=ChatErrorDetails(
                    message=completion.error or "Chat request failed", code="chat_error"
                )
            )

        stream.markdown(completion.text or "")
        return ChatResult()


def inline_references(prompt: str, resolved: Sequence[tuple[ChatReference, str]]) -> str:
    """Replace each reference's span of ``prompt`` with its loaded content.

    References without a usable range are appended after the prompt.
    """

    spanned = sorted(
        (item for item in resolved if _valid_range(item[0], prompt)),
        key=lambda item: item[0].range[0],  # type: ignore[index]
        reverse=True,
    )
    trailing = [item for item in resolved if not _valid_range(item[0], prompt)]

    text = prompt
    previous_start = len(prompt)
    for reference, content in spanned:
        start, end = reference.range  # type: ignore[misc]
        if end > previous_start:
            # overlaps a later span
            trailing.append((reference, content))
            continue
        text = text[:start] + content + text[end:]
        previous_start = start

    for _, content in trailing:
        text = f"{text}\n\n{content}" if text else content
    return text


def _valid_range(reference: ChatReference, prompt: str) -> bool:
    if reference.range is None:
        return False
    start, end = reference.range
    return 0 <= start <= end <= len(prompt)


def _cancelled(cancel_event: asyncio.Event | None) -> bool:
    return cancel_event is not None and cancel_event.is_set()
