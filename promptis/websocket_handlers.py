"""WebSocket surface of the chat participant."""

from __future__ import annotations

import asyncio
import json
import logging
from collections import deque
from contextlib import suppress
from typing import Annotated

from fastapi import Depends, WebSocket, WebSocketDisconnect, status
from pydantic import ValidationError
from starlette.websockets import WebSocketState

from promptis.config import Settings, get_settings
from promptis.dependencies import get_chat_handler
from promptis.models import ChatRequest, ChatResult, ChatTurn, ErrorResponse
from promptis.services.chat_handler import BufferedResponseStream, ChatHandler

logger = logging.getLogger(__name__)


async def chat_endpoint(
    websocket: WebSocket,
    participant_id: str,
    chat_handler: Annotated[ChatHandler, Depends(get_chat_handler)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> None:
    """Chat workflow: request frame → handler → markdown frames → result frame.

    Frames are read by a separate task for the whole connection, so a client
    that goes away mid-turn cancels the turn in progress.
    """

    if participant_id != settings.participant_id:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        logger.info("Unknown chat participant", extra={"participant_id": participant_id})
        return

    await websocket.accept()
    should_close = True
    history: deque[ChatTurn] = deque(maxlen=settings.chat_history_turns)
    cancel_event = asyncio.Event()
    incoming: asyncio.Queue[str | None] = asyncio.Queue()
    reader = asyncio.create_task(_read_frames(websocket, incoming, cancel_event))
    logger.info(
        "WebSocket connection accepted",
        extra={"client": _client_repr(websocket), "participant_id": participant_id},
    )

    try:
        while True:
            try:
                message = await asyncio.wait_for(
                    incoming.get(),
                    timeout=settings.ws_inactivity_timeout,
                )
            except asyncio.TimeoutError:
                logger.info(
                    "WebSocket inactive; closing",
                    extra={"client": _client_repr(websocket)},
                )
                await websocket.close(code=status.WS_1000_NORMAL_CLOSURE)
                should_close = False
                break

            if message is None:
                should_close = False
                break

            try:
                request = ChatRequest.model_validate_json(message)
            except ValidationError:
                await _send_error(
                    websocket,
                    ErrorResponse(error="invalid_payload", detail="Invalid chat request payload."),
                )
                continue

            stream = BufferedResponseStream()
            result = await _run_turn(chat_handler, request, list(history), stream, cancel_event)
            if result is None:
                logger.info(
                    "Chat turn cancelled by disconnect",
                    extra={"client": _client_repr(websocket)},
                )
                should_close = False
                break
            history.append(ChatTurn(request=request, result=result))

            for fragment in stream.fragments:
                await websocket.send_text(json.dumps({"type": "markdown", "value": fragment}))
            await websocket.send_text(
                json.dumps({"type": "result", "result": result.model_dump(mode="json")})
            )
            logger.info(
                "Chat turn completed",
                extra={
                    "client": _client_repr(websocket),
                    "failed": result.error_details is not None,
                },
            )
    finally:
        cancel_event.set()
        reader.cancel()
        await asyncio.gather(reader, return_exceptions=True)
        if should_close and websocket.application_state == WebSocketState.CONNECTED:
            with suppress(RuntimeError, WebSocketDisconnect):
                await websocket.close()
        logger.info(
            "WebSocket connection closed",
            extra={"client": _client_repr(websocket)},
        )


async def _read_frames(
    websocket: WebSocket,
    incoming: asyncio.Queue[str | None],
    disconnected: asyncio.Event,
) -> None:
    """Queue text frames until the client goes away, then queue ``None``."""

    try:
        while True:
            incoming.put_nowait(await websocket.receive_text())
    except WebSocketDisconnect:
        logger.info(
            "WebSocket client disconnected",
            extra={"client": _client_repr(websocket)},
        )
    finally:
        disconnected.set()
        incoming.put_nowait(None)


async def _run_turn(
    chat_handler: ChatHandler,
    request: ChatRequest,
    history: list[ChatTurn],
    stream: BufferedResponseStream,
    cancel_event: asyncio.Event,
) -> ChatResult | None:
    """Run one turn; ``None`` when the connection ended before it finished."""

    turn = asyncio.create_task(chat_handler.handle(request, history, stream, cancel_event))
    cancelled = asyncio.create_task(cancel_event.wait())
    try:
        await asyncio.wait({turn, cancelled}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        cancelled.cancel()
        if not turn.done():
            turn.cancel()
            await asyncio.gather(turn, return_exceptions=True)

    if turn.cancelled() or cancel_event.is_set():
        return None
    return turn.result()


async def _send_error(websocket: WebSocket, error: ErrorResponse) -> None:
    """Send a structured error frame."""

    await websocket.send_text(error.model_dump_json())


def _client_repr(websocket: WebSocket) -> str:
    """Render the remote client for logging purposes."""

    client = websocket.client
    if client is None:
        return "unknown"
    return f"{client.host}:{client.port}"
