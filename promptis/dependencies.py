"""Dependency providers for the FastAPI application."""

import httpx
from fastapi import Depends
from starlette.requests import HTTPConnection

from promptis.config import ConfigurationStore, Settings, get_settings
from promptis.services.chat_channel import ChatChannel, ChatServiceChannel
from promptis.services.chat_handler import ChatHandler
from promptis.services.chat_service import ChatService
from promptis.services.prompt_loader import PromptLoader


async def get_http_client(connection: HTTPConnection) -> httpx.AsyncClient:
    """Retrieve the shared AsyncClient from application state."""

    return connection.app.state.http_client  # type: ignore[return-value]


async def get_configuration_store(connection: HTTPConnection) -> ConfigurationStore:
    """Retrieve the process-wide configuration store."""

    return connection.app.state.configuration  # type: ignore[return-value]


async def get_prompt_loader(settings: Settings = Depends(get_settings)) -> PromptLoader:
    return PromptLoader(encoding=settings.prompt_encoding)


async def get_chat_channel(
    connection: HTTPConnection,
    settings: Settings = Depends(get_settings),
) -> ChatChannel | None:
    """Chat channel backed by ChatService, or None when no backend is configured."""

    if not settings.chat_enabled:
        return None
    client = await get_http_client(connection)
    return ChatServiceChannel(ChatService(client=client, settings=settings))


async def get_chat_handler(
    loader: PromptLoader = Depends(get_prompt_loader),
    channel: ChatChannel | None = Depends(get_chat_channel),
) -> ChatHandler:
    """Dependency provider for ChatHandler."""

    return ChatHandler(loader=loader, channel=channel)
