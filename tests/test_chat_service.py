import asyncio
import json

import httpx
import pytest

from promptis.config import Settings
from promptis.exceptions import ChatServiceError
from promptis.models import ChatMessage
from promptis.services.chat_channel import ChatChannel, ChatServiceChannel
from promptis.services.chat_service import ChatService


@pytest.fixture
def settings() -> Settings:
    return Settings(OPENAI_API_KEY="test-key", OPENAI_BASE_URL="https://llm.test/v1/")


def _reply(content: str) -> httpx.Response:
    return httpx.Response(200, json={"choices": [{"message": {"content": content}}]})


@pytest.mark.asyncio
async def test_chat_service_success(settings: Settings) -> None:
    async def handler(request: httpx.Request) -> httpx.Response:
        payload = json.loads(request.content.decode())
        assert str(request.url) == "https://llm.test/v1/chat/completions"
        assert request.headers["Authorization"] == "Bearer test-key"
        assert payload["model"] == settings.chat_model
        assert payload["messages"][0]["role"] == "system"
        assert payload["messages"][1] == {"role": "user", "content": "hello"}
        return _reply(" hi there\n")

    transport = httpx.MockTransport(handler)

    async with httpx.AsyncClient(transport=transport) as client:
        service = ChatService(client, settings)
        result = await service.complete([ChatMessage(text="hello")])

    assert result == "hi there"


@pytest.mark.asyncio
async def test_chat_service_timeout(settings: Settings) -> None:
    async def handler(_: httpx.Request) -> httpx.Response:
        raise httpx.TimeoutException("timeout")

    transport = httpx.MockTransport(handler)

    async with httpx.AsyncClient(transport=transport) as client:
        service = ChatService(client, settings)
        with pytest.raises(ChatServiceError) as exc:
            await service.complete([ChatMessage(text="hello")])

    assert "timed out" in str(exc.value)
    assert exc.value.code == "chat_error"


@pytest.mark.asyncio
async def test_chat_service_http_error(settings: Settings) -> None:
    async def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(429, json={"error": {"message": "slow down"}})

    transport = httpx.MockTransport(handler)

    async with httpx.AsyncClient(transport=transport) as client:
        service = ChatService(client, settings)
        with pytest.raises(ChatServiceError) as exc:
            await service.complete([ChatMessage(text="hello")])

    assert exc.value.status_code == 429


@pytest.mark.asyncio
async def test_chat_service_bad_payload(settings: Settings) -> None:
    async def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"unexpected": "structure"})

    transport = httpx.MockTransport(handler)

    async with httpx.AsyncClient(transport=transport) as client:
        service = ChatService(client, settings)
        with pytest.raises(ChatServiceError):
            await service.complete([ChatMessage(text="hello")])


@pytest.mark.asyncio
async def test_channel_isolates_failures_and_keeps_order(settings: Settings) -> None:
    async def handler(request: httpx.Request) -> httpx.Response:
        content = json.loads(request.content.decode())["messages"][-1]["content"]
        if content == "second":
            return httpx.Response(500, text="oops")
        return _reply(content.upper())

    transport = httpx.MockTransport(handler)
    messages = [ChatMessage(text=t) for t in ("first", "second", "third")]

    async with httpx.AsyncClient(transport=transport) as client:
        channel = ChatServiceChannel(ChatService(client, settings))
        completions = await channel.submit(messages)

    assert isinstance(channel, ChatChannel)
    assert [c.message.text for c in completions] == ["first", "second", "third"]
    assert [c.text for c in completions] == ["FIRST", None, "THIRD"]
    assert completions[1].error == "Chat service returned an error"


@pytest.mark.asyncio
async def test_channel_skips_requests_after_cancellation(settings: Settings) -> None:
    cancel_event = asyncio.Event()
    cancel_event.set()

    async def handler(_: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        channel = ChatServiceChannel(ChatService(client, settings))
        completions = await channel.submit([ChatMessage(text="x")], cancel_event)

    assert completions[0].error == "Cancelled"
