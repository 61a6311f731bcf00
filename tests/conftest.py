"""Shared pytest fixtures."""

from __future__ import annotations

import asyncio
import os
import sys
from pathlib import Path
from typing import Sequence

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("ENVIRONMENT", "test")
os.environ["OPENAI_API_KEY"] = ""
os.environ["PROMPT_DIRECTORY"] = ""

from promptis.config import get_settings  # noqa: E402
from promptis.main import create_app  # noqa: E402
from promptis.models import ChatMessage, Completion  # noqa: E402


@pytest.fixture(autouse=True)
def configure_env(monkeypatch: pytest.MonkeyPatch):
    """Run every test without a chat backend or a configured directory."""

    monkeypatch.setenv("OPENAI_API_KEY", "")
    monkeypatch.setenv("PROMPT_DIRECTORY", "")
    monkeypatch.setenv("ENVIRONMENT", "test")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def app():
    return create_app()


@pytest.fixture
def prompts_dir(tmp_path: Path) -> Path:
    """The a.txt / b.txt / sub/c.txt tree."""

    root = tmp_path / "prompts"
    (root / "sub").mkdir(parents=True)
    (root / "a.txt").write_text("hello", encoding="utf-8")
    (root / "b.txt").write_text("world", encoding="utf-8")
    (root / "sub" / "c.txt").write_text("nested", encoding="utf-8")
    return root


class FakeChannel:
    """Chat channel that echoes messages and fails those containing ``fail``."""

    def __init__(self) -> None:
        self.calls: list[list[str]] = []

    async def submit(
        self,
        messages: Sequence[ChatMessage],
        cancel_event: asyncio.Event | None = None,
    ) -> list[Completion]:
        self.calls.append([message.text for message in messages])
        return [
            Completion(message=message, error="boom")
            if "fail" in message.text
            else Completion(message=message, text=f"reply to {message.text}")
            for message in messages
        ]


@pytest.fixture
def fake_channel() -> FakeChannel:
    return FakeChannel()
