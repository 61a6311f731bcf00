"""Command endpoints: run the prompt files, select the prompt directory."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel

from promptis.config import ConfigurationStore
from promptis.dependencies import get_chat_channel, get_configuration_store, get_prompt_loader
from promptis.exceptions import ConfigurationError
from promptis.models import BatchReport, Notification
from promptis.notifications import NotificationLog
from promptis.services.batch_executor import BatchExecutor
from promptis.services.chat_channel import ChatChannel
from promptis.services.prompt_loader import PromptLoader

router = APIRouter(prefix="/commands", tags=["commands"])


class SelectDirectoryIn(BaseModel):
    path: str


class PromptDirectoryOut(BaseModel):
    prompt_directory: str
    notifications: list[Notification] = []


class RunPromptFilesOut(BaseModel):
    report: BatchReport
    notifications: list[Notification]


@router.post("/run-prompt-files")
async def run_prompt_files(
    store: Annotated[ConfigurationStore, Depends(get_configuration_store)],
    loader: Annotated[PromptLoader, Depends(get_prompt_loader)],
    channel: Annotated[ChatChannel | None, Depends(get_chat_channel)],
) -> RunPromptFilesOut:
    notifier = NotificationLog()
    executor = BatchExecutor(notifier=notifier, loader=loader, channel=channel)
    report = await executor.run(store.prompt_directory)
    return RunPromptFilesOut(report=report, notifications=notifier.notifications)


@router.post("/select-prompt-directory")
async def select_prompt_directory(
    payload: SelectDirectoryIn,
    store: Annotated[ConfigurationStore, Depends(get_configuration_store)],
) -> PromptDirectoryOut:
    try:
        selected = store.update_prompt_directory(payload.path)
    except ConfigurationError as exc:
        raise HTTPException(
            status_code=exc.status_code or status.HTTP_400_BAD_REQUEST,
            detail=exc.message,
        ) from exc

    notifier = NotificationLog()
    notifier.info(f"Selected folder: {selected}")
    return PromptDirectoryOut(prompt_directory=selected, notifications=notifier.notifications)


@router.get("/prompt-directory")
async def prompt_directory(
    store: Annotated[ConfigurationStore, Depends(get_configuration_store)],
) -> PromptDirectoryOut:
    return PromptDirectoryOut(prompt_directory=store.prompt_directory)
