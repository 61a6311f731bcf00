"""Sequential execution of the prompt files in a directory."""

from __future__ import annotations

import asyncio
import logging

from promptis.models import BatchReport, ChatMessage, FileOutcome
from promptis.notifications import Notifier
from promptis.services.chat_channel import ChatChannel
from promptis.services.prompt_loader import PromptLoader
from promptis.services.scanner import scan

logger = logging.getLogger(__name__)


class BatchExecutor:
    """Scans a prompt directory and processes its files one at a time.

    Each file is loaded, and its outcome reported, before the next file is
    touched. A file that cannot be loaded is reported and skipped; it never
    ends the run. When a chat channel is given, the loaded prompts are
    submitted through it once loading has finished.
    """

    def __init__(
        self,
        notifier: Notifier,
        loader: PromptLoader,
        channel: ChatChannel | None = None,
    ) -> None:
        self._notifier = notifier
        self._loader = loader
        self._channel = channel

    async def run(
        self,
        prompt_directory: str,
        cancel_event: asyncio.Event | None = None,
    ) -> BatchReport:
        report = BatchReport(directory=prompt_directory)

        if not prompt_directory.strip():
            report.error = "Prompt directory is not set"
            self._notifier.error(report.error)
            return report

        scan_result = await asyncio.to_thread(scan, prompt_directory)
        if not scan_result.ok:
            report.error = f"Failed to read directory: {scan_result.error}"
            self._notifier.error(report.error)
            return report
        if not scan_result.files:
            report.error = f"No files found in {prompt_directory}"
            self._notifier.error(report.error)
            return report

        self._notifier.info(f"Found {len(scan_result.files)} files in {prompt_directory}")

        messages: list[ChatMessage] = []
        submitted: list[FileOutcome] = []
        for descriptor in scan_result.files:
            if cancel_event is not None and cancel_event.is_set():
                report.cancelled = True
                self._notifier.info("Batch run cancelled")
                break

            self._notifier.info(f"Executing {descriptor.name}")
            content = await self._loader.load(descriptor)
            outcome = FileOutcome(file=descriptor)
            report.files.append(outcome)

            if not content.ok:
                outcome.load_error = content.load_error
                self._notifier.error(f"Failed to load {descriptor.name}: {content.load_error}")
                continue

            outcome.content = content.text
            messages.append(ChatMessage(text=content.text or ""))
            submitted.append(outcome)
            self._notifier.info(f"Content of {descriptor.name}: {content.text}")

        if self._channel is not None and messages and not report.cancelled:
            await self._submit(messages, submitted, cancel_event)

        logger.info(
            "Batch run finished",
            extra={
                "directory": prompt_directory,
                "succeeded": report.succeeded,
                "failed": report.failed,
                "cancelled": report.cancelled,
            },
        )
        return report

    async def _submit(
        self,
        messages: list[ChatMessage],
        outcomes: list[FileOutcome],
        cancel_event: asyncio.Event | None,
    ) -> None:
        assert self._channel is not None
        completions = await self._channel.submit(messages, cancel_event)
        for outcome, completion in zip(outcomes, completions, strict=True):
            name = outcome.file.name
            if completion.ok:
                outcome.completion = completion.text
                self._notifier.info(f"Response for {name}: {completion.text}")
            else:
                outcome.completion_error = completion.error
                self._notifier.error(f"Chat request failed for {name}: {completion.error}")
