"""Asynchronous loading of prompt file contents."""

from __future__ import annotations

import logging

import aiofiles

from promptis.models import FileDescriptor, PromptContent

logger = logging.getLogger(__name__)


class PromptLoader:
    """Reads prompt files without blocking the event loop."""

    def __init__(self, encoding: str = "utf-8") -> None:
        self._encoding = encoding

    async def load(self, descriptor: FileDescriptor) -> PromptContent:
        """Load a file's text; failures are captured on the result."""

        path = descriptor.full_path
        try:
            async with aiofiles.open(path, encoding=self._encoding) as handle:
                text = await handle.read()
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning(
                "Failed to load prompt file",
                extra={"path": str(path), "error": str(exc)},
            )
            return PromptContent(source_file=descriptor, load_error=_describe(descriptor, exc))

        return PromptContent(source_file=descriptor, text=text)


def _describe(descriptor: FileDescriptor, exc: Exception) -> str:
    if isinstance(exc, UnicodeDecodeError):
        return f"cannot decode {descriptor.name} as {exc.encoding}: {exc.reason}"
    if isinstance(exc, OSError) and exc.strerror:
        return f"{exc.strerror}: {exc.filename}"
    return f"{descriptor.name}: {exc}"
