"""Pydantic models shared across application layers."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, computed_field

FILE_REFERENCE_ID = "vscode.file"


class FileDescriptor(BaseModel):
    """A prompt file discovered by the directory scanner."""

    model_config = ConfigDict(frozen=True)

    parent_directory: Path
    name: str

    @computed_field  # type: ignore[prop-decorator]
    @property
    def full_path(self) -> Path:
        return self.parent_directory / self.name

    @classmethod
    def from_path(cls, path: Path) -> FileDescriptor:
        path = path.absolute()
        return cls(parent_directory=path.parent, name=path.name)


class PromptContent(BaseModel):
    """Text loaded from a prompt file, or the reason it could not be loaded."""

    source_file: FileDescriptor
    text: str | None = None
    load_error: str | None = None

    @property
    def ok(self) -> bool:
        return self.load_error is None


class ChatMessage(BaseModel):
    """A single user turn sent to the chat channel."""

    role: Literal["user"] = "user"
    text: str


class Completion(BaseModel):
    """The chat channel's answer to one message."""

    message: ChatMessage
    text: str | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class ScanResult(BaseModel):
    """Outcome of a directory scan; ``error`` is set when the scan failed."""

    root: Path
    files: list[FileDescriptor] = Field(default_factory=list)
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class FileOutcome(BaseModel):
    """Everything the batch executor learned about one prompt file."""

    file: FileDescriptor
    content: str | None = None
    load_error: str | None = None
    completion: str | None = None
    completion_error: str | None = None


class BatchReport(BaseModel):
    """Summary of one batch run."""

    directory: str
    files: list[FileOutcome] = Field(default_factory=list)
    cancelled: bool = False
    error: str | None = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def succeeded(self) -> int:
        return sum(1 for outcome in self.files if outcome.load_error is None)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def failed(self) -> int:
        return sum(1 for outcome in self.files if outcome.load_error is not None)


class Notification(BaseModel):
    """A user-visible message raised by a command."""

    level: Literal["info", "error"]
    message: str


class ChatReference(BaseModel):
    """A typed attachment on a chat request."""

    id: str
    name: str = ""
    range: tuple[int, int] | None = None
    value: Any = None

    def file_path(self) -> Path | None:
        """Return the filesystem path of a file reference, if it is one."""

        if self.id != FILE_REFERENCE_ID:
            return None
        if isinstance(self.value, str):
            return Path(self.value)
        if isinstance(self.value, dict) and self.value.get("scheme", "file") == "file":
            path = self.value.get("path") or self.value.get("fsPath")
            if path:
                return Path(path)
        return None


class ChatRequest(BaseModel):
    """Incoming chat turn."""

    command: str | None = None
    prompt: str = ""
    references: list[ChatReference] = Field(default_factory=list)


class ChatErrorDetails(BaseModel):
    message: str
    code: str | None = None


class ChatResult(BaseModel):
    """Outcome of a chat turn; empty on success."""

    error_details: ChatErrorDetails | None = None
    metadata: dict[str, Any] | None = None


class ChatTurn(BaseModel):
    request: ChatRequest
    result: ChatResult


class ErrorResponse(BaseModel):
    """Error frame returned to WebSocket clients."""

    error: str
    detail: str | None = None
