"""Custom exceptions shared across services."""

from dataclasses import dataclass


@dataclass(eq=False)
class ServiceError(Exception):
    """Base exception for service layer failures."""

    message: str
    code: str = "service_error"
    status_code: int | None = None

    def __str__(self) -> str:  # pragma: no cover - trivial
        return self.message


@dataclass(eq=False)
class ChatServiceError(ServiceError):
    """Raised when ChatService fails to return a response."""

    code: str = "chat_error"


@dataclass(eq=False)
class ConfigurationError(ServiceError):
    """Raised when a configuration value is rejected."""

    code: str = "configuration_error"
