"""Roomdispatch error hierarchy."""

from __future__ import annotations

from enum import StrEnum
from typing import Any


class ErrorCategory(StrEnum):
    """Category of error for classification and handling."""

    INPUT = "input"
    TRANSPORT = "transport"
    ORCHESTRATION = "orchestration"
    TIMEOUT = "timeout"
    RECURSION = "recursion"
    CONFIGURATION = "configuration"
    INTERNAL = "internal"


class DispatchError(Exception):
    """Base error for all dispatch exceptions."""

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory = ErrorCategory.INTERNAL,
        retryable: bool = False,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.category = category
        self.retryable = retryable
        self.details: dict[str, Any] = details or {}

    def __repr__(self) -> str:
        return f"{type(self).__name__}({str(self)!r}, category={self.category!r})"


class TransportError(DispatchError):
    """A terminal IPC call failed."""

    def __init__(
        self,
        message: str,
        *,
        transport: str | None = None,
        room: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, category=ErrorCategory.TRANSPORT, **kwargs)
        self.transport = transport
        self.room = room


class OrchestratorError(DispatchError):
    """The external orchestrator rejected or failed a call."""

    def __init__(self, message: str, *, operation: str | None = None, **kwargs: Any) -> None:
        super().__init__(message, category=ErrorCategory.ORCHESTRATION, retryable=True, **kwargs)
        self.operation = operation


class SpawnError(DispatchError):
    """A fallback worker process could not be started."""

    def __init__(self, message: str, *, binary: str | None = None) -> None:
        super().__init__(message, category=ErrorCategory.INTERNAL)
        self.binary = binary


class RecursionBlockedError(DispatchError):
    """Dispatch was requested from inside a spawned worker."""

    def __init__(self, message: str = "Blocked: recursive dispatch detected") -> None:
        super().__init__(message, category=ErrorCategory.RECURSION)


class ConfigurationError(DispatchError):
    """Invalid configuration (room table, defaults)."""

    def __init__(self, message: str) -> None:
        super().__init__(message, category=ErrorCategory.CONFIGURATION)


def truncate(text: str, limit: int = 200) -> str:
    """Shorten diagnostic text for user-facing messages."""
    text = text.strip()
    if len(text) <= limit:
        return text
    return text[: limit - 3] + "..."
