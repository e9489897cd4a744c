"""Structured error types for agent-friendly error reporting."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Standard error codes for stashfmt operations."""

    # Caller errors
    INVALID_ARGUMENT = "INVALID_ARGUMENT"
    INVALID_PAYLOAD = "INVALID_PAYLOAD"

    # Flow errors
    OPERATION_CANCELLED = "OPERATION_CANCELLED"

    # Anything raised by the API client or diff source
    SOURCE_FAILURE = "SOURCE_FAILURE"

    INTERNAL_ERROR = "INTERNAL_ERROR"


# Suggestions for each error code
ERROR_SUGGESTIONS = {
    ErrorCode.INVALID_ARGUMENT: "Use positive values for --max-lines and --max-files",
    ErrorCode.INVALID_PAYLOAD: (
        "Pass the raw JSON body returned by the Bitbucket Server REST API"
    ),
    ErrorCode.OPERATION_CANCELLED: "Retry the request; no partial output was produced",
    ErrorCode.SOURCE_FAILURE: "Check the API client error details and retry the request",
    ErrorCode.INTERNAL_ERROR: "Please report this issue with the input that triggered it",
}


@dataclass
class ErrorResponse:
    """Structured error response for agent consumption."""

    error: str  # Human-readable error message
    code: ErrorCode  # Machine-readable error code
    suggestion: str  # Actionable suggestion to resolve
    context: dict[str, Any] = field(default_factory=dict)  # Additional debug info

    @classmethod
    def create(
        cls,
        code: ErrorCode,
        error: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> ErrorResponse:
        """Create an error response with automatic suggestion lookup."""
        return cls(
            error=error or code.value.replace("_", " ").title(),
            code=code,
            suggestion=ERROR_SUGGESTIONS.get(code, "Check the error details"),
            context=context or {},
        )

    @classmethod
    def from_exception(cls, exc: BaseException) -> ErrorResponse:
        """Build a response from any exception.

        Our own errors keep their code and context. Anything else came from
        the API client or the diff source and is reported as a source failure
        with its message untouched.
        """
        if isinstance(exc, StashFormatError):
            return exc.to_response()
        return cls.create(
            code=ErrorCode.SOURCE_FAILURE,
            error=str(exc) or type(exc).__name__,
            context={"type": type(exc).__name__},
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "error": self.error,
            "code": self.code.value,
            "suggestion": self.suggestion,
            "context": self.context,
        }

    def format_xml(self) -> str:
        """Format as XML for agent output."""
        context_attrs = " ".join(f'{k}="{v}"' for k, v in self.context.items())
        context_str = f" {context_attrs}" if context_attrs else ""
        return (
            f'<error code="{self.code.value}"{context_str}>\n'
            f"  <message>{self.error}</message>\n"
            f"  <suggestion>{self.suggestion}</suggestion>\n"
            f"</error>"
        )

    def format_compact(self) -> str:
        """Format as compact text."""
        lines = [
            f"Error [{self.code.value}]: {self.error}",
            f"Suggestion: {self.suggestion}",
        ]
        if self.context:
            lines.append(f"Context: {self.context}")
        return "\n".join(lines)


class StashFormatError(Exception):
    """Base exception for stashfmt with structured error support."""

    def __init__(
        self,
        code: ErrorCode,
        message: str | None = None,
        context: dict[str, Any] | None = None,
    ):
        self.code = code
        self.context = context or {}
        self.message = message or code.value.replace("_", " ").title()
        super().__init__(self.message)

    def to_response(self) -> ErrorResponse:
        """Convert exception to ErrorResponse."""
        return ErrorResponse.create(
            code=self.code,
            error=self.message,
            context=self.context,
        )


class InvalidArgumentError(StashFormatError, ValueError):
    """Raised when a limit or other argument is out of range."""

    def __init__(self, name: str, value: Any, message: str | None = None):
        super().__init__(
            code=ErrorCode.INVALID_ARGUMENT,
            message=message or f"{name} must be positive, got {value!r}",
            context={"argument": name, "value": value},
        )


class OperationCancelledError(StashFormatError):
    """Raised when cancellation is observed while rendering."""

    def __init__(self, processed_files: int = 0):
        super().__init__(
            code=ErrorCode.OPERATION_CANCELLED,
            message="Rendering was cancelled before completion",
            context={"processed_files": processed_files},
        )


class InvalidPayloadError(StashFormatError):
    """Raised when JSON input does not have the expected API shape."""

    def __init__(self, kind: str, message: str | None = None):
        super().__init__(
            code=ErrorCode.INVALID_PAYLOAD,
            message=message or f"Payload is not a valid {kind} response",
            context={"kind": kind},
        )
