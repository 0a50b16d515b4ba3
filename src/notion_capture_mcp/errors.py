"""Structured error handling — exception taxonomy, classification, and tool error model."""

from __future__ import annotations

from enum import Enum

import httpx
from pydantic import BaseModel


class CaptureError(Exception):
    """Base class for every error raised by the capture pipeline."""


class ConfigurationError(CaptureError):
    """Missing or unusable credentials; raised before any network call."""


class ValidationError(CaptureError):
    """Rejected user input (unsupported file type, missing form field)."""


class TransportError(CaptureError):
    """Network failure or non-success response from a remote backend."""

    def __init__(self, message: str, *, status: int | None = None, backend: str = "") -> None:
        super().__init__(message)
        self.status = status
        self.backend = backend


class ParseError(CaptureError):
    """The AI response could not be turned into a JSON object."""


class NoJsonFoundError(ParseError):
    """No ``{...}`` span exists in the response, usually a refusal."""

    def __init__(self, message: str = "No JSON object found in the AI response.") -> None:
        super().__init__(message)


class InvalidJsonError(ParseError):
    """A ``{...}`` span was found but is not valid JSON."""

    def __init__(
        self,
        message: str = "The AI returned an invalid response. Please check the content and try again.",
    ) -> None:
        super().__init__(message)


class ErrorCategory(str, Enum):
    """Categories of errors for diagnostics."""

    CONFIGURATION = "CONFIGURATION"
    VALIDATION = "VALIDATION"
    NETWORK_ERROR = "NETWORK_ERROR"
    API_ERROR = "API_ERROR"
    API_PERMISSION_DENIED = "API_PERMISSION_DENIED"
    API_QUOTA_EXCEEDED = "API_QUOTA_EXCEEDED"
    API_NOT_FOUND = "API_NOT_FOUND"
    AI_NO_JSON = "AI_NO_JSON"
    AI_INVALID_JSON = "AI_INVALID_JSON"
    FILE_NOT_FOUND = "FILE_NOT_FOUND"
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    UNKNOWN = "UNKNOWN"


class ToolError(BaseModel):
    """Structured error returned from any tool."""

    error: str
    category: str
    hint: str
    retryable: bool = False


def _categorize_transport(error: TransportError) -> tuple[ErrorCategory, str]:
    if error.status is None:
        return (
            ErrorCategory.NETWORK_ERROR,
            "Network failure — check connectivity and resubmit",
        )
    if error.status in (401, 403):
        return (
            ErrorCategory.API_PERMISSION_DENIED,
            "Credential rejected or integration lacks access to the database",
        )
    if error.status == 404:
        return (
            ErrorCategory.API_NOT_FOUND,
            "Resource not found — check the database ID and that it is shared with the integration",
        )
    if error.status == 429:
        return (
            ErrorCategory.API_QUOTA_EXCEEDED,
            "Rate limit hit — wait before resubmitting",
        )
    return (ErrorCategory.API_ERROR, f"{error.backend or 'Backend'} returned status {error.status}")


def categorize_error(error: Exception) -> tuple[ErrorCategory, str]:
    """Map an exception to an ErrorCategory + human-readable hint."""
    if isinstance(error, ConfigurationError):
        return (
            ErrorCategory.CONFIGURATION,
            "Set the missing API key (env var or connection settings) and retry",
        )
    if isinstance(error, (ValidationError, IndexError)):
        return (ErrorCategory.VALIDATION, "Fix the input and resubmit")
    if isinstance(error, NoJsonFoundError):
        return (
            ErrorCategory.AI_NO_JSON,
            "The model did not answer with JSON — it may have refused; rephrase the content",
        )
    if isinstance(error, InvalidJsonError):
        return (
            ErrorCategory.AI_INVALID_JSON,
            "The model produced malformed JSON — resubmit or try another model",
        )
    if isinstance(error, TransportError):
        return _categorize_transport(error)
    if isinstance(error, (httpx.TimeoutException, httpx.NetworkError, TimeoutError)):
        return (
            ErrorCategory.NETWORK_ERROR,
            "Request timed out or connection failed — try again",
        )
    if isinstance(error, FileNotFoundError):
        return (ErrorCategory.FILE_NOT_FOUND, "File not found — check the path")
    if isinstance(error, KeyError) and "session" in str(error).lower():
        return (ErrorCategory.SESSION_NOT_FOUND, "Unknown or expired session — call capture_start")
    if isinstance(error, KeyError) and "connection" in str(error).lower():
        return (
            ErrorCategory.CONFIGURATION,
            "List connections with notion_connections or add one with notion_connect",
        )

    return (ErrorCategory.UNKNOWN, str(error))


def make_tool_error(error: Exception) -> dict:
    """Create a serialisable ToolError dict from an exception."""
    cat, hint = categorize_error(error)
    message = error.args[0] if isinstance(error, KeyError) and error.args else str(error)
    return ToolError(
        error=str(message) or type(error).__name__,
        category=cat.value,
        hint=hint,
        retryable=cat in {ErrorCategory.NETWORK_ERROR, ErrorCategory.API_QUOTA_EXCEEDED},
    ).model_dump(mode="json")
