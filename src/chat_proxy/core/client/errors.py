"""
Structured error system for the Chat Proxy core.

Only two kinds of failure cross the core boundary: caller input and
configuration errors, and upstream transport errors. Tool failures are
absorbed by the executor and never reach this hierarchy.
"""

from typing import Any, Dict, Optional
import logging

import httpx

logger = logging.getLogger(__name__)


class ChatProxyError(Exception):
    """Base exception for all errors surfaced to the caller."""

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        original_error: Optional[Exception] = None
    ):
        super().__init__(message)
        self.message = message
        self.status = status
        self.code = code
        self.details = details or {}
        self.original_error = original_error

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary representation."""
        return {
            "message": self.message,
            "status": self.status,
            "code": self.code,
            "details": self.details,
            "type": self.__class__.__name__
        }

    def __str__(self) -> str:
        parts = [self.message]
        if self.status:
            parts.append(f"(Status: {self.status})")
        if self.code:
            parts.append(f"(Code: {self.code})")
        return " ".join(parts)


class InvalidRequestError(ChatProxyError):
    """The caller sent a malformed chat request."""

    def __init__(
        self,
        message: str = "Invalid request",
        field: Optional[str] = None,
        **kwargs
    ):
        super().__init__(message, status=400, code="INVALID_REQUEST", **kwargs)
        if field:
            self.details["field"] = field


class ConfigurationError(ChatProxyError):
    """No usable configuration, typically a missing upstream credential."""

    def __init__(
        self,
        message: str = "Configuration error",
        config_field: Optional[str] = None,
        **kwargs
    ):
        super().__init__(message, status=500, code="CONFIGURATION_ERROR", **kwargs)
        if config_field:
            self.details["config_field"] = config_field


class UpstreamError(ChatProxyError):
    """The upstream chat-completion endpoint failed."""

    def __init__(
        self,
        message: str = "Upstream request failed",
        upstream_status: Optional[int] = None,
        detail: Optional[str] = None,
        **kwargs
    ):
        kwargs.setdefault("code", "UPSTREAM_ERROR")
        super().__init__(message, status=500, **kwargs)
        self.upstream_status = upstream_status
        self.detail = detail
        if upstream_status is not None:
            self.details["upstream_status"] = upstream_status
        if detail:
            self.details["detail"] = detail


class UpstreamTimeoutError(UpstreamError):
    """The upstream call exceeded its wall-clock timeout."""

    def __init__(
        self,
        message: str = "Upstream request timed out",
        timeout_seconds: Optional[float] = None,
        **kwargs
    ):
        super().__init__(message, code="UPSTREAM_TIMEOUT", **kwargs)
        if timeout_seconds:
            self.details["timeout_seconds"] = timeout_seconds


class UpstreamNetworkError(UpstreamError):
    """The upstream endpoint could not be reached."""

    def __init__(self, message: str = "Upstream network error", **kwargs):
        super().__init__(message, code="UPSTREAM_NETWORK_ERROR", **kwargs)


def classify_error(error: Exception) -> ChatProxyError:
    """
    Classify a generic exception into a structured ChatProxyError.

    Args:
        error: The original exception

    Returns:
        Classified ChatProxyError instance
    """
    if isinstance(error, ChatProxyError):
        return error

    if isinstance(error, httpx.HTTPStatusError):
        status = error.response.status_code
        try:
            body = error.response.text[:500]
        except httpx.ResponseNotRead:
            body = ""
        return UpstreamError(
            f"API responded with status: {status}",
            upstream_status=status,
            detail=body or None,
            original_error=error
        )

    if isinstance(error, httpx.TimeoutException):
        return UpstreamTimeoutError(original_error=error)

    if isinstance(error, httpx.HTTPError):
        return UpstreamNetworkError(f"Upstream network error: {error}", original_error=error)

    return ChatProxyError(str(error) or error.__class__.__name__, status=500, original_error=error)


def create_user_friendly_message(error: ChatProxyError) -> str:
    """
    Create a user-friendly error message.

    Args:
        error: The ChatProxyError to convert

    Returns:
        User-friendly error message
    """
    if isinstance(error, InvalidRequestError):
        return error.message
    elif isinstance(error, ConfigurationError):
        return "API key not configured. Set CHAT_PROXY_API_KEY or pass an API key."
    elif isinstance(error, UpstreamTimeoutError):
        return "The AI provider took too long to respond. Please try again."
    elif isinstance(error, UpstreamNetworkError):
        return "Could not reach the AI provider. Please check your connection."
    elif isinstance(error, UpstreamError):
        if error.upstream_status in (401, 403):
            return "The AI provider rejected the API key."
        if error.upstream_status == 429:
            return "The AI provider is rate limiting requests. Please try again later."
        return "The AI provider returned an error. Please try again later."
    return f"An unexpected error occurred: {error.message}"
