"""
Upstream API client for Chat Proxy.

This package provides the message types, the chat-completion client and the
structured error hierarchy used across the core.
"""

from .errors import (
    ChatProxyError,
    InvalidRequestError,
    ConfigurationError,
    UpstreamError,
    UpstreamTimeoutError,
    UpstreamNetworkError,
    classify_error,
    create_user_friendly_message,
)
from .turn import Message, MessageRole
from .upstream import UpstreamChatClient, ChatCompletionRequest

__all__ = [
    "ChatProxyError",
    "InvalidRequestError",
    "ConfigurationError",
    "UpstreamError",
    "UpstreamTimeoutError",
    "UpstreamNetworkError",
    "classify_error",
    "create_user_friendly_message",
    "Message",
    "MessageRole",
    "UpstreamChatClient",
    "ChatCompletionRequest",
]
