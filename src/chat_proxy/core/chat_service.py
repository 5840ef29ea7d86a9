"""
Chat request handling shared by the HTTP server and the CLI.

``ChatService.respond`` validates a caller request, resolves the credential
and model, normalizes the history and runs the tool loop.
"""

import logging
from datetime import datetime
from typing import Any, Callable, Optional, Sequence

from ..config.settings import ChatProxySettings
from ..tools.registry import ToolRegistry, create_default_registry
from .client.errors import ConfigurationError, InvalidRequestError
from .client.upstream import UpstreamChatClient
from .conversation import normalize_conversation, resolve_model
from .function_calling.orchestrator import ChatOrchestrator, ChatOutcome

logger = logging.getLogger(__name__)

ClientFactory = Callable[[str], UpstreamChatClient]


class ChatService:
    """Entry point for one chat turn."""

    def __init__(
        self,
        settings: ChatProxySettings,
        tool_registry: Optional[ToolRegistry] = None,
        client_factory: Optional[ClientFactory] = None
    ):
        """
        Initialize the service.

        Args:
            settings: Application settings
            tool_registry: Tool registry, the built-in tools when omitted
            client_factory: Builds an upstream client for a credential
        """
        self.settings = settings
        self.tool_registry = tool_registry or create_default_registry(settings)
        self.client_factory = client_factory or (
            lambda api_key: UpstreamChatClient.from_settings(settings, api_key)
        )

    def resolve_api_key(self, api_key: Optional[str] = None) -> str:
        """Pick the caller's key, then the configured one."""
        key = api_key or self.settings.api_key
        if not key:
            raise ConfigurationError("API key not configured", config_field="api_key")
        return key

    async def respond(
        self,
        messages: Any,
        model: Optional[str] = None,
        api_key: Optional[str] = None,
        now: Optional[datetime] = None
    ) -> ChatOutcome:
        """
        Run one chat turn.

        Args:
            messages: Caller-supplied message records
            model: Requested model id
            api_key: Per-request upstream credential
            now: Timestamp for the system prompt date line

        Returns:
            ChatOutcome of the tool loop

        Raises:
            InvalidRequestError: If ``messages`` is not a non-empty list
            ConfigurationError: If no credential is available
            UpstreamError: If the upstream provider fails
        """
        if not isinstance(messages, Sequence) or isinstance(messages, (str, bytes)) or not messages:
            raise InvalidRequestError("Messages array is required", field="messages")
        if model is not None and not isinstance(model, str):
            raise InvalidRequestError("model must be a string", field="model")

        key = self.resolve_api_key(api_key)

        target_model = resolve_model(
            messages,
            model,
            self.settings.vision_models,
            default_model=self.settings.model,
            fallback_vision_model=self.settings.fallback_vision_model
        )
        normalized = normalize_conversation(
            messages,
            now=now,
            model=target_model,
            history_window=self.settings.history_window,
            persona=self.settings.system_prompt
        )
        logger.info(
            f"Chat request: model={normalized.model} messages={len(normalized.messages)} "
            f"dropped={normalized.dropped}"
        )

        client = self.client_factory(key)
        try:
            orchestrator = ChatOrchestrator(
                client,
                self.tool_registry,
                max_tool_rounds=self.settings.max_tool_rounds,
                max_calls_per_tool=self.settings.max_calls_per_tool
            )
            return await orchestrator.run(normalized)
        finally:
            aclose = getattr(client, "aclose", None)
            if aclose is not None:
                await aclose()
