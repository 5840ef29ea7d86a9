"""
Configuration settings for Chat Proxy.

This module provides configuration management using Pydantic settings
with support for environment variables and ``.env`` files.
"""

from typing import Optional, List, Dict, Any
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_VISION_MODELS = [
    "gemini-fast",
    "openai",
    "openai-fast",
    "gemini-search",
    "openai-large",
]


class ChatProxySettings(BaseSettings):
    """
    Main configuration settings for Chat Proxy.

    Settings are loaded from multiple sources in order of preference:
    1. Environment variables (prefixed with CHAT_PROXY_)
    2. The ``.env`` file in the working directory
    3. Default values
    """

    model_config = SettingsConfigDict(
        env_prefix="CHAT_PROXY_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Upstream provider
    api_key: Optional[str] = Field(
        default=None,
        description="Bearer token for the upstream chat-completion provider"
    )

    base_url: str = Field(
        default="https://gen.pollinations.ai/v1",
        description="Base URL of the OpenAI-compatible upstream API"
    )

    model: str = Field(
        default="openai",
        description="Model used when the caller does not name one"
    )

    fallback_vision_model: str = Field(
        default="openai",
        description="Model substituted when images are sent to a text-only model"
    )

    vision_models: List[str] = Field(
        default_factory=lambda: list(DEFAULT_VISION_MODELS),
        description="Models that accept image_url message parts"
    )

    temperature: float = Field(
        default=0.8,
        description="Temperature for response generation",
        ge=0.0,
        le=2.0
    )

    top_p: float = Field(
        default=1.0,
        description="Nucleus sampling parameter",
        gt=0.0,
        le=1.0
    )

    seed: int = Field(
        default=-1,
        description="Sampling seed sent upstream (-1 lets the provider pick)"
    )

    timeout: float = Field(
        default=120.0,
        description="Wall-clock timeout for upstream requests in seconds",
        gt=0
    )

    # Tool loop budgets
    max_tool_rounds: int = Field(
        default=5,
        description="Maximum upstream rounds per chat request",
        gt=0,
        le=20
    )

    max_calls_per_tool: int = Field(
        default=3,
        description="Maximum executions of any single tool per chat request",
        gt=0,
        le=20
    )

    history_window: int = Field(
        default=10,
        description="Number of trailing conversation messages sent upstream",
        gt=0
    )

    system_prompt: Optional[str] = Field(
        default=None,
        description="Replaces the built-in assistant persona when set"
    )

    # Tool credentials
    brave_api_key: Optional[str] = Field(
        default=None,
        description="Subscription token for the Brave web search API"
    )

    serpapi_api_key: Optional[str] = Field(
        default=None,
        description="API key for SerpApi Google Images search"
    )

    tool_timeout: float = Field(
        default=15.0,
        description="Timeout for individual tool HTTP requests in seconds",
        gt=0
    )

    # Server
    host: str = Field(default="127.0.0.1", description="Bind address for the HTTP server")
    port: int = Field(default=8000, description="Bind port for the HTTP server", gt=0, le=65535)

    # Logging Configuration
    log_level: str = Field(
        default="INFO",
        description="Logging level"
    )

    debug: bool = Field(
        default=False,
        description="Enable debug mode"
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid log level '{v}'. Valid levels: {', '.join(sorted(valid_levels))}")
        return v_upper

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """Require an http(s) URL and strip the trailing slash."""
        v = v.strip()
        if not v.startswith(("http://", "https://")):
            raise ValueError("base_url must start with http:// or https://")
        return v.rstrip("/")

    @property
    def is_configured(self) -> bool:
        """Check if an upstream credential is available."""
        return bool(self.api_key)

    def to_dict(self) -> Dict[str, Any]:
        """Convert settings to dictionary, excluding sensitive data."""
        data = self.model_dump()
        for key in ("api_key", "brave_api_key", "serpapi_api_key"):
            if data.get(key):
                data[key] = "***masked***"
        return data


def get_settings() -> ChatProxySettings:
    """Get the current Chat Proxy settings."""
    return ChatProxySettings()
