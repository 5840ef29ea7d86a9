"""
Configuration package for Chat Proxy.

This package contains the environment-driven settings for the upstream
provider, the tool loop budgets, and the HTTP server.
"""

from .settings import ChatProxySettings, get_settings

__all__ = ["ChatProxySettings", "get_settings"]
