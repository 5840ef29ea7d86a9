"""HTTP surface for Chat Proxy."""

from .app import create_app

__all__ = ["create_app"]
