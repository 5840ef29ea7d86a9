"""
CLI package for Chat Proxy.

This package contains the command-line interface built with Typer.
"""

__all__ = ["app"]
