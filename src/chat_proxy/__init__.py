"""
Chat Proxy - tool-augmented chat completion proxy.

This package forwards user conversations to a hosted chat-completion
provider, lets the model call a small set of tools, and returns the final
answer as an ordered event stream.
"""

__version__ = "0.1.0"
__author__ = "Chat Proxy Team"
__license__ = "Apache-2.0"

from typing import Final

# Package metadata
VERSION: Final[str] = __version__
PACKAGE_NAME: Final[str] = "chat-proxy"
USER_AGENT: Final[str] = f"{PACKAGE_NAME}/{VERSION}"

__all__ = [
    "__version__",
    "VERSION",
    "PACKAGE_NAME",
    "USER_AGENT",
]
