"""
Entry point for running Chat Proxy as a module.

This allows users to run the CLI using:
    python -m chat_proxy [command] [options]
"""

from chat_proxy.cli.app import main

if __name__ == "__main__":
    main()
