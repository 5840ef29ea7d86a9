"""System prompt construction for Chat Proxy."""

from .system_prompt import SYSTEM_PROMPT, get_core_system_prompt, format_current_date

__all__ = ["SYSTEM_PROMPT", "get_core_system_prompt", "format_current_date"]
