"""
Conversation message types for Chat Proxy.

Messages use the OpenAI chat-completion shape: a role, a content that is
text, a list of multi-part entries, or null, plus the tool-calling fields.
"""

from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class MessageRole(Enum):
    """Message roles in a conversation."""
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    TOOL = "tool"


MessageContent = Union[str, List[Dict[str, Any]], None]


class Message(BaseModel):
    """A message in a conversation."""

    model_config = ConfigDict(frozen=True)

    role: MessageRole
    content: MessageContent = None
    tool_calls: Optional[List[Dict[str, Any]]] = Field(default=None)
    tool_call_id: Optional[str] = Field(default=None)

    @classmethod
    def create_text_message(cls, role: MessageRole, text: str) -> "Message":
        """Create a simple text message."""
        return cls(role=role, content=text)

    @classmethod
    def create_tool_call_message(cls, tool_calls: List[Dict[str, Any]]) -> "Message":
        """Create the assistant message that records a round's tool calls."""
        return cls(role=MessageRole.ASSISTANT, content=None, tool_calls=tool_calls)

    @classmethod
    def create_tool_result_message(cls, tool_call_id: str, content: str) -> "Message":
        """Create a tool-role message answering one tool call."""
        return cls(role=MessageRole.TOOL, content=content, tool_call_id=tool_call_id)

    def get_text_content(self) -> str:
        """Get the concatenated text of the message, ignoring image parts."""
        if self.content is None:
            return ""
        if isinstance(self.content, str):
            return self.content
        texts = []
        for part in self.content:
            if part.get("type") == "text" and isinstance(part.get("text"), str):
                texts.append(part["text"])
        return "".join(texts)

    def has_image(self) -> bool:
        """Check whether the message carries an image_url part."""
        if not isinstance(self.content, list):
            return False
        return any(part.get("type") == "image_url" for part in self.content)

    def issued_call_ids(self) -> List[str]:
        """Ids of the tool calls this assistant message requested."""
        if not self.tool_calls:
            return []
        return [call["id"] for call in self.tool_calls if isinstance(call, dict) and call.get("id")]

    def to_openai(self) -> Dict[str, Any]:
        """Render the message as an OpenAI-compatible dictionary."""
        data: Dict[str, Any] = {"role": self.role.value, "content": self.content}
        if self.tool_calls:
            data["tool_calls"] = self.tool_calls
        if self.tool_call_id is not None:
            data["tool_call_id"] = self.tool_call_id
        return data
