"""
Response event stream for a finished chat request.

All rounds complete before the first event is produced, so the stream is a
replay of the outcome, not a live progress feed:

    status(label) ... status(None)   one per executed tool call, then a clear
    content(text)                    only when the answer is not blank
    done
"""

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterator, Optional, Sequence


class StreamEventType(Enum):
    """Types of response events."""
    STATUS = "status"
    CONTENT = "content"
    DONE = "done"


@dataclass(frozen=True)
class StreamEvent:
    """One event of the response stream."""
    type: StreamEventType
    value: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        if self.type == StreamEventType.DONE:
            return {"done": True}
        return {self.type.value: self.value}


def create_status_event(label: Optional[str]) -> StreamEvent:
    return StreamEvent(StreamEventType.STATUS, label)


def create_content_event(text: str) -> StreamEvent:
    return StreamEvent(StreamEventType.CONTENT, text)


def create_done_event() -> StreamEvent:
    return StreamEvent(StreamEventType.DONE)


def has_text(content: Optional[str]) -> bool:
    """Whether an answer carries anything besides whitespace."""
    return bool(content and content.strip())


def build_events(status_labels: Sequence[str], content: str) -> Iterator[StreamEvent]:
    """
    Produce the ordered event sequence for a status list and final answer.

    Args:
        status_labels: Tool status labels in execution order
        content: Final answer text

    Yields:
        StreamEvent instances, ending with the done sentinel
    """
    for label in status_labels:
        yield create_status_event(label)
    if status_labels:
        yield create_status_event(None)
    if has_text(content):
        yield create_content_event(content)
    yield create_done_event()


def stream_events(outcome: Any) -> Iterator[StreamEvent]:
    """Produce the event sequence for a ChatOutcome."""
    return build_events(outcome.status_labels, outcome.content)


def encode_sse(event: StreamEvent) -> str:
    """
    Render an event as a Server-Sent Events frame.

    Status and content events carry a JSON object; the done sentinel is the
    literal ``[DONE]`` marker used by OpenAI-style streams.
    """
    if event.type == StreamEventType.DONE:
        return "data: [DONE]\n\n"
    return f"data: {json.dumps(event.to_dict(), ensure_ascii=False)}\n\n"
