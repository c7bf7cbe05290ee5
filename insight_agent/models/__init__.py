"""Pydantic models for API request/response and the stream protocol."""

from .chat import ChatMessage, AskRequest, AskResult
from .conversation import (
    ConversationSummary,
    ConversationListResponse,
    MessageResponse,
    ConversationMessagesResponse
)
from .events import (
    StatusEvent,
    TextEvent,
    ClearPartialEvent,
    DoneEvent,
    ErrorEvent,
    StreamEvent,
    encode_event,
    parse_event,
    is_terminal
)

__all__ = [
    "ChatMessage",
    "AskRequest",
    "AskResult",
    "ConversationSummary",
    "ConversationListResponse",
    "MessageResponse",
    "ConversationMessagesResponse",
    "StatusEvent",
    "TextEvent",
    "ClearPartialEvent",
    "DoneEvent",
    "ErrorEvent",
    "StreamEvent",
    "encode_event",
    "parse_event",
    "is_terminal",
]
