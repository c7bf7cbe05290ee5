"""Conversation API models."""

from datetime import datetime
from typing import List
from pydantic import BaseModel, Field


class ConversationSummary(BaseModel):
    """Response model for one thread in the recent list."""

    id: str = Field(description="Conversation ID")
    title: str = Field(description="Title derived from the first question")
    created_at: datetime = Field(description="Creation timestamp")
    updated_at: datetime = Field(description="Last activity timestamp")


class ConversationListResponse(BaseModel):
    """Response model for listing conversations."""

    conversations: List[ConversationSummary] = Field(description="List of conversations")
    total: int = Field(description="Total number of conversations")


class MessageResponse(BaseModel):
    """Response model for a single message."""

    role: str = Field(description="Message role (user/assistant)")
    content: str = Field(description="Message content")
    created_at: datetime = Field(description="Message timestamp")


class ConversationMessagesResponse(BaseModel):
    """Response model for conversation messages."""

    conversation_id: str = Field(description="Conversation ID")
    messages: List[MessageResponse] = Field(description="List of messages")
    total: int = Field(description="Total number of messages")
