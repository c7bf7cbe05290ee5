"""Ask API models."""

from typing import List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field


class ChatMessage(BaseModel):
    """One message of the caller-supplied history."""

    role: Literal["user", "assistant"] = Field(description="Message role")
    content: str = Field(description="Message content")


class AskRequest(BaseModel):
    """Request model for both ask endpoints."""

    model_config = ConfigDict(populate_by_name=True)

    client_id: str = Field(alias="clientId", min_length=1, description="Client the question is about")
    messages: List[ChatMessage] = Field(min_length=1, description="Ordered message history, newest last")
    conversation_id: Optional[str] = Field(
        default=None, alias="conversationId", description="Existing thread to continue"
    )

    def last_user_message(self) -> Optional[ChatMessage]:
        """The newest message with role user, if any."""
        for message in reversed(self.messages):
            if message.role == "user":
                return message
        return None


class AskResult(BaseModel):
    """Response model for the non-streaming ask endpoint."""

    model_config = ConfigDict(populate_by_name=True)

    reply: Optional[str] = Field(default=None, description="Final answer")
    error: Optional[str] = Field(default=None, description="Error message if the exchange failed")
    conversation_id: Optional[str] = Field(
        default=None, alias="conversationId", description="Thread the exchange was stored in"
    )
