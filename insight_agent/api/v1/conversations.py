"""Conversation REST API routes - V1."""

from fastapi import APIRouter, HTTPException, Depends, Query

from ..deps import require_operator
from ...config import settings
from ...db.database_models import ConversationDO
from ...models.conversation import (
    ConversationSummary,
    ConversationListResponse,
    MessageResponse,
    ConversationMessagesResponse
)
from ...services.conversation_store import ConversationStore

router = APIRouter(
    prefix="/api/v1/clients/{client_id}/conversations",
    tags=["Conversations"],
    dependencies=[Depends(require_operator)]
)

# Conversation store (set by main.py)
store: ConversationStore = None


def get_store() -> ConversationStore:
    """Dependency to get the conversation store."""
    if store is None:
        raise HTTPException(status_code=500, detail="Conversation store not initialized")
    return store


def _to_summary(conv: ConversationDO) -> ConversationSummary:
    """Convert ConversationDO to ConversationSummary."""
    return ConversationSummary(
        id=conv.id,
        title=conv.title,
        created_at=conv.created_at,
        updated_at=conv.updated_at
    )


@router.get("", response_model=ConversationListResponse)
async def list_conversations(
    client_id: str,
    limit: int = Query(settings.conversation_list_limit, ge=1, le=100),
    conv_store: ConversationStore = Depends(get_store)
):
    """List a client's threads, most recently active first."""
    conversations = conv_store.list_recent(client_id, limit=limit)

    return ConversationListResponse(
        conversations=[_to_summary(c) for c in conversations],
        total=len(conversations)
    )


@router.get("/{conversation_id}/messages", response_model=ConversationMessagesResponse)
async def get_conversation_messages(
    client_id: str,
    conversation_id: str,
    conv_store: ConversationStore = Depends(get_store)
):
    """Get the messages of a thread in chronological order."""
    if conv_store.get_for_client(client_id, conversation_id) is None:
        raise HTTPException(status_code=404, detail=f"Conversation not found: {conversation_id}")

    messages = conv_store.load_messages(conversation_id)

    return ConversationMessagesResponse(
        conversation_id=conversation_id,
        messages=[
            MessageResponse(role=m.role, content=m.content, created_at=m.created_at)
            for m in messages
        ],
        total=len(messages)
    )


@router.delete("/{conversation_id}", response_model=dict)
async def delete_conversation(
    client_id: str,
    conversation_id: str,
    conv_store: ConversationStore = Depends(get_store)
):
    """Delete a thread and its messages."""
    if conv_store.get_for_client(client_id, conversation_id) is None:
        raise HTTPException(status_code=404, detail=f"Conversation not found: {conversation_id}")

    if not conv_store.delete(conversation_id):
        raise HTTPException(status_code=500, detail="Failed to delete conversation")

    return {
        "status": "deleted",
        "message": f"Conversation {conversation_id} deleted successfully"
    }
