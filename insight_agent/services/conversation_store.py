"""Conversation Store - threads and their ordered messages."""

import uuid
from datetime import datetime
from typing import List, Optional

from ..db.connection import DatabaseConnection
from ..db.database_models import ConversationDO, MessageDO
from ..db.repositories import ConversationRepository, MessageRepository
from ..utils.logger import get_app_logger


TITLE_MAX_LENGTH = 80
DEFAULT_TITLE = "New conversation"

ROLES = ("user", "assistant")


def derive_title(first_message: Optional[str]) -> str:
    """Title of a new thread: the first 80 characters of its opening question."""
    if not first_message:
        return DEFAULT_TITLE
    return first_message[:TITLE_MAX_LENGTH]


class ConversationStore:
    """
    Persistence for conversation threads.

    Access control is not done here; routes check the operator before
    calling and verify client ownership with ``get_for_client``.
    """

    def __init__(self, db: DatabaseConnection):
        self.db = db
        self.conversations = ConversationRepository(db.conn)
        self.messages = MessageRepository(db.conn)
        self.logger = get_app_logger()

    def create(self, client_id: str, title: str) -> ConversationDO:
        """Create a thread for a client."""
        now = datetime.utcnow()
        conversation = ConversationDO(
            id=str(uuid.uuid4()),
            client_id=client_id,
            title=title[:TITLE_MAX_LENGTH],
            created_at=now,
            updated_at=now
        )
        self.conversations.create(conversation)
        return conversation

    def get(self, conversation_id: str) -> Optional[ConversationDO]:
        return self.conversations.get(conversation_id)

    def get_for_client(self, client_id: str, conversation_id: str) -> Optional[ConversationDO]:
        """The thread if it exists and belongs to the client."""
        conversation = self.conversations.get(conversation_id)
        if conversation is None or conversation.client_id != client_id:
            return None
        return conversation

    def touch(self, conversation_id: str) -> None:
        """Bump updated_at."""
        self.conversations.touch(conversation_id)

    def append_message(self, conversation_id: str, role: str, content: str) -> MessageDO:
        """
        Append a message to a thread.

        Raises:
            ValueError: If role is not user or assistant
        """
        if role not in ROLES:
            raise ValueError(f"Invalid message role: {role}")
        return self.messages.add(MessageDO(
            conversation_id=conversation_id,
            role=role,
            content=content
        ))

    def last_message(self, conversation_id: str) -> Optional[MessageDO]:
        return self.messages.get_latest(conversation_id)

    def list_recent(self, client_id: str, limit: int = 20) -> List[ConversationDO]:
        """Threads of a client, most recently active first."""
        return self.conversations.list_by_client(client_id, limit=limit)

    def load_messages(self, conversation_id: str) -> List[MessageDO]:
        """Messages of a thread, oldest first."""
        return self.messages.get_by_conversation(conversation_id)

    def delete(self, conversation_id: str) -> bool:
        """
        Delete a thread and all of its messages in one transaction.

        Returns:
            True if the thread existed
        """
        conn = self.db.conn
        conn.begin()
        try:
            removed = self.messages.delete_by_conversation(conversation_id)
            deleted = self.conversations.delete(conversation_id)
            conn.commit()
        except Exception as e:
            conn.rollback()
            self.logger.error(f"Failed to delete conversation {conversation_id}: {e}")
            raise
        if deleted:
            self.logger.info(f"Deleted conversation {conversation_id} and {removed} messages")
        return deleted
