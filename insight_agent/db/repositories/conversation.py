"""Conversation repository for database operations."""

from datetime import datetime
from typing import Optional, List
from .base import BaseRepository
from ..database_models.conversation import ConversationDO


_COLUMNS = "id, client_id, title, created_at, updated_at"


def _row_to_conversation(row) -> ConversationDO:
    return ConversationDO(
        id=row[0],
        client_id=row[1],
        title=row[2],
        created_at=row[3],
        updated_at=row[4]
    )


class ConversationRepository(BaseRepository):
    """Repository for Conversation CRUD operations."""

    def create(self, conversation: ConversationDO) -> None:
        """
        Create a new conversation record.

        Args:
            conversation: ConversationDO instance

        Raises:
            duckdb.Error: If the insert fails
        """
        try:
            self.conn.execute(f"""
                INSERT INTO conversations ({_COLUMNS})
                VALUES (?, ?, ?, ?, ?)
            """, [
                conversation.id,
                conversation.client_id,
                conversation.title,
                conversation.created_at,
                conversation.updated_at
            ])
            self.conn.commit()
            self.logger.info(f"Created conversation record: {conversation.id}")
        except Exception as e:
            self.logger.error(f"Failed to create conversation: {e}")
            raise

    def get(self, conversation_id: str) -> Optional[ConversationDO]:
        """
        Get conversation by ID.

        Args:
            conversation_id: Conversation ID

        Returns:
            ConversationDO instance or None
        """
        try:
            result = self.conn.execute(f"""
                SELECT {_COLUMNS}
                FROM conversations
                WHERE id = ?
            """, [conversation_id]).fetchone()

            return _row_to_conversation(result) if result else None
        except Exception as e:
            self.logger.error(f"Failed to get conversation {conversation_id}: {e}")
            return None

    def list_by_client(self, client_id: str, limit: int = 20) -> List[ConversationDO]:
        """
        List the most recently updated conversations for a client.

        Args:
            client_id: Client ID
            limit: Maximum number of conversations to return

        Returns:
            List of ConversationDO instances, newest activity first
        """
        try:
            results = self.conn.execute(f"""
                SELECT {_COLUMNS}
                FROM conversations
                WHERE client_id = ?
                ORDER BY updated_at DESC
                LIMIT ?
            """, [client_id, limit]).fetchall()

            return [_row_to_conversation(row) for row in results]
        except Exception as e:
            self.logger.error(f"Failed to list conversations: {e}")
            return []

    def touch(self, conversation_id: str, updated_at: Optional[datetime] = None) -> None:
        """
        Bump updated_at for a conversation.

        Args:
            conversation_id: Conversation ID
            updated_at: Timestamp to set, defaults to now
        """
        try:
            self.conn.execute("""
                UPDATE conversations
                SET updated_at = ?
                WHERE id = ?
            """, [updated_at or datetime.utcnow(), conversation_id])
            self.conn.commit()
        except Exception as e:
            self.logger.error(f"Failed to touch conversation {conversation_id}: {e}")
            raise

    def delete(self, conversation_id: str) -> bool:
        """
        Delete conversation by ID. Does not commit; callers own the transaction.

        Args:
            conversation_id: Conversation ID

        Returns:
            True if a row was deleted
        """
        result = self.conn.execute(
            "DELETE FROM conversations WHERE id = ? RETURNING id", [conversation_id]
        ).fetchall()
        return len(result) > 0
