"""Message repository for database operations."""

from datetime import timedelta
from typing import Optional, List
from .base import BaseRepository
from ..database_models.message import MessageDO


_COLUMNS = "id, conversation_id, role, content, created_at"


def _row_to_message(row) -> MessageDO:
    return MessageDO(
        id=row[0],
        conversation_id=row[1],
        role=row[2],
        content=row[3],
        created_at=row[4]
    )


class MessageRepository(BaseRepository):
    """Repository for Message CRUD operations."""

    def add(self, message: MessageDO) -> MessageDO:
        """
        Add a new message.

        created_at is moved forward by a microsecond when it would not be
        strictly after the conversation's latest message.

        Args:
            message: MessageDO instance

        Returns:
            The stored MessageDO with its id and final created_at

        Raises:
            duckdb.Error: If the insert fails
        """
        try:
            latest = self.conn.execute("""
                SELECT max(created_at) FROM messages WHERE conversation_id = ?
            """, [message.conversation_id]).fetchone()
            created_at = message.created_at
            if latest and latest[0] is not None and created_at <= latest[0]:
                created_at = latest[0] + timedelta(microseconds=1)

            result = self.conn.execute("""
                INSERT INTO messages (id, conversation_id, role, content, created_at)
                VALUES (nextval('messages_id_seq'), ?, ?, ?, ?)
                RETURNING id
            """, [
                message.conversation_id,
                message.role,
                message.content,
                created_at
            ]).fetchone()
            self.conn.commit()

            stored = MessageDO(
                id=result[0],
                conversation_id=message.conversation_id,
                role=message.role,
                content=message.content,
                created_at=created_at
            )
            self.logger.debug(f"Added {stored.role} message {stored.id} to conversation {stored.conversation_id}")
            return stored
        except Exception as e:
            self.logger.error(f"Failed to add message: {e}")
            raise

    def get_by_conversation(self, conversation_id: str) -> List[MessageDO]:
        """
        Get messages for a conversation.

        Args:
            conversation_id: Conversation ID

        Returns:
            List of MessageDO instances (chronological order)
        """
        try:
            results = self.conn.execute(f"""
                SELECT {_COLUMNS}
                FROM messages
                WHERE conversation_id = ?
                ORDER BY created_at ASC, id ASC
            """, [conversation_id]).fetchall()

            return [_row_to_message(row) for row in results]
        except Exception as e:
            self.logger.error(f"Failed to get conversation messages: {e}")
            return []

    def get_latest(self, conversation_id: str) -> Optional[MessageDO]:
        """
        Get the latest message of a conversation.

        Args:
            conversation_id: Conversation ID

        Returns:
            Latest MessageDO or None
        """
        try:
            result = self.conn.execute(f"""
                SELECT {_COLUMNS} FROM messages
                WHERE conversation_id = ?
                ORDER BY created_at DESC, id DESC
                LIMIT 1
            """, [conversation_id]).fetchone()
            return _row_to_message(result) if result else None
        except Exception as e:
            self.logger.error(f"Failed to get latest message: {e}")
            return None

    def delete_by_conversation(self, conversation_id: str) -> int:
        """
        Delete all messages for a conversation. Does not commit; callers own the transaction.

        Args:
            conversation_id: Conversation ID

        Returns:
            Number of deleted messages
        """
        result = self.conn.execute(
            "DELETE FROM messages WHERE conversation_id = ? RETURNING id", [conversation_id]
        ).fetchall()
        return len(result)
