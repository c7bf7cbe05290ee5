"""Repository layer for data access."""

from .client import ClientRepository
from .conversation import ConversationRepository
from .message import MessageRepository

__all__ = ["ClientRepository", "ConversationRepository", "MessageRepository"]
