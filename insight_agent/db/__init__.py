"""Database package - connection, models, and repositories."""

from .connection import DatabaseConnection
from .repositories.client import ClientRepository
from .repositories.conversation import ConversationRepository
from .repositories.message import MessageRepository

__all__ = [
    "DatabaseConnection",
    "ClientRepository",
    "ConversationRepository",
    "MessageRepository",
]
