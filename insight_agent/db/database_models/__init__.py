"""Database models (Data Objects) - map to database tables."""

from .client import ClientDO
from .conversation import ConversationDO
from .message import MessageDO

__all__ = ["ClientDO", "ConversationDO", "MessageDO"]
