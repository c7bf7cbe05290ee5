"""Services package."""

from .conversation_store import ConversationStore, derive_title
from .context_builder import build_instructions
from .ask_service import AskService

__all__ = ["ConversationStore", "derive_title", "build_instructions", "AskService"]
