"""Ask service - resolves the thread, builds context and runs the agent loop."""

import asyncio
import weakref
from typing import AsyncIterator, List, Optional

from .context_builder import build_instructions
from .conversation_store import ConversationStore, derive_title
from ..agent.loop import AgentLoop
from ..db.database_models import ConversationDO
from ..db.repositories.client import ClientRepository
from ..models.chat import AskRequest, AskResult
from ..models.events import (
    ClearPartialEvent,
    DoneEvent,
    ErrorEvent,
    StreamEvent,
    TextEvent
)
from ..utils.logger import get_app_logger


class AskService:
    """
    Entry point for one operator question.

    ``stream`` yields status, text and terminal events; ``ask`` folds them into a
    single reply. Turns on the same conversation are serialized within the
    process by a per-conversation lock.
    """

    def __init__(
        self,
        store: ConversationStore,
        clients: ClientRepository,
        loop: AgentLoop,
        data_lag_days: int = 1
    ):
        self.store = store
        self.clients = clients
        self.loop = loop
        self.data_lag_days = data_lag_days
        self.logger = get_app_logger()
        self._locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = weakref.WeakValueDictionary()

    def _lock_for(self, conversation_id: str) -> asyncio.Lock:
        lock = self._locks.get(conversation_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[conversation_id] = lock
        return lock

    def _resolve_conversation(self, request: AskRequest) -> Optional[ConversationDO]:
        """Existing thread of this client, or a new one titled from the question."""
        if request.conversation_id:
            return self.store.get_for_client(request.client_id, request.conversation_id)
        question = request.last_user_message()
        return self.store.create(request.client_id, derive_title(question.content if question else None))

    def _record_user_message(self, conversation: ConversationDO, request: AskRequest) -> None:
        """Append the newest user message unless it is already the thread's tail."""
        question = request.last_user_message()
        if question is not None:
            last = self.store.last_message(conversation.id)
            if last is not None and last.role == "user" and last.content == question.content:
                self.logger.info(f"Skipping duplicate user message in conversation {conversation.id}")
            else:
                self.store.append_message(conversation.id, "user", question.content)
        self.store.touch(conversation.id)

    async def stream(self, request: AskRequest) -> AsyncIterator[StreamEvent]:
        """
        Run one exchange and yield its events.

        Yields:
            Stream events ending with exactly one done or error event
        """
        try:
            client = self.clients.get(request.client_id)
            if client is None:
                yield ErrorEvent(message="Client not found")
                return

            conversation = self._resolve_conversation(request)
            if conversation is None:
                yield ErrorEvent(message="Conversation not found")
                return

            async with self._lock_for(conversation.id):
                self._record_user_message(conversation, request)
                instructions = build_instructions(client, lag_days=self.data_lag_days)
                history = [m.model_dump() for m in request.messages]

                async def persist_answer(answer: str) -> None:
                    self.store.append_message(conversation.id, "assistant", answer)
                    self.store.touch(conversation.id)

                async for event in self.loop.run(
                    history=history,
                    instructions=instructions,
                    client=client,
                    conversation_id=conversation.id,
                    on_answer=persist_answer
                ):
                    yield event
        except Exception as e:
            self.logger.exception(f"Ask request failed for client {request.client_id}")
            yield ErrorEvent(message=str(e) or "Failed to get response")

    async def ask(self, request: AskRequest) -> AskResult:
        """Run one exchange and return only its outcome."""
        parts: List[str] = []
        result = AskResult(error="Stream ended without a result")
        async for event in self.stream(request):
            if isinstance(event, TextEvent):
                parts.append(event.delta)
            elif isinstance(event, ClearPartialEvent):
                parts = []
            elif isinstance(event, DoneEvent):
                result = AskResult(reply="".join(parts), conversation_id=event.conversation_id)
            elif isinstance(event, ErrorEvent):
                result = AskResult(error=event.message)
        return result
