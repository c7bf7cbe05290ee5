"""Model provider abstraction and the Anthropic streaming implementation."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, AsyncIterator, Dict, List, Optional, Sequence, Union

import anthropic

from ..utils.logger import get_app_logger


class StopReason(str, Enum):
    """Why a model turn ended."""

    FINISHED = "end_turn"
    TOOL_USE = "tool_use"
    OTHER = "other"

    @classmethod
    def from_api(cls, value: Optional[str]) -> "StopReason":
        if value == cls.FINISHED.value:
            return cls.FINISHED
        if value == cls.TOOL_USE.value:
            return cls.TOOL_USE
        return cls.OTHER


@dataclass(frozen=True)
class ToolInvocation:
    """A tool call requested by the model, keyed by its correlation id."""

    call_id: str
    tool_name: str
    input: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class TextDelta:
    """A piece of answer text."""

    text: str


@dataclass(frozen=True)
class ToolUseStarted:
    """The model opened a tool-call content block."""

    call_id: str
    tool_name: str


@dataclass
class TurnCompleted:
    """End of one model turn, with the full assistant content."""

    stop_reason: StopReason
    content: List[Dict[str, Any]] = field(default_factory=list)
    tool_calls: List[ToolInvocation] = field(default_factory=list)


TurnChunk = Union[TextDelta, ToolUseStarted, TurnCompleted]


class ProviderError(Exception):
    """The model provider failed or could not be reached."""


class ModelProvider(ABC):
    """Streams one model turn as TurnChunk values ending with TurnCompleted."""

    @abstractmethod
    def stream_turn(
        self,
        system: str,
        messages: Sequence[Dict[str, Any]],
        tools: Sequence[Dict[str, Any]]
    ) -> AsyncIterator[TurnChunk]:
        """
        Stream a model turn.

        Args:
            system: Instruction block
            messages: Conversation in provider message-param shape
            tools: Tool definitions in provider shape

        Yields:
            TextDelta / ToolUseStarted chunks, then exactly one TurnCompleted

        Raises:
            ProviderError: If the provider call fails
        """


def _block_to_param(block) -> Optional[Dict[str, Any]]:
    if block.type == "text":
        return {"type": "text", "text": block.text}
    if block.type == "tool_use":
        return {"type": "tool_use", "id": block.id, "name": block.name, "input": block.input}
    return None


class AnthropicProvider(ModelProvider):
    """Claude via the Anthropic Messages streaming API."""

    def __init__(
        self,
        api_key: Optional[str],
        model: str,
        max_tokens: int = 4096,
        timeout: Optional[float] = None,
        client: Optional[anthropic.AsyncAnthropic] = None
    ):
        self.model = model
        self.max_tokens = max_tokens
        self.client = client or anthropic.AsyncAnthropic(api_key=api_key, timeout=timeout, max_retries=0)
        self.logger = get_app_logger()

    @classmethod
    def from_settings(cls, settings) -> "AnthropicProvider":
        return cls(
            api_key=settings.anthropic_api_key,
            model=settings.anthropic_model,
            max_tokens=settings.anthropic_max_tokens,
            timeout=settings.model_timeout_seconds
        )

    async def stream_turn(self, system, messages, tools) -> AsyncIterator[TurnChunk]:
        try:
            async with self.client.messages.stream(
                model=self.model,
                max_tokens=self.max_tokens,
                system=system,
                tools=list(tools),
                messages=list(messages),
            ) as stream:
                async for event in stream:
                    if event.type == "content_block_start" and event.content_block.type == "tool_use":
                        yield ToolUseStarted(call_id=event.content_block.id, tool_name=event.content_block.name)
                    elif event.type == "content_block_delta" and event.delta.type == "text_delta":
                        yield TextDelta(text=event.delta.text)
                final = await stream.get_final_message()
        except anthropic.APIError as e:
            self.logger.error(f"Anthropic request failed: {e}")
            raise ProviderError(str(e)) from e

        content = [param for param in (_block_to_param(b) for b in final.content) if param]
        tool_calls = [
            ToolInvocation(call_id=b.id, tool_name=b.name, input=dict(b.input or {}))
            for b in final.content
            if b.type == "tool_use"
        ]
        self.logger.debug(
            f"Model turn ended: stop_reason={final.stop_reason} "
            f"tool_calls={len(tool_calls)} output_tokens={final.usage.output_tokens}"
        )
        yield TurnCompleted(
            stop_reason=StopReason.from_api(final.stop_reason),
            content=content,
            tool_calls=tool_calls
        )
