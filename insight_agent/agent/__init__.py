"""Agent - model provider, loop state machine and stream emitter."""

from .llm import (
    StopReason,
    ToolInvocation,
    TextDelta,
    ToolUseStarted,
    TurnCompleted,
    TurnChunk,
    ProviderError,
    ModelProvider,
    AnthropicProvider
)
from .loop import AgentLoop, LoopState, transition, MAX_ITERATIONS, FALLBACK_ANSWER
from .emitter import StreamEmitter, NDJSON_MEDIA_TYPE

__all__ = [
    "StopReason",
    "ToolInvocation",
    "TextDelta",
    "ToolUseStarted",
    "TurnCompleted",
    "TurnChunk",
    "ProviderError",
    "ModelProvider",
    "AnthropicProvider",
    "AgentLoop",
    "LoopState",
    "transition",
    "MAX_ITERATIONS",
    "FALLBACK_ANSWER",
    "StreamEmitter",
    "NDJSON_MEDIA_TYPE",
]
