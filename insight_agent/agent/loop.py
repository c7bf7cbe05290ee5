"""Agent Loop - bounded model/tool state machine producing stream events.

States::

    AWAITING_MODEL -> MODEL_FINISHED -> DONE
    AWAITING_MODEL -> MODEL_REQUESTED_TOOLS -> EXECUTING_TOOLS -> AWAITING_MODEL
    MODEL_REQUESTED_TOOLS -> FAILED_MAX_ITERATIONS -> DONE   (bound reached)

Text streamed in a turn that then opens a tool call is speculative: it is
retracted with one ``clear_partial`` event and never becomes part of the
answer. The loop only yields events; writing them to a transport is the
emitter's job.
"""

import asyncio
from enum import Enum
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, List, Optional, Sequence

from .llm import (
    ModelProvider,
    ProviderError,
    StopReason,
    TextDelta,
    ToolInvocation,
    ToolUseStarted,
    TurnCompleted
)
from ..db.database_models.client import ClientDO
from ..models.events import (
    ClearPartialEvent,
    DoneEvent,
    ErrorEvent,
    StatusEvent,
    StreamEvent,
    TextEvent
)
from ..tools.executor import ToolExecutor
from ..tools.registry import ToolRegistry
from ..utils.logger import get_app_logger


MAX_ITERATIONS = 6

FALLBACK_ANSWER = (
    "I ran into repeated errors fetching the data and was unable to complete your request. "
    "This usually means the GSC or GA4 data source is unavailable or the date range returned no results. "
    "Try a simpler question, or check that the client's GSC site URL and GA4 property are configured "
    "correctly in client settings."
)

AnswerSink = Callable[[str], Awaitable[None]]


class LoopState(str, Enum):
    """States of one agent run."""

    AWAITING_MODEL = "awaiting_model"
    MODEL_FINISHED = "model_finished"
    MODEL_REQUESTED_TOOLS = "model_requested_tools"
    EXECUTING_TOOLS = "executing_tools"
    DONE = "done"
    FAILED_MAX_ITERATIONS = "failed_max_iterations"


def transition(
    state: LoopState,
    stop_reason: Optional[StopReason] = None,
    iterations_left: int = 0
) -> LoopState:
    """
    Next state of the loop.

    Args:
        state: Current state
        stop_reason: Stop reason of the turn that just ended (AWAITING_MODEL only)
        iterations_left: Model turns still allowed (MODEL_REQUESTED_TOOLS only)

    Returns:
        The following state

    Raises:
        ValueError: If called on DONE
    """
    if state is LoopState.AWAITING_MODEL:
        if stop_reason is StopReason.TOOL_USE:
            return LoopState.MODEL_REQUESTED_TOOLS
        # finished, or an unexpected reason: close out with what we have
        return LoopState.MODEL_FINISHED
    if state is LoopState.MODEL_REQUESTED_TOOLS:
        if iterations_left > 0:
            return LoopState.EXECUTING_TOOLS
        return LoopState.FAILED_MAX_ITERATIONS
    if state is LoopState.EXECUTING_TOOLS:
        return LoopState.AWAITING_MODEL
    if state in (LoopState.MODEL_FINISHED, LoopState.FAILED_MAX_ITERATIONS):
        return LoopState.DONE
    raise ValueError(f"No transition out of {state.value}")


class AgentLoop:
    """Runs one exchange against the model, executing tools as requested."""

    def __init__(
        self,
        provider: ModelProvider,
        registry: ToolRegistry,
        executor: ToolExecutor,
        max_iterations: int = MAX_ITERATIONS
    ):
        self.provider = provider
        self.registry = registry
        self.executor = executor
        self.max_iterations = max_iterations
        self.logger = get_app_logger()

    async def run(
        self,
        history: Sequence[Dict[str, Any]],
        instructions: str,
        client: ClientDO,
        conversation_id: str,
        on_answer: AnswerSink
    ) -> AsyncIterator[StreamEvent]:
        """
        Drive the exchange and yield its stream events.

        Args:
            history: Prior messages as {role, content}, newest last
            instructions: System instruction block
            client: Client whose data sources the tools query
            conversation_id: Thread reported in the done event
            on_answer: Persists the final answer; awaited once before done

        Yields:
            status / text / clear_partial events, then one done or error
        """
        messages: List[Dict[str, Any]] = [{"role": m["role"], "content": m["content"]} for m in history]
        tools = self.registry.to_api()
        transcript: List[str] = []
        iteration = 0
        turn: Optional[TurnCompleted] = None
        state = LoopState.AWAITING_MODEL

        while state is not LoopState.DONE:
            if state is LoopState.AWAITING_MODEL:
                iteration += 1
                self.logger.debug(f"Agent iteration {iteration}/{self.max_iterations} for {conversation_id}")
                speculative: List[str] = []
                tool_seen = False
                turn = None
                try:
                    async for chunk in self.provider.stream_turn(instructions, messages, tools):
                        if isinstance(chunk, TextDelta):
                            if tool_seen or not chunk.text:
                                continue
                            speculative.append(chunk.text)
                            transcript.append(chunk.text)
                            yield TextEvent(delta=chunk.text)
                        elif isinstance(chunk, ToolUseStarted):
                            if not tool_seen:
                                tool_seen = True
                                if speculative:
                                    yield ClearPartialEvent()
                                    del transcript[-len(speculative):]
                                    speculative = []
                        elif isinstance(chunk, TurnCompleted):
                            turn = chunk
                except ProviderError as e:
                    yield ErrorEvent(message=str(e) or "Failed to get response")
                    return
                if turn is None:
                    yield ErrorEvent(message="Model stream ended without a final message")
                    return
                stop_reason = turn.stop_reason
                if stop_reason is StopReason.TOOL_USE and not turn.tool_calls:
                    stop_reason = StopReason.OTHER
                if stop_reason is StopReason.OTHER:
                    self.logger.warning(f"Unexpected stop reason in iteration {iteration}, closing out")
                state = transition(state, stop_reason=stop_reason)

            elif state is LoopState.MODEL_FINISHED:
                await on_answer("".join(transcript))
                self.logger.info(f"Agent finished after {iteration} iteration(s) for {conversation_id}")
                yield DoneEvent(conversation_id=conversation_id)
                state = transition(state)

            elif state is LoopState.MODEL_REQUESTED_TOOLS:
                state = transition(state, iterations_left=self.max_iterations - iteration)
                if state is LoopState.EXECUTING_TOOLS:
                    for name in dict.fromkeys(call.tool_name for call in turn.tool_calls):
                        yield StatusEvent(text=self.registry.status_text(name))

            elif state is LoopState.EXECUTING_TOOLS:
                results = await self.execute_tools(turn.tool_calls, client)
                messages.append({"role": "assistant", "content": turn.content})
                messages.append({
                    "role": "user",
                    "content": [
                        {"type": "tool_result", "tool_use_id": call.call_id, "content": results[call.call_id]}
                        for call in turn.tool_calls
                    ]
                })
                state = transition(state)

            elif state is LoopState.FAILED_MAX_ITERATIONS:
                self.logger.warning(f"Agent hit max iterations ({self.max_iterations}) for {conversation_id}")
                yield TextEvent(delta=FALLBACK_ANSWER)
                await on_answer(FALLBACK_ANSWER)
                yield DoneEvent(conversation_id=conversation_id)
                state = transition(state)

    async def execute_tools(self, calls: Sequence[ToolInvocation], client: ClientDO) -> Dict[str, str]:
        """
        Run all tool calls of a turn concurrently.

        Returns:
            Tool output text keyed by correlation id
        """
        self.logger.info(f"Executing {len(calls)} tool call(s): {', '.join(c.tool_name for c in calls)}")
        tasks = {
            call.call_id: asyncio.create_task(self.executor.execute(call.tool_name, call.input, client))
            for call in calls
        }
        await asyncio.gather(*tasks.values())
        return {call_id: task.result() for call_id, task in tasks.items()}
