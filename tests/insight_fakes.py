"""Test doubles for the model provider and the analytics adapters."""

import asyncio
import copy
from typing import Any, Dict, List, Optional, Sequence

from insight_agent.agent.llm import (
    ModelProvider,
    StopReason,
    TextDelta,
    ToolInvocation,
    ToolUseStarted,
    TurnCompleted
)


def final_turn(*texts: str) -> List[Any]:
    """A turn that streams text and ends the exchange."""
    return [TextDelta(t) for t in texts] + [
        TurnCompleted(
            stop_reason=StopReason.FINISHED,
            content=[{"type": "text", "text": "".join(texts)}] if texts else []
        )
    ]


def tool_turn(calls: Sequence[ToolInvocation], *texts: str) -> List[Any]:
    """A turn that optionally streams preamble text, then requests tools."""
    content: List[Dict[str, Any]] = []
    if texts:
        content.append({"type": "text", "text": "".join(texts)})
    content.extend(
        {"type": "tool_use", "id": c.call_id, "name": c.tool_name, "input": c.input} for c in calls
    )
    chunks: List[Any] = [TextDelta(t) for t in texts]
    chunks.extend(ToolUseStarted(call_id=c.call_id, tool_name=c.tool_name) for c in calls)
    chunks.append(TurnCompleted(stop_reason=StopReason.TOOL_USE, content=content, tool_calls=list(calls)))
    return chunks


def gsc_call(call_id: str, start: str = "2024-05-01", end: str = "2024-05-07", **extra) -> ToolInvocation:
    arguments = {"dimensions": ["query"], "startDate": start, "endDate": end}
    arguments.update(extra)
    return ToolInvocation(call_id=call_id, tool_name="get_gsc_data", input=arguments)


def ga4_call(call_id: str, start: str = "2024-05-01", end: str = "2024-05-07", **extra) -> ToolInvocation:
    arguments = {"metrics": ["sessions"], "startDate": start, "endDate": end}
    arguments.update(extra)
    return ToolInvocation(call_id=call_id, tool_name="get_ga4_data", input=arguments)


class ScriptedProvider(ModelProvider):
    """
    Replays canned turns.

    Each scripted turn is a list of chunks, or an exception instance that is
    raised when the turn starts. The last turn repeats when the script runs out.
    """

    def __init__(self, turns: Sequence[Any]):
        self.turns = list(turns)
        self.calls: List[Dict[str, Any]] = []

    async def stream_turn(self, system, messages, tools):
        self.calls.append({
            "system": system,
            "messages": copy.deepcopy(list(messages)),
            "tools": list(tools),
        })
        turn = self.turns[min(len(self.calls), len(self.turns)) - 1]
        if isinstance(turn, Exception):
            raise turn
        for chunk in turn:
            await asyncio.sleep(0)
            yield chunk


class FakeAdapter:
    """
    Analytics adapter returning fixed rows.

    ``delays`` maps a start date to a sleep in seconds, so concurrent calls
    can be made to finish out of order.
    """

    def __init__(
        self,
        rows: Optional[List[Dict[str, Any]]] = None,
        error: Optional[Exception] = None,
        delays: Optional[Dict[str, float]] = None
    ):
        self.rows = rows if rows is not None else []
        self.error = error
        self.delays = delays or {}
        self.queries: List[Any] = []
        self.completed: List[str] = []

    async def query(self, source_id, query):
        self.queries.append((source_id, query))
        start = query.start_date.isoformat()
        await asyncio.sleep(self.delays.get(start, 0))
        if self.error is not None:
            raise self.error
        self.completed.append(start)
        return [dict(row, start=start) for row in self.rows]
