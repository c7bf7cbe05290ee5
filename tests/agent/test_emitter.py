"""Tests for StreamEmitter."""

import json

from insight_agent.agent.emitter import StreamEmitter
from insight_agent.models.events import (
    ClearPartialEvent,
    DoneEvent,
    ErrorEvent,
    StatusEvent,
    TextEvent
)


async def _source(*events):
    for event in events:
        yield event


async def _lines(emitter, events):
    return [chunk async for chunk in emitter.relay(_source(*events))]


class TestStreamEmitter:
    """SUT: StreamEmitter.relay"""

    async def test_one_line_per_event_in_order(self):
        """Each event should become one JSON line, in the order received."""
        emitter = StreamEmitter()
        lines = await _lines(emitter, [
            StatusEvent(text="Querying Search Console…"),
            TextEvent(delta="Hi"),
            ClearPartialEvent(),
            DoneEvent(conversation_id="c1"),
        ])

        assert all(line.endswith(b"\n") and line.count(b"\n") == 1 for line in lines)
        assert [json.loads(line) for line in lines] == [
            {"type": "status", "text": "Querying Search Console…"},
            {"type": "text", "delta": "Hi"},
            {"type": "clear_partial"},
            {"type": "done", "conversationId": "c1"},
        ]
        assert emitter.emitted == 4

    async def test_stops_after_terminal(self):
        """Nothing should be relayed after the first terminal event."""
        lines = await _lines(StreamEmitter(), [
            ErrorEvent(message="boom"),
            DoneEvent(conversation_id="c1"),
            TextEvent(delta="late"),
        ])
        assert [json.loads(line)["type"] for line in lines] == ["error"]

    async def test_newlines_in_text_escaped(self):
        """Newlines inside a delta should be escaped, not split the line."""
        lines = await _lines(StreamEmitter(), [TextEvent(delta="a\nb"), DoneEvent(conversation_id="c")])
        assert json.loads(lines[0])["delta"] == "a\nb"
        assert lines[0].count(b"\n") == 1

    async def test_utf8(self):
        """Lines should be UTF-8 encoded."""
        lines = await _lines(StreamEmitter(), [TextEvent(delta="café")])
        assert json.loads(lines[0].decode("utf-8"))["delta"] == "café"
