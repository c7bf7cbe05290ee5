"""Tests for AgentLoop."""

import json

import pytest

from insight_agent.agent.llm import (
    ProviderError,
    StopReason,
    TextDelta,
    ToolUseStarted,
    TurnCompleted
)
from insight_agent.agent.loop import AgentLoop, FALLBACK_ANSWER, MAX_ITERATIONS
from insight_agent.models.events import (
    ClearPartialEvent,
    DoneEvent,
    ErrorEvent,
    StatusEvent,
    TextEvent,
    is_terminal
)
from insight_agent.tools import ToolExecutor, default_registry

from insight_fakes import FakeAdapter, final_turn, ga4_call, gsc_call, tool_turn


HISTORY = [{"role": "user", "content": "How did organic clicks change week over week?"}]


class AnswerRecorder:
    def __init__(self):
        self.answers = []

    async def __call__(self, answer):
        self.answers.append(answer)


@pytest.fixture
def answers():
    return AnswerRecorder()


async def _run(loop, client, answers, history=HISTORY):
    return [
        event async for event in loop.run(
            history=history,
            instructions="system",
            client=client,
            conversation_id="conv-1",
            on_answer=answers
        )
    ]


def _tool_results(provider, call_index):
    """tool_result blocks sent to the model in a given provider call, keyed by id."""
    blocks = provider.calls[call_index]["messages"][-1]["content"]
    return {b["tool_use_id"]: b["content"] for b in blocks}


class TestAgentLoop:
    """Tests for AgentLoop."""

    class TestDirectAnswer:
        """SUT: AgentLoop.run without tools"""

        async def test_text_then_done(self, agent_loop, provider, acme, answers):
            """A finished turn should stream its text, persist it and end with done."""
            provider.turns = [final_turn("Clicks ", "rose 8%.")]

            events = await _run(agent_loop, acme, answers)

            assert events == [
                TextEvent(delta="Clicks "),
                TextEvent(delta="rose 8%."),
                DoneEvent(conversation_id="conv-1"),
            ]
            assert answers.answers == ["Clicks rose 8%."]

        async def test_sends_tools_and_instructions(self, agent_loop, provider, acme, answers):
            """The model should receive the instructions, both tools and the history."""
            await _run(agent_loop, acme, answers)
            call = provider.calls[0]
            assert call["system"] == "system"
            assert [t["name"] for t in call["tools"]] == ["get_gsc_data", "get_ga4_data"]
            assert call["messages"] == HISTORY

        async def test_empty_answer_still_persisted_once(self, agent_loop, provider, acme, answers):
            """An empty finished answer should still be persisted exactly once."""
            provider.turns = [final_turn()]

            events = await _run(agent_loop, acme, answers)

            assert events == [DoneEvent(conversation_id="conv-1")]
            assert answers.answers == [""]

        async def test_unexpected_stop_reason_keeps_text(self, agent_loop, provider, acme, answers):
            """An unexpected stop reason should close out with the text so far."""
            provider.turns = [[
                TextDelta("Partial answer"),
                TurnCompleted(stop_reason=StopReason.OTHER, content=[{"type": "text", "text": "Partial answer"}]),
            ]]

            events = await _run(agent_loop, acme, answers)

            assert isinstance(events[-1], DoneEvent)
            assert answers.answers == ["Partial answer"]

    class TestToolRound:
        """SUT: AgentLoop.run with tool calls"""

        async def test_preamble_retracted(self, agent_loop, provider, acme, answers):
            """Text before a tool call should be retracted with one clear_partial."""
            provider.turns = [
                tool_turn([gsc_call("call_1")], "Let me ", "check that."),
                final_turn("Clicks rose 8%."),
            ]

            events = await _run(agent_loop, acme, answers)

            assert events == [
                TextEvent(delta="Let me "),
                TextEvent(delta="check that."),
                ClearPartialEvent(),
                StatusEvent(text="Querying Search Console…"),
                TextEvent(delta="Clicks rose 8%."),
                DoneEvent(conversation_id="conv-1"),
            ]
            assert answers.answers == ["Clicks rose 8%."]

        async def test_no_clear_without_preamble(self, agent_loop, provider, acme, answers):
            """No clear_partial should be sent when nothing was streamed first."""
            provider.turns = [tool_turn([gsc_call("call_1")]), final_turn("ok")]

            events = await _run(agent_loop, acme, answers)

            assert not any(isinstance(e, ClearPartialEvent) for e in events)

        async def test_text_after_tool_block_ignored(self, agent_loop, provider, acme, answers):
            """Text arriving after a tool block in the same turn should be dropped."""
            call = gsc_call("call_1")
            turn = tool_turn([call], "Checking.")
            turn.insert(-1, TextDelta("stray"))
            provider.turns = [turn, final_turn("Done.")]

            events = await _run(agent_loop, acme, answers)

            deltas = [e.delta for e in events if isinstance(e, TextEvent)]
            assert deltas == ["Checking.", "Done."]
            assert answers.answers == ["Done."]

        async def test_one_status_per_distinct_tool(self, agent_loop, provider, acme, answers):
            """One status should be sent per distinct tool, in request order."""
            provider.turns = [
                tool_turn([gsc_call("a"), gsc_call("b", start="2024-04-24", end="2024-04-30"), ga4_call("c")]),
                final_turn("ok"),
            ]

            events = await _run(agent_loop, acme, answers)

            assert [e.text for e in events if isinstance(e, StatusEvent)] == [
                "Querying Search Console…",
                "Querying Google Analytics…",
            ]

        async def test_transcript_sent_back(self, agent_loop, provider, acme, answers):
            """The tool call and its results should be appended to the next request."""
            provider.turns = [tool_turn([gsc_call("call_1")], "Checking."), final_turn("ok")]

            await _run(agent_loop, acme, answers)

            messages = provider.calls[1]["messages"]
            assert len(messages) == 3
            assert messages[1]["role"] == "assistant"
            assert [b["type"] for b in messages[1]["content"]] == ["text", "tool_use"]
            assert messages[2]["role"] == "user"
            assert messages[2]["content"][0]["type"] == "tool_result"
            assert json.loads(_tool_results(provider, 1)["call_1"])[0]["keys"] == ["shoes"]

        async def test_tool_failure_reaches_model_as_text(self, provider, acme, answers):
            """A failed tool call should reach the model as text and the run should finish."""
            executor = ToolExecutor(FakeAdapter(rows=[]), FakeAdapter(rows=[]))
            loop = AgentLoop(provider, default_registry(), executor)
            provider.turns = [tool_turn([gsc_call("call_1", dimensions=["country"])]), final_turn("Sorry.")]

            events = await _run(loop, acme, answers)

            assert _tool_results(provider, 1)["call_1"].startswith("Error: invalid arguments")
            assert isinstance(events[-1], DoneEvent)

    class TestCorrelation:
        """SUT: AgentLoop.execute_tools"""

        async def test_results_follow_call_ids_not_completion_order(self, provider, acme, answers):
            """Results should be matched by call id even when calls finish out of order."""
            # current week is slower than the prior week
            search = FakeAdapter(
                rows=[{"keys": ["shoes"]}],
                delays={"2024-05-01": 0.03, "2024-04-24": 0.005}
            )
            loop = AgentLoop(provider, default_registry(), ToolExecutor(search, FakeAdapter()))
            provider.turns = [
                tool_turn([
                    gsc_call("current", start="2024-05-01", end="2024-05-07"),
                    gsc_call("prior", start="2024-04-24", end="2024-04-30"),
                ]),
                final_turn("Clicks rose week over week."),
            ]

            events = await _run(loop, acme, answers)

            assert search.completed == ["2024-04-24", "2024-05-01"]
            results = _tool_results(provider, 1)
            assert json.loads(results["current"])[0]["start"] == "2024-05-01"
            assert json.loads(results["prior"])[0]["start"] == "2024-04-24"
            assert events[-1] == DoneEvent(conversation_id="conv-1")
            assert answers.answers == ["Clicks rose week over week."]

        async def test_execute_tools_keys(self, agent_loop, acme):
            """execute_tools() should return one result per call id."""
            results = await agent_loop.execute_tools([gsc_call("x"), ga4_call("y")], acme)
            assert set(results) == {"x", "y"}

    class TestIterationBound:
        """SUT: AgentLoop.run iteration limit"""

        async def test_fallback_after_max_iterations(self, agent_loop, provider, acme, answers):
            """Hitting the iteration bound should send and persist the fallback, then done."""
            provider.turns = [tool_turn([gsc_call("again")])]

            events = await _run(agent_loop, acme, answers)

            assert len(provider.calls) == MAX_ITERATIONS
            statuses = [e for e in events if isinstance(e, StatusEvent)]
            assert len(statuses) == MAX_ITERATIONS - 1
            assert events[-2:] == [TextEvent(delta=FALLBACK_ANSWER), DoneEvent(conversation_id="conv-1")]
            assert answers.answers == [FALLBACK_ANSWER]

        async def test_custom_bound(self, provider, executor, acme, answers):
            """A bound of one should fall back without dispatching tools."""
            loop = AgentLoop(provider, default_registry(), executor, max_iterations=1)
            provider.turns = [tool_turn([gsc_call("once")], "Let me look.")]

            events = await _run(loop, acme, answers)

            assert len(provider.calls) == 1
            assert events == [
                TextEvent(delta="Let me look."),
                ClearPartialEvent(),
                TextEvent(delta=FALLBACK_ANSWER),
                DoneEvent(conversation_id="conv-1"),
            ]

    class TestFailures:
        """SUT: AgentLoop.run provider failures"""

        async def test_provider_error_is_single_terminal(self, agent_loop, provider, acme, answers):
            """A provider failure should end the stream with a single error."""
            provider.turns = [tool_turn([gsc_call("call_1")], "Checking."), ProviderError("overloaded")]

            events = await _run(agent_loop, acme, answers)

            terminal = [e for e in events if is_terminal(e)]
            assert terminal == [ErrorEvent(message="overloaded")]
            assert events[-1] is terminal[0]
            assert answers.answers == []

        async def test_stream_without_final_message(self, agent_loop, provider, acme, answers):
            """A model stream without a final message should end with an error."""
            provider.turns = [[TextDelta("half"), ToolUseStarted(call_id="x", tool_name="get_gsc_data")]]

            events = await _run(agent_loop, acme, answers)

            assert isinstance(events[-1], ErrorEvent)
            assert sum(1 for e in events if is_terminal(e)) == 1

        async def test_tool_use_without_calls_closes_out(self, agent_loop, provider, acme, answers):
            """A tool_use stop with no calls should be treated as finished."""
            provider.turns = [[TextDelta("answer"), TurnCompleted(stop_reason=StopReason.TOOL_USE)]]

            events = await _run(agent_loop, acme, answers)

            assert events[-1] == DoneEvent(conversation_id="conv-1")
            assert answers.answers == ["answer"]

