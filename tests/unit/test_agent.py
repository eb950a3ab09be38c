"""Unit tests for the agent loop."""

import asyncio
import logging
from unittest.mock import AsyncMock, Mock

import pytest

from helpers.completers import ScriptedCompleter, call, text_response, tool_response

from weft.agent import (
    Agent,
    with_approvals,
    with_auto_approve_all,
    with_auto_approve_tools,
    with_finalizer,
    with_iterations,
    with_model,
    with_model_mapper,
    with_rejections,
    with_strict_iterations,
    with_structured_output,
    with_system_message,
    with_temperature,
    with_tool,
    with_values,
)
from weft.errors import (
    AgentAbortError,
    AgentMaxStepsError,
    CompleterError,
    ConfigurationError,
    MemoryWriteError,
    ToolApprovalRequest,
)
from weft.memory import StaticMemory
from weft.types import (
    AssistantMessage,
    CompletionResponse,
    FinishReason,
    SystemMessage,
    Tool,
    ToolCallBlock,
    ToolError,
    ToolResult,
    UserMessage,
)

LOOKUP = Tool("lookup", "Look things up", {"type": "object", "properties": {}})


def lookup(arguments, ctx):
    return "42"


def assistant_count(memory):
    return sum(isinstance(m, AssistantMessage) for m in memory.list())


class TestBasicRun:
    @pytest.mark.asyncio
    async def test_plain_answer(self, question):
        """A stop reply with no tools ends the run after one request."""
        completer = ScriptedCompleter(text_response("4"))
        agent = Agent("math", completer=completer, memory=question)

        reply = await agent.run()

        assert reply.text() == "4"
        assert question.list() == [UserMessage("2+2?"), AssistantMessage.from_text("4")]
        assert completer.calls == 1

    @pytest.mark.asyncio
    async def test_any_object_with_complete_is_a_completer(self, question):
        completer = Mock()
        completer.complete = AsyncMock(return_value=text_response("4"))

        reply = await Agent("math", completer=completer, memory=question).run()

        assert reply.text() == "4"
        completer.complete.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_request_shape(self, question):
        completer = ScriptedCompleter(text_response("4"))
        agent = Agent(
            "math",
            with_model("fast"),
            with_model_mapper({"fast": "gpt-4.1-mini"}),
            with_temperature(0.2),
            with_tool(LOOKUP, lookup),
            completer=completer,
            memory=question,
        )

        await agent.run()

        request = completer.requests[0]
        assert request.model == "gpt-4.1-mini"
        assert request.temperature == 0.2
        assert [t.name for t in request.tools] == ["lookup"]
        assert request.parallel_tool_calls is True
        assert request.messages == [UserMessage("2+2?")]

    @pytest.mark.asyncio
    async def test_default_model_from_settings(self, question, monkeypatch):
        monkeypatch.setenv("WEFT_DEFAULT_MODEL", "local-model")
        completer = ScriptedCompleter(text_response("4"))
        await Agent("math", completer=completer, memory=question).run()
        assert completer.requests[0].model == "local-model"

    @pytest.mark.asyncio
    async def test_starter_messages_are_rendered_not_stored(self, question):
        completer = ScriptedCompleter(text_response("4"))
        agent = Agent(
            "math",
            with_system_message("You are {{ name }}, expert in {{ topic }}."),
            with_values({"topic": "arithmetic"}),
            completer=completer,
            memory=question,
        )

        await agent.run()

        assert completer.requests[0].messages[0] == SystemMessage(
            "You are math, expert in arithmetic."
        )
        assert len(question.list()) == 2

    @pytest.mark.asyncio
    async def test_missing_completer(self, question):
        with pytest.raises(ConfigurationError):
            await Agent("math", memory=question).run()

    def test_zero_iterations_rejected(self):
        with pytest.raises(ConfigurationError):
            with_iterations(0)


class TestToolCalls:
    @pytest.mark.asyncio
    async def test_pending_approval(self, question):
        """Without an approver the call is deferred and nothing runs."""
        executed = []
        completer = ScriptedCompleter(tool_response(call("c1", "lookup")))
        agent = Agent(
            "math",
            with_tool(LOOKUP, lambda a, c: executed.append(a)),
            completer=completer,
            memory=question,
        )

        with pytest.raises(ToolApprovalRequest) as exc_info:
            await agent.run()

        assert exc_info.value.call_ids == ["c1"]
        assert executed == []
        messages = question.list()
        assert len(messages) == 2
        assert messages[1].tool_calls[0].id == "c1"
        assert not any(isinstance(m, (ToolResult, ToolError)) for m in messages)

    @pytest.mark.asyncio
    async def test_auto_approve_all(self, question):
        completer = ScriptedCompleter(tool_response(call("c1", "lookup")), text_response("42"))
        agent = Agent(
            "math",
            with_tool(LOOKUP, lookup),
            with_auto_approve_all(),
            completer=completer,
            memory=question,
        )

        reply = await agent.run()

        assert reply.text() == "42"
        assert completer.calls == 2
        assert ToolResult("c1", "42") in completer.requests[1].messages
        assert question.list()[2] == ToolResult("c1", "42")
        assert assistant_count(question) == completer.calls

    @pytest.mark.asyncio
    async def test_call_ids_reused_across_turns(self, question):
        """Backends that number calls per turn still get every call answered."""
        seen = []
        completer = ScriptedCompleter(
            tool_response(call("c1", "lookup", q="a")),
            tool_response(call("c1", "lookup", q="b")),
            text_response("done"),
        )
        agent = Agent(
            "math",
            with_tool(LOOKUP, lambda arguments, ctx: seen.append(arguments) or "42"),
            with_auto_approve_all(),
            completer=completer,
            memory=question,
        )

        await agent.run()

        assert seen == ['{"q": "a"}', '{"q": "b"}']
        results = [m for m in question.list() if isinstance(m, ToolResult)]
        assert results == [ToolResult("c1", "42"), ToolResult("c1", "42")]
        assert completer.requests[2].messages[-1] == ToolResult("c1", "42")

    @pytest.mark.asyncio
    async def test_tool_calls_run_whatever_the_finish_reason(self, question, caplog):
        completer = ScriptedCompleter(
            CompletionResponse(
                content=[ToolCallBlock(call("c1", "lookup"))], finish_reason=FinishReason.STOP
            ),
            text_response("42"),
        )
        agent = Agent(
            "math",
            with_tool(LOOKUP, lookup),
            with_auto_approve_all(),
            completer=completer,
            memory=question,
        )

        with caplog.at_level(logging.DEBUG, logger="weft.agent.core"):
            reply = await agent.run()

        assert reply.text() == "42"
        assert question.list()[2] == ToolResult("c1", "42")
        assert "but finish reason stop" in caplog.text

    @pytest.mark.asyncio
    async def test_resume_with_approval(self, question):
        """A later run with an approval executes the pending call before asking the model."""
        completer = ScriptedCompleter(tool_response(call("c1", "lookup")), text_response("done"))
        agent = Agent("math", with_tool(LOOKUP, lookup), completer=completer, memory=question)

        with pytest.raises(ToolApprovalRequest):
            await agent.run()
        reply = await agent.run(with_approvals("c1"))

        assert reply.text() == "done"
        assert completer.calls == 2
        assert completer.requests[1].messages[-1] == ToolResult("c1", "42")
        assert assistant_count(question) == completer.calls

    @pytest.mark.asyncio
    async def test_resume_with_rejection(self, question):
        completer = ScriptedCompleter(tool_response(call("c1", "lookup")), text_response("ok"))
        agent = Agent("math", with_tool(LOOKUP, lookup), completer=completer, memory=question)

        with pytest.raises(ToolApprovalRequest):
            await agent.run()
        await agent.run(with_rejections("c1"))

        assert ToolError("c1", "rejected by the user") in question.list()
        assert not any(isinstance(m, ToolResult) for m in question.list())

    @pytest.mark.asyncio
    async def test_approve_by_tool_name(self, question):
        completer = ScriptedCompleter(
            tool_response(call("c1", "lookup"), call("c2", "delete")),
        )
        agent = Agent(
            "math",
            with_tool(LOOKUP, lookup),
            with_tool(Tool("delete"), lambda a, c: "deleted"),
            with_auto_approve_tools("lookup"),
            completer=completer,
            memory=question,
        )

        with pytest.raises(ToolApprovalRequest) as exc_info:
            await agent.run()
        assert exc_info.value.call_ids == ["c2"]

    @pytest.mark.asyncio
    async def test_per_run_tool_does_not_leak(self, question):
        completer = ScriptedCompleter(text_response("a"), text_response("b"))
        agent = Agent("math", completer=completer, memory=question)

        await agent.run(with_tool(LOOKUP, lookup))
        await agent.run()

        assert [t.name for t in completer.requests[0].tools] == ["lookup"]
        assert completer.requests[1].tools == []


class TestFinalizers:
    @pytest.mark.asyncio
    async def test_structured_output_retries(self, question):
        completer = ScriptedCompleter(
            text_response("four"),
            text_response('```json\n{"answer": 4}\n```'),
        )
        agent = Agent("math", with_structured_output(), completer=completer, memory=question)

        reply = await agent.run()

        assert reply.unmarshal() == {"answer": 4}
        messages = question.list()
        assert messages[2] == UserMessage("ERROR: response must be a valid JSON")
        assert completer.calls == 2
        assert assistant_count(question) == completer.calls

    @pytest.mark.asyncio
    async def test_cap_exhaustion_returns_last_draft(self, question):
        completer = ScriptedCompleter(text_response("not json"), repeat=True)
        agent = Agent(
            "math",
            with_structured_output(),
            with_iterations(3),
            completer=completer,
            memory=question,
        )

        reply = await agent.run()

        assert reply.text() == "not json"
        assert completer.calls == 3
        errors = [
            m
            for m in question.list()
            if isinstance(m, UserMessage) and m.content.startswith("ERROR:")
        ]
        assert len(errors) == 3
        assert assistant_count(question) == 3

    @pytest.mark.asyncio
    async def test_strict_iterations_raise(self, question):
        completer = ScriptedCompleter(text_response("not json"), repeat=True)
        agent = Agent(
            "math",
            with_structured_output(),
            with_iterations(2),
            with_strict_iterations(),
            completer=completer,
            memory=question,
        )

        with pytest.raises(AgentMaxStepsError) as exc_info:
            await agent.run()

        assert exc_info.value.steps == 2
        assert exc_info.value.partial.text() == "not json"

    @pytest.mark.asyncio
    async def test_async_finalizer(self, question):
        seen = []

        async def record(reply):
            seen.append(reply.text())

        completer = ScriptedCompleter(text_response("4"))
        await Agent("math", with_finalizer(record), completer=completer, memory=question).run()
        assert seen == ["4"]


class TestFailures:
    @pytest.mark.asyncio
    async def test_completer_failure(self, question):
        completer = ScriptedCompleter(RuntimeError("rate limited"))
        agent = Agent("math", completer=completer, memory=question)

        with pytest.raises(CompleterError) as exc_info:
            await agent.run()

        assert isinstance(exc_info.value.cause, RuntimeError)
        assert question.list() == [UserMessage("2+2?")]

    @pytest.mark.asyncio
    async def test_memory_failure(self):
        class ReadOnlyMemory(StaticMemory):
            async def append(self, message):
                raise OSError("read-only")

        memory = ReadOnlyMemory([UserMessage("2+2?")])
        agent = Agent("math", completer=ScriptedCompleter(text_response("4")), memory=memory)

        with pytest.raises(MemoryWriteError):
            await agent.run()

    @pytest.mark.asyncio
    async def test_abort_signal(self, question):
        completer = ScriptedCompleter(text_response("4"))
        signal = asyncio.Event()
        signal.set()

        with pytest.raises(AgentAbortError):
            await Agent("math", completer=completer, memory=question).run(signal=signal)
        assert completer.calls == 0

    @pytest.mark.asyncio
    async def test_cancellation_during_completion_appends_nothing(self, question):
        completer = ScriptedCompleter(text_response("4"), latency=10)
        agent = Agent("math", completer=completer, memory=question)

        task = asyncio.create_task(agent.run())
        await asyncio.sleep(0.05)
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task
        assert question.list() == [UserMessage("2+2?")]


class TestConcurrentRuns:
    @pytest.mark.asyncio
    async def test_run_options_are_isolated(self):
        completer = ScriptedCompleter(text_response("a"), text_response("b"), latency=0.01)
        agent = Agent("math", completer=completer)

        await asyncio.gather(
            agent.run(with_temperature(0.1), with_model("m1")),
            agent.run(with_temperature(0.9), with_model("m2")),
        )

        params = sorted((r.model, r.temperature) for r in completer.requests)
        assert params == [("m1", 0.1), ("m2", 0.9)]
        assert agent.config.temperature is None
