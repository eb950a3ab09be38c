"""Tests for prompt loaders and starter-message rendering."""

from datetime import datetime, timezone

import pytest

from helpers.completers import ScriptedCompleter, text_response

from weft.agent import (
    Agent,
    with_option_loader,
    with_prompt,
    with_system_message,
    with_tracer,
)
from weft.errors import ConfigurationError
from weft.prompts import (
    Prompt,
    StaticPrompt,
    render,
    render_messages,
    static_prompt,
    template_values,
)
from weft.tracing import MemoryTracer, SpanKind
from weft.types import (
    AssistantMessage,
    SystemMessage,
    TextBlock,
    ToolCall,
    ToolCallBlock,
    ToolResult,
    UserMessage,
)


class FilePromptLoader:
    """A loader that returns a fully specified prompt."""

    async def load(self):
        return Prompt(
            name="support",
            version="2.1.0",
            model="small",
            messages=(SystemMessage("You are {{ name }}."),),
            temperature=0.3,
            max_tokens=256,
        )


class TestTemplateValues:
    def test_builtins(self):
        now = datetime(2024, 5, 17, 9, 30, 5, tzinfo=timezone.utc)
        values = template_values("math", {"topic": "sums"}, now=now)
        assert values == {
            "topic": "sums",
            "name": "math",
            "date": "2024-05-17",
            "time": "09:30:05",
            "datetime": "2024-05-17T09:30:05+00:00",
        }

    def test_name_cannot_be_overridden(self):
        assert template_values("math", {"name": "other"})["name"] == "math"


class TestRender:
    def test_render(self):
        assert render("Hi {{ user }}!", {"user": "Ada"}) == "Hi Ada!"

    def test_syntax_error(self):
        with pytest.raises(ConfigurationError):
            render("{% if %}", {})

    def test_sandbox_blocks_attribute_escape(self):
        with pytest.raises(ConfigurationError):
            render("{{ ''.__class__.__mro__[1].__subclasses__() }}", {})

    def test_render_messages(self):
        call = ToolCall("c1", "lookup")
        messages = [
            SystemMessage("I am {{ name }}"),
            UserMessage("{{ question }}"),
            AssistantMessage(content=(TextBlock("for {{ name }}"), ToolCallBlock(call))),
            ToolResult("c1", "{{ untouched }}"),
        ]

        rendered = render_messages("math", messages, {"question": "2+2?"})

        assert rendered == [
            SystemMessage("I am math"),
            UserMessage("2+2?"),
            AssistantMessage(content=(TextBlock("for math"), ToolCallBlock(call))),
            ToolResult("c1", "{{ untouched }}"),
        ]


class TestPromptLoaders:
    @pytest.mark.asyncio
    async def test_static_prompt(self):
        prompt = await static_prompt("Be brief.").load()
        assert prompt.messages == (SystemMessage("Be brief."),)
        assert prompt.name == "static"
        assert isinstance(static_prompt("x"), StaticPrompt)

    @pytest.mark.asyncio
    async def test_with_prompt_configures_run(self, question):
        tracer = MemoryTracer()
        completer = ScriptedCompleter(text_response("ok"))
        agent = Agent(
            "support",
            with_system_message("Be kind."),
            with_prompt(FilePromptLoader()),
            completer=completer,
            memory=question,
        )

        await agent.run(with_tracer(tracer))

        request = completer.requests[0]
        assert request.model == "small"
        assert request.temperature == 0.3
        assert request.max_tokens == 256
        assert request.messages[:2] == [
            SystemMessage("You are support."),
            SystemMessage("Be kind."),
        ]
        (task,) = tracer.by_kind(SpanKind.TASK)
        assert task.metadata["prompt_name"] == "support"
        assert task.metadata["prompt_version"] == "2.1.0"

    @pytest.mark.asyncio
    async def test_loaders_run_every_time(self, question):
        loads = []

        async def count(config):
            loads.append(config.name)
            return config

        completer = ScriptedCompleter(text_response("a"), text_response("b"))
        agent = Agent("math", with_option_loader(count), completer=completer, memory=question)

        await agent.run()
        await agent.run()

        assert loads == ["math", "math"]

    @pytest.mark.asyncio
    async def test_loader_failure_propagates(self, question):
        async def broken(config):
            raise ConfigurationError("prompt store unavailable")

        agent = Agent(
            "math",
            with_option_loader(broken),
            completer=ScriptedCompleter(text_response("a")),
            memory=question,
        )

        with pytest.raises(ConfigurationError, match="prompt store unavailable"):
            await agent.run()
