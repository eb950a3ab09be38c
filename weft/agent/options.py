"""
Agent options.

Each option is a pure function ``AgentConfig -> AgentConfig``. Options passed
to ``Agent(...)`` shape the agent; options passed to ``Agent.run(...)`` apply
to that run only.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterable, Mapping
from typing import Any

from pydantic import BaseModel

from ..errors import ConfigurationError
from ..memory import Memory
from ..prompts import PromptLoader
from ..tools import (
    Storage,
    Toolset,
    as_static,
    builtin_tool,
    inline_tool,
    storage_read_tool,
    storage_tools,
)
from ..tracing import Tracer
from ..types import (
    Approver,
    AssistantMessage,
    ChatCompleter,
    Message,
    Reasoning,
    StreamCallback,
    SystemMessage,
    Tool,
    ToolChoice,
    ToolContext,
    ToolHandler,
    UserMessage,
)
from .approval import approve_all, approve_calls, approve_tools, reject_calls
from .config import AgentConfig, Finalizer, Option, OptionLoader
from .finalizers import require_json


def with_options(*options: Option) -> Option:
    def apply(config: AgentConfig) -> AgentConfig:
        for option in options:
            config = option(config)
        return config

    return apply


# -- collaborators --


def with_memory(memory: Memory) -> Option:
    return lambda config: config.replace(memory=memory)


def with_toolset(toolset: Toolset) -> Option:
    return lambda config: config.replace(toolset=toolset)


def with_completer(completer: ChatCompleter) -> Option:
    return lambda config: config.replace(completer=completer)


def with_tracer(tracer: Tracer) -> Option:
    return lambda config: config.replace(tracer=tracer)


def with_streamer(streamer: StreamCallback) -> Option:
    return lambda config: config.replace(streamer=streamer)


def with_description(description: str) -> Option:
    return lambda config: config.replace(description=description)


# -- tools --


def with_tool(tool: Tool, handler: ToolHandler) -> Option:
    return lambda config: config.replace(toolset=as_static(config.toolset).extend(tool, handler))


def with_inline_tool(
    name: str,
    description: str,
    fn: Callable[[Any, ToolContext], Awaitable[Any] | Any],
    input_model: type[BaseModel],
    output_model: type[BaseModel] | None = None,
) -> Option:
    return with_tool(*inline_tool(name, description, fn, input_model, output_model))


def with_builtin_tool(name: str, kind: str, description: str = "") -> Option:
    return with_tool(*builtin_tool(name, kind, description))


def with_storage_tools(storage: Storage) -> Option:
    return with_options(*(with_tool(tool, handler) for tool, handler in storage_tools(storage)))


def with_storage_read_tool(storage: Storage) -> Option:
    return with_tool(*storage_read_tool(storage))


# -- starter messages and prompts --


def with_messages(messages: Iterable[Message]) -> Option:
    added = tuple(messages)
    return lambda config: config.replace(messages=config.messages + added)


def with_system_message(text: str) -> Option:
    return with_messages([SystemMessage(text)])


def with_user_message(text: str) -> Option:
    return with_messages([UserMessage(text)])


def with_assistant_message(text: str) -> Option:
    return with_messages([AssistantMessage.from_text(text)])


def with_values(values: Mapping[str, Any]) -> Option:
    return lambda config: config.replace(values={**config.values, **values})


def with_option_loader(*loaders: OptionLoader) -> Option:
    return lambda config: config.replace(loaders=config.loaders + loaders)


def with_prompt(loader: PromptLoader) -> Option:
    """Load a prompt at the start of every run and apply it to the run's config."""

    async def apply(config: AgentConfig) -> AgentConfig:
        prompt = await loader.load()
        changes: dict[str, Any] = {
            "messages": tuple(prompt.messages) + config.messages,
            "attributes": {
                **config.attributes,
                "prompt_name": prompt.name,
                "prompt_version": prompt.version,
            },
        }
        if prompt.model:
            changes["model"] = prompt.model
        for param in ("temperature", "max_tokens", "top_p", "top_k"):
            value = getattr(prompt, param)
            if value is not None:
                changes[param] = value
        return config.replace(**changes)

    return with_option_loader(apply)


# -- model and sampling --


def with_model(model: str) -> Option:
    return lambda config: config.replace(model=model)


def with_model_mapper(mapping: Mapping[str, str]) -> Option:
    return lambda config: config.replace(model_mapper=dict(mapping))


def with_temperature(temperature: float) -> Option:
    return lambda config: config.replace(temperature=temperature)


def with_max_tokens(max_tokens: int) -> Option:
    return lambda config: config.replace(max_tokens=max_tokens)


def with_top_p(top_p: float) -> Option:
    return lambda config: config.replace(top_p=top_p)


def with_top_k(top_k: int) -> Option:
    return lambda config: config.replace(top_k=top_k)


def with_reasoning(reasoning: Reasoning) -> Option:
    return lambda config: config.replace(reasoning=reasoning)


def with_tool_choice(choice: ToolChoice | str) -> Option:
    return lambda config: config.replace(tool_choice=ToolChoice(choice))


# -- loop behaviour --


def with_parallelism(limit: int) -> Option:
    """Bound concurrent tool calls: 1 runs them sequentially, 0 or less means unbounded."""
    return lambda config: config.replace(parallelism=limit)


def with_iterations(iterations: int) -> Option:
    if iterations < 1:
        raise ConfigurationError(f"iterations must be at least 1, got {iterations}")
    return lambda config: config.replace(iterations=iterations)


def with_strict_iterations(strict: bool = True) -> Option:
    """Raise AgentMaxStepsError instead of returning the last draft when iterations run out."""
    return lambda config: config.replace(strict_iterations=strict)


def with_finalizer(*finalizers: Finalizer) -> Option:
    return lambda config: config.replace(finalizers=config.finalizers + finalizers)


def with_structured_output() -> Option:
    return with_finalizer(require_json)


def with_approver(*approvers: Approver) -> Option:
    return lambda config: config.replace(approvers=config.approvers + approvers)


def with_approvals(*call_ids: str) -> Option:
    return with_approver(approve_calls(call_ids))


def with_rejections(*call_ids: str) -> Option:
    return with_approver(reject_calls(call_ids))


def with_auto_approve_all() -> Option:
    return with_approver(approve_all)


def with_auto_approve_tools(*names: str) -> Option:
    return with_approver(approve_tools(names))
