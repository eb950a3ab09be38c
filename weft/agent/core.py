"""The agent orchestration loop: request, dispatch tools, finalize."""

from __future__ import annotations

import asyncio
import logging

from ..errors import (
    AgentAbortError,
    AgentMaxStepsError,
    CompleterError,
    ConfigurationError,
    MemoryWriteError,
    WeftError,
)
from ..memory import Memory, last_message
from ..prompts import render_messages
from ..tools import Toolset
from ..tracing import SpanKind
from ..types import (
    AssistantMessage,
    ChatCompleter,
    CompletionRequest,
    CompletionResponse,
    FinishReason,
    Message,
    UserMessage,
    message_to_dict,
)
from .config import AgentConfig, Option, apply_options
from .dispatch import ToolDispatcher
from .finalizers import run_finalizers
from .options import with_memory
from .outcome import Continue, Done, HandOff, StepOutcome

logger = logging.getLogger(__name__)


class Agent:
    """
    A named model-driven participant in a conversation.

    The agent's configuration is fixed at construction. Each ``run`` derives
    its own config from it, so concurrent runs never see each other's options;
    they do share the agent's memory and toolset.
    """

    def __init__(
        self,
        name: str,
        *options: Option,
        completer: ChatCompleter | None = None,
        memory: Memory | None = None,
        toolset: Toolset | None = None,
        description: str = "",
    ) -> None:
        config = AgentConfig.from_settings(name)
        changes = {
            "completer": completer,
            "memory": memory,
            "toolset": toolset,
            "description": description or None,
        }
        config = config.replace(**{k: v for k, v in changes.items() if v is not None})
        self._config = apply_options(config, options)

    @property
    def name(self) -> str:
        return self._config.name

    @property
    def description(self) -> str:
        return self._config.description

    @property
    def config(self) -> AgentConfig:
        return self._config

    @property
    def memory(self) -> Memory:
        return self._config.memory

    async def run(self, *options: Option, signal: asyncio.Event | None = None) -> AssistantMessage:
        """
        Drive the conversation until a reply passes every finalizer.

        Raises ``ToolApprovalRequest`` when a tool call needs a decision; the
        pending call stays in memory and a later run with approvals resumes it.
        Completer and memory failures are raised as ``CompleterError`` and
        ``MemoryWriteError``; setting ``signal`` raises ``AgentAbortError``.
        """
        config = apply_options(self._config, options)

        with config.tracer.start_span(f'agent "{config.name}"', kind=SpanKind.TASK) as span:
            for loader in config.loaders:
                config = await loader(config)
            completer = config.completer
            if completer is None:
                raise ConfigurationError(f'agent "{config.name}" has no completer')
            if config.iterations < 1:
                raise ConfigurationError(f"iterations must be at least 1, got {config.iterations}")

            span.set_metadata("model", config.model)
            for key, value in config.attributes.items():
                span.set_metadata(key, value)

            logger.debug("Agent %s run started", config.name)
            reply = await _Run(config, completer, signal).execute()
            span.set_output(reply.text())
            return reply

    def __repr__(self) -> str:
        return f"Agent(name={self.name!r})"


class _Run:
    """State of a single ``Agent.run`` invocation."""

    def __init__(
        self, config: AgentConfig, completer: ChatCompleter, signal: asyncio.Event | None
    ) -> None:
        self.config = config
        self.completer = completer
        self.signal = signal
        self.dispatcher = ToolDispatcher(config, signal)
        self.starter: list[Message] = render_messages(config.name, config.messages, config.values)

    async def execute(self) -> AssistantMessage:
        config = self.config

        # a previous run stopped at the approval gate: settle its calls first
        last = last_message(config.memory)
        if isinstance(last, AssistantMessage) and last.tool_calls:
            logger.debug("Agent %s resuming %d tool call(s)", config.name, len(last.tool_calls))
            handoff = await self.dispatcher.call(last)
            if handoff is not None:
                return await self._hand_off(handoff)

        draft: AssistantMessage | None = None
        for iteration in range(config.iterations):
            outcome = await self._step(iteration)
            match outcome:
                case Done(reply=reply):
                    logger.debug("Agent %s done after %d iteration(s)", config.name, iteration + 1)
                    return reply
                case HandOff():
                    return await self._hand_off(outcome)
                case Continue(draft=reply):
                    draft = reply

        if config.strict_iterations or draft is None:
            raise AgentMaxStepsError(config.iterations, draft)
        logger.warning(
            "Agent %s exhausted %d iterations; returning the last draft",
            config.name,
            config.iterations,
        )
        return draft

    async def _step(self, iteration: int) -> StepOutcome:
        self._check_signal()

        response = await self._complete(self._request())
        reply = response.to_message()
        await self._append(reply)
        logger.debug(
            "Agent %s iteration %d finished with %s",
            self.config.name,
            iteration,
            response.finish_reason,
        )

        if bool(reply.tool_calls) != (response.finish_reason == FinishReason.TOOL_CALLS):
            logger.debug(
                "Agent %s reply has %d tool call(s) but finish reason %s",
                self.config.name,
                len(reply.tool_calls),
                response.finish_reason,
            )
        if reply.tool_calls:
            handoff = await self.dispatcher.call(reply)
            return handoff if handoff is not None else Continue(reply)

        error = await run_finalizers(self.config.finalizers, reply)
        if error is not None:
            logger.info("Agent %s reply rejected by finalizer: %s", self.config.name, error)
            await self._append(UserMessage(f"ERROR: {error}"))
            return Continue(reply)

        return Done(reply)

    def _request(self) -> CompletionRequest:
        config = self.config
        tools = config.toolset.list()
        return CompletionRequest(
            model=config.resolve_model(),
            messages=[*self.starter, *config.memory.list()],
            tools=tools,
            tool_choice=config.tool_choice,
            parallel_tool_calls=bool(tools) and config.parallelism != 1,
            max_tokens=config.max_tokens,
            temperature=config.temperature,
            top_p=config.top_p,
            top_k=config.top_k,
            reasoning=config.reasoning,
            stream=config.streamer,
        )

    async def _complete(self, request: CompletionRequest) -> CompletionResponse:
        with self.config.tracer.start_span(
            "chat_completion",
            kind=SpanKind.LLM,
            input=[message_to_dict(m) for m in request.messages],
            attributes={"model": request.model},
        ) as span:
            try:
                response = await self.completer.complete(request)
            except CompleterError:
                raise
            except Exception as e:
                raise CompleterError(f"completion failed: {e}", e) from e

            usage = response.usage
            span.set_metric("tokens", usage.total_tokens)
            span.set_metric("prompt_tokens", usage.prompt_tokens)
            span.set_metric("completion_tokens", usage.completion_tokens)
            span.set_metric("prompt_cached_tokens", usage.cached_prompt_tokens)
            span.set_output(message_to_dict(response.to_message()))
            return response

    async def _append(self, message: Message) -> None:
        try:
            await self.config.memory.append(message)
        except WeftError:
            raise
        except Exception as e:
            raise MemoryWriteError(f"failed to record message: {e}", e) from e

    async def _hand_off(self, outcome: HandOff) -> AssistantMessage:
        logger.info("Agent %s transferring to %s", self.config.name, outcome.agent.name)
        return await outcome.agent.run(with_memory(self.config.memory), signal=self.signal)

    def _check_signal(self) -> None:
        if self.signal is not None and self.signal.is_set():
            raise AgentAbortError()
