"""Tool dispatch: approve, execute concurrently, commit results as one batch."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

from ..errors import AgentAbortError, Handoff, MemoryWriteError, ToolApprovalRequest, WeftError
from ..tracing import SpanKind
from ..types import (
    AssistantMessage,
    Chunk,
    ChunkType,
    Message,
    ToolCall,
    ToolCallApproval,
    ToolCallBlock,
    ToolContext,
    ToolError,
    ToolResult,
)
from .approval import decide
from .config import AgentConfig
from .outcome import HandOff

logger = logging.getLogger(__name__)

REJECTED_MESSAGE = "rejected by the user"
NOT_EXECUTED_MESSAGE = "not executed: handed off"


def normalize_arguments(arguments: str) -> str:
    stripped = arguments.strip()
    if not stripped or stripped == "null":
        return "{}"
    return arguments


def _resolved_after(messages: list[Message], reply: AssistantMessage) -> set[str]:
    """Call ids answered after the last occurrence of ``reply``; ids may repeat across turns."""
    for position in range(len(messages) - 1, -1, -1):
        if messages[position] == reply:
            return {
                m.call_id
                for m in messages[position + 1 :]
                if isinstance(m, (ToolResult, ToolError))
            }
    return set()


@dataclass
class _PendingCall:
    index: int  # block index within the assistant message
    call: ToolCall
    approval: ToolCallApproval


class ToolDispatcher:
    """
    Executes the tool calls of one assistant message.

    Every call receives exactly one ToolResult or ToolError, committed to memory
    in call order with a single ``extend`` once the whole batch has finished.
    Calls that already have a result in memory are skipped, so dispatching the
    same message twice never duplicates entries.
    """

    def __init__(self, config: AgentConfig, signal: asyncio.Event | None = None) -> None:
        self.config = config
        self.signal = signal

    async def call(self, reply: AssistantMessage) -> HandOff | None:
        pending = self._pending(reply)
        if not pending:
            return None

        undecided = [p.call for p in pending if p.approval == ToolCallApproval.UNDECIDED]
        if undecided:
            logger.info(
                "Agent %s deferred %d tool call(s) awaiting approval",
                self.config.name,
                len(undecided),
            )
            raise ToolApprovalRequest(undecided)

        results: list[Message | None] = [None] * len(pending)
        handoff: list[Handoff] = []

        async def run(slot: int, item: _PendingCall) -> None:
            if item.approval == ToolCallApproval.REJECTED:
                results[slot] = ToolError(item.call.id, REJECTED_MESSAGE)
                return
            if handoff:
                results[slot] = ToolError(item.call.id, NOT_EXECUTED_MESSAGE)
                return
            results[slot] = await self._execute(item, handoff)

        limit = self.config.parallelism
        if limit > 0:
            semaphore = asyncio.Semaphore(limit)

            async def bounded(slot: int, item: _PendingCall) -> None:
                async with semaphore:
                    await run(slot, item)

            await asyncio.gather(*(bounded(i, p) for i, p in enumerate(pending)))
        else:
            await asyncio.gather(*(run(i, p) for i, p in enumerate(pending)))

        if self.signal is not None and self.signal.is_set():
            raise AgentAbortError()

        batch = [r for r in results if r is not None]
        await self._commit(batch)

        if handoff:
            signal = handoff[0]
            logger.info("Agent %s handed off to %s", self.config.name, signal.agent.name)
            return HandOff(agent=signal.agent, message=signal.message)
        return None

    def _pending(self, reply: AssistantMessage) -> list[_PendingCall]:
        resolved = _resolved_after(self.config.memory.list(), reply)
        return [
            _PendingCall(index, block.call, decide(block.call, self.config.approvers))
            for index, block in enumerate(reply.content)
            if isinstance(block, ToolCallBlock) and block.call.id not in resolved
        ]

    async def _execute(self, item: _PendingCall, handoff: list[Handoff]) -> Message:
        call = item.call
        ctx = ToolContext(
            agent=self.config.name,
            call_id=call.id,
            tool_name=call.name,
            memory=self.config.memory,
            signal=self.signal,
        )
        arguments = normalize_arguments(call.arguments)

        await self._emit(Chunk(ChunkType.TOOL_CALL_EXECUTE, index=item.index, call=call))
        with self.config.tracer.start_span(
            f'tool_call "{call.name}"', kind=SpanKind.TOOL, input=arguments
        ) as span:
            try:
                output = await self.config.toolset.call(call.name, arguments, ctx)
            except Handoff as e:
                handoff.append(e)
                text = e.message or f"handed off to {e.agent.name}"
                result: Message = ToolResult(call.id, text)
            except Exception as e:
                logger.warning("Tool %s (%s) failed: %s", call.name, call.id, e, exc_info=True)
                span.set_error(e)
                result = ToolError(call.id, str(e) or type(e).__name__)
            else:
                result = ToolResult(call.id, output)
            span.set_output(str(result))

        await self._emit(
            Chunk(ChunkType.TOOL_CALL_COMPLETE, index=item.index, call=call, result=result)
        )
        return result

    async def _commit(self, messages: list[Message]) -> None:
        try:
            await self.config.memory.extend(messages)
        except WeftError:
            raise
        except Exception as e:
            raise MemoryWriteError(f"failed to record tool results: {e}", e) from e

    async def _emit(self, chunk: Chunk) -> None:
        if self.config.streamer is not None:
            await self.config.streamer(chunk)
