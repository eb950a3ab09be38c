"""
Delegation tools: hand the conversation over, ask a specialist, or orchestrate
a list of tasks across several agents.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Literal

from pydantic import BaseModel, Field

from ..errors import FinalizerError, Handoff, ToolApprovalRequest, WeftError
from ..memory import StaticMemory
from ..types import AssistantMessage, ToolContext, UserMessage
from .config import Option
from .options import (
    with_auto_approve_tools,
    with_finalizer,
    with_inline_tool,
    with_memory,
    with_options,
)

if TYPE_CHECKING:
    from .core import Agent

logger = logging.getLogger(__name__)


class SpecialistDescription(BaseModel):
    specialist: str
    description: str


class ListSpecialistsRequest(BaseModel):
    pass


class HandoffRequest(BaseModel):
    specialist: str = Field(
        description="name of the specialist in charge of handling the conversation"
    )
    message: str = Field(default="", description="a description of the task for specialist")


class SpecialistRequest(BaseModel):
    specialist: str = Field(
        description="name of the specialist in charge of handling the conversation"
    )
    task: str = Field(
        description="detailed explanation of the task for the specialist, what she has to do"
    )
    context: str = Field(description="an extended summarization of the conversation so far")


def _roster(agents: tuple[Agent, ...]) -> dict[str, Agent]:
    return {agent.name: agent for agent in agents}


def _unknown(kind: str, name: str, roster: dict[str, Agent]) -> WeftError:
    return WeftError(
        "UNKNOWN_SPECIALIST",
        f'{kind} "{name}" does not exist, valid values: {", ".join(roster)}',
    )


def _list_specialists(agents: tuple[Agent, ...]) -> Option:
    def list_specialists(params: ListSpecialistsRequest, ctx: ToolContext) -> list[dict[str, str]]:
        return [
            SpecialistDescription(specialist=a.name, description=a.description).model_dump()
            for a in agents
        ]

    return with_inline_tool(
        "list_specialists", "List available specialists", list_specialists, ListSpecialistsRequest
    )


def with_handoff_tool(*agents: Agent) -> Option:
    """Let the model transfer the whole conversation to one of ``agents``."""
    roster = _roster(agents)

    def delegate_to(params: HandoffRequest, ctx: ToolContext) -> str:
        target = roster.get(params.specialist)
        if target is None:
            raise _unknown("specialist", params.specialist, roster)
        raise Handoff(target, params.message or None)

    return with_options(
        _list_specialists(agents),
        with_inline_tool(
            "delegate_to",
            "Handoff conversation to a specialist who can provide expert-level assistance "
            "for the user",
            delegate_to,
            HandoffRequest,
        ),
    )


def with_specialist_tool(*agents: Agent) -> Option:
    """Let the model consult one of ``agents`` on a side conversation."""
    roster = _roster(agents)

    async def ask_specialist(params: SpecialistRequest, ctx: ToolContext) -> str:
        specialist = roster.get(params.specialist)
        if specialist is None:
            raise _unknown("specialist", params.specialist, roster)

        seed = [
            AssistantMessage.from_text(
                "The summary of the conversation so far:\n" + params.context
            ),
            UserMessage(params.task),
        ]
        memory = StaticMemory(seed)
        try:
            await specialist.run(with_memory(memory), signal=ctx.signal)
        except ToolApprovalRequest as e:
            raise WeftError(
                e.code, f'specialist "{specialist.name}" needs approval: {e}', e
            ) from e
        except WeftError as e:
            raise WeftError(
                e.code, f'failed to ask specialist "{specialist.name}": {e}', e
            ) from e

        replies = [
            m.text()
            for m in memory.list()[len(seed):]
            if isinstance(m, AssistantMessage) and m.text()
        ]
        return "\n".join(replies)

    return with_options(
        _list_specialists(agents),
        with_inline_tool(
            "ask_specialist",
            "Ask a specialist who can provide expert-level assistance to perform a task",
            ask_specialist,
            SpecialistRequest,
        ),
    )


# -- orchestration --

TaskStatus = Literal["", "COMPLETE", "FAILURE", "FAILED"]


class Task(BaseModel):
    agent: str = Field(description="name of the agent in charge of performing this task")
    task: str = Field(
        description="detailed explanation of the task for the agent, "
        "what she has to do and what outcome is expected"
    )
    status: TaskStatus = ""
    outcome: str = ""


class OrchestrationRequest(BaseModel):
    context: str = Field(
        description="an extended summarization of the conversation so far, "
        "context details, requirements, identifiers, names etc"
    )
    tasks: list[Task] = Field(description="list of tasks to complete")


class CompletionReport(BaseModel):
    status: Literal["COMPLETE", "FAILURE"] = Field(
        description="COMPLETE if task is successfully complete; FAILURE if task is incomplete"
    )
    reasoning: str = Field(
        min_length=1, description="the summary of what actions have been taken and their outcome"
    )


TASK_PROMPT = (
    "You have to perform the task described below and call `complete_task` "
    "to communicate the results. \n\nThe task: "
)


def _with_completion_tool(task: Task) -> Option:
    """Register a pre-approved ``complete_task`` and refuse replies until it is called."""
    reported = False

    def complete_task(params: CompletionReport, ctx: ToolContext) -> str:
        nonlocal reported
        task.status = params.status
        task.outcome = params.reasoning
        reported = True
        return "Acknowledged"

    def require_report(reply: AssistantMessage) -> None:
        if not reported:
            raise FinalizerError(
                "you must call `complete_task` tool to report task completion status"
            )

    return with_options(
        with_inline_tool(
            "complete_task",
            "Mark task as completed or to report an failure",
            complete_task,
            CompletionReport,
        ),
        with_auto_approve_tools("complete_task"),
        with_finalizer(require_report),
    )


def with_orchestrator_tool(*agents: Agent) -> Option:
    """Let the model run a todo list, one task per agent, stopping at the first failure."""
    roster = _roster(agents)
    available = "\n".join(f"  - `{a.name}`: {a.description}" for a in agents)

    async def execute_tasks(params: OrchestrationRequest, ctx: ToolContext) -> dict:
        tasks = [t.model_copy() for t in params.tasks]
        for task in tasks:
            if task.agent not in roster:
                raise _unknown("agent", task.agent, roster)

        for task in tasks:
            agent = roster[task.agent]
            memory = StaticMemory(
                [AssistantMessage.from_text(params.context), UserMessage(TASK_PROMPT + task.task)]
            )
            try:
                await agent.run(with_memory(memory), _with_completion_tool(task), signal=ctx.signal)
            except WeftError as e:
                logger.info("Task for agent %s failed: %s", agent.name, e)
                task.status = "FAILED"
                task.outcome = f"ERROR: {e}"
                break

            if not task.status:
                task.status = "FAILED"
                task.outcome = "ERROR: agent did not respond"
            if task.status != "COMPLETE":
                break

        return {"tasks": [t.model_dump() for t in tasks]}

    description = f"Execute tasks in the todo list. Available agents are:\n{available}"
    return with_inline_tool("execute_tasks", description, execute_tasks, OrchestrationRequest)
