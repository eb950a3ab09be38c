"""Structured error hierarchy for the orchestration core."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .agent import Agent
    from .types import ToolCall


class WeftError(Exception):
    def __init__(self, code: str, message: str, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.code = code
        self.cause = cause

    @classmethod
    def wrap(cls, err: Exception) -> WeftError:
        if isinstance(err, WeftError):
            return err
        return WeftError("UNKNOWN", str(err), err)


class ConfigurationError(WeftError):
    def __init__(self, message: str) -> None:
        super().__init__("CONFIGURATION_ERROR", message)


class ToolApprovalRequest(WeftError):
    """Raised when at least one tool call of a batch has no approval decision.

    Nothing from the batch has been executed. Re-run the agent with approvals
    (or rejections) for the listed calls to resume.
    """

    def __init__(self, calls: list[ToolCall]) -> None:
        names = ", ".join(call.name for call in calls)
        super().__init__("TOOL_APPROVAL_REQUIRED", f"tool approval is required: {names}")
        self.calls = list(calls)

    @property
    def call_ids(self) -> list[str]:
        return [call.id for call in self.calls]


class Handoff(WeftError):
    """Control-transfer signal raised by a tool handler.

    Tool dispatch turns it into a step outcome; it never escapes ``Agent.run``.
    """

    def __init__(self, agent: Agent, message: str | None = None) -> None:
        super().__init__("HANDOFF", "handed over")
        self.agent = agent
        self.message = message


class ToolExecutionError(WeftError):
    def __init__(
        self, code: str, tool_name: str, message: str, cause: Exception | None = None
    ) -> None:
        super().__init__(code, message, cause)
        self.tool_name = tool_name


class UnknownToolError(ToolExecutionError):
    def __init__(self, tool_name: str) -> None:
        super().__init__("TOOL_UNKNOWN", tool_name, f'unknown tool "{tool_name}"')


class BuiltinToolError(ToolExecutionError):
    def __init__(self, tool_name: str) -> None:
        super().__init__(
            "TOOL_BUILTIN",
            tool_name,
            f'attempting to execute built-in tool "{tool_name}"',
        )


class ToolArgumentsError(ToolExecutionError):
    def __init__(self, tool_name: str, cause: Exception) -> None:
        super().__init__(
            "TOOL_INVALID_ARGUMENTS",
            tool_name,
            f"failed to parse tool arguments: {cause}",
            cause,
        )


class FinalizerError(WeftError):
    def __init__(self, message: str, cause: Exception | None = None) -> None:
        super().__init__("FINALIZER_FAILED", message, cause)


class CompleterError(WeftError):
    def __init__(self, message: str, cause: Exception | None = None) -> None:
        super().__init__("COMPLETER_FAILED", message, cause)


class MemoryWriteError(WeftError):
    def __init__(self, message: str, cause: Exception | None = None) -> None:
        super().__init__("MEMORY_WRITE_FAILED", message, cause)


class AgentAbortError(WeftError):
    def __init__(self) -> None:
        super().__init__("AGENT_ABORT", "Agent execution was aborted")


class AgentMaxStepsError(WeftError):
    def __init__(self, steps: int, partial: Any = None) -> None:
        super().__init__("AGENT_MAX_STEPS", f"Agent reached max steps ({steps})")
        self.steps = steps
        self.partial = partial
