"""Agent core, re-exported from sub-modules."""

from .config import AgentConfig, Finalizer, Option, OptionLoader, apply_options
from .core import Agent
from .approval import decide, approve_all, approve_calls, approve_tools, reject_calls
from .dispatch import ToolDispatcher, normalize_arguments
from .finalizers import require_json, run_finalizers
from .outcome import Continue, Done, HandOff, StepOutcome
from .delegation import with_handoff_tool, with_orchestrator_tool, with_specialist_tool
from .options import (
    with_approvals,
    with_approver,
    with_assistant_message,
    with_auto_approve_all,
    with_auto_approve_tools,
    with_builtin_tool,
    with_completer,
    with_description,
    with_finalizer,
    with_inline_tool,
    with_iterations,
    with_max_tokens,
    with_memory,
    with_messages,
    with_model,
    with_model_mapper,
    with_option_loader,
    with_options,
    with_parallelism,
    with_prompt,
    with_reasoning,
    with_rejections,
    with_storage_read_tool,
    with_storage_tools,
    with_streamer,
    with_strict_iterations,
    with_structured_output,
    with_system_message,
    with_temperature,
    with_tool,
    with_tool_choice,
    with_toolset,
    with_top_k,
    with_top_p,
    with_tracer,
    with_user_message,
    with_values,
)

__all__ = [
    "Agent",
    "AgentConfig",
    "Finalizer",
    "Option",
    "OptionLoader",
    "apply_options",
    "decide",
    "approve_all",
    "approve_calls",
    "approve_tools",
    "reject_calls",
    "ToolDispatcher",
    "normalize_arguments",
    "require_json",
    "run_finalizers",
    "Continue",
    "Done",
    "HandOff",
    "StepOutcome",
    "with_handoff_tool",
    "with_orchestrator_tool",
    "with_specialist_tool",
    "with_approvals",
    "with_approver",
    "with_assistant_message",
    "with_auto_approve_all",
    "with_auto_approve_tools",
    "with_builtin_tool",
    "with_completer",
    "with_description",
    "with_finalizer",
    "with_inline_tool",
    "with_iterations",
    "with_max_tokens",
    "with_memory",
    "with_messages",
    "with_model",
    "with_model_mapper",
    "with_option_loader",
    "with_options",
    "with_parallelism",
    "with_prompt",
    "with_reasoning",
    "with_rejections",
    "with_storage_read_tool",
    "with_storage_tools",
    "with_streamer",
    "with_strict_iterations",
    "with_structured_output",
    "with_system_message",
    "with_temperature",
    "with_tool",
    "with_tool_choice",
    "with_toolset",
    "with_top_k",
    "with_top_p",
    "with_tracer",
    "with_user_message",
    "with_values",
]
