"""
weft: an agent-orchestration core.

An ``Agent`` drives a conversation between a model backend (any
``ChatCompleter``) and a set of tools: it iterates model turns, gates tool
calls behind approvers, runs approved calls concurrently, validates final
replies with finalizers and can hand the conversation to another agent.

```python
from weft import Agent, UserMessage, StaticMemory, with_auto_approve_all

memory = StaticMemory([UserMessage("2+2?")])
agent = Agent("math", completer=my_completer, memory=memory)
reply = await agent.run(with_auto_approve_all())
print(reply.text())
```
"""

from .agent import *  # noqa: F401,F403
from .agent import __all__ as _agent_all
from .errors import (
    AgentAbortError,
    AgentMaxStepsError,
    BuiltinToolError,
    CompleterError,
    ConfigurationError,
    FinalizerError,
    Handoff,
    MemoryWriteError,
    ToolApprovalRequest,
    ToolArgumentsError,
    ToolExecutionError,
    UnknownToolError,
    WeftError,
)
from .infra.logging import configure_logging, get_logger
from .memory import FileMemory, ForgetfulMemory, Memory, StaticMemory
from .prompts import Prompt, PromptLoader, StaticPrompt, static_prompt
from .settings import WeftSettings, get_settings
from .tools import InMemoryStorage, StaticToolset, Storage, Toolset, builtin_tool, inline_tool
from .tracing import LoggingTracer, MemoryTracer, NoopTracer, Span, SpanKind, Tracer
from .types import *  # noqa: F401,F403
from .types import __all__ as _types_all

__version__ = "0.1.0"

__all__ = [
    *_agent_all,
    *_types_all,
    "AgentAbortError",
    "AgentMaxStepsError",
    "BuiltinToolError",
    "CompleterError",
    "ConfigurationError",
    "FinalizerError",
    "Handoff",
    "MemoryWriteError",
    "ToolApprovalRequest",
    "ToolArgumentsError",
    "ToolExecutionError",
    "UnknownToolError",
    "WeftError",
    "configure_logging",
    "get_logger",
    "FileMemory",
    "ForgetfulMemory",
    "Memory",
    "StaticMemory",
    "Prompt",
    "PromptLoader",
    "StaticPrompt",
    "static_prompt",
    "WeftSettings",
    "get_settings",
    "InMemoryStorage",
    "StaticToolset",
    "Storage",
    "Toolset",
    "builtin_tool",
    "inline_tool",
    "LoggingTracer",
    "MemoryTracer",
    "NoopTracer",
    "Span",
    "SpanKind",
    "Tracer",
]
