"""Tool-call approval: approver factories and vote aggregation."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from ..types import Approver, ToolCall, ToolCallApproval


def decide(call: ToolCall, approvers: Sequence[Approver]) -> ToolCallApproval:
    """Any rejection wins; otherwise any approval; otherwise undecided."""
    decision = ToolCallApproval.UNDECIDED
    for approver in approvers:
        vote = approver(call)
        if vote == ToolCallApproval.REJECTED:
            return ToolCallApproval.REJECTED
        if vote == ToolCallApproval.APPROVED:
            decision = ToolCallApproval.APPROVED
    return decision


def approve_calls(call_ids: Iterable[str]) -> Approver:
    ids = frozenset(call_ids)

    def approver(call: ToolCall) -> ToolCallApproval:
        return ToolCallApproval.APPROVED if call.id in ids else ToolCallApproval.UNDECIDED

    return approver


def reject_calls(call_ids: Iterable[str]) -> Approver:
    ids = frozenset(call_ids)

    def approver(call: ToolCall) -> ToolCallApproval:
        return ToolCallApproval.REJECTED if call.id in ids else ToolCallApproval.UNDECIDED

    return approver


def approve_tools(names: Iterable[str]) -> Approver:
    allowed = frozenset(names)

    def approver(call: ToolCall) -> ToolCallApproval:
        return ToolCallApproval.APPROVED if call.name in allowed else ToolCallApproval.UNDECIDED

    return approver


def approve_all(call: ToolCall) -> ToolCallApproval:
    return ToolCallApproval.APPROVED
