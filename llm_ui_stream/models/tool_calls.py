"""Tool-call records tracked by the stream aggregator."""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Optional


class ToolExecutionStatus(str, Enum):
    """Lifecycle of a single tool invocation.

    States only move forward: preparing -> executing -> ready -> completed | failed.
    """
    PREPARING = "preparing"
    EXECUTING = "executing"
    READY = "ready"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def rank(self) -> int:
        return _STATUS_RANK[self]

    @property
    def is_terminal(self) -> bool:
        return self in (ToolExecutionStatus.COMPLETED, ToolExecutionStatus.FAILED)

    def can_transition_to(self, status: "ToolExecutionStatus") -> bool:
        """Forward moves are allowed; repeating the current status is allowed too."""
        if status == self:
            return True
        if self.is_terminal:
            return False
        return status.rank > self.rank


_STATUS_RANK = {
    ToolExecutionStatus.PREPARING: 0,
    ToolExecutionStatus.EXECUTING: 1,
    ToolExecutionStatus.READY: 2,
    ToolExecutionStatus.COMPLETED: 3,
    ToolExecutionStatus.FAILED: 3,
}


@dataclass
class ToolCallInfo:
    """Tool call as announced by a provider adapter."""
    id: str
    name: str = ""
    arguments: str = ""


@dataclass
class ToolCallRecord:
    """Aggregated state of one tool call.

    Attributes:
        id: Provider tool-call id
        name: Tool name
        arguments: Accumulated (or final, once parsed) argument string
        status: Current lifecycle status
        result: Result payload attached on completion
        error: Error message attached on failure
    """
    id: str
    name: str = ""
    arguments: str = ""
    status: ToolExecutionStatus = ToolExecutionStatus.PREPARING
    result: Optional[Any] = None
    error: Optional[str] = None
    synthesized: bool = field(default=False, repr=False)

    def snapshot(self) -> "ToolCallRecord":
        """Copy of the record as it is right now."""
        return replace(self)

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "name": self.name,
            "arguments": self.arguments,
            "status": self.status.value,
        }
        if self.result is not None:
            data["result"] = self.result
        if self.error is not None:
            data["error"] = self.error
        return data
