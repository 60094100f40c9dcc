"""Directory reorganization plan data models."""

from __future__ import annotations

from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ActionType(str, Enum):
    """Kind of filesystem operation recorded in an action log."""

    CREATE_DIRECTORY = "create_directory"
    RENAME_DIRECTORY = "rename_directory"
    RENAME_FILE = "rename_file"
    REPORT_ERROR = "report_error"


class ErrorKind(str, Enum):
    """Categories of per-action failures collected during execution."""

    ALREADY_EXISTS = "already_exists"
    NOT_A_DIRECTORY = "not_a_directory"
    NOT_A_FILE = "not_a_file"
    OPERATION_FAILED = "operation_failed"
    TEMPLATE_MISMATCH = "template_mismatch"
    UNSAFE = "unsafe"


class RenameAction(BaseModel):
    """Represents one planned filesystem operation.

    Attributes:
        kind: Type of operation to perform.
        source: Path being renamed; empty for directory creation and error reports.
        destination: Target path, or the diagnostic message for error reports.
        handle: File the action was planned for, used to release open handles and
            to keep an in-memory directory model in sync after a rename.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    kind: ActionType
    source: str = ""
    destination: str
    handle: Any = Field(default=None, exclude=True, repr=False)


class ActionDescription(BaseModel):
    """Human-readable rendering of an action for progress output.

    Attributes:
        verb: Operation label such as ``Rename directory``.
        source: Source path when the action has one.
        destination: Destination path or error message.
    """

    verb: str
    source: Optional[str] = None
    destination: str

    def as_list(self) -> List[str]:
        """Return the ``[verb, source?, destination]`` form of the description."""
        parts = [self.verb]
        if self.source:
            parts.append(self.source)
        parts.append(self.destination)
        return parts


class ActionFailure(BaseModel):
    """Failure recorded for a single action of an executed log."""

    index: int
    kind: ErrorKind
    message: str
    action: RenameAction


class ExecutionReport(BaseModel):
    """Outcome of executing an action log.

    Attributes:
        applied: Number of actions that completed successfully.
        failures: Per-action failures in execution order.
        aborted: Whether execution stopped early because of an abort request.
        remaining: Number of actions left unexecuted after an abort.
        directory_name: Tracked application directory after execution.
    """

    applied: int = 0
    failures: List[ActionFailure] = Field(default_factory=list)
    aborted: bool = False
    remaining: int = 0
    directory_name: Optional[str] = None

    @property
    def ok(self) -> bool:
        """Return True when no action failed and the run was not aborted."""
        return not self.failures and not self.aborted

    @property
    def error_message(self) -> str:
        """Return all failure messages as newline-terminated lines."""
        return "".join(f"{failure.message}\n" for failure in self.failures)


__all__ = [
    "ActionType",
    "ErrorKind",
    "RenameAction",
    "ActionDescription",
    "ActionFailure",
    "ExecutionReport",
]
