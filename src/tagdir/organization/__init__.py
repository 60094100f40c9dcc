"""Directory reorganization planning and execution."""

from .actions import ActionLog, describe
from .aggregation import AggregationContext
from .errors import OperationError
from .executor import ActionExecutor
from .filesystem import LocalDirectoryOps
from .models import ActionDescription, ActionType, ErrorKind, ExecutionReport, RenameAction
from .planner import ActionPlanner, RenameMode
from .ports import DirectoryOps, ExpandedFormat, FileHandle, MetadataSource
from .renamer import DirectoryRenamer

__all__ = [
    "ActionDescription",
    "ActionExecutor",
    "ActionLog",
    "ActionPlanner",
    "ActionType",
    "AggregationContext",
    "DirectoryOps",
    "DirectoryRenamer",
    "ErrorKind",
    "ExecutionReport",
    "ExpandedFormat",
    "FileHandle",
    "LocalDirectoryOps",
    "MetadataSource",
    "OperationError",
    "RenameAction",
    "RenameMode",
    "describe",
]
