"""Facade running a complete directory reorganization."""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Tuple

from .actions import ActionLog
from .aggregation import AggregationContext
from .executor import ActionExecutor
from .models import ActionDescription, ExecutionReport
from .planner import (
    MAX_DESCEND_DEPTH,
    MAX_REFINEMENT_ROUNDS,
    MAX_RENAME_HOPS,
    ActionPlanner,
    RenameMode,
    ScheduledCallback,
)
from .ports import DirectoryOps, FileHandle, MetadataSource

LOGGER = logging.getLogger(__name__)


class DirectoryRenamer:
    """Plan and execute the reorganization of a batch of files.

    A run has two phases. Planning calls :meth:`schedule` for every file and
    then :meth:`finalize`; execution calls :meth:`run`. The instance owns its
    action log and must not be shared between concurrent runs.
    """

    def __init__(
        self,
        metadata: MetadataSource,
        ops: DirectoryOps,
        *,
        template: str,
        mode: RenameMode = RenameMode.RENAME,
        on_scheduled: Optional[ScheduledCallback] = None,
        max_rename_hops: int = MAX_RENAME_HOPS,
        max_refinement_rounds: int = MAX_REFINEMENT_ROUNDS,
        max_descend_depth: int = MAX_DESCEND_DEPTH,
    ) -> None:
        self.ops = ops
        self.log = ActionLog()
        self.aggregation = AggregationContext()
        self.planner = ActionPlanner(
            self.log,
            self.aggregation,
            metadata,
            ops,
            template=template,
            mode=mode,
            on_scheduled=on_scheduled,
            max_rename_hops=max_rename_hops,
            max_refinement_rounds=max_refinement_rounds,
            max_descend_depth=max_descend_depth,
        )
        self.directory_name: Optional[str] = None
        self._aborted = False

    def abort(self) -> None:
        """Request planning or execution to stop at the next file or action."""
        LOGGER.warning("Abort requested")
        self._aborted = True

    def is_aborted(self) -> bool:
        return self._aborted

    def clear(self) -> None:
        """Drop scheduled actions and aggregation state and reset the abort flag.

        Must be called before scheduling a new batch.
        """
        self.planner.clear()
        self._aborted = False

    def preview(self, file: FileHandle) -> Tuple[str, str]:
        """Return the current and the new directory name of ``file``."""
        current, desired, _ = self.planner.generate_new_dirname(file)
        return current, desired

    def schedule(self, file: FileHandle) -> None:
        if self._aborted:
            return
        self.planner.schedule(file)

    def schedule_all(self, files: Iterable[FileHandle]) -> int:
        """Schedule every file, then finalize aggregate directory names.

        Returns:
            int: Number of actions in the finalized log.
        """
        for file in files:
            if self._aborted:
                LOGGER.warning("Planning aborted")
                break
            self.planner.schedule(file)
        self.finalize()
        LOGGER.info("Planned %d actions", len(self.log))
        return len(self.log)

    def finalize(self) -> List[Tuple[str, str]]:
        return self.planner.finalize()

    def describe_actions(self) -> List[ActionDescription]:
        return self.log.describe_all()

    def run(self) -> ExecutionReport:
        """Execute the scheduled actions and consume the action log.

        Returns:
            ExecutionReport: Result of the execution; ``error_message`` holds
            the combined error text.
        """
        executor = ActionExecutor(self.ops, should_abort=self.is_aborted)
        report = executor.run(self.log, directory_name=self.directory_name)
        self.directory_name = report.directory_name
        self.planner.clear()
        return report


__all__ = ["DirectoryRenamer"]
