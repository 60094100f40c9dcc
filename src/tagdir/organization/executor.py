"""Executor for planned directory operations."""

from __future__ import annotations

import logging
from typing import Callable, Iterable, Optional

from .actions import describe
from .errors import (
    DestinationExistsError,
    OperationError,
    SourceNotDirectoryError,
    SourceNotFileError,
    TemplateMismatchError,
)
from .models import ActionFailure, ActionType, ExecutionReport, RenameAction
from .ports import DirectoryOps

LOGGER = logging.getLogger(__name__)


def _never() -> bool:
    return False


class ActionExecutor:
    """Apply an action log in order, collecting per-action failures.

    A failing action does not stop the run; only an abort request does, in
    which case the remaining actions are left unexecuted. Changes already
    applied are not rolled back.
    """

    def __init__(
        self,
        ops: DirectoryOps,
        *,
        should_abort: Callable[[], bool] = _never,
    ) -> None:
        self.ops = ops
        self.should_abort = should_abort

    def run(
        self,
        actions: Iterable[RenameAction],
        directory_name: Optional[str] = None,
    ) -> ExecutionReport:
        """Execute ``actions`` sequentially.

        Args:
            actions: Actions in planned order.
            directory_name: Directory tracked by the caller; updated in the
                report when a directory rename moves exactly this directory.

        Returns:
            ExecutionReport: Counts, failures and the tracked directory.
        """
        pending = list(actions)
        report = ExecutionReport(directory_name=directory_name)
        for index, action in enumerate(pending):
            if self.should_abort():
                report.aborted = True
                report.remaining = len(pending) - index
                LOGGER.warning("Aborted with %d actions left", report.remaining)
                break
            try:
                self._apply(action, report)
            except OperationError as exc:
                LOGGER.warning("Action %d failed: %s", index, exc)
                report.failures.append(
                    ActionFailure(index=index, kind=exc.kind, message=str(exc), action=action)
                )
            else:
                report.applied += 1
                LOGGER.info("Applied %s", describe(action).as_list())
        return report

    def _apply(self, action: RenameAction, report: ExecutionReport) -> None:
        if action.kind == ActionType.CREATE_DIRECTORY:
            self._create_directory(action.destination)
        elif action.kind == ActionType.RENAME_DIRECTORY:
            self._rename_directory(action.source, action.destination)
            if report.directory_name == action.source:
                report.directory_name = action.destination
        elif action.kind == ActionType.RENAME_FILE:
            self._rename_file(action)
        else:
            raise TemplateMismatchError(action.destination.rstrip("\n"))

    def _create_directory(self, path: str) -> None:
        if self.ops.path_is_directory(path):
            return
        self.ops.create_directory(path)

    def _rename_directory(self, old: str, new: str) -> None:
        if self.ops.path_exists(new) and not self.ops.same_entry(old, new):
            raise DestinationExistsError(f"File {new} already exists")
        if not self.ops.path_is_directory(old):
            raise SourceNotDirectoryError(f"{old} is not a directory")
        self.ops.close_open_handles_under(old)
        self.ops.rename_directory(old, new)

    def _rename_file(self, action: RenameAction) -> None:
        old, new = action.source, action.destination
        if old == new:
            return
        if old.lower() != new.lower() and self.ops.path_exists(new):
            if self.ops.path_is_file(new) and (
                not self.ops.path_exists(old) or self.ops.same_entry(old, new)
            ):
                # Already moved by an earlier run.
                return
            raise DestinationExistsError(f"{new} already exists")
        if not self.ops.path_is_file(old):
            raise SourceNotFileError(f"{old} is not a file")
        if action.handle is not None:
            action.handle.close()
        self.ops.rename_file(old, new, action.handle)


__all__ = ["ActionExecutor"]
