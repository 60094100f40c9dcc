"""Planner deriving directory operations from file metadata.

For each file the planner compares the file's current directory with the
directory generated from the configured format and appends the actions
needed to get there to an :class:`ActionLog`. Directories are renamed as a
whole where possible so that every file inside travels with them; individual
files are moved only when the target directory already exists or is created
below the current one.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, List, Optional, Tuple

from .actions import ActionLog, describe
from .aggregation import AggregationContext
from .models import ActionDescription, ActionType, RenameAction
from .ports import DirectoryOps, ExpandedFormat, FileHandle, MetadataSource

LOGGER = logging.getLogger(__name__)

# Loop limits for the planner.
# They are not derived from a proof: chains of directory renames longer than
# MAX_RENAME_HOPS are not followed, formats nesting deeper than
# MAX_DESCEND_DEPTH new directories below a file are reported as errors, and a
# file is re-evaluated at most MAX_REFINEMENT_ROUNDS times.
MAX_RENAME_HOPS = 5
MAX_REFINEMENT_ROUNDS = 2
MAX_DESCEND_DEPTH = 5

ScheduledCallback = Callable[[ActionDescription], None]


class RenameMode(str, Enum):
    """Where the formatted directory name is placed.

    ``RENAME`` replaces the file's directory by a sibling named after the
    format, ``CREATE`` creates the formatted directory below it.
    """

    RENAME = "rename"
    CREATE = "create"


def parent_directory(directory: str) -> str:
    """Return the parent of ``directory`` including the trailing separator.

    Returns an empty string if ``directory`` has no separator.
    """
    slash = directory.rfind("/")
    if slash == -1:
        return ""
    return directory[: slash + 1]


class ActionPlanner:
    """Schedule the actions that move files into directories named by a format."""

    def __init__(
        self,
        log: ActionLog,
        aggregation: AggregationContext,
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
        self.log = log
        self.aggregation = aggregation
        self.metadata = metadata
        self.ops = ops
        self.template = template
        self.mode = RenameMode(mode)
        self.on_scheduled = on_scheduled
        self.max_rename_hops = max_rename_hops
        self.max_refinement_rounds = max_refinement_rounds
        self.max_descend_depth = max_descend_depth
        # (directory before any planned rename, file) for every scheduled file
        self._scheduled: List[Tuple[str, FileHandle]] = []

    def clear(self) -> None:
        """Drop the action log, aggregation state and scheduled files."""
        self.log.clear()
        self.aggregation.clear()
        self._scheduled = []

    def generate_new_dirname(self, file: FileHandle) -> Tuple[str, str, ExpandedFormat]:
        """Derive the current and desired directory of ``file``.

        Args:
            file: File to generate the directory name for.

        Returns:
            tuple: ``(current_directory, desired_directory, expansion)``. The
            desired directory equals the current one when the metadata used
            by the format is empty; it may still contain aggregate tokens.
        """
        current = file.directory.replace("\\", "/")
        if current.endswith("/"):
            current = current[:-1]
        expansion = self.metadata.expand(file, self.template)
        if expansion.empty:
            return current, current, expansion

        if expansion.text.startswith("/"):
            return current, expansion.text, expansion
        if self.mode is RenameMode.RENAME:
            desired = parent_directory(current)
        elif current:
            desired = current + "/"
        else:
            desired = ""
        return current, desired + expansion.text, expansion

    def schedule(self, file: FileHandle) -> None:
        """Schedule the actions needed to move ``file`` into its desired directory."""
        current, desired, expansion = self.generate_new_dirname(file)
        if expansion.empty:
            LOGGER.debug("No metadata for %s/%s; skipping", current, file.filename)
            return

        for code, value in expansion.aggregates:
            self.aggregation.add_value(code, value)
        self.aggregation.put_directory(desired)
        self._scheduled.append((current, file))

        again = False
        for _ in range(self.max_refinement_rounds):
            current = self.log.replace_if_already_renamed(current, self.max_rename_hops)
            if desired != current:
                if desired.startswith(current + "/"):
                    self._schedule_descendant(file, current, desired)
                else:
                    current, again = self._schedule_sibling(file, current, desired)
            if not again:
                break

    def finalize(self) -> List[Tuple[str, str]]:
        """Resolve aggregate tokens in the scheduled actions.

        Returns:
            list: The ``(placeholder_dir, resolved_dir)`` pairs applied.
        """
        replacements = self.aggregation.take_replacements()
        self.log.rewrite_prefixes(replacements)
        if replacements:
            self._move_files_into_existing()
        if self.aggregation.has_aggregated_codes() and self.on_scheduled is not None:
            for action in self.log:
                self.on_scheduled(describe(action))
        return replacements

    # ------------------------------------------------------------------ #
    # Helpers                                                            #
    # ------------------------------------------------------------------ #

    def _schedule_descendant(self, file: FileHandle, current: str, desired: str) -> None:
        dir_with_file = current
        for _ in range(self.max_descend_depth):
            new_part = desired[len(current) :]
            # new_part starts with the separator following current.
            slash = new_part.find("/", 1)
            leaf = slash == -1 or slash == len(new_part) - 1
            if not leaf:
                new_part = new_part[:slash]
            self._add(
                RenameAction(kind=ActionType.CREATE_DIRECTORY, destination=current + new_part)
            )
            current = current + new_part
            if leaf:
                self._add(
                    RenameAction(
                        kind=ActionType.RENAME_FILE,
                        source=f"{dir_with_file}/{file.filename}",
                        destination=f"{current}/{file.filename}",
                        handle=file,
                    )
                )
                return
        LOGGER.warning("Directory %s is nested too deeply below %s", desired, dir_with_file)
        self._add(
            RenameAction(
                kind=ActionType.REPORT_ERROR,
                destination=f"Directory {desired} is nested too deeply below {dir_with_file}",
            )
        )

    def _schedule_sibling(self, file: FileHandle, current: str, desired: str) -> Tuple[str, bool]:
        parent = parent_directory(current)
        if not desired.startswith(parent):
            self._add(
                RenameAction(
                    kind=ActionType.REPORT_ERROR,
                    destination=f"New directory name is too different: {desired}",
                )
            )
            return current, False

        again = False
        new_part = desired[len(parent) :]
        slash = new_part.find("/")
        if slash != -1 and slash != len(new_part) - 1:
            # Rename the current directory now, create the rest next round.
            new_part = new_part[:slash]
            again = True
        target = parent + new_part
        target_exists = self.ops.path_is_directory(target) and not self.log.has_source(target)
        if target_exists or self.log.has_destination(target):
            self._add(
                RenameAction(
                    kind=ActionType.RENAME_FILE,
                    source=f"{current}/{file.filename}",
                    destination=f"{target}/{file.filename}",
                    handle=file,
                )
            )
        else:
            self._add(
                RenameAction(
                    kind=ActionType.RENAME_DIRECTORY,
                    source=current,
                    destination=target,
                    handle=file,
                )
            )
        return target, again

    def _move_files_into_existing(self) -> None:
        # Targets named by aggregates are only known after finalizing, so a
        # directory rename may now point at a directory that already exists.
        for action in self.log:
            if action.kind != ActionType.RENAME_DIRECTORY:
                continue
            target = action.destination
            if not self.ops.path_is_directory(target) or self.log.has_source(target):
                continue
            moves = [
                RenameAction(
                    kind=ActionType.RENAME_FILE,
                    source=f"{action.source}/{file.filename}",
                    destination=f"{target}/{file.filename}",
                    handle=file,
                )
                for origin, file in self._scheduled
                if self._travels_with(origin, action)
            ]
            LOGGER.debug("%s exists; moving %d files into it", target, len(moves))
            self.log.replace(action, moves)

    def _travels_with(self, directory: str, rename: RenameAction) -> bool:
        for _ in range(self.max_rename_hops):
            action = self.log.find_by_source(directory)
            if action is None or action.kind != ActionType.RENAME_DIRECTORY:
                return False
            if action is rename:
                return True
            directory = action.destination
        return False

    def _add(self, action: RenameAction) -> None:
        if not self.log.add(action):
            return
        description = describe(action)
        LOGGER.debug("Scheduled %s", description.as_list())
        if self.on_scheduled is not None and not self.aggregation.has_aggregated_codes():
            self.on_scheduled(description)


__all__ = [
    "ActionPlanner",
    "RenameMode",
    "parent_directory",
    "MAX_RENAME_HOPS",
    "MAX_REFINEMENT_ROUNDS",
    "MAX_DESCEND_DEPTH",
]
