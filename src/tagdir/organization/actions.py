"""Ordered log of planned directory operations."""

from __future__ import annotations

import logging
from typing import Dict, Iterator, List, Optional, Tuple

from .models import ActionDescription, ActionType, RenameAction

LOGGER = logging.getLogger(__name__)

_VERBS = {
    ActionType.CREATE_DIRECTORY: "Create directory",
    ActionType.RENAME_DIRECTORY: "Rename directory",
    ActionType.RENAME_FILE: "Rename file",
    ActionType.REPORT_ERROR: "Error",
}


def describe(action: RenameAction) -> ActionDescription:
    """Return the ``(verb, [source], destination)`` description of an action."""
    return ActionDescription(
        verb=_VERBS.get(action.kind, "Error"),
        source=action.source or None,
        destination=action.destination,
    )


class ActionLog:
    """Insertion-ordered actions with lookup by source and destination.

    No two actions share a non-empty source or a non-empty destination;
    :meth:`add` rejects an action that would break this.
    """

    def __init__(self) -> None:
        self._actions: List[RenameAction] = []
        self._by_source: Dict[str, RenameAction] = {}
        self._by_destination: Dict[str, RenameAction] = {}

    def __len__(self) -> int:
        return len(self._actions)

    def __iter__(self) -> Iterator[RenameAction]:
        return iter(list(self._actions))

    def __getitem__(self, index: int) -> RenameAction:
        return self._actions[index]

    def clear(self) -> None:
        self._actions = []
        self._by_source = {}
        self._by_destination = {}

    def add(self, action: RenameAction) -> bool:
        """Append ``action`` unless its source or destination is already used.

        Returns:
            bool: True if the action was appended.
        """
        if self.has_source(action.source) or self.has_destination(action.destination):
            LOGGER.debug("Skipping duplicate action %s", describe(action).as_list())
            return False
        self._actions.append(action)
        if action.source:
            self._by_source[action.source] = action
        if action.destination:
            self._by_destination[action.destination] = action
        return True

    def has_source(self, source: str) -> bool:
        return bool(source) and source in self._by_source

    def has_destination(self, destination: str) -> bool:
        return bool(destination) and destination in self._by_destination

    def find_by_source(self, source: str) -> Optional[RenameAction]:
        return self._by_source.get(source) if source else None

    def replace_if_already_renamed(self, directory: str, max_hops: int) -> str:
        """Follow planned directory renames starting at ``directory``.

        Args:
            directory: Directory path as it currently exists.
            max_hops: Maximum number of chained renames to follow.

        Returns:
            str: Location of ``directory`` once the planned renames are applied.
        """
        for _ in range(max_hops):
            action = self._by_source.get(directory)
            if action is None or action.kind != ActionType.RENAME_DIRECTORY:
                break
            LOGGER.debug("Directory %s is renamed to %s", directory, action.destination)
            directory = action.destination
        return directory

    def rewrite_prefixes(self, replacements: List[Tuple[str, str]]) -> None:
        """Replace directory prefixes in every action's source and destination.

        Each ``(old, new)`` pair rewrites paths equal to ``old`` or below it,
        and ancestors of ``old`` that carry unresolved tokens of their own
        (intermediate directories created on the way to ``old``). Actions that
        collide with an earlier one after rewriting are dropped, and so are
        renames whose source and destination became equal. Error messages get
        the resolved directory names substituted.
        """
        if not replacements:
            return
        replacements = _with_ancestors(replacements)
        actions = self._actions
        self.clear()
        for action in actions:
            action.source = _replace_prefix(action.source, replacements)
            if action.kind == ActionType.REPORT_ERROR:
                action.destination = _replace_in_message(action.destination, replacements)
            else:
                action.destination = _replace_prefix(action.destination, replacements)
            if action.source and action.source == action.destination:
                LOGGER.debug("Dropping rename of %s onto itself", action.source)
                continue
            self.add(action)

    def replace(self, action: RenameAction, replacements: List[RenameAction]) -> None:
        """Put ``replacements`` in place of ``action``, keeping the log order."""
        actions = self._actions
        self.clear()
        for existing in actions:
            if existing is action:
                for replacement in replacements:
                    self.add(replacement)
            else:
                self.add(existing)

    def describe_all(self) -> List[ActionDescription]:
        return [describe(action) for action in self._actions]


def _with_ancestors(replacements: List[Tuple[str, str]]) -> List[Tuple[str, str]]:
    expanded: Dict[str, str] = {}
    for old, new in replacements:
        expanded.setdefault(old, new)
        old_parts = old.split("/")
        new_parts = new.split("/")
        if len(old_parts) != len(new_parts):
            continue
        for depth in range(len(old_parts) - 1, 0, -1):
            old_prefix = "/".join(old_parts[:depth])
            new_prefix = "/".join(new_parts[:depth])
            if old_prefix != new_prefix:
                expanded.setdefault(old_prefix, new_prefix)
    return sorted(expanded.items(), key=lambda pair: len(pair[0]), reverse=True)


def _replace_prefix(path: str, replacements: List[Tuple[str, str]]) -> str:
    if not path:
        return path
    for old, new in replacements:
        if path == old:
            return new
        if path.startswith(old + "/"):
            return new + path[len(old) :]
    return path


def _replace_in_message(message: str, replacements: List[Tuple[str, str]]) -> str:
    for old, new in replacements:
        message = message.replace(old, new)
    return message


__all__ = ["ActionLog", "describe"]
