"""Local filesystem implementation of the directory operations port."""

from __future__ import annotations

import logging
import os
from typing import Iterable, List, Optional

from .errors import OperationFailedError, UnsafeRenameError
from .ports import FileHandle

LOGGER = logging.getLogger(__name__)

CASE_RENAME_SUFFIX = "_CASE"


def is_case_only_rename(old: str, new: str) -> bool:
    """Return True if ``old`` and ``new`` differ only in letter case."""
    return old != new and old.lower() == new.lower()


def _handle_path(handle: FileHandle) -> str:
    return f"{handle.directory}/{handle.filename}"


class LocalDirectoryOps:
    """Perform directory operations with :mod:`os` calls.

    Handles registered at construction are closed before the directory
    containing them is renamed and are told about their new location after
    successful renames, so an in-memory file list stays in sync with disk.
    """

    def __init__(self, open_handles: Iterable[FileHandle] = ()) -> None:
        self._handles: List[FileHandle] = list(open_handles)

    def create_directory(self, path: str) -> None:
        try:
            os.mkdir(path)
        except FileExistsError:
            if os.path.isdir(path):
                return
            raise OperationFailedError(f"Create directory {path} failed")
        except OSError as exc:
            raise OperationFailedError(f"Create directory {path} failed") from exc
        if not os.path.isdir(path):
            raise OperationFailedError(f"Create directory {path} failed")

    def rename_directory(self, old: str, new: str) -> None:
        self._rename(old, new)
        if not os.path.isdir(new):
            raise OperationFailedError(f"Rename {old} to {new} failed")
        for handle in self._handles:
            path = _handle_path(handle)
            if path.startswith(old + "/"):
                handle.moved_to(new + path[len(old) :])

    def rename_file(self, old: str, new: str, handle: Optional[FileHandle] = None) -> None:
        self._rename(old, new)
        if not os.path.isfile(new):
            raise OperationFailedError(f"Rename {old} to {new} failed")
        if handle is not None:
            handle.moved_to(new)

    def path_is_directory(self, path: str) -> bool:
        return os.path.isdir(path)

    def path_is_file(self, path: str) -> bool:
        return os.path.isfile(path)

    def path_exists(self, path: str) -> bool:
        return os.path.lexists(path)

    def same_entry(self, first: str, second: str) -> bool:
        try:
            first_stat = os.stat(first)
            second_stat = os.stat(second)
        except OSError:
            return False
        return first_stat.st_ino == second_stat.st_ino and first_stat.st_dev == second_stat.st_dev

    def close_open_handles_under(self, path: str) -> None:
        prefix = path + "/"
        for handle in self._handles:
            if _handle_path(handle).startswith(prefix):
                handle.close()

    def _rename(self, old: str, new: str) -> None:
        try:
            if is_case_only_rename(old, new):
                # Case-insensitive filesystems report the new name as existing;
                # it must be the same entry as the old one.
                if os.path.lexists(new) and not self.same_entry(old, new):
                    raise UnsafeRenameError(f"{new} already exists")
                temporary = new + CASE_RENAME_SUFFIX
                LOGGER.info("Renaming %s to %s via %s", old, new, temporary)
                os.rename(old, temporary)
                os.rename(temporary, new)
            else:
                os.rename(old, new)
        except OSError as exc:
            raise OperationFailedError(f"Rename {old} to {new} failed") from exc


__all__ = ["LocalDirectoryOps", "CASE_RENAME_SUFFIX", "is_case_only_rename"]
