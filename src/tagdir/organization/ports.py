"""Interfaces the planner and executor depend on."""

from __future__ import annotations

from typing import List, Optional, Protocol, Tuple, runtime_checkable

from pydantic import BaseModel, Field


class ExpandedFormat(BaseModel):
    """Result of expanding a format string against one file's metadata.

    Attributes:
        text: Expanded text; aggregate codes remain as bare tokens.
        aggregates: ``(aggregate_code, base_value)`` pairs referenced by the format.
        empty: True when the metadata used by the format is absent or inactive.
    """

    text: str
    aggregates: List[Tuple[str, str]] = Field(default_factory=list)
    empty: bool = False


@runtime_checkable
class FileHandle(Protocol):
    """File record an action is planned for."""

    @property
    def directory(self) -> str:
        """Directory containing the file."""

    @property
    def filename(self) -> str:
        """Name of the file inside its directory."""

    def close(self) -> None:
        """Release open handles on the file."""

    def moved_to(self, path: str) -> None:
        """Update the record after the file was moved to ``path``."""


class MetadataSource(Protocol):
    """Expands format strings with a file's metadata."""

    def expand(self, file: FileHandle, template: str) -> ExpandedFormat:
        """Expand ``template`` for ``file``."""


class DirectoryOps(Protocol):
    """Filesystem primitives used to execute an action log."""

    def create_directory(self, path: str) -> None:
        """Create ``path``; raise ``OperationError`` on failure."""

    def rename_directory(self, old: str, new: str) -> None:
        """Rename directory ``old`` to ``new``; raise ``OperationError`` on failure."""

    def rename_file(self, old: str, new: str, handle: Optional[FileHandle] = None) -> None:
        """Rename file ``old`` to ``new``; raise ``OperationError`` on failure."""

    def path_is_directory(self, path: str) -> bool:
        """Return True if ``path`` is an existing directory."""

    def path_is_file(self, path: str) -> bool:
        """Return True if ``path`` is an existing regular file."""

    def path_exists(self, path: str) -> bool:
        """Return True if anything exists at ``path``."""

    def same_entry(self, first: str, second: str) -> bool:
        """Return True if both paths refer to the same filesystem entry."""

    def close_open_handles_under(self, path: str) -> None:
        """Release open handles of files below ``path``."""


__all__ = ["ExpandedFormat", "FileHandle", "MetadataSource", "DirectoryOps"]
