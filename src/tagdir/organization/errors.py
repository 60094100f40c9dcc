"""Errors raised while applying planned directory operations."""

from __future__ import annotations

from .models import ErrorKind


class OperationError(Exception):
    """Base exception for a single action that could not be applied."""

    kind: ErrorKind = ErrorKind.OPERATION_FAILED


class DestinationExistsError(OperationError):
    """Raised when the destination is occupied by an unrelated entry."""

    kind = ErrorKind.ALREADY_EXISTS


class SourceNotDirectoryError(OperationError):
    """Raised when a directory rename source is not a directory."""

    kind = ErrorKind.NOT_A_DIRECTORY


class SourceNotFileError(OperationError):
    """Raised when a file rename source is not a regular file."""

    kind = ErrorKind.NOT_A_FILE


class OperationFailedError(OperationError):
    """Raised when the underlying filesystem call fails."""

    kind = ErrorKind.OPERATION_FAILED


class UnsafeRenameError(OperationError):
    """Raised when a case-only rename could overwrite a different file."""

    kind = ErrorKind.UNSAFE


class TemplateMismatchError(OperationError):
    """Raised for error reports planned when a format produced an unreachable path."""

    kind = ErrorKind.TEMPLATE_MISMATCH


__all__ = [
    "OperationError",
    "DestinationExistsError",
    "SourceNotDirectoryError",
    "SourceNotFileError",
    "OperationFailedError",
    "UnsafeRenameError",
    "TemplateMismatchError",
]
