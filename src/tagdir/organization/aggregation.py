"""Aggregate placeholder resolution for directory names.

A directory format may reference aggregate codes such as ``%{max-year}``.
Their values depend on every file that ends up in the same directory, so the
template engine leaves the bare token (``max-year``) in the directory string
and reports each file's base value here. Files destined for the same raw
directory string form a session; once a file maps elsewhere, or the batch
ends, the session is closed and the tokens are replaced by the aggregate.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Tuple

LOGGER = logging.getLogger(__name__)

AGGREGATE_PREFIXES = ("max-", "min-", "unq-")


def is_aggregate_code(code: str) -> bool:
    """Return True if ``code`` names an aggregate such as ``max-year``."""
    return code.startswith(AGGREGATE_PREFIXES) and len(code) > 4


def base_code(code: str) -> str:
    """Return the per-file code aggregated by ``code`` (``max-year`` -> ``year``)."""
    return code[4:] if is_aggregate_code(code) else code


def aggregate(code: str, values: List[str]) -> str:
    """Compute the value of an aggregate code over collected values.

    Values are compared as strings, so ``max-date`` works on ISO dates.

    Args:
        code: Aggregate code with a ``max-``, ``min-`` or ``unq-`` prefix.
        values: Per-file values collected for the code.

    Returns:
        str: The resolved value, empty if there is nothing to aggregate or the
        unique value is ambiguous.
    """
    if not values:
        return ""
    if code.startswith("max-"):
        return max(values)
    if code.startswith("min-"):
        return min(values)
    if code.startswith("unq-"):
        first = values[0]
        return first if all(value == first for value in values) else ""
    raise ValueError(f"Not an aggregate code: {code}")


class AggregationSession:
    """Values collected for files sharing one unresolved directory string."""

    def __init__(self, pending_directory: str) -> None:
        self.pending_directory = pending_directory
        self.collected: Dict[str, List[str]] = {}

    def merge(self, values: Dict[str, List[str]]) -> None:
        for code, code_values in values.items():
            self.collected.setdefault(code, []).extend(code_values)

    def resolve(self) -> str:
        """Return the pending directory with every aggregate token replaced."""
        resolved = self.pending_directory
        # Longer codes first so "max-date" is not clobbered by a "max-da" code.
        for code in sorted(self.collected, key=len, reverse=True):
            resolved = resolved.replace(code, aggregate(code, self.collected[code]))
        return resolved


class AggregationContext:
    """Accumulate aggregate values per target directory and resolve them.

    Usage per file: call :meth:`add_value` for every aggregate code the file
    contributes to, then :meth:`put_directory` with the file's raw target
    directory. After the batch, :meth:`take_replacements` yields the
    ``(placeholder_dir, resolved_dir)`` pairs.
    """

    def __init__(self) -> None:
        self._session: Optional[AggregationSession] = None
        self._buffer: Dict[str, List[str]] = {}
        self._replacements: List[Tuple[str, str]] = []
        self._has_codes = False

    def clear(self) -> None:
        """Drop all sessions, buffered values and completed replacements."""
        self._session = None
        self._buffer = {}
        self._replacements = []
        self._has_codes = False

    def add_value(self, code: str, value: str) -> None:
        """Record ``value`` as a contribution of the current file to ``code``."""
        self._buffer.setdefault(code, []).append(value)
        self._has_codes = True

    def has_aggregated_codes(self) -> bool:
        return self._has_codes

    def put_directory(self, name: str) -> None:
        """Assign the values buffered for the current file to directory ``name``.

        An empty ``name`` closes the open session without opening a new one.
        """
        session = self._session
        if session is not None and name == session.pending_directory:
            session.merge(self._buffer)
        else:
            self._close_session()
            if name:
                session = AggregationSession(name)
                session.merge(self._buffer)
                self._session = session
                LOGGER.debug("Opened aggregation session for %s", name)
        self._buffer = {}

    def take_replacements(self) -> List[Tuple[str, str]]:
        """Close any open session and return the completed directory pairs."""
        self.put_directory("")
        replacements = self._replacements
        self._replacements = []
        return replacements

    def _close_session(self) -> None:
        session = self._session
        self._session = None
        if session is None or not session.collected:
            return
        resolved = session.resolve()
        LOGGER.debug("Closed aggregation session %s -> %s", session.pending_directory, resolved)
        if resolved != session.pending_directory:
            self._replacements.append((session.pending_directory, resolved))


__all__ = [
    "AGGREGATE_PREFIXES",
    "AggregationContext",
    "AggregationSession",
    "aggregate",
    "base_code",
    "is_aggregate_code",
]
