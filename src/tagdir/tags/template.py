"""Expansion of directory format strings with track tags.

Codes are written ``%{name}`` or with a one-letter short form such as ``%a``.
``%{track.3}`` zero-pads the track number to three digits. Aggregate codes
(``%{max-year}``, ``%{min-date}``, ``%{unq-artist}``) are left in the output as
bare tokens and reported alongside the file's base value so they can be
resolved once every file of the target directory is known.
"""

from __future__ import annotations

import re
from typing import Dict, List, Tuple

from tagdir.organization.aggregation import base_code, is_aggregate_code
from tagdir.organization.ports import ExpandedFormat

from .reader import TrackFile

_CODE_PATTERN = re.compile(r"%\{([^}]+)\}|%(.)")

SHORT_CODES: Dict[str, str] = {
    "s": "title",
    "l": "album",
    "a": "artist",
    "c": "comment",
    "y": "year",
    "t": "track.2",
    "g": "genre",
}


def sanitize(value: str) -> str:
    """Return ``value`` stripped and without path separators."""
    return value.replace("/", "-").replace("\\", "-").strip()


class TagFormatter:
    """Expand format strings for :class:`TrackFile` objects."""

    def expand(self, file: TrackFile, template: str) -> ExpandedFormat:
        tags = file.tags
        referenced: List[str] = []
        aggregates: List[Tuple[str, str]] = []

        def _substitute(match: re.Match) -> str:
            code = match.group(1)
            if code is None:
                short = match.group(2)
                if short == "%":
                    return "%"
                code = SHORT_CODES.get(short)
                if code is None:
                    return match.group(0)
            if is_aggregate_code(code):
                value = self.value(tags, base_code(code))
                aggregates.append((code, value))
                referenced.append(value)
                return code
            value = self.value(tags, code)
            referenced.append(value)
            return value

        text = _CODE_PATTERN.sub(_substitute, template)
        empty = not tags or (bool(referenced) and not any(referenced))
        return ExpandedFormat(text=text, aggregates=aggregates, empty=empty)

    def value(self, tags: Dict[str, str], code: str) -> str:
        """Return the sanitized value of ``code`` for the given tags."""
        name, _, width = code.partition(".")
        name = name.strip().lower()
        value = tags.get(name, "")
        if not value:
            if name == "year":
                value = tags.get("date", "")[:4]
            elif name == "albumartist":
                value = tags.get("artist", "")
        if width.isdigit() and value.isdigit():
            value = value.zfill(int(width))
        return sanitize(value)


__all__ = ["SHORT_CODES", "TagFormatter", "sanitize"]
