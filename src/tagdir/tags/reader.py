"""Tag reading from audio files with mutagen."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, Literal, Optional

from mutagen import File as MutagenFile
from mutagen import MutagenError

LOGGER = logging.getLogger(__name__)

TagSource = Literal["easy", "raw"]

DEFAULT_EXTENSIONS = (
    ".mp3",
    ".flac",
    ".ogg",
    ".opus",
    ".m4a",
    ".wav",
    ".wma",
    ".ape",
    ".mpc",
    ".aiff",
)

# mutagen easy keys and raw ID3 / MP4 frame names -> format codes.
# Vorbis comments and APE keys already use the code names.
_KEY_ALIASES = {
    "tracknumber": "track",
    "discnumber": "disc",
    "organization": "publisher",
    "tit2": "title",
    "talb": "album",
    "tpe1": "artist",
    "tpe2": "albumartist",
    "tcon": "genre",
    "tdrc": "date",
    "tyer": "year",
    "trck": "track",
    "tpos": "disc",
    "comm": "comment",
    "©nam": "title",
    "©alb": "album",
    "©art": "artist",
    "aart": "albumartist",
    "©gen": "genre",
    "©day": "date",
    "©cmt": "comment",
    "trkn": "track",
    "disk": "disc",
}


class TagReadError(Exception):
    """Raised when an audio file's tags cannot be parsed."""


def _normalize_tags(raw: Dict[str, Any]) -> Dict[str, str]:
    tags: Dict[str, str] = {}
    for key, value in raw.items():
        # ID3 frames keep their values in .text
        value = getattr(value, "text", value)
        if isinstance(value, list):
            value = value[0] if value else ""
        if isinstance(value, tuple):
            # MP4 trkn/disk: (number, total)
            value = value[0] if value else ""
        text = str(value).strip()
        if not text:
            continue
        # "COMM::eng" -> "comm"
        name = key.lower().split(":", 1)[0]
        name = _KEY_ALIASES.get(name, name)
        if name in ("track", "disc"):
            # "3/12" -> "3"
            text = text.split("/", 1)[0].strip()
        tags.setdefault(name, text)
    return tags


def read_tags(path: str | Path, source: TagSource = "easy") -> Dict[str, str]:
    """Read the tags of an audio file into a flat ``code -> value`` mapping.

    Args:
        path: Audio file to read.
        source: ``easy`` uses mutagen's normalized keys, ``raw`` the
            format-specific frame names, with common ID3 and MP4 frames
            mapped to their format codes (``TPE1`` -> ``artist``).

    Returns:
        dict: Tag values keyed by lower-case code; empty for files mutagen
        does not recognize.

    Raises:
        TagReadError: If mutagen recognizes the file but cannot parse it.
    """
    try:
        audio = MutagenFile(os.fspath(path), easy=source == "easy")
    except MutagenError as exc:
        raise TagReadError(f"Unable to read tags from {path}: {exc}") from exc
    if audio is None or audio.tags is None:
        return {}
    return _normalize_tags(dict(audio.tags.items()))


class TrackFile:
    """An audio file taking part in a reorganization.

    The file is addressed as directory plus file name with ``/`` separators.
    Tags are read lazily and cached until :meth:`close`.
    """

    def __init__(
        self,
        path: str | Path,
        tags: Optional[Dict[str, str]] = None,
        *,
        tag_source: TagSource = "easy",
    ) -> None:
        self._path = os.fspath(path).replace("\\", "/")
        self._tags = dict(tags) if tags is not None else None
        self.tag_source = tag_source

    def __repr__(self) -> str:
        return f"TrackFile({self._path!r})"

    @property
    def path(self) -> str:
        return self._path

    @property
    def directory(self) -> str:
        return self._path.rsplit("/", 1)[0] if "/" in self._path else ""

    @property
    def filename(self) -> str:
        return self._path.rsplit("/", 1)[-1]

    @property
    def tags(self) -> Dict[str, str]:
        if self._tags is None:
            try:
                self._tags = read_tags(self._path, self.tag_source)
            except TagReadError as exc:
                LOGGER.warning("%s", exc)
                self._tags = {}
        return self._tags

    def close(self) -> None:
        """Drop cached tag data read from the file."""
        self._tags = None

    def moved_to(self, path: str) -> None:
        LOGGER.debug("Track %s moved to %s", self._path, path)
        self._path = path


def scan_tracks(
    root: str | Path,
    *,
    recursive: bool = True,
    extensions: Iterable[str] = DEFAULT_EXTENSIONS,
    tag_source: TagSource = "easy",
) -> Iterator[TrackFile]:
    """Yield audio files under ``root`` in sorted directory-tree order.

    Files of one directory are yielded together, which keeps files that share
    a target directory adjacent for aggregate resolution.
    """
    suffixes = {suffix.lower() for suffix in extensions}
    root_path = Path(root).expanduser().resolve()
    if not root_path.is_dir():
        return

    for dirpath, dirnames, filenames in os.walk(root_path):
        dirnames[:] = sorted(name for name in dirnames if not name.startswith("."))
        for name in sorted(filenames):
            if Path(name).suffix.lower() in suffixes:
                yield TrackFile(Path(dirpath) / name, tag_source=tag_source)
        if not recursive:
            break


__all__ = ["DEFAULT_EXTENSIONS", "TagReadError", "TrackFile", "read_tags", "scan_tracks"]
