"""Audio tag access and format expansion."""

from .reader import TagReadError, TrackFile, read_tags, scan_tracks
from .template import TagFormatter

__all__ = ["TagFormatter", "TagReadError", "TrackFile", "read_tags", "scan_tracks"]
