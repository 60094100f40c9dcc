"""Tests for tag reading and track discovery."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest
from mutagen import MutagenError

from tagdir.tags import TagReadError, TrackFile, read_tags, scan_tracks


class _StubAudio:
    def __init__(self, tags: dict[str, Any] | None) -> None:
        self.tags = tags


def test_read_tags_normalizes_mutagen_values(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[tuple[str, bool]] = []

    def _fake_file(path: str, easy: bool = False) -> _StubAudio:
        calls.append((path, easy))
        return _StubAudio(
            {
                "Artist": ["Band", "Other"],
                "tracknumber": ["3/12"],
                "organization": ["Label"],
                "comment": [""],
            }
        )

    monkeypatch.setattr("tagdir.tags.reader.MutagenFile", _fake_file)

    tags = read_tags("/music/01.mp3")

    assert tags == {"artist": "Band", "track": "3", "publisher": "Label"}
    assert calls == [("/music/01.mp3", True)]


def test_read_tags_raw_source(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[bool] = []

    def _fake_file(path: str, easy: bool = False) -> _StubAudio:
        calls.append(easy)
        return _StubAudio(None)

    monkeypatch.setattr("tagdir.tags.reader.MutagenFile", _fake_file)

    assert read_tags("/music/01.mp3", "raw") == {}
    assert calls == [False]


def test_read_tags_wraps_mutagen_errors(monkeypatch: pytest.MonkeyPatch) -> None:
    def _broken(path: str, easy: bool = False) -> _StubAudio:
        raise MutagenError("bad header")

    monkeypatch.setattr("tagdir.tags.reader.MutagenFile", _broken)

    with pytest.raises(TagReadError):
        read_tags("/music/01.mp3")


def test_unrecognized_file_has_no_tags(tmp_path: Path) -> None:
    path = tmp_path / "notes.txt"
    path.write_text("not audio", encoding="utf-8")

    assert read_tags(path) == {}


def test_track_file_tag_errors_become_empty_tags(monkeypatch: pytest.MonkeyPatch) -> None:
    def _broken(path: str, source: str) -> dict[str, str]:
        raise TagReadError("unreadable")

    monkeypatch.setattr("tagdir.tags.reader.read_tags", _broken)

    assert TrackFile("/music/01.mp3").tags == {}


def test_track_file_paths_and_moves() -> None:
    track = TrackFile("/music/Old/01.mp3", tags={"album": "Record"})

    assert track.directory == "/music/Old"
    assert track.filename == "01.mp3"

    track.moved_to("/music/New/01.mp3")

    assert track.directory == "/music/New"
    assert track.tags == {"album": "Record"}


def test_scan_tracks_filters_and_orders(tmp_path: Path) -> None:
    (tmp_path / "b").mkdir()
    (tmp_path / "a").mkdir()
    (tmp_path / ".hidden").mkdir()
    (tmp_path / "b" / "2.flac").write_bytes(b"")
    (tmp_path / "a" / "2.MP3").write_bytes(b"")
    (tmp_path / "a" / "1.mp3").write_bytes(b"")
    (tmp_path / "a" / "cover.jpg").write_bytes(b"")
    (tmp_path / ".hidden" / "x.mp3").write_bytes(b"")
    (tmp_path / "top.ogg").write_bytes(b"")

    root = tmp_path.resolve()
    names = [Path(track.path).relative_to(root).as_posix() for track in scan_tracks(tmp_path)]
    flat = [track.filename for track in scan_tracks(tmp_path, recursive=False)]

    assert names == ["top.ogg", "a/1.mp3", "a/2.MP3", "b/2.flac"]
    assert flat == ["top.ogg"]


def test_scan_tracks_missing_root(tmp_path: Path) -> None:
    assert list(scan_tracks(tmp_path / "missing")) == []


class _Frame:
    def __init__(self, *text: Any) -> None:
        self.text = list(text)


def test_read_tags_maps_raw_frames_to_codes(monkeypatch: pytest.MonkeyPatch) -> None:
    id3 = {
        "TPE1": _Frame("Band"),
        "TALB": _Frame("Record"),
        "TRCK": _Frame("4/10"),
        "TDRC": _Frame("1999-02-01"),
        "COMM::eng": _Frame("liner notes"),
    }
    mp4 = {"©ART": ["Duo"], "©alb": ["Tape"], "trkn": [(7, 12)], "aART": ["Duo & Co"]}
    results = iter([_StubAudio(id3), _StubAudio(mp4)])
    monkeypatch.setattr(
        "tagdir.tags.reader.MutagenFile", lambda path, easy=False: next(results)
    )

    assert read_tags("/music/01.mp3", "raw") == {
        "artist": "Band",
        "album": "Record",
        "track": "4",
        "date": "1999-02-01",
        "comment": "liner notes",
    }
    assert read_tags("/music/02.m4a", "raw") == {
        "artist": "Duo",
        "album": "Tape",
        "track": "7",
        "albumartist": "Duo & Co",
    }
