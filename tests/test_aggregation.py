"""Tests for aggregate placeholder resolution."""

from __future__ import annotations

import pytest

from tagdir.organization.aggregation import (
    AggregationContext,
    aggregate,
    base_code,
    is_aggregate_code,
)


def test_aggregate_max_min_and_unique() -> None:
    years = ["1998", "2001", "1975"]

    assert aggregate("max-year", years) == "2001"
    assert aggregate("min-year", years) == "1975"
    assert aggregate("unq-year", ["1998"]) == "1998"
    assert aggregate("unq-year", ["1998", "1998"]) == "1998"
    assert aggregate("unq-year", ["1998", "2001"]) == ""
    assert aggregate("max-year", []) == ""


def test_aggregate_rejects_plain_codes() -> None:
    with pytest.raises(ValueError):
        aggregate("year", ["1998"])


def test_code_helpers() -> None:
    assert is_aggregate_code("max-year")
    assert is_aggregate_code("unq-albumartist")
    assert not is_aggregate_code("year")
    assert not is_aggregate_code("max-")
    assert base_code("min-date") == "date"
    assert base_code("artist") == "artist"


def test_session_resolves_values_of_all_files() -> None:
    context = AggregationContext()
    for year in ("1998", "2001", "1975"):
        context.add_value("max-year", year)
        context.put_directory("/music/Band (max-year)")

    assert context.has_aggregated_codes()
    assert context.take_replacements() == [("/music/Band (max-year)", "/music/Band (2001)")]
    assert context.take_replacements() == []


def test_changing_directory_closes_the_session() -> None:
    context = AggregationContext()
    context.add_value("max-year", "1990")
    context.put_directory("/music/A (max-year)")
    context.add_value("max-year", "1995")
    context.put_directory("/music/A (max-year)")
    context.add_value("max-year", "2000")
    context.put_directory("/music/B (max-year)")

    assert context.take_replacements() == [
        ("/music/A (max-year)", "/music/A (1995)"),
        ("/music/B (max-year)", "/music/B (2000)"),
    ]


def test_multiple_codes_in_one_directory() -> None:
    context = AggregationContext()
    context.add_value("unq-artist", "Band")
    context.add_value("min-year", "1999")
    context.put_directory("/m/unq-artist/min-year")
    context.add_value("unq-artist", "Band")
    context.add_value("min-year", "1997")
    context.put_directory("/m/unq-artist/min-year")

    assert context.take_replacements() == [("/m/unq-artist/min-year", "/m/Band/1997")]


def test_directories_without_codes_produce_no_pairs() -> None:
    context = AggregationContext()
    context.put_directory("/music/Plain")
    context.put_directory("/music/Other")

    assert not context.has_aggregated_codes()
    assert context.take_replacements() == []


def test_clear_drops_pending_state() -> None:
    context = AggregationContext()
    context.add_value("max-year", "2001")
    context.put_directory("/music/max-year")

    context.clear()

    assert not context.has_aggregated_codes()
    assert context.take_replacements() == []
