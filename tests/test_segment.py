"""Tests for silence interval and marker helpers."""

import pytest

from voxedit.core.segment import (
    Marker,
    SelectableSilenceInterval,
    SilenceInterval,
    merge_intervals,
    pad_and_merge,
    selected_intervals,
)


def test_interval_padding_is_outward_and_clamped() -> None:
    padded = SilenceInterval(0.02, 9.99).padded(0.05, duration=10.0)
    assert padded.start == 0.0
    assert padded.end == 10.0


def test_interval_contains_is_half_open() -> None:
    interval = SilenceInterval(1.0, 2.0)
    assert interval.contains(1.0)
    assert not interval.contains(2.0)


def test_merge_touching_and_overlapping() -> None:
    merged = merge_intervals(
        [SilenceInterval(3.0, 4.0), SilenceInterval(1.0, 2.0), SilenceInterval(2.0, 2.5)]
    )
    assert [(i.start, i.end) for i in merged] == [(1.0, 2.5), (3.0, 4.0)]


def test_merge_drops_empty() -> None:
    assert merge_intervals([SilenceInterval(1.0, 1.0)]) == []


def test_selected_intervals_accepts_tuples() -> None:
    items = [
        (1.0, 2.0),
        SelectableSilenceInterval(SilenceInterval(3.0, 4.0), included=False),
        SilenceInterval(5.0, 6.0),
    ]
    assert selected_intervals(items) == [SilenceInterval(1.0, 2.0), SilenceInterval(5.0, 6.0)]


def test_pad_and_merge() -> None:
    result = pad_and_merge([(2.0, 3.0), (3.05, 4.0)], 0.05, duration=10.0)
    assert len(result) == 1
    assert result[0].start == pytest.approx(1.95)
    assert result[0].end == pytest.approx(4.05)


def test_toggle() -> None:
    item = SelectableSilenceInterval(SilenceInterval(1.0, 2.0))
    item.toggle()
    assert not item.included
    assert item.duration == 1.0


def test_marker_shift_never_negative() -> None:
    marker = Marker(0.5, label="start")
    moved = marker.shifted(-2.0)
    assert moved.time == 0.0
    assert moved.id == marker.id
    assert moved.label == "start"
