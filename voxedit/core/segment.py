"""Data structures for silence ranges and markers."""

import uuid
from dataclasses import dataclass, field, replace
from typing import Iterable, List, Optional, Sequence, Tuple, Union


def _new_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True)
class SilenceInterval:
    """A detected run of silence, ``[start, end)`` in seconds."""
    start: float
    end: float

    @property
    def duration(self) -> float:
        """Duration in seconds."""
        return self.end - self.start

    def contains(self, time: float) -> bool:
        return self.start <= time < self.end

    def padded(self, padding: float, duration: Optional[float] = None) -> "SilenceInterval":
        """Expand outward by ``padding`` on both sides, clamped to the file."""
        start = max(0.0, self.start - padding)
        end = self.end + padding
        if duration is not None:
            end = min(end, duration)
        return SilenceInterval(start=start, end=max(start, end))

    def to_samples(self, sr: int) -> Tuple[int, int]:
        """Convert to sample indices."""
        return int(self.start * sr), int(self.end * sr)


@dataclass
class SelectableSilenceInterval:
    """A silence range the user can include in or exclude from removal."""
    interval: SilenceInterval
    included: bool = True
    id: str = field(default_factory=_new_id)

    @property
    def start(self) -> float:
        return self.interval.start

    @property
    def end(self) -> float:
        return self.interval.end

    @property
    def duration(self) -> float:
        return self.interval.duration

    def toggle(self):
        self.included = not self.included


RangeLike = Union[SilenceInterval, SelectableSilenceInterval, Tuple[float, float]]


@dataclass(frozen=True)
class Marker:
    """A cue point at a time within a recording."""
    time: float
    id: str = field(default_factory=_new_id)
    label: Optional[str] = None

    def shifted(self, offset: float) -> "Marker":
        """Same marker moved by ``offset`` seconds (never before 0)."""
        return replace(self, time=max(0.0, self.time + offset))

    def is_within(self, start: float, end: float) -> bool:
        return start <= self.time <= end


def clamp_range(start: float, end: float, duration: float) -> Tuple[float, float]:
    """Clamp ``[start, end]`` into ``[0, duration]``; ``end`` never precedes ``start``."""
    start = max(0.0, min(start, duration))
    end = max(start, min(end, duration))
    return start, end


def sorted_markers(markers: Iterable[Marker]) -> List[Marker]:
    """Markers ordered by time."""
    return sorted(markers, key=lambda m: m.time)


def as_interval(item: RangeLike) -> SilenceInterval:
    """Coerce a range-like value to a :class:`SilenceInterval`."""
    if isinstance(item, SilenceInterval):
        return item
    if isinstance(item, SelectableSilenceInterval):
        return item.interval
    start, end = item
    return SilenceInterval(start=float(start), end=float(end))


def selected_intervals(items: Iterable[RangeLike]) -> List[SilenceInterval]:
    """Drop deselected entries and return plain intervals."""
    result = []
    for item in items:
        if isinstance(item, SelectableSilenceInterval) and not item.included:
            continue
        result.append(as_interval(item))
    return result


def merge_intervals(intervals: Iterable[SilenceInterval]) -> List[SilenceInterval]:
    """Sort and merge overlapping or touching intervals; empty ones are dropped."""
    ordered = sorted(
        (i for i in intervals if i.end > i.start),
        key=lambda i: (i.start, i.end),
    )
    merged: List[SilenceInterval] = []
    for interval in ordered:
        if merged and interval.start <= merged[-1].end:
            last = merged[-1]
            merged[-1] = SilenceInterval(start=last.start, end=max(last.end, interval.end))
        else:
            merged.append(interval)
    return merged


def pad_and_merge(
    ranges: Sequence[RangeLike],
    padding: float,
    duration: Optional[float] = None,
) -> List[SilenceInterval]:
    """
    Removal ranges for a batch silence cut.

    Each selected range is expanded outward by ``padding`` (clamped to
    ``[0, duration]``) and ranges that overlap after padding are merged.
    """
    padded = [r.padded(padding, duration) for r in selected_intervals(ranges)]
    return merge_intervals(padded)


def total_duration(intervals: Iterable[SilenceInterval]) -> float:
    return sum(i.duration for i in intervals)
