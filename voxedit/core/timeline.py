"""
Marker remapping after edits change a recording's timeline.

All functions are pure: they take a marker collection and return a new list
sorted by time. A marker sitting exactly on the edge of removed material is
treated as inside it and dropped.
"""

from typing import Iterable, List, Optional, Sequence

from .segment import Marker, RangeLike, pad_and_merge, sorted_markers


def after_trim(markers: Iterable[Marker], keep_start: float, keep_end: float) -> List[Marker]:
    """Keep markers within ``[keep_start, keep_end]`` and rebase them to 0."""
    kept = [
        m.shifted(-keep_start)
        for m in markers
        if keep_start <= m.time <= keep_end
    ]
    return sorted_markers(kept)


def after_cut(markers: Iterable[Marker], removed_start: float, removed_end: float) -> List[Marker]:
    """Drop markers inside the removed range and pull later ones back."""
    removed = removed_end - removed_start
    result = []
    for marker in markers:
        if removed_start <= marker.time <= removed_end:
            continue
        if marker.time > removed_end:
            result.append(marker.shifted(-removed))
        else:
            result.append(marker)
    return sorted_markers(result)


def after_removing_silence(
    markers: Iterable[Marker],
    ranges: Sequence[RangeLike],
    padding: float,
    duration: Optional[float] = None,
) -> List[Marker]:
    """
    Remap markers after a batch silence removal.

    Uses the same padded and merged ranges the editor removed, applied as
    successive cuts from the earliest range on.
    """
    result = list(markers)
    removals = pad_and_merge(ranges, padding, duration)
    if not removals:
        return result

    shift = 0.0
    for removal in removals:
        result = after_cut(result, removal.start - shift, removal.end - shift)
        shift += removal.duration
    return result
