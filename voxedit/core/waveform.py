"""Multi-resolution waveform data and the queries run against it."""

import math
from dataclasses import dataclass
from typing import Dict, Tuple

import numpy as np

from .resample import resample

# LOD0 resolution; every further level halves it.
BASE_POINTS_PER_SECOND = 1000
LEVEL_COUNT = 6

# Two view points per waveform sample renders smoothly.
IDEAL_SAMPLES_PER_POINT = 0.5


def points_per_second(level: int) -> int:
    """Nominal resolution of a pyramid level (1000, 500, 250, 125, 62, 31)."""
    return BASE_POINTS_PER_SECOND >> level


@dataclass(frozen=True, eq=False)
class WaveformPyramid:
    """
    Peak-amplitude waveform at several levels of detail.

    ``levels[0]`` is the finest resolution (~1 ms per point). Every level is
    normalized to ``[0, 1]`` on its own. Instances are never mutated; an edit
    produces a new pyramid for the new file.
    """

    levels: Tuple[np.ndarray, ...]
    duration_seconds: float
    source_sample_rate: float

    def __post_init__(self):
        frozen = []
        for level in self.levels:
            arr = np.array(level, dtype=np.float32)
            arr.setflags(write=False)
            frozen.append(arr)
        object.__setattr__(self, "levels", tuple(frozen))

    @property
    def level_count(self) -> int:
        return len(self.levels)

    def native_rate(self, level: int) -> float:
        """Actual points per second stored at ``level``."""
        if self.duration_seconds <= 0:
            return 0.0
        return len(self.levels[level]) / self.duration_seconds

    def level_for_zoom(self, zoom: float, view_width: float) -> Tuple[int, np.ndarray]:
        """
        Pick the level to draw for a zoom factor and view width.

        Args:
            zoom: 1.0 shows the whole file, larger values zoom in
            view_width: Width of the view in points

        Returns:
            (level_index, samples) -- the first level, finest to coarsest,
            dense enough for ~2 points per sample, or the coarsest level.
        """
        if not self.levels:
            return 0, np.zeros(0, dtype=np.float32)
        if self.duration_seconds <= 0 or zoom <= 0:
            return 0, self.levels[0]

        visible_duration = self.duration_seconds / zoom
        ideal_total = view_width / IDEAL_SAMPLES_PER_POINT
        ideal_rate = ideal_total / visible_duration

        last = len(self.levels) - 1
        for index in range(len(self.levels)):
            if self.native_rate(index) >= ideal_rate or index == last:
                return index, self.levels[index]
        return last, self.levels[last]

    def level_for_range(self, start_time: float, end_time: float, target_count: int) -> int:
        """Coarsest level that still has ``target_count`` points over the range."""
        range_duration = max(0.001, end_time - start_time)
        ideal_rate = target_count / range_duration
        for index in reversed(range(len(self.levels))):
            if self.native_rate(index) >= ideal_rate:
                return index
        return 0

    def slice(self, start_time: float, end_time: float, target_count: int) -> np.ndarray:
        """
        Waveform points for ``[start_time, end_time]`` resampled to ``target_count``.

        The range is clamped to the file. Degenerate requests return an empty
        array.
        """
        if not self.levels or self.duration_seconds <= 0 or target_count <= 0:
            return np.zeros(0, dtype=np.float64)

        duration = self.duration_seconds
        clamped_start = max(0.0, min(start_time, duration))
        clamped_end = max(clamped_start, min(end_time, duration))

        samples = self.levels[self.level_for_range(clamped_start, clamped_end, target_count)]
        count = len(samples)
        if count == 0:
            return np.zeros(0, dtype=np.float64)

        # floor/ceil so rounding never leaves part of the span uncovered
        start_index = int(math.floor(clamped_start / duration * count))
        end_index = int(math.ceil(clamped_end / duration * count))

        safe_start = max(0, min(start_index, count - 1))
        safe_end = max(safe_start + 1, min(end_index, count))

        return resample(samples[safe_start:safe_end], target_count)

    def to_arrays(self) -> Dict[str, np.ndarray]:
        """Flatten into named arrays for ``np.savez``."""
        arrays = {f"level_{i}": level for i, level in enumerate(self.levels)}
        arrays["meta"] = np.array(
            [self.duration_seconds, self.source_sample_rate], dtype=np.float64
        )
        return arrays

    @classmethod
    def from_arrays(cls, arrays) -> "WaveformPyramid":
        """Rebuild a pyramid from the mapping produced by ``to_arrays``."""
        meta = arrays["meta"]
        levels = []
        index = 0
        while f"level_{index}" in arrays:
            levels.append(arrays[f"level_{index}"])
            index += 1
        return cls(
            levels=tuple(levels),
            duration_seconds=float(meta[0]),
            source_sample_rate=float(meta[1]),
        )
