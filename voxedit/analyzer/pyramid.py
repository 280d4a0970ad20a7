"""Waveform pyramid construction."""

import logging
from typing import Optional

import numpy as np

from ..core.errors import EmptyAudio
from ..core.waveform import LEVEL_COUNT, WaveformPyramid, points_per_second
from ..core.resample import resample

logger = logging.getLogger(__name__)


class PyramidBuilder:
    """Build a :class:`WaveformPyramid` from raw mono samples."""

    def __init__(
        self,
        level_count: int = LEVEL_COUNT,
        noise_floor: float = 0.001,
    ):
        """
        Initialize pyramid builder.

        Args:
            level_count: Number of levels of detail to build
            noise_floor: Levels whose peak stays below this are left
                unnormalized so silence is not blown up to full scale
        """
        self.level_count = level_count
        self.noise_floor = noise_floor

    def build(
        self,
        samples: np.ndarray,
        duration_seconds: float,
        sample_rate: Optional[float] = None,
    ) -> WaveformPyramid:
        """
        Build all levels of detail.

        Args:
            samples: Mono audio samples
            duration_seconds: Duration of the audio
            sample_rate: Sample rate of the source (derived from the sample
                count when omitted)

        Returns:
            WaveformPyramid

        Raises:
            EmptyAudio: If the duration is not positive or there are no samples
        """
        audio = np.asarray(samples, dtype=np.float64)
        if audio.ndim > 1:
            audio = np.mean(audio, axis=1)
        if duration_seconds <= 0 or audio.size == 0:
            raise EmptyAudio()

        if sample_rate is None:
            sample_rate = audio.size / duration_seconds

        amplitude = np.abs(audio)
        levels = []
        for level in range(self.level_count):
            target_count = max(1, int(round(duration_seconds * points_per_second(level))))
            levels.append(self._normalize(resample(amplitude, target_count)))
            logger.debug("LOD%d: %d points", level, target_count)

        return WaveformPyramid(
            levels=tuple(levels),
            duration_seconds=float(duration_seconds),
            source_sample_rate=float(sample_rate),
        )

    def _normalize(self, level: np.ndarray) -> np.ndarray:
        """Scale a level so its peak is 1.0 (unless it is below the noise floor)."""
        peak = float(np.max(level)) if level.size else 0.0
        if peak > self.noise_floor:
            level = level / peak
        return np.clip(level, 0.0, 1.0)


def build_pyramid(samples: np.ndarray, duration_seconds: float) -> WaveformPyramid:
    """Build a pyramid with the default settings."""
    return PyramidBuilder().build(samples, duration_seconds)
