"""Silence detection module."""

import logging
import numpy as np
from typing import List, Optional, Tuple

from ..core.segment import SilenceInterval

logger = logging.getLogger(__name__)

# Generic detection
DEFAULT_THRESHOLD_DB = -40.0
DEFAULT_MIN_DURATION = 0.25

# Interactive "highlight silent parts" while editing
HIGHLIGHT_THRESHOLD_DB = -45.0
HIGHLIGHT_MIN_DURATION = 0.5

WINDOW_SECONDS = 0.01


def db_to_linear(threshold_db: float) -> float:
    """Convert a dBFS level to linear amplitude."""
    return 10 ** (threshold_db / 20)


class SilenceDetector:
    """Detect silence regions in audio."""

    def __init__(
        self,
        silence_thresh_db: float = DEFAULT_THRESHOLD_DB,
        min_silence_s: float = DEFAULT_MIN_DURATION,
        window_s: float = WINDOW_SECONDS,
    ):
        """
        Initialize silence detector.

        Args:
            silence_thresh_db: Windows whose RMS is below this are silent (dBFS)
            min_silence_s: Minimum silence duration to report (seconds)
            window_s: Analysis window length (seconds)
        """
        self.silence_thresh_db = silence_thresh_db
        self.min_silence_s = min_silence_s
        self.window_s = window_s

    def detect(self, audio: np.ndarray, sr: float) -> List[SilenceInterval]:
        """
        Detect silence regions in audio.

        Args:
            audio: Audio signal as numpy array
            sr: Sample rate

        Returns:
            Sorted, non-overlapping list of SilenceInterval objects
        """
        return self.detect_linear(audio, sr, db_to_linear(self.silence_thresh_db))

    def detect_linear(
        self,
        audio: np.ndarray,
        sr: float,
        threshold: float,
    ) -> List[SilenceInterval]:
        """Like :meth:`detect` with the threshold given as linear amplitude."""
        audio = np.asarray(audio, dtype=np.float64)
        # Ensure mono
        if audio.ndim > 1:
            audio = np.mean(audio, axis=1)

        if audio.size == 0 or sr <= 0:
            return []

        window = max(1, int(round(sr * self.window_s)))
        rms = self._calculate_rms(audio, window)
        is_silence = rms < threshold

        logger.debug(
            "Silence detection: threshold=%.4f, window=%d samples, windows=%d",
            threshold, window, len(rms),
        )

        return self._windows_to_intervals(is_silence, window, sr, audio.size)

    def _calculate_rms(self, audio: np.ndarray, window: int) -> np.ndarray:
        """RMS per non-overlapping window; the last window may be shorter."""
        starts = np.arange(0, audio.size, window)
        sums = np.add.reduceat(audio ** 2, starts)
        counts = np.diff(np.append(starts, audio.size))
        return np.sqrt(sums / counts)

    def _windows_to_intervals(
        self,
        is_silence: np.ndarray,
        window: int,
        sr: float,
        total_samples: int,
    ) -> List[SilenceInterval]:
        """Merge consecutive silent windows into intervals of sufficient length."""
        intervals = []
        run_start: Optional[float] = None

        for index, silent in enumerate(is_silence):
            time = index * window / sr
            if silent:
                if run_start is None:
                    run_start = time
            elif run_start is not None:
                self._close_run(intervals, run_start, time)
                run_start = None

        if run_start is not None:
            self._close_run(intervals, run_start, total_samples / sr)

        return intervals

    def _close_run(self, intervals: List[SilenceInterval], start: float, end: float):
        if end - start >= self.min_silence_s:
            intervals.append(SilenceInterval(start=start, end=end))

    def speech_segments(
        self,
        audio: np.ndarray,
        sr: float,
        silence_segments: Optional[List[SilenceInterval]] = None,
        min_speech_s: float = 0.05,
    ) -> List[Tuple[float, float]]:
        """
        Get speech (non-silence) segments.

        Returns:
            List of (start_time, end_time) tuples for speech regions
        """
        if silence_segments is None:
            silence_segments = self.detect(audio, sr)

        audio = np.asarray(audio)
        duration = audio.shape[0] / sr if sr > 0 else 0.0
        speech = []

        current_time = 0.0

        for silence in sorted(silence_segments, key=lambda s: s.start):
            if silence.start > current_time:
                speech.append((current_time, silence.start))
            current_time = silence.end

        if current_time < duration:
            speech.append((current_time, duration))

        return [s for s in speech if s[1] - s[0] >= min_speech_s]


def detect_silence(
    samples: np.ndarray,
    sample_rate: float,
    threshold_db: float = DEFAULT_THRESHOLD_DB,
    min_duration: float = DEFAULT_MIN_DURATION,
) -> List[SilenceInterval]:
    """Detect silence with the given threshold (dBFS) and minimum duration."""
    detector = SilenceDetector(silence_thresh_db=threshold_db, min_silence_s=min_duration)
    return detector.detect(samples, sample_rate)
