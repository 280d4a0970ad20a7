"""Shared fixtures: synthetic recordings and an in-memory audio backend."""

from __future__ import annotations

import sys
import threading
import time
from pathlib import Path

import numpy as np
import pytest
import soundfile as sf


def _ensure_repo_on_path() -> None:
    """Allow tests to import from repo modules without installing the package."""
    repo_root = Path(__file__).resolve().parents[1]
    path_str = str(repo_root)
    if path_str not in sys.path:
        sys.path.insert(0, path_str)


_ensure_repo_on_path()

SR = 16000


def tone(duration: float, sr: int = SR, freq: float = 440.0, amplitude: float = 0.5) -> np.ndarray:
    """Sine wave of the given length."""
    t = np.arange(int(round(duration * sr))) / sr
    return (amplitude * np.sin(2 * np.pi * freq * t)).astype(np.float32)


def speech_with_gaps(sr: int = SR) -> np.ndarray:
    """10 s of tone with digital silence at [2.0, 3.0) and [6.0, 6.6)."""
    audio = tone(10.0, sr)
    audio[int(2.0 * sr):int(3.0 * sr)] = 0.0
    audio[int(6.0 * sr):int(6.6 * sr)] = 0.0
    return audio


class FakeBackend:
    """
    In-memory stand-in for SoundFileBackend.

    Decoding returns the registered samples; rewrites only invent a new file
    name and record what was asked for.
    """

    def __init__(self, samples: np.ndarray | None = None, sr: int = SR, delay: float = 0.0):
        self.samples = speech_with_gaps(sr) if samples is None else samples
        self.sr = sr
        self.delay = delay
        self.fail_writes = False
        self.decode_error: Exception | None = None
        self.decode_calls = 0
        self.writes: list = []
        self.removed_files: list = []
        self._lock = threading.Lock()
        self._counter = 0

    def decode_mono_samples(self, path):
        with self._lock:
            self.decode_calls += 1
        if self.delay:
            time.sleep(self.delay)
        if self.decode_error is not None:
            raise self.decode_error
        return self.samples, self.sr

    def duration(self, path):
        return len(self.samples) / self.sr

    def write_trimmed(self, path, start, end):
        if self.fail_writes:
            raise OSError("disk full")
        self.writes.append(("trim", Path(path), start, end))
        return self._next_path(path)

    def write_with_ranges_removed(self, path, ranges):
        if self.fail_writes:
            raise OSError("disk full")
        self.writes.append(("remove", Path(path), [(r.start, r.end) for r in ranges]))
        return self._next_path(path)

    def remove_file(self, path):
        self.removed_files.append(Path(path))

    def _next_path(self, path):
        path = Path(path)
        self._counter += 1
        stem = path.stem.split("_edited_")[0]
        return path.with_name(f"{stem}_edited_{self._counter}{path.suffix}")


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def memo_wav(tmp_path) -> Path:
    """A real 10 s mono 16-bit WAV with two silent gaps."""
    path = tmp_path / "memo.wav"
    sf.write(str(path), speech_with_gaps(), SR, subtype="PCM_16")
    return path


@pytest.fixture
def stereo_wav(tmp_path) -> Path:
    """A 4 s stereo 24-bit WAV at 22.05 kHz."""
    sr = 22050
    left = tone(4.0, sr, amplitude=0.4)
    right = tone(4.0, sr, freq=220.0, amplitude=0.4)
    path = tmp_path / "stereo.wav"
    sf.write(str(path), np.stack([left, right], axis=1), sr, subtype="PCM_24")
    return path
