"""Audio loading and rewriting on top of soundfile."""

import logging
import numpy as np
from datetime import datetime
from pathlib import Path
from typing import Protocol, Sequence, Tuple, Union
import soundfile as sf

from ..core.errors import DecodeUnavailable, EmptyAudio, NoSamples
from ..core.segment import SilenceInterval, merge_intervals

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

EDITED_MARKER = "_edited_"


class AudioBackend(Protocol):
    """Decode and rewrite primitives the editing core relies on."""

    def decode_mono_samples(self, path: PathLike) -> Tuple[np.ndarray, int]:
        ...

    def write_trimmed(self, path: PathLike, start: float, end: float) -> Path:
        ...

    def write_with_ranges_removed(
        self, path: PathLike, ranges: Sequence[SilenceInterval]
    ) -> Path:
        ...

    def duration(self, path: PathLike) -> float:
        ...


class AudioAnalyzer:
    """Load audio files and slice sample arrays by time."""

    # Supported formats
    SUPPORTED_FORMATS = {'.wav', '.flac', '.ogg', '.aiff', '.aif', '.caf', '.mp3', '.m4a'}

    @staticmethod
    def load(path: PathLike, mono: bool = True) -> Tuple[np.ndarray, int]:
        """
        Load an audio file as float32.

        Args:
            path: Path to audio file
            mono: Average channels down to one if True

        Returns:
            (audio_array, sample_rate)

        Raises:
            DecodeUnavailable: If neither soundfile nor librosa can read it
            EmptyAudio: If the file holds no frames
            NoSamples: If the decoded data has no channels
        """
        path = Path(path)

        try:
            audio, sr = sf.read(str(path), dtype='float32', always_2d=True)
        except Exception as e:
            # libsndfile cannot open some containers (m4a/aac); librosa can via audioread
            audio, sr = AudioAnalyzer._load_with_librosa(path, e)

        if audio.shape[0] == 0:
            raise EmptyAudio(f"Audio file is empty: {path}")
        if audio.ndim != 2 or audio.shape[1] == 0:
            raise NoSamples(f"No audio data found in {path}")

        if mono:
            audio = np.mean(audio, axis=1)

        return audio.astype(np.float32), int(sr)

    @staticmethod
    def _load_with_librosa(path: Path, original_error: Exception) -> Tuple[np.ndarray, int]:
        try:
            import librosa
        except ImportError:
            raise DecodeUnavailable(f"Cannot decode audio file: {path}. Error: {original_error}")

        try:
            audio, sr = librosa.load(str(path), sr=None, mono=False)
        except Exception as e:
            raise DecodeUnavailable(f"Cannot decode audio file: {path}. Error: {e}")

        # librosa returns (samples,) for mono or (channels, samples)
        if audio.ndim == 1:
            audio = audio[:, np.newaxis]
        else:
            audio = audio.T
        return audio, int(sr)

    @staticmethod
    def get_duration(audio: np.ndarray, sr: int) -> float:
        """Get audio duration in seconds."""
        if sr <= 0:
            return 0.0
        return audio.shape[0] / sr

    @staticmethod
    def get_info(path: PathLike) -> dict:
        """
        Get audio file information without loading full audio.

        Returns:
            dict with duration, sample_rate, channels, format, subtype
        """
        path = Path(path)
        try:
            info = sf.info(str(path))
        except Exception as e:
            raise DecodeUnavailable(f"Cannot read audio info: {path}. Error: {e}")
        return {
            'duration': info.duration,
            'sample_rate': info.samplerate,
            'channels': info.channels,
            'format': info.format,
            'subtype': info.subtype,
        }

    @staticmethod
    def frame_range(start_time: float, end_time: float, sr: int, total_frames: int) -> Tuple[int, int]:
        """Clamp a time range to frame indices within the file."""
        start = max(0, min(int(start_time * sr), total_frames))
        end = max(start, min(int(end_time * sr), total_frames))
        return start, end

    @staticmethod
    def extract_segment(audio: np.ndarray, sr: int, start_time: float, end_time: float) -> np.ndarray:
        """Extract audio segment by time."""
        start, end = AudioAnalyzer.frame_range(start_time, end_time, sr, audio.shape[0])
        return audio[start:end]

    @staticmethod
    def remove_ranges(audio: np.ndarray, sr: int, ranges: Sequence[SilenceInterval]) -> np.ndarray:
        """Splice out every range in one pass; ``audio`` is frames-first."""
        keep = np.ones(audio.shape[0], dtype=bool)
        for r in merge_intervals(ranges):
            start, end = AudioAnalyzer.frame_range(r.start, r.end, sr, audio.shape[0])
            keep[start:end] = False
        return audio[keep]

    @staticmethod
    def output_path_for(source: PathLike) -> Path:
        """``<stem>_edited_<timestamp><suffix>`` next to the source file."""
        source = Path(source)
        stem = source.stem.split(EDITED_MARKER)[0]
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
        return source.with_name(f"{stem}{EDITED_MARKER}{timestamp}{source.suffix}")


class SoundFileBackend:
    """
    Default :class:`AudioBackend` built on soundfile.

    Rewritten files keep the source's channel count, sample rate, container
    format and subtype. Analysis always sees the channel mean.
    """

    def decode_mono_samples(self, path: PathLike) -> Tuple[np.ndarray, int]:
        return AudioAnalyzer.load(path, mono=True)

    def duration(self, path: PathLike) -> float:
        return float(AudioAnalyzer.get_info(path)['duration'])

    def write_trimmed(self, path: PathLike, start: float, end: float) -> Path:
        """Write ``[start, end)`` of ``path`` to a new file."""
        path = Path(path)
        with sf.SoundFile(str(path)) as src:
            first, last = AudioAnalyzer.frame_range(start, end, src.samplerate, src.frames)
            if last <= first:
                raise ValueError(f"Invalid time range for editing: {start}-{end}")
            src.seek(first)
            data = src.read(last - first, dtype='float32', always_2d=True)
            output = self._write_like(src, data)
        logger.info("Trimmed %s -> %s (%d frames)", path.name, output.name, data.shape[0])
        return output

    def write_with_ranges_removed(self, path: PathLike, ranges: Sequence[SilenceInterval]) -> Path:
        """Write ``path`` without the given ranges."""
        path = Path(path)
        with sf.SoundFile(str(path)) as src:
            data = src.read(dtype='float32', always_2d=True)
            kept = AudioAnalyzer.remove_ranges(data, src.samplerate, ranges)
            if kept.shape[0] == 0:
                raise ValueError("Edit would remove the entire recording")
            output = self._write_like(src, kept)
        logger.info(
            "Removed %d range(s) from %s -> %s", len(ranges), path.name, output.name
        )
        return output

    def remove_file(self, path: PathLike):
        """Delete an edit artifact."""
        Path(path).unlink(missing_ok=True)
        logger.debug("Deleted %s", path)

    @staticmethod
    def _write_like(src: sf.SoundFile, data: np.ndarray) -> Path:
        output = AudioAnalyzer.output_path_for(src.name)
        sf.write(
            str(output),
            data,
            src.samplerate,
            subtype=src.subtype,
            format=src.format,
        )
        return output
