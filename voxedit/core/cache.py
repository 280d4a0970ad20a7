"""
Per-file cache of waveform pyramids and silence detections.

Results are computed at most once per key: concurrent requests while a
computation is running await the same task. Waiters that give up do not
cancel the shared work, which still lands in the cache when it finishes.
"""

import asyncio
import enum
import hashlib
import logging
from pathlib import Path
from typing import Awaitable, Callable, Dict, Hashable, List, Optional, Tuple, Union

import numpy as np

from ..analyzer.audio import AudioBackend, SoundFileBackend
from ..analyzer.pyramid import PyramidBuilder
from ..analyzer.silence import DEFAULT_MIN_DURATION, DEFAULT_THRESHOLD_DB, SilenceDetector
from .errors import WaveformError
from .segment import SilenceInterval
from .waveform import WaveformPyramid

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]
SilenceKey = Tuple[Path, float, float]


class CacheState(enum.Enum):
    EMPTY = "empty"
    LOADING = "loading"
    READY = "ready"


class AnalysisCache:
    """
    Memoized waveform and silence analysis keyed by audio file.

    One instance is created by the application and shared by everything that
    needs analysis data; tests build their own.
    """

    def __init__(
        self,
        backend: Optional[AudioBackend] = None,
        builder: Optional[PyramidBuilder] = None,
        cache_dir: Optional[PathLike] = None,
    ):
        """
        Args:
            backend: Decoder for audio files
            builder: Pyramid builder (default settings if omitted)
            cache_dir: Directory for persisted pyramids, or None to keep
                everything in memory
        """
        self.backend = backend or SoundFileBackend()
        self.builder = builder or PyramidBuilder()
        self.cache_dir = Path(cache_dir) if cache_dir is not None else None

        self._waveforms: Dict[Path, WaveformPyramid] = {}
        self._silences: Dict[SilenceKey, Tuple[SilenceInterval, ...]] = {}
        self._inflight: Dict[Hashable, asyncio.Task] = {}
        # Bumped on invalidation so a build started before it cannot publish
        self._generations: Dict[Path, int] = {}

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def get_waveform(self, path: PathLike) -> WaveformPyramid:
        """
        Pyramid for ``path``, building it on a miss.

        Raises:
            EmptyAudio, NoSamples, DecodeUnavailable: propagated from the
                decode or build step; nothing is cached in that case
        """
        key = Path(path)
        cached = self._waveforms.get(key)
        if cached is not None:
            return cached
        return await self._single_flight(("waveform", key), lambda: self._build_waveform(key))

    async def get_silence(
        self,
        path: PathLike,
        threshold_db: float = DEFAULT_THRESHOLD_DB,
        min_duration: float = DEFAULT_MIN_DURATION,
    ) -> List[SilenceInterval]:
        """Silence intervals for ``path`` with the given detection parameters."""
        file_key = Path(path)
        key = (file_key, float(threshold_db), float(min_duration))
        cached = self._silences.get(key)
        if cached is None:
            cached = await self._single_flight(
                ("silence",) + key, lambda: self._detect_silence(key)
            )
        return list(cached)

    def state(self, path: PathLike) -> CacheState:
        """Waveform cache state for ``path``."""
        key = Path(path)
        if key in self._waveforms:
            return CacheState.READY
        if ("waveform", key) in self._inflight:
            return CacheState.LOADING
        return CacheState.EMPTY

    def peek_waveform(self, path: PathLike) -> Optional[WaveformPyramid]:
        """Cached pyramid without triggering a build."""
        return self._waveforms.get(Path(path))

    async def precompute_waveform(self, path: PathLike):
        """Warm the cache (e.g. right after a recording finishes)."""
        try:
            await self.get_waveform(path)
        except WaveformError as e:
            logger.warning("Could not precompute waveform for %s: %s", Path(path).name, e)

    # ------------------------------------------------------------------
    # Invalidation
    # ------------------------------------------------------------------

    def invalidate(self, path: PathLike):
        """Forget everything cached for ``path`` (memory and disk)."""
        key = Path(path)
        self._generations[key] = self._generations.get(key, 0) + 1
        self._waveforms.pop(key, None)
        # Later requests start a fresh build instead of joining a stale one
        for flight_key in [k for k in self._inflight if k[1] == key]:
            del self._inflight[flight_key]
        self.invalidate_silence(key)
        disk = self._disk_path(key)
        if disk is not None:
            disk.unlink(missing_ok=True)

    def invalidate_silence(self, path: PathLike):
        """Forget silence detections for ``path`` but keep its waveform."""
        key = Path(path)
        for silence_key in [k for k in self._silences if k[0] == key]:
            del self._silences[silence_key]

    def clear(self):
        """Forget everything (memory and disk)."""
        known = set(self._generations) | set(self._waveforms)
        known |= {k[0] for k in self._silences}
        known |= {k[1] for k in self._inflight}
        for key in known:
            self._generations[key] = self._generations.get(key, 0) + 1
        self._waveforms.clear()
        self._silences.clear()
        self._inflight.clear()
        if self.cache_dir is not None and self.cache_dir.exists():
            for cached in self.cache_dir.glob("*.npz"):
                cached.unlink(missing_ok=True)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _single_flight(self, flight_key: Hashable, compute: Callable[[], Awaitable]):
        task = self._inflight.get(flight_key)
        if task is None:
            task = asyncio.ensure_future(compute())
            self._inflight[flight_key] = task
            task.add_done_callback(lambda t: self._finish_flight(flight_key, t))
        return await asyncio.shield(task)

    def _finish_flight(self, flight_key: Hashable, task: asyncio.Task):
        if self._inflight.get(flight_key) is task:
            del self._inflight[flight_key]
        # Retrieve the exception so abandoned failed tasks are not reported as unhandled
        if not task.cancelled():
            task.exception()

    def _is_current(self, key: Path, generation: int) -> bool:
        return self._generations.get(key, 0) == generation

    async def _build_waveform(self, key: Path) -> WaveformPyramid:
        generation = self._generations.get(key, 0)

        pyramid = await asyncio.to_thread(self._load_from_disk, key)
        if pyramid is None:
            logger.info("Extracting waveform for: %s", key.name)
            samples, sr = await asyncio.to_thread(self.backend.decode_mono_samples, key)
            duration = len(samples) / sr if sr else 0.0
            pyramid = await asyncio.to_thread(self.builder.build, samples, duration, sr)
            if self._is_current(key, generation):
                await asyncio.to_thread(self._save_to_disk, key, pyramid)
            logger.info(
                "Waveform extracted: %d points at LOD0, duration: %.2fs",
                len(pyramid.levels[0]), pyramid.duration_seconds,
            )

        if self._is_current(key, generation):
            self._waveforms[key] = pyramid
        return pyramid

    async def _detect_silence(self, key: SilenceKey) -> Tuple[SilenceInterval, ...]:
        path, threshold_db, min_duration = key
        generation = self._generations.get(path, 0)
        logger.info("Detecting silence for: %s", path.name)

        samples, sr = await asyncio.to_thread(self.backend.decode_mono_samples, path)
        detector = SilenceDetector(silence_thresh_db=threshold_db, min_silence_s=min_duration)
        intervals = tuple(await asyncio.to_thread(detector.detect, samples, sr))

        if self._is_current(path, generation):
            self._silences[key] = intervals
        logger.info(
            "Detected %d silence range(s), total: %.1fs",
            len(intervals), sum(i.duration for i in intervals),
        )
        return intervals

    # Disk cache

    def _disk_path(self, key: Path) -> Optional[Path]:
        if self.cache_dir is None:
            return None
        digest = hashlib.sha1(str(key).encode("utf-8")).hexdigest()[:12]
        return self.cache_dir / f"{key.stem}-{digest}.npz"

    def _load_from_disk(self, key: Path) -> Optional[WaveformPyramid]:
        disk = self._disk_path(key)
        if disk is None or not disk.exists():
            return None

        # Stale if the audio changed after the cache was written
        try:
            if key.stat().st_mtime > disk.stat().st_mtime:
                disk.unlink(missing_ok=True)
                return None
        except OSError:
            return None

        try:
            with np.load(disk, allow_pickle=False) as arrays:
                pyramid = WaveformPyramid.from_arrays(arrays)
        except (OSError, ValueError, KeyError) as e:
            logger.warning("Discarding unreadable waveform cache %s: %s", disk.name, e)
            disk.unlink(missing_ok=True)
            return None

        logger.info("Loaded waveform from disk cache: %s", key.name)
        return pyramid

    def _save_to_disk(self, key: Path, pyramid: WaveformPyramid):
        disk = self._disk_path(key)
        if disk is None:
            return
        tmp = disk.with_suffix(".tmp.npz")
        try:
            disk.parent.mkdir(parents=True, exist_ok=True)
            np.savez_compressed(tmp, **pyramid.to_arrays())
            tmp.replace(disk)
        except OSError as e:
            logger.warning("Could not write waveform cache %s: %s", disk.name, e)
            if tmp.exists():
                tmp.unlink()
            return
        logger.debug("Saved waveform to disk cache: %s", key.name)
