"""Trim, cut and batch silence removal."""

import asyncio
import logging
from pathlib import Path
from typing import Optional, Sequence, Union

from ..analyzer.audio import AudioBackend, SoundFileBackend
from ..config import DEFAULT_CONFIG, EditorConfig
from .report import EditResult
from .segment import RangeLike, clamp_range, pad_and_merge, total_duration

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class AudioEditor:
    """
    Run edit operations against an :class:`AudioBackend`.

    Each operation rewrites the file off the event loop and reports the new
    file and duration. Rewrite failures come back as ``success=False``;
    nothing is raised and the source file is left alone.
    """

    def __init__(
        self,
        backend: Optional[AudioBackend] = None,
        config: EditorConfig = DEFAULT_CONFIG,
    ):
        self.backend = backend or SoundFileBackend()
        self.config = config

    def can_perform_trim(self, start: float, end: float, duration: float) -> bool:
        """True if keeping ``[start, end]`` would actually shorten the file."""
        if start < 0 or end <= start:
            return False
        guard = self.config.min_edit_granularity
        return start > guard or end < duration - guard

    def can_perform_cut(self, start: float, end: float, duration: float) -> bool:
        """True if removing ``[start, end]`` removes something but not everything."""
        if start < 0 or end <= start:
            return False
        guard = self.config.min_edit_granularity
        return guard < (end - start) < duration - guard

    async def trim(
        self,
        source: PathLike,
        start_time: float,
        end_time: float,
        duration: Optional[float] = None,
    ) -> EditResult:
        """Keep only ``[start_time, end_time]``."""
        source = Path(source)
        duration = await self._duration(source, duration)
        if duration is None:
            return EditResult.failed(source, "Trim", "Could not read audio duration")
        start_time, end_time = clamp_range(start_time, end_time, duration)
        if not self.can_perform_trim(start_time, end_time, duration):
            return EditResult.failed(source, "Trim", "Selection covers the whole recording")

        try:
            output = await asyncio.to_thread(
                self.backend.write_trimmed, source, start_time, end_time
            )
        except Exception as e:
            logger.warning("Trim of %s failed: %s", source.name, e)
            return EditResult.failed(source, "Trim", str(e))

        return EditResult(
            success=True,
            output_file=Path(output),
            new_duration=end_time - start_time,
            operation="Trim",
        )

    async def cut(
        self,
        source: PathLike,
        start_time: float,
        end_time: float,
        duration: Optional[float] = None,
    ) -> EditResult:
        """Remove ``[start_time, end_time]`` and splice the remainder."""
        source = Path(source)
        duration = await self._duration(source, duration)
        if duration is None:
            return EditResult.failed(source, "Cut", "Could not read audio duration")
        start_time, end_time = clamp_range(start_time, end_time, duration)
        if not self.can_perform_cut(start_time, end_time, duration):
            return EditResult.failed(source, "Cut", "Invalid time range for editing")

        removal = pad_and_merge([(start_time, end_time)], 0.0, duration)
        try:
            output = await asyncio.to_thread(
                self.backend.write_with_ranges_removed, source, removal
            )
        except Exception as e:
            logger.warning("Cut of %s failed: %s", source.name, e)
            return EditResult.failed(source, "Cut", str(e))

        return EditResult(
            success=True,
            output_file=Path(output),
            new_duration=duration - total_duration(removal),
            operation="Cut",
        )

    async def remove_silence(
        self,
        source: PathLike,
        ranges: Sequence[RangeLike],
        padding: Optional[float] = None,
        duration: Optional[float] = None,
    ) -> EditResult:
        """
        Remove several silence ranges in a single rewrite.

        Args:
            source: Audio file to edit
            ranges: Silence ranges; deselected ``SelectableSilenceInterval``
                entries are skipped
            padding: Seconds added on each side of every range before removal
                (defaults to the configured padding)
            duration: Duration of ``source`` if already known

        Returns:
            EditResult with ``removed_duration`` and ``removed_ranges_count``
        """
        source = Path(source)
        if padding is None:
            padding = self.config.padding
        duration = await self._duration(source, duration)
        if duration is None:
            return EditResult.failed(source, "Remove Silence", "Could not read audio duration")

        removals = pad_and_merge(ranges, padding, duration)
        if not removals:
            return EditResult(
                success=True,
                output_file=source,
                new_duration=duration,
                operation="Remove Silence",
                removed_duration=0.0,
                removed_ranges_count=0,
            )

        removed = total_duration(removals)
        if removed >= duration:
            return EditResult.failed(source, "Remove Silence", "Edit would remove the entire recording")

        try:
            output = await asyncio.to_thread(
                self.backend.write_with_ranges_removed, source, removals
            )
        except Exception as e:
            logger.warning("Silence removal on %s failed: %s", source.name, e)
            return EditResult.failed(source, "Remove Silence", str(e))

        logger.info(
            "Removed %d silence range(s) (%.2fs) from %s", len(removals), removed, source.name
        )
        return EditResult(
            success=True,
            output_file=Path(output),
            new_duration=duration - removed,
            operation="Remove Silence",
            removed_duration=removed,
            removed_ranges_count=len(removals),
        )

    async def _duration(self, source: Path, duration: Optional[float]) -> Optional[float]:
        if duration is not None:
            return duration
        try:
            return await asyncio.to_thread(self.backend.duration, source)
        except Exception as e:
            logger.warning("Could not read duration of %s: %s", source.name, e)
            return None
