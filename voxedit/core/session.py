"""Editing session: one recording, its pending edits and their history."""

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Awaitable, Callable, Iterable, List, Optional, Sequence, Tuple, Union

from ..analyzer.audio import EDITED_MARKER
from ..config import DEFAULT_CONFIG, EditorConfig
from . import timeline
from .cache import AnalysisCache
from .editor import AudioEditor
from .history import EditHistory, EditSnapshot
from .report import EditResult
from .segment import (
    Marker,
    RangeLike,
    SelectableSilenceInterval,
    clamp_range,
    selected_intervals,
    sorted_markers,
)
from .waveform import WaveformPyramid

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


@dataclass(frozen=True)
class Original:
    """The recording's own file; nothing has been edited yet."""
    path: Path


@dataclass(frozen=True)
class Pending:
    """An edited file that has not been committed."""
    path: Path
    duration: float


CurrentAudio = Union[Original, Pending]


@dataclass(frozen=True)
class CommitResult:
    """What the caller persists after a session is committed."""
    audio_file: Path
    duration: float
    markers: Tuple[Marker, ...]
    changed: bool


class EditSession:
    """
    Editable state of one recording.

    Every change first pushes a snapshot of the current state, then runs.
    A failed edit pops that snapshot again so the session is exactly as it
    was. Edits are serialized.
    """

    def __init__(
        self,
        audio_file: PathLike,
        duration: float,
        markers: Iterable[Marker] = (),
        *,
        editor: Optional[AudioEditor] = None,
        cache: Optional[AnalysisCache] = None,
        config: EditorConfig = DEFAULT_CONFIG,
        history: Optional[EditHistory] = None,
    ):
        self.config = config
        self.editor = editor or AudioEditor(config=config)
        self.cache = cache or AnalysisCache(
            backend=self.editor.backend, cache_dir=config.cache_dir
        )
        self.history = history or EditHistory(
            max_steps=config.max_undo_steps, on_discard=self._discard_file
        )

        self._original = Original(Path(audio_file))
        self._original_duration = float(duration)
        self._original_markers = tuple(sorted_markers(markers))

        self.current: CurrentAudio = self._original
        self.duration = self._original_duration
        self.markers: Tuple[Marker, ...] = self._original_markers
        self.selection: Tuple[float, float] = (0.0, self.duration)
        self._lock = asyncio.Lock()

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def audio_file(self) -> Path:
        return self.current.path

    @property
    def has_changes(self) -> bool:
        return isinstance(self.current, Pending) or self.markers != self._original_markers

    @property
    def can_undo(self) -> bool:
        return self.history.can_undo

    @property
    def can_redo(self) -> bool:
        return self.history.can_redo

    def select(self, start: float, end: float) -> Tuple[float, float]:
        """Set the selection, clamped to the recording."""
        self.selection = clamp_range(start, end, self.duration)
        return self.selection

    def can_trim(self) -> bool:
        return self.editor.can_perform_trim(*self.selection, self.duration)

    def can_cut(self) -> bool:
        return self.editor.can_perform_cut(*self.selection, self.duration)

    def snapshot(self, description: str) -> EditSnapshot:
        return EditSnapshot(
            audio_file=self.audio_file,
            duration=self.duration,
            markers=self.markers,
            selection_start=self.selection[0],
            selection_end=self.selection[1],
            description=description,
        )

    # ------------------------------------------------------------------
    # Analysis
    # ------------------------------------------------------------------

    async def waveform(self) -> WaveformPyramid:
        return await self.cache.get_waveform(self.audio_file)

    async def highlight_silence(
        self,
        threshold_db: Optional[float] = None,
        min_duration: Optional[float] = None,
    ) -> List[SelectableSilenceInterval]:
        """Detect silence for interactive removal; every range starts included."""
        if threshold_db is None:
            threshold_db = self.config.highlight_threshold_db
        if min_duration is None:
            min_duration = self.config.highlight_min_duration
        intervals = await self.cache.get_silence(self.audio_file, threshold_db, min_duration)
        return [SelectableSilenceInterval(interval=i) for i in intervals]

    # ------------------------------------------------------------------
    # Markers
    # ------------------------------------------------------------------

    def add_marker(self, time: float, label: Optional[str] = None) -> Marker:
        marker = Marker(time=max(0.0, min(time, self.duration)), label=label)
        self.history.push_undo(self.snapshot("Add Marker"))
        self.markers = tuple(sorted_markers(self.markers + (marker,)))
        return marker

    def remove_marker(self, marker_id: str) -> bool:
        remaining = tuple(m for m in self.markers if m.id != marker_id)
        if len(remaining) == len(self.markers):
            return False
        self.history.push_undo(self.snapshot("Remove Marker"))
        self.markers = remaining
        return True

    # ------------------------------------------------------------------
    # Edits
    # ------------------------------------------------------------------

    async def trim(self, start: Optional[float] = None, end: Optional[float] = None) -> EditResult:
        """Keep only the selection (or ``[start, end]``)."""
        start, end = self._range(start, end)
        if not self.editor.can_perform_trim(start, end, self.duration):
            return EditResult.failed(self.audio_file, "Trim", "Selection covers the whole recording")
        return await self._apply(
            "Trim",
            lambda source, duration: self.editor.trim(source, start, end, duration=duration),
            lambda markers, duration: timeline.after_trim(markers, start, end),
        )

    async def cut(self, start: Optional[float] = None, end: Optional[float] = None) -> EditResult:
        """Remove the selection (or ``[start, end]``)."""
        start, end = self._range(start, end)
        if not self.editor.can_perform_cut(start, end, self.duration):
            return EditResult.failed(self.audio_file, "Cut", "Invalid time range for editing")
        return await self._apply(
            "Cut",
            lambda source, duration: self.editor.cut(source, start, end, duration=duration),
            lambda markers, duration: timeline.after_cut(markers, start, end),
        )

    async def remove_silence(
        self,
        ranges: Sequence[RangeLike],
        padding: Optional[float] = None,
    ) -> EditResult:
        """Remove the included silence ranges in one pass."""
        if padding is None:
            padding = self.config.padding
        chosen = selected_intervals(ranges)
        return await self._apply(
            "Remove Silence",
            lambda source, duration: self.editor.remove_silence(
                source, chosen, padding, duration=duration
            ),
            lambda markers, duration: timeline.after_removing_silence(
                markers, chosen, padding, duration
            ),
        )

    async def _apply(
        self,
        description: str,
        operation: Callable[[Path, float], Awaitable[EditResult]],
        remap: Callable[[Sequence[Marker], float], List[Marker]],
    ) -> EditResult:
        async with self._lock:
            before = self.snapshot(description)
            self.history.push_undo(before)

            result = await operation(before.audio_file, before.duration)
            if not result.success:
                self.history.pop_undo()
                return result
            if result.output_file == before.audio_file:
                # Nothing was removed
                self.history.pop_undo()
                return result

            self.current = Pending(path=Path(result.output_file), duration=result.new_duration)
            self.duration = result.new_duration
            self.markers = tuple(remap(before.markers, before.duration))
            self.selection = (0.0, self.duration)
            self.cache.invalidate(self.audio_file)
            logger.info("%s applied: %.3fs -> %.3fs", description, before.duration, self.duration)
            return result

    def _range(self, start: Optional[float], end: Optional[float]) -> Tuple[float, float]:
        sel_start, sel_end = self.selection
        return clamp_range(
            sel_start if start is None else start,
            sel_end if end is None else end,
            self.duration,
        )

    # ------------------------------------------------------------------
    # Undo / redo
    # ------------------------------------------------------------------

    def undo(self) -> Optional[EditSnapshot]:
        """Restore the state before the last change; None if there is none."""
        snapshot = self.history.pop_undo()
        if snapshot is None:
            return None
        self.history.push_redo(self.snapshot(snapshot.description))
        self._restore(snapshot)
        return snapshot

    def redo(self) -> Optional[EditSnapshot]:
        """Re-apply the last undone change; None if there is none."""
        snapshot = self.history.pop_redo()
        if snapshot is None:
            return None
        self.history.push_undo(self.snapshot(snapshot.description), clear_redo=False)
        self._restore(snapshot)
        return snapshot

    def _restore(self, snapshot: EditSnapshot):
        if snapshot.audio_file == self._original.path:
            self.current = self._original
        else:
            self.current = Pending(path=snapshot.audio_file, duration=snapshot.duration)
        self.duration = snapshot.duration
        self.markers = snapshot.markers
        self.selection = (snapshot.selection_start, snapshot.selection_end)

    # ------------------------------------------------------------------
    # Ending the session
    # ------------------------------------------------------------------

    def commit(self) -> CommitResult:
        """Accept the current state; history is cleared."""
        result = CommitResult(
            audio_file=self.audio_file,
            duration=self.duration,
            markers=self.markers,
            changed=self.has_changes,
        )
        self.history.clear(keep=[self.audio_file, self._original.path])
        self._original = Original(self.audio_file)
        self._original_duration = self.duration
        self._original_markers = self.markers
        self.current = self._original
        return result

    def discard(self):
        """Drop every pending edit and return to the original recording."""
        pending = self.current.path if isinstance(self.current, Pending) else None
        self.history.clear(keep=[self._original.path])
        self.current = self._original
        self.duration = self._original_duration
        self.markers = self._original_markers
        self.selection = (0.0, self.duration)
        if pending is not None:
            self.cache.invalidate(pending)
            self._discard_file(pending)

    def _discard_file(self, path: Path):
        if path in (self.current.path, self._original.path) or EDITED_MARKER not in path.name:
            return
        remove = getattr(self.editor.backend, "remove_file", None)
        if remove is not None:
            remove(path)
