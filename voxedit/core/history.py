"""Undo/redo history for an editing session."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Tuple

from ..analyzer.audio import EDITED_MARKER
from ..config import MAX_UNDO_STEPS
from .segment import Marker

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EditSnapshot:
    """Full editable state captured right before an edit."""
    audio_file: Path
    duration: float
    markers: Tuple[Marker, ...] = field(default_factory=tuple)
    selection_start: float = 0.0
    selection_end: float = 0.0
    description: str = ""  # e.g. "Trim", "Cut", "Add Marker"

    def __post_init__(self):
        object.__setattr__(self, "audio_file", Path(self.audio_file))
        object.__setattr__(self, "markers", tuple(self.markers))


class EditHistory:
    """
    Two stacks of snapshots with linear-history semantics.

    Snapshots that fall off the history (stack overflow, redo invalidation,
    ``clear``) pass their audio file to ``on_discard`` once nothing else in
    the history points at it, but only for edit artifacts.
    """

    def __init__(
        self,
        max_steps: int = MAX_UNDO_STEPS,
        on_discard: Optional[Callable[[Path], None]] = None,
    ):
        self.max_steps = max_steps
        self.on_discard = on_discard
        self._undo: List[EditSnapshot] = []
        self._redo: List[EditSnapshot] = []

    @property
    def can_undo(self) -> bool:
        return bool(self._undo)

    @property
    def can_redo(self) -> bool:
        return bool(self._redo)

    @property
    def undo_description(self) -> Optional[str]:
        return self._undo[-1].description if self._undo else None

    @property
    def redo_description(self) -> Optional[str]:
        return self._redo[-1].description if self._redo else None

    @property
    def undo_count(self) -> int:
        return len(self._undo)

    @property
    def redo_count(self) -> int:
        return len(self._redo)

    def push_undo(self, snapshot: EditSnapshot, clear_redo: bool = True):
        """Record the state before a change. A new edit invalidates redo."""
        self._undo.append(snapshot)
        if len(self._undo) > self.max_steps:
            self._discard([self._undo.pop(0)])
        if clear_redo:
            dropped, self._redo = self._redo, []
            self._discard(dropped)

    def pop_undo(self) -> Optional[EditSnapshot]:
        return self._undo.pop() if self._undo else None

    def push_redo(self, snapshot: EditSnapshot):
        self._redo.append(snapshot)
        if len(self._redo) > self.max_steps:
            self._discard([self._redo.pop(0)])

    def pop_redo(self) -> Optional[EditSnapshot]:
        return self._redo.pop() if self._redo else None

    def clear(self, keep: Iterable[Path] = ()):
        """Empty both stacks (session committed or abandoned)."""
        dropped = self._undo + self._redo
        self._undo, self._redo = [], []
        self._discard(dropped, keep=keep)

    def references(self, path: Path) -> bool:
        path = Path(path)
        return any(s.audio_file == path for s in self._undo + self._redo)

    def _discard(self, snapshots: Iterable[EditSnapshot], keep: Iterable[Path] = ()):
        if self.on_discard is None:
            return
        kept = {Path(p) for p in keep}
        seen = set()
        for snapshot in snapshots:
            path = snapshot.audio_file
            if path in seen or path in kept or self.references(path):
                continue
            seen.add(path)
            if EDITED_MARKER in path.name:
                logger.debug("Discarding orphaned edit file %s", path.name)
                self.on_discard(path)
