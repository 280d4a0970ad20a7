"""
Configuration for the editing core.

``EditorConfig`` is immutable and validated on construction, so one instance
can be shared by the editor, the cache and every editing session.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from .analyzer.silence import (
    DEFAULT_MIN_DURATION,
    DEFAULT_THRESHOLD_DB,
    HIGHLIGHT_MIN_DURATION,
    HIGHLIGHT_THRESHOLD_DB,
)

DEFAULT_PADDING = 0.05
"""Seconds kept on each side of a removed silence."""

MIN_EDIT_GRANULARITY = 0.1
"""Trims and cuts closer than this to a no-op (or to removing everything) are refused."""

MAX_UNDO_STEPS = 20

ENV_PREFIX = "VOXEDIT_"


@dataclass(frozen=True)
class EditorConfig:
    """
    Parameters for editing and analysis.

    Attributes:
        padding: Outward padding applied to each removed silence range.
        min_edit_granularity: Guard used by the trim and cut validity checks.
        max_undo_steps: Depth of the undo and redo stacks.
        silence_threshold_db: Threshold for generic silence detection.
        silence_min_duration: Minimum silence length for generic detection.
        highlight_threshold_db: Threshold for highlighting silence while editing.
        highlight_min_duration: Minimum silence length when highlighting.
        cache_dir: Where waveform pyramids are persisted, or None for memory only.
    """

    padding: float = DEFAULT_PADDING
    min_edit_granularity: float = MIN_EDIT_GRANULARITY
    max_undo_steps: int = MAX_UNDO_STEPS
    silence_threshold_db: float = DEFAULT_THRESHOLD_DB
    silence_min_duration: float = DEFAULT_MIN_DURATION
    highlight_threshold_db: float = HIGHLIGHT_THRESHOLD_DB
    highlight_min_duration: float = HIGHLIGHT_MIN_DURATION
    cache_dir: Optional[Path] = None

    def __post_init__(self) -> None:
        """Validate configuration parameters."""
        if self.padding < 0:
            raise ValueError(f"padding must be non-negative, got {self.padding}")
        if self.min_edit_granularity < 0:
            raise ValueError(
                f"min_edit_granularity must be non-negative, got {self.min_edit_granularity}"
            )
        if self.max_undo_steps <= 0:
            raise ValueError(f"max_undo_steps must be positive, got {self.max_undo_steps}")
        for name in ("silence_min_duration", "highlight_min_duration"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be non-negative, got {getattr(self, name)}")
        for name in ("silence_threshold_db", "highlight_threshold_db"):
            if getattr(self, name) > 0:
                raise ValueError(f"{name} is in dBFS and must be <= 0, got {getattr(self, name)}")
        if self.cache_dir is not None and not isinstance(self.cache_dir, Path):
            object.__setattr__(self, "cache_dir", Path(self.cache_dir))

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "EditorConfig":
        """Build a config from ``VOXEDIT_*`` environment variables."""
        env = os.environ if environ is None else environ
        kwargs = {}
        floats = (
            "padding",
            "min_edit_granularity",
            "silence_threshold_db",
            "silence_min_duration",
            "highlight_threshold_db",
            "highlight_min_duration",
        )
        for name in floats:
            value = env.get(ENV_PREFIX + name.upper())
            if value is not None:
                kwargs[name] = float(value)
        steps = env.get(ENV_PREFIX + "MAX_UNDO_STEPS")
        if steps is not None:
            kwargs["max_undo_steps"] = int(steps)
        cache_dir = env.get(ENV_PREFIX + "CACHE_DIR")
        if cache_dir:
            kwargs["cache_dir"] = Path(cache_dir).expanduser()
        return cls(**kwargs)


DEFAULT_CONFIG = EditorConfig()
"""Default configuration: 50 ms padding, 0.1 s edit guard, 20 undo steps, no disk cache."""
