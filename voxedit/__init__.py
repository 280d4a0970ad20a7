"""
voxedit: waveform analysis and editing core for voice recordings.
"""

import logging

from .core.session import EditSession
from .core.cache import AnalysisCache
from .core.editor import AudioEditor
from .core.segment import Marker, SilenceInterval, SelectableSilenceInterval
from .core.waveform import WaveformPyramid
from .core.report import EditResult
from .config import EditorConfig

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"
__all__ = [
    "EditSession",
    "AnalysisCache",
    "AudioEditor",
    "Marker",
    "SilenceInterval",
    "SelectableSilenceInterval",
    "WaveformPyramid",
    "EditResult",
    "EditorConfig",
]
