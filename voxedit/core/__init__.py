"""Core module for voxedit."""

from .errors import DecodeUnavailable, EmptyAudio, NoSamples, VoxEditError, WaveformError
from .resample import bucket_edges, resample
from .segment import Marker, SelectableSilenceInterval, SilenceInterval
from .waveform import WaveformPyramid
from .report import EditResult
from .editor import AudioEditor
from .history import EditHistory, EditSnapshot
from .cache import AnalysisCache, CacheState
from .session import CurrentAudio, EditSession, Original, Pending

__all__ = [
    "DecodeUnavailable",
    "EmptyAudio",
    "NoSamples",
    "VoxEditError",
    "WaveformError",
    "bucket_edges",
    "resample",
    "Marker",
    "SelectableSilenceInterval",
    "SilenceInterval",
    "WaveformPyramid",
    "EditResult",
    "AudioEditor",
    "EditHistory",
    "EditSnapshot",
    "AnalysisCache",
    "CacheState",
    "CurrentAudio",
    "EditSession",
    "Original",
    "Pending",
]
