"""Analyzer subpackage for audio analysis."""

from .audio import AudioAnalyzer, AudioBackend, SoundFileBackend
from .pyramid import PyramidBuilder, build_pyramid
from .silence import SilenceDetector, detect_silence

__all__ = [
    "AudioAnalyzer",
    "AudioBackend",
    "SoundFileBackend",
    "PyramidBuilder",
    "build_pyramid",
    "SilenceDetector",
    "detect_silence",
]
