"""Exception types raised by voxedit."""


class VoxEditError(Exception):
    """Base class for all voxedit errors."""


class WaveformError(VoxEditError):
    """Audio could not be turned into analysis data."""


class EmptyAudio(WaveformError):
    """The audio has no duration or no frames."""

    def __init__(self, message: str = "Audio file is empty"):
        super().__init__(message)


class NoSamples(WaveformError):
    """The audio decoded but produced no usable sample data."""

    def __init__(self, message: str = "No audio data found"):
        super().__init__(message)


class DecodeUnavailable(WaveformError):
    """The audio file could not be opened or decoded."""

    def __init__(self, message: str = "Audio file could not be decoded"):
        super().__init__(message)
