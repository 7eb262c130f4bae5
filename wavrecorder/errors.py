"""Exception types raised by the recorder."""


class RecorderError(Exception):
    """Base class for recorder errors."""


class CaptureUnavailable(RecorderError):
    """The capture device could not supply an audio stream."""


class ChunkLengthMismatch(RecorderError, ValueError):
    """Per-channel chunks delivered in one notification do not line up."""


class InvalidConfiguration(RecorderError, ValueError):
    """Configuration could not be loaded or names an unsupported format."""
