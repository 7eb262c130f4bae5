"""Service layer for WavRecorder."""

from .recording_session import RecordingSession

__all__ = [
    "RecordingSession",
]
