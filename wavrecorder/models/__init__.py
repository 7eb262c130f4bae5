"""Data models for the WavRecorder package."""

from .audio import SessionState, RecordingStats
from .events import ProgressEvent
from .recording import RecordingInfo

__all__ = [
    "SessionState",
    "RecordingStats",
    "ProgressEvent",
    "RecordingInfo",
]
