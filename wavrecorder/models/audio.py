"""Audio-related data models."""

from dataclasses import dataclass
from enum import Enum


class SessionState(Enum):
    """Lifecycle state of a recording session."""
    IDLE = "idle"
    RECORDING = "recording"
    PAUSED = "paused"
    STOPPED = "stopped"


@dataclass
class RecordingStats:
    """Recording session statistics."""
    state: SessionState
    is_recording: bool
    elapsed_seconds: float
    total_samples: int
    total_chunks: int
    channel_count: int
    input_sample_rate: int
    output_sample_rate: int
    output_bit_depth: int
