"""Saved recording metadata."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class RecordingInfo:
    """Information about an exported recording."""
    recording_id: str
    created_at: datetime
    duration_seconds: float
    audio_file: str
    file_size_bytes: int
    channel_count: int
    sample_rate: int  # Rate declared in the WAV header
    bit_depth: int
    total_chunks: int
