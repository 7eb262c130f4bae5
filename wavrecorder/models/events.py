"""Event models published while recording."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class ProgressEvent:
    """Recording progress after a chunk has been ingested."""
    elapsed_seconds: float
    total_samples: int
    sequence_number: int  # Number of chunks ingested so far
    timestamp: datetime = field(default_factory=datetime.now)
