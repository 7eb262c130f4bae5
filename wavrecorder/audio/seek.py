"""Rewinding channel buffers to a position in the recording."""

import math
import logging
from typing import Optional, Sequence

from .buffer import ChannelBuffer

logger = logging.getLogger(__name__)


def seconds_to_sample_index(seconds: float, sample_rate: int) -> int:
    """Convert a time position to a sample count, rounding halves up."""
    return int(math.floor(seconds * sample_rate + 0.5))


class SeekTruncator:
    """Truncates every channel of a session to the same sample position."""

    def __init__(self, sample_rate: int):
        """Initialize truncator.

        Args:
            sample_rate: Input sample rate the buffers were captured at
        """
        self.sample_rate = sample_rate

    def truncate(self, buffers: Sequence[ChannelBuffer], target_seconds: float) -> Optional[int]:
        """Discard everything captured after ``target_seconds``.

        Channel 0 is the reference timeline; all channels share its chunk
        boundaries.

        Args:
            buffers: One buffer per channel
            target_seconds: Non-negative time position to rewind to

        Returns:
            The new sample count of every channel, or None when the position
            lies beyond the captured audio and nothing was changed
        """
        if not buffers:
            return None

        target_index = seconds_to_sample_index(target_seconds, self.sample_rate)
        reference = buffers[0]

        if target_index > reference.total_samples:
            logger.debug(f"Seek to {target_seconds:.3f}s is past {reference.total_samples} "
                         f"captured samples, nothing to discard")
            return None

        # Locate the containing chunk before touching any buffer
        chunk_index = None
        start_offset = 0
        for index, chunk in enumerate(reference.chunks):
            end_offset = start_offset + len(chunk)
            if target_index < end_offset:
                chunk_index = index
                break
            start_offset = end_offset

        if chunk_index is None:
            # Target is exactly the end of the captured audio
            for buffer in buffers:
                buffer.total_samples = target_index
            return target_index

        keep_samples = target_index - start_offset
        for buffer in buffers:
            buffer.truncate(chunk_index, keep_samples, target_index)

        logger.info(f"Truncated {len(buffers)} channel(s) to sample {target_index} "
                    f"({target_index / self.sample_rate:.3f}s), chunk {chunk_index}")
        return target_index
