"""Decimating resampler that interleaves channels for PCM encoding."""

import math
import logging
from typing import Sequence

import numpy as np

logger = logging.getLogger(__name__)


def compression_ratio(input_sample_rate: int, output_sample_rate: int) -> float:
    """Input samples consumed per output sample. Never below 1 (no upsampling)."""
    return max(input_sample_rate / output_sample_rate, 1.0)


def resample(channels: Sequence[np.ndarray], input_sample_rate: int,
             output_sample_rate: int) -> np.ndarray:
    """Point-sample the channels down to the output rate and interleave them.

    A fractional cursor starts at 0 and advances by the compression ratio;
    each step takes the sample at ``floor(cursor)`` from the first channel
    and, for stereo, from the second. No filtering is applied, so
    downsampling aliases.

    Args:
        channels: One float array per channel; a missing or empty second
            channel means mono
        input_sample_rate: Rate the channels were captured at
        output_sample_rate: Requested output rate

    Returns:
        Interleaved float32 samples (L, R, L, R, ... for stereo)
    """
    left = np.asarray(channels[0], dtype=np.float32) if channels else np.zeros(0, dtype=np.float32)
    right = np.asarray(channels[1], dtype=np.float32) if len(channels) > 1 else np.zeros(0, dtype=np.float32)

    ratio = compression_ratio(input_sample_rate, output_sample_rate)
    length = int(math.floor((len(left) + len(right)) / ratio))
    if length == 0 or len(left) == 0:
        return np.zeros(0, dtype=np.float32)

    stereo = len(right) > 0
    steps = (length + 1) // 2 if stereo else length

    # Sequential accumulation matches stepping the cursor one ratio at a time
    cursor = np.zeros(steps, dtype=np.float64)
    if steps > 1:
        cursor[1:] = np.cumsum(np.full(steps - 1, ratio, dtype=np.float64))
    positions = np.floor(cursor).astype(np.int64)
    positions = np.minimum(positions, len(left) - 1)

    if not stereo:
        output = left[positions]
    else:
        positions = np.minimum(positions, len(right) - 1)
        output = np.empty(steps * 2, dtype=np.float32)
        output[0::2] = left[positions]
        output[1::2] = right[positions]
        output = output[:length]

    logger.debug(f"Resampled {len(left) + len(right)} samples at ratio {ratio:.4f} "
                 f"to {len(output)} samples")
    return output
