"""Float to integer PCM quantization."""

import logging

import numpy as np

from ..errors import InvalidConfiguration

logger = logging.getLogger(__name__)

SUPPORTED_BIT_DEPTHS = (8, 16)


def _round_half_away(values: np.ndarray) -> np.ndarray:
    return np.sign(values) * np.floor(np.abs(values) + 0.5)


def quantize(samples: np.ndarray, bit_depth: int) -> np.ndarray:
    """Quantize float samples to integer PCM values.

    Samples are clamped to [-1.0, 1.0]. Negative values scale by 2^(n-1) and
    positive values by 2^(n-1) - 1 so the full signed range is used without
    overflow. 8-bit output is unsigned, centred on 128.

    Args:
        samples: Interleaved float samples
        bit_depth: 8 or 16

    Returns:
        ``uint8`` array for 8-bit, little-endian ``int16`` array for 16-bit
    """
    if bit_depth not in SUPPORTED_BIT_DEPTHS:
        raise InvalidConfiguration(f"Unsupported PCM bit depth: {bit_depth}")

    clamped = np.clip(np.asarray(samples, dtype=np.float64), -1.0, 1.0)

    if bit_depth == 16:
        scaled = np.where(clamped < 0, clamped * 32768.0, clamped * 32767.0)
        return _round_half_away(scaled).astype("<i2")

    scaled = np.where(clamped < 0, clamped * 128.0, clamped * 127.0)
    return np.clip(_round_half_away(scaled) + 128, 0, 255).astype(np.uint8)


def encode_pcm(samples: np.ndarray, bit_depth: int) -> bytes:
    """Encode float samples as a little-endian PCM byte payload."""
    payload = quantize(samples, bit_depth).tobytes()
    logger.debug(f"Encoded {len(samples)} samples as {bit_depth}-bit PCM ({len(payload)} bytes)")
    return payload
