"""RIFF/WAVE container encoding for PCM payloads."""

import struct
import logging

logger = logging.getLogger(__name__)

WAV_HEADER_SIZE = 44
WAVE_FORMAT_PCM = 1

# RIFF header, fmt chunk and data chunk header in one little-endian layout
_HEADER = struct.Struct("<4sI4s4sIHHIIHH4sI")


def declared_sample_rate(output_sample_rate: int, input_sample_rate: int) -> int:
    """Rate written to the header; decimation can't exceed the input rate."""
    return min(output_sample_rate, input_sample_rate)


def build_header(payload_size: int, channel_count: int, sample_rate: int, bit_depth: int) -> bytes:
    """Build the 44-byte canonical WAV header.

    Args:
        payload_size: Length of the PCM data in bytes
        channel_count: Number of interleaved channels
        sample_rate: Declared sample rate in Hz
        bit_depth: Bits per sample (8 or 16)

    Returns:
        Header bytes
    """
    bytes_per_sample = bit_depth // 8
    return _HEADER.pack(
        b"RIFF",
        36 + payload_size,
        b"WAVE",
        b"fmt ",
        16,
        WAVE_FORMAT_PCM,
        channel_count,
        sample_rate,
        channel_count * sample_rate * bytes_per_sample,
        channel_count * bytes_per_sample,
        bit_depth,
        b"data",
        payload_size,
    )


def build_wav(payload: bytes, channel_count: int, sample_rate: int, bit_depth: int) -> bytes:
    """Wrap a PCM payload in a WAV container."""
    wav = build_header(len(payload), channel_count, sample_rate, bit_depth) + payload
    logger.debug(f"Built WAV container: {channel_count}ch, {sample_rate}Hz, "
                 f"{bit_depth}-bit, {len(wav)} bytes")
    return wav
