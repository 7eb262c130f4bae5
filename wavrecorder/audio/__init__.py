"""Audio buffering, capture and encoding module."""

from .buffer import ChannelBuffer
from .capture import CaptureSource, CaptureStream, PyAudioCaptureSource, check_microphone_available
from .seek import SeekTruncator
from .resampler import resample
from .pcm import encode_pcm
from .wav import build_wav

__all__ = [
    'ChannelBuffer',
    'CaptureSource',
    'CaptureStream',
    'PyAudioCaptureSource',
    'check_microphone_available',
    'SeekTruncator',
    'resample',
    'encode_pcm',
    'build_wav',
]
