"""Pytest configuration and fixtures for WavRecorder tests."""

import pytest
import tempfile
import logging
from typing import Callable, List, Optional
from unittest.mock import Mock, patch
import numpy as np

from wavrecorder.audio.capture import CaptureSource, CaptureStream
from wavrecorder.errors import CaptureUnavailable


# Configure logging for tests
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


class FakeCaptureStream(CaptureStream):
    """Capture stream driven by the test instead of a device."""

    def __init__(self):
        self.callback: Optional[Callable] = None
        self.stopped = False

    def on_chunk(self, callback):
        self.callback = callback

    def stop(self):
        self.stopped = True

    def deliver(self, chunks: List[np.ndarray]) -> None:
        """Push one chunk per channel as the device would."""
        self.callback(chunks)


class FakeCaptureSource(CaptureSource):
    """Capture source handing out FakeCaptureStreams."""

    def __init__(self, sample_rate: int = 44100, available: bool = True):
        self._sample_rate = sample_rate
        self.available = available
        self.streams: List[FakeCaptureStream] = []

    @property
    def sample_rate(self) -> int:
        return self._sample_rate

    def start_capture(self) -> FakeCaptureStream:
        if not self.available:
            raise CaptureUnavailable("No microphone permission")
        stream = FakeCaptureStream()
        self.streams.append(stream)
        return stream

    @property
    def stream(self) -> FakeCaptureStream:
        """Most recently opened stream."""
        return self.streams[-1]


@pytest.fixture
def temp_data_dir():
    """Create temporary directory for test data."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield temp_dir


@pytest.fixture
def capture_source():
    """Fake 44.1kHz capture source."""
    return FakeCaptureSource(sample_rate=44100)


@pytest.fixture
def sine_chunks():
    """Generate a sine wave split into equal chunks."""
    def generate(num_chunks=4, chunk_size=1024, sample_rate=44100, freq=440.0, amplitude=0.8):
        samples = num_chunks * chunk_size
        t = np.arange(samples) / sample_rate
        wave_data = (amplitude * np.sin(2 * np.pi * freq * t)).astype(np.float32)
        return [wave_data[i * chunk_size:(i + 1) * chunk_size] for i in range(num_chunks)]

    return generate


@pytest.fixture
def sample_float_chunk():
    """A single 1024-sample float32 chunk of a 440Hz sine."""
    t = np.arange(1024) / 16000
    return np.sin(2 * np.pi * 440 * t).astype(np.float32)


@pytest.fixture
def mock_pyaudio():
    """Mock PyAudio for testing without actual audio hardware."""
    with patch('pyaudio.PyAudio') as mock_pyaudio_class:
        mock_pyaudio_instance = Mock()
        mock_stream = Mock()

        # Stereo silence: 1024 frames of two float32 samples
        mock_stream.read.return_value = b'\x00' * (1024 * 2 * 4)
        mock_stream.stop_stream.return_value = None
        mock_stream.close.return_value = None

        mock_pyaudio_instance.open.return_value = mock_stream
        mock_pyaudio_instance.terminate.return_value = None
        mock_pyaudio_instance.get_default_input_device_info.return_value = {
            'name': 'Mock Microphone',
            'defaultSampleRate': 48000.0,
        }
        mock_pyaudio_instance.get_device_info_by_index.return_value = {
            'name': 'Mock USB Microphone',
            'defaultSampleRate': 44100.0,
        }

        mock_pyaudio_class.return_value = mock_pyaudio_instance

        yield {
            'class': mock_pyaudio_class,
            'instance': mock_pyaudio_instance,
            'stream': mock_stream
        }


@pytest.fixture
def make_capture_source():
    """Factory for fake capture sources with a chosen rate or availability."""
    return FakeCaptureSource
