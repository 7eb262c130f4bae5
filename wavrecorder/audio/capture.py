"""Audio capture collaborator delivering per-channel float chunks."""

import logging
from abc import ABC, abstractmethod
from threading import Thread, Event, current_thread
from typing import Callable, List, Optional

import numpy as np
import pyaudio

from ..errors import CaptureUnavailable, ChunkLengthMismatch

logger = logging.getLogger(__name__)

ChunkCallback = Callable[[List[np.ndarray]], None]

DEFAULT_CHUNK_SIZE = 4096


class CaptureStream(ABC):
    """Handle to a running capture stream."""

    @abstractmethod
    def on_chunk(self, callback: ChunkCallback) -> None:
        """Register the callback receiving one chunk per channel per cycle.

        Delivery starts once a callback is registered.
        """
        pass

    @abstractmethod
    def stop(self) -> None:
        """Stop delivering chunks and release the device."""
        pass


class CaptureSource(ABC):
    """Something that can open capture streams at a fixed input rate."""

    @property
    @abstractmethod
    def sample_rate(self) -> int:
        """Input sample rate of the streams this source opens."""
        pass

    @abstractmethod
    def start_capture(self) -> CaptureStream:
        """Open a new stream.

        Raises:
            CaptureUnavailable: No device, no permission, or the stream
                could not be opened
        """
        pass


def deinterleave(data: bytes, channels: int) -> List[np.ndarray]:
    """Split interleaved float32 frames into one array per channel."""
    frames = np.frombuffer(data, dtype=np.float32).reshape(-1, channels)
    return [frames[:, chan].copy() for chan in range(channels)]


class PyAudioCaptureStream(CaptureStream):
    """Reads a PyAudio input stream on a background thread."""

    def __init__(self, pyaudio_instance: pyaudio.PyAudio, stream, channels: int, chunk_size: int):
        self.pyaudio_instance = pyaudio_instance
        self.stream = stream
        self.channels = channels
        self.chunk_size = chunk_size

        self.callback: Optional[ChunkCallback] = None
        self.reader_thread: Optional[Thread] = None
        self.stop_event = Event()
        self.total_chunks = 0

    def on_chunk(self, callback: ChunkCallback) -> None:
        if self.reader_thread is not None:
            raise RuntimeError("Chunk callback already registered")

        self.callback = callback
        self.reader_thread = Thread(target=self._read_continuously, daemon=True)
        self.reader_thread.name = "AudioCaptureThread"
        self.reader_thread.start()
        logger.info(f"Capture started: {self.channels} channel(s), {self.chunk_size} samples/chunk")

    def stop(self) -> None:
        self.stop_event.set()

        if self.reader_thread is None:
            self._close()
        elif self.reader_thread is not current_thread() and self.reader_thread.is_alive():
            self.reader_thread.join(timeout=2.0)
            if self.reader_thread.is_alive():
                logger.warning("Capture thread did not stop cleanly")

        logger.info(f"Capture stopped. Total chunks: {self.total_chunks}")

    def _read_chunk(self) -> List[np.ndarray]:
        data = self.stream.read(self.chunk_size, exception_on_overflow=False)
        self.total_chunks += 1
        return deinterleave(data, self.channels)

    def _read_continuously(self) -> None:
        """Internal method: read and dispatch chunks until stopped."""
        try:
            while not self.stop_event.is_set():
                chunks = self._read_chunk()
                self.callback(chunks)
        except ChunkLengthMismatch as e:
            logger.error(f"Aborting capture: {e}")
            raise
        finally:
            self._close()

    def _close(self) -> None:
        if self.stream:
            self.stream.stop_stream()
            self.stream.close()
            self.stream = None
        if self.pyaudio_instance:
            self.pyaudio_instance.terminate()
            self.pyaudio_instance = None


class PyAudioCaptureSource(CaptureSource):
    """Opens float32 input streams on a PyAudio device."""

    def __init__(self, chunk_size: int = DEFAULT_CHUNK_SIZE, channels: int = 2,
                 device_index: Optional[int] = None):
        """Initialize capture source.

        Args:
            chunk_size: Samples per channel in each delivered chunk
            channels: Number of channels to capture (1 or 2)
            device_index: PyAudio input device, or None for the default device
        """
        self.chunk_size = chunk_size
        self.channels = channels
        self.device_index = device_index
        self._sample_rate: Optional[int] = None

    @property
    def sample_rate(self) -> int:
        if self._sample_rate is None:
            self._sample_rate = self._query_sample_rate()
        return self._sample_rate

    def _query_sample_rate(self) -> int:
        pyaudio_instance = pyaudio.PyAudio()
        try:
            if self.device_index is None:
                info = pyaudio_instance.get_default_input_device_info()
            else:
                info = pyaudio_instance.get_device_info_by_index(self.device_index)
        except (IOError, OSError) as e:
            raise CaptureUnavailable(f"No audio input device available: {e}") from e
        finally:
            pyaudio_instance.terminate()

        rate = int(info["defaultSampleRate"])
        logger.info(f"Input device '{info.get('name', '?')}' reports {rate}Hz")
        return rate

    def start_capture(self) -> PyAudioCaptureStream:
        # The default device may have changed since the last stream
        sample_rate = self._sample_rate = self._query_sample_rate()
        pyaudio_instance = pyaudio.PyAudio()
        try:
            stream = pyaudio_instance.open(
                format=pyaudio.paFloat32,
                channels=self.channels,
                rate=sample_rate,
                input=True,
                input_device_index=self.device_index,
                frames_per_buffer=self.chunk_size,
                stream_callback=None
            )
        except (IOError, OSError, ValueError) as e:
            pyaudio_instance.terminate()
            raise CaptureUnavailable(f"Could not open audio input stream: {e}") from e

        logger.info(f"Audio stream opened: {sample_rate}Hz, {self.channels} channel(s), "
                    f"{self.chunk_size} samples/chunk")
        return PyAudioCaptureStream(pyaudio_instance, stream, self.channels, self.chunk_size)


def check_microphone_available(source: Optional[CaptureSource] = None) -> bool:
    """Check that an input stream can be opened, releasing it immediately."""
    source = source or PyAudioCaptureSource(channels=1)
    try:
        stream = source.start_capture()
    except CaptureUnavailable as e:
        logger.debug(f"Microphone not available: {e}")
        return False
    stream.stop()
    return True
