"""Recording session that buffers captured audio and renders it to WAV."""

import logging
import threading
from typing import Callable, List, Optional, Sequence

import numpy as np

from ..audio.buffer import ChannelBuffer
from ..audio.capture import CaptureSource, CaptureStream
from ..audio.pcm import encode_pcm
from ..audio.progress_pub import ProgressPublisher
from ..audio.resampler import resample
from ..audio.seek import SeekTruncator
from ..audio.wav import build_wav, declared_sample_rate
from ..config import RecorderOptions
from ..errors import ChunkLengthMismatch
from ..models.audio import RecordingStats, SessionState
from ..models.events import ProgressEvent

logger = logging.getLogger(__name__)


class RecordingSession:
    """Owns the channel buffers of one recording and its capture stream.

    Chunks arrive through ``ingest`` on the capture thread while ``pause``,
    ``resume``, ``stop`` and ``clear`` come from a control thread. Every
    buffer mutation and the export snapshot run under one lock.
    """

    def __init__(self,
                 capture_source: CaptureSource,
                 options: Optional[RecorderOptions] = None,
                 on_progress: Optional[Callable[[float], None]] = None,
                 publisher: Optional[ProgressPublisher] = None):
        """Initialize recording session.

        Args:
            capture_source: Collaborator that opens capture streams
            options: Output format; defaults to stereo 16-bit at the input rate
            on_progress: Called with the elapsed seconds after every chunk
            publisher: Optional pub/sub publisher for progress events
        """
        self.capture_source = capture_source
        self.options = options or RecorderOptions()
        self.on_progress = on_progress
        self.publisher = publisher

        self.channel_count = self.options.channel_count
        self.output_bit_depth = self.options.output_bit_depth
        self._input_sample_rate: Optional[int] = None

        self.buffers: List[ChannelBuffer] = [ChannelBuffer() for _ in range(self.channel_count)]
        self.state = SessionState.IDLE
        self.elapsed_seconds = 0.0
        self.total_chunks = 0

        self.stream: Optional[CaptureStream] = None
        self.lock = threading.RLock()

        logger.info(f"RecordingSession initialized: {self.channel_count} channel(s), "
                    f"{self.output_bit_depth}-bit")

    @property
    def input_sample_rate(self) -> int:
        """Rate the buffers are captured at, read from the source on first use and on every start."""
        if self._input_sample_rate is None:
            self._input_sample_rate = int(self.capture_source.sample_rate)
        return self._input_sample_rate

    @property
    def output_sample_rate(self) -> int:
        return self.options.output_sample_rate or self.input_sample_rate

    @property
    def recording(self) -> bool:
        return self.state == SessionState.RECORDING

    @property
    def total_samples(self) -> int:
        return self.buffers[0].total_samples

    def start(self) -> None:
        """Discard any previous recording and start capturing.

        Raises:
            CaptureUnavailable: The capture source could not open a stream
        """
        self.clear()

        logger.info("Starting recording session")
        stream = self.capture_source.start_capture()
        input_rate = int(self.capture_source.sample_rate)

        with self.lock:
            self._input_sample_rate = input_rate
            self.stream = stream
            self.state = SessionState.RECORDING
        logger.info(f"Capturing at {input_rate}Hz, exporting at {self.output_sample_rate}Hz")
        stream.on_chunk(self.ingest)

    def ingest(self, chunks: Sequence[np.ndarray]) -> None:
        """Append one chunk per channel.

        Ignored unless the session is recording.

        Raises:
            ChunkLengthMismatch: Wrong number of chunks, or chunks of
                different lengths; nothing is appended and the session
                stops capturing
        """
        with self.lock:
            if self.state != SessionState.RECORDING:
                return

            error = self._check_chunks(chunks)
            if error is not None:
                stream = self.stream
                self.stream = None
                self.state = SessionState.STOPPED
            else:
                event = self._append(chunks)

        if error is not None:
            logger.error(f"Recording stopped on invalid chunk: {error}")
            if stream:
                stream.stop()
            raise error

        self._notify_progress(event)

    def _check_chunks(self, chunks: Sequence[np.ndarray]) -> Optional[ChunkLengthMismatch]:
        if len(chunks) != self.channel_count:
            return ChunkLengthMismatch(
                f"Expected {self.channel_count} channel chunk(s), got {len(chunks)}")
        lengths = {len(chunk) for chunk in chunks}
        if len(lengths) > 1:
            return ChunkLengthMismatch(f"Channel chunks differ in length: {sorted(lengths)}")
        return None

    def _append(self, chunks: Sequence[np.ndarray]) -> ProgressEvent:
        # Caller holds the lock
        for buffer, chunk in zip(self.buffers, chunks):
            buffer.append(chunk)
        self.total_chunks += 1
        self.elapsed_seconds = self.total_samples / self.input_sample_rate

        return ProgressEvent(
            elapsed_seconds=self.elapsed_seconds,
            total_samples=self.total_samples,
            sequence_number=self.total_chunks
        )

    def _notify_progress(self, event: ProgressEvent) -> None:
        if self.on_progress:
            self.on_progress(event.elapsed_seconds)
        if self.publisher:
            self.publisher.publish_progress(event)

    def pause(self) -> None:
        """Stop accepting chunks while keeping what was captured."""
        with self.lock:
            if self.state != SessionState.RECORDING:
                logger.warning(f"Cannot pause a session that is {self.state.value}")
                return
            self.state = SessionState.PAUSED
        logger.info(f"Recording paused at {self.elapsed_seconds:.3f}s")

    def resume(self, seek_to: Optional[float] = None) -> None:
        """Accept chunks again, optionally rewinding first.

        Args:
            seek_to: Position in seconds to continue recording from; audio
                captured after it is discarded. Ignored when None or negative.
        """
        with self.lock:
            if self.state not in (SessionState.PAUSED, SessionState.RECORDING):
                logger.warning(f"Cannot resume a session that is {self.state.value}")
                return

            if seek_to is not None and seek_to >= 0:
                truncator = SeekTruncator(self.input_sample_rate)
                new_total = truncator.truncate(self.buffers, seek_to)
                if new_total is not None:
                    self.total_chunks = len(self.buffers[0])
                    self.elapsed_seconds = new_total / self.input_sample_rate

            self.state = SessionState.RECORDING
        logger.info(f"Recording resumed at {self.elapsed_seconds:.3f}s")

    def stop(self) -> None:
        """Stop capturing; buffered audio is kept for export."""
        with self.lock:
            stream = self.stream
            self.stream = None
            if self.state in (SessionState.RECORDING, SessionState.PAUSED):
                self.state = SessionState.STOPPED

        if stream:
            stream.stop()
        logger.info(f"Recording stopped after {self.elapsed_seconds:.3f}s "
                    f"({self.total_chunks} chunks)")

    def clear(self) -> None:
        """Stop capturing and discard all buffered audio."""
        with self.lock:
            stream = self.stream
            self.stream = None
            for buffer in self.buffers:
                buffer.clear()
            self.elapsed_seconds = 0.0
            self.total_chunks = 0
            self.state = SessionState.IDLE

        if stream:
            stream.stop()
        logger.debug("Recording session cleared")

    def compress(self) -> np.ndarray:
        """Snapshot the buffers and decimate them into interleaved samples."""
        if self.state == SessionState.RECORDING:
            logger.warning("Exporting while recording; audio captured after the snapshot is not included")

        with self.lock:
            channels = [buffer.to_array() for buffer in self.buffers]

        return resample(channels, self.input_sample_rate, self.output_sample_rate)

    def export(self) -> bytes:
        """Render the buffered audio as a WAV container.

        Returns:
            WAV file bytes; a 44-byte header only when nothing was captured
        """
        samples = self.compress()
        payload = encode_pcm(samples, self.output_bit_depth)
        wav = build_wav(
            payload,
            channel_count=self.channel_count,
            sample_rate=self.declared_sample_rate,
            bit_depth=self.output_bit_depth
        )
        logger.info(f"Exported {self.elapsed_seconds:.3f}s of audio as {len(wav)} bytes")
        return wav

    @property
    def declared_sample_rate(self) -> int:
        return declared_sample_rate(self.output_sample_rate, self.input_sample_rate)

    def get_stats(self) -> RecordingStats:
        """Get current recording statistics."""
        with self.lock:
            return RecordingStats(
                state=self.state,
                is_recording=self.recording,
                elapsed_seconds=self.elapsed_seconds,
                total_samples=self.total_samples,
                total_chunks=self.total_chunks,
                channel_count=self.channel_count,
                input_sample_rate=self.input_sample_rate,
                output_sample_rate=self.output_sample_rate,
                output_bit_depth=self.output_bit_depth
            )
