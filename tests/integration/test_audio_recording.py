"""Integration tests for the complete record, rewind and export workflow."""

import pytest
import time
import logging
import wave
import threading
from datetime import datetime
from unittest.mock import patch
from pathlib import Path
import numpy as np
from pubsub import pub
from rich.console import Console

from wavrecorder.audio.capture import PyAudioCaptureSource
from wavrecorder.audio.progress_pub import ProgressPublisher
from wavrecorder.config import RecorderOptions
from wavrecorder.errors import CaptureUnavailable
from wavrecorder.main import Recorder, main
from wavrecorder.models.audio import SessionState
from wavrecorder.models.recording import RecordingInfo
from wavrecorder.services.recording_session import RecordingSession
from wavrecorder.storage.file_manager import FileManager


@pytest.mark.integration
class TestAudioRecordingIntegration:
    """Integration tests for the recording workflow."""

    def test_complete_recording_workflow(self, temp_data_dir, capture_source, sine_chunks):
        """Record, pause, rewind, record more, stop, export and save."""
        file_manager = FileManager(temp_data_dir)
        progress = []
        session = RecordingSession(
            capture_source,
            RecorderOptions(channel_count=2, output_bit_depth=16, output_sample_rate=22050),
            on_progress=progress.append
        )

        session.start()
        for chunk in sine_chunks(num_chunks=10, chunk_size=4410):
            capture_source.stream.deliver([chunk, chunk])
        assert session.elapsed_seconds == pytest.approx(1.0)

        session.pause()
        session.resume(seek_to=0.25)
        assert session.elapsed_seconds == 0.25

        for chunk in sine_chunks(num_chunks=5, chunk_size=4410):
            capture_source.stream.deliver([chunk, chunk])
        session.stop()

        assert session.state == SessionState.STOPPED
        assert session.total_samples == 11025 + 5 * 4410
        assert progress[-1] == pytest.approx(0.75)

        wav = session.export()
        recording_id = file_manager.create_recording_id()
        audio_path = file_manager.save_recording(wav, recording_id)
        stats = session.get_stats()
        file_manager.save_recording_info(RecordingInfo(
            recording_id=recording_id,
            created_at=datetime.now(),
            duration_seconds=stats.elapsed_seconds,
            audio_file=Path(audio_path).name,
            file_size_bytes=len(wav),
            channel_count=stats.channel_count,
            sample_rate=session.declared_sample_rate,
            bit_depth=stats.output_bit_depth,
            total_chunks=stats.total_chunks
        ))

        with wave.open(audio_path, 'rb') as wf:
            assert wf.getnchannels() == 2
            assert wf.getsampwidth() == 2
            assert wf.getframerate() == 22050
            assert wf.getnframes() == (11025 + 5 * 4410) // 2

        assert [info.recording_id for info in file_manager.list_recordings()] == [recording_id]
        loaded = file_manager.load_recording_info(recording_id)
        assert loaded.duration_seconds == pytest.approx(0.75)
        assert loaded.total_chunks == 8

    def test_progress_published_on_topic(self, capture_source):
        received = []

        def listener(event):
            received.append(event)

        pub.subscribe(listener, "recorder.progress")
        try:
            session = RecordingSession(capture_source, publisher=ProgressPublisher())
            session.start()
            chunk = np.zeros(441, dtype=np.float32)
            capture_source.stream.deliver([chunk, chunk])
            capture_source.stream.deliver([chunk, chunk])
        finally:
            pub.unsubscribe(listener, "recorder.progress")

        assert [event.sequence_number for event in received] == [1, 2]
        assert received[-1].elapsed_seconds == pytest.approx(0.02)

    def test_ingest_and_seek_from_different_threads(self, make_capture_source):
        """Truncation from a control thread never interleaves with an append."""
        source = make_capture_source(sample_rate=1000)
        session = RecordingSession(source, RecorderOptions(channel_count=2))
        session.start()
        done = threading.Event()

        def produce():
            chunk = np.ones(10, dtype=np.float32)
            while not done.is_set():
                source.stream.deliver([chunk, chunk])

        producer = threading.Thread(target=produce, daemon=True)
        producer.start()
        try:
            for _ in range(50):
                session.pause()
                session.resume(seek_to=0.005)
                stats = session.get_stats()
                assert stats.elapsed_seconds == stats.total_samples / 1000
        finally:
            done.set()
            producer.join(timeout=2.0)

        session.stop()
        left, right = session.buffers
        assert left.total_samples == right.total_samples
        assert [len(c) for c in left.chunks] == [len(c) for c in right.chunks]

    @pytest.mark.slow
    def test_pyaudio_recording_to_file(self, temp_data_dir, mock_pyaudio):
        """Record from a mocked device through the CLI recorder."""
        config_path = Path(temp_data_dir) / "wavrecorder.yaml"
        config_path.write_text(
            "recorder:\n"
            "  channel_count: 2\n"
            "  output_sample_rate: 24000\n"
            "capture:\n"
            "  chunk_size: 1024\n"
            "storage:\n"
            "  data_directory: data\n"
            "logging:\n"
            "  file_path: data/logs/test.log\n"
            "  console_output: false\n"
        )
        frames = np.full((1024, 2), 0.5, dtype=np.float32)
        mock_pyaudio['stream'].read.side_effect = lambda *args, **kwargs: (time.sleep(0.005), frames.tobytes())[1]

        root_logger = logging.getLogger()
        saved_handlers, saved_level = list(root_logger.handlers), root_logger.level
        recorder = Recorder(str(config_path))
        try:
            audio_path = recorder.run(duration=0.2)
        finally:
            recorder.cleanup()
            for handler in root_logger.handlers:
                handler.close()
            root_logger.handlers = saved_handlers
            root_logger.setLevel(saved_level)

        assert isinstance(recorder.capture_source, PyAudioCaptureSource)
        with wave.open(audio_path, 'rb') as wf:
            assert wf.getnchannels() == 2
            assert wf.getframerate() == 24000
            assert wf.getnframes() > 0
            samples = np.frombuffer(wf.readframes(wf.getnframes()), dtype='<i2')
        assert set(samples.tolist()) == {16384}

        recording_id = FileManager(recorder.config.get_data_directory()).list_recordings()[0].recording_id
        assert audio_path.endswith(f"recording_{recording_id}.wav")

    def test_invalid_chunk_from_device_stops_session(self, mock_pyaudio, caplog):
        """A device delivering the wrong channel layout stops the session."""
        source = PyAudioCaptureSource(chunk_size=1024, channels=1)
        session = RecordingSession(source, RecorderOptions(channel_count=2))

        with patch.object(threading, 'excepthook'):
            session.start()
            for thread in threading.enumerate():
                if thread.name == "AudioCaptureThread":
                    thread.join(timeout=2.0)

        assert session.state == SessionState.STOPPED
        assert session.get_stats().is_recording is False
        assert session.stream is None
        mock_pyaudio['stream'].close.assert_called_once()

        with caplog.at_level(logging.WARNING):
            wav = session.export()
        assert "while recording" not in caplog.text
        assert len(wav) == 44

    def test_missing_device_fails_at_start(self, mock_pyaudio):
        mock_pyaudio['instance'].get_default_input_device_info.side_effect = IOError("No Default Input Device Available")
        session = RecordingSession(PyAudioCaptureSource(), RecorderOptions(channel_count=2))

        with pytest.raises(CaptureUnavailable):
            session.start()

        assert session.state == SessionState.IDLE
        mock_pyaudio['instance'].open.assert_not_called()

    def test_show_saved_recordings(self, temp_data_dir, mock_pyaudio):
        config_path = Path(temp_data_dir) / "wavrecorder.yaml"
        config_path.write_text(
            "storage:\n"
            "  data_directory: data\n"
            "logging:\n"
            "  file_path: data/logs/test.log\n"
            "  console_output: false\n"
        )

        root_logger = logging.getLogger()
        saved_handlers, saved_level = list(root_logger.handlers), root_logger.level
        recorder = Recorder(str(config_path))
        try:
            recorder.console = Console(record=True, width=200)
            assert recorder.show_recordings() == 0
            assert "No saved recordings" in recorder.console.export_text()

            recording_id = recorder.file_manager.create_recording_id()
            recorder.file_manager.save_recording_info(RecordingInfo(
                recording_id=recording_id,
                created_at=datetime(2024, 5, 1, 9, 30, 0),
                duration_seconds=1.5,
                audio_file=f"recording_{recording_id}.wav",
                file_size_bytes=132344,
                channel_count=2,
                sample_rate=22050,
                bit_depth=16,
                total_chunks=15
            ))

            assert recorder.show_recordings() == 1
            output = recorder.console.export_text()
        finally:
            recorder.cleanup()
            for handler in root_logger.handlers:
                handler.close()
            root_logger.handlers = saved_handlers
            root_logger.setLevel(saved_level)

        assert recording_id in output
        assert "2024-05-01 09:30:00" in output
        assert "1.50s" in output
        assert "2ch 22050Hz 16-bit" in output
        mock_pyaudio['instance'].open.assert_not_called()

    def test_list_flag_skips_recording(self, temp_data_dir):
        config_path = Path(temp_data_dir) / "wavrecorder.yaml"
        config_path.write_text("storage:\n  data_directory: data\n")

        with patch('sys.argv', ['wavrecorder', '--config', str(config_path), '--list']), \
                patch('wavrecorder.main.Recorder') as mock_recorder_class:
            main()

        recorder = mock_recorder_class.return_value
        recorder.show_recordings.assert_called_once()
        recorder.run.assert_not_called()
        recorder.cleanup.assert_called_once()
