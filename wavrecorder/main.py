"""Main application entry point for WavRecorder."""

import sys
import time
import argparse
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.table import Table

from .audio.capture import PyAudioCaptureSource, check_microphone_available
from .audio.progress_pub import ProgressPublisher
from .config import RecorderConfig
from .errors import RecorderError
from .models.recording import RecordingInfo
from .services.recording_session import RecordingSession
from .storage.file_manager import FileManager

logger = logging.getLogger(__name__)


class Recorder:
    """Records from the microphone for a fixed duration and saves a WAV file."""

    def __init__(self, config_path: str, log_level: Optional[str] = None):
        self.config = RecorderConfig(config_path)
        setup_logging(self.config, log_level or self.config.get('logging.level', 'INFO'))
        self.console = Console()

        options = self.config.get_recorder_options()
        self.capture_source = PyAudioCaptureSource(
            chunk_size=self.config.get_chunk_size(),
            channels=options.channel_count,
            device_index=self.config.get_device_index()
        )
        self.session = RecordingSession(
            self.capture_source,
            options=options,
            on_progress=self._show_progress,
            publisher=ProgressPublisher()
        )
        self.file_manager = FileManager(self.config.get_data_directory())

    def _show_progress(self, elapsed_seconds: float) -> None:
        self.console.print(f"\r🔴 Recording {elapsed_seconds:6.2f}s", end="", style="red")

    def run(self, duration: float, output: Optional[str] = None) -> str:
        """Record, export and save.

        Returns:
            Path of the written WAV file
        """
        self.session.start()
        try:
            time.sleep(duration)
        finally:
            self.session.stop()
        self.console.print()

        wav = self.session.export()
        if output:
            path = Path(output)
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(wav)
            logger.info(f"Audio file saved: {path} ({len(wav)} bytes)")
            return str(path)

        recording_id = self.file_manager.create_recording_id()
        audio_path = self.file_manager.save_recording(wav, recording_id)
        stats = self.session.get_stats()
        self.file_manager.save_recording_info(RecordingInfo(
            recording_id=recording_id,
            created_at=datetime.now(),
            duration_seconds=stats.elapsed_seconds,
            audio_file=Path(audio_path).name,
            file_size_bytes=len(wav),
            channel_count=stats.channel_count,
            sample_rate=self.session.declared_sample_rate,
            bit_depth=stats.output_bit_depth,
            total_chunks=stats.total_chunks
        ))
        return audio_path

    def show_recordings(self) -> int:
        """Print a table of saved recordings.

        Returns:
            Number of recordings listed
        """
        recordings = self.file_manager.list_recordings()
        if not recordings:
            self.console.print("No saved recordings", style="yellow")
            return 0

        table = Table(title="🎙️  Saved Recordings", show_header=True, header_style="bold magenta")
        table.add_column("Recording", style="cyan")
        table.add_column("Created")
        table.add_column("Duration", justify="right")
        table.add_column("Format")
        table.add_column("Size", justify="right")
        for info in recordings:
            table.add_row(
                info.recording_id,
                info.created_at.strftime("%Y-%m-%d %H:%M:%S"),
                f"{info.duration_seconds:.2f}s",
                f"{info.channel_count}ch {info.sample_rate}Hz {info.bit_depth}-bit",
                f"{info.file_size_bytes:,} B"
            )
        self.console.print(table)
        return len(recordings)

    def cleanup(self) -> None:
        self.session.clear()


def setup_logging(config: RecorderConfig, level: str = "INFO") -> None:
    """Set up logging configuration from YAML config."""
    log_file_path = config.get('logging.file_path', 'data/logs/wavrecorder.log')
    console_output = config.get('logging.console_output', True)

    log_dir = Path(log_file_path).parent
    log_dir.mkdir(parents=True, exist_ok=True)

    handlers = []

    file_handler = logging.FileHandler(log_file_path)
    file_handler.setLevel(logging.DEBUG)
    file_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'
    )
    file_handler.setFormatter(file_formatter)
    handlers.append(file_handler)

    if console_output:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(logging.WARNING)
        console_formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
        console_handler.setFormatter(console_formatter)
        handlers.append(console_handler)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(getattr(logging, level.upper()))
    for handler in handlers:
        root_logger.addHandler(handler)

    logger.info("=" * 50)
    logger.info("WavRecorder starting up")
    logger.info(f"Log file: {log_file_path}")
    logger.info(f"Log level set to: {level}")
    logger.info("=" * 50)


def main() -> None:
    """Main entry point for WavRecorder."""
    parser = argparse.ArgumentParser(
        description="WavRecorder - record the microphone to a WAV file"
    )

    parser.add_argument(
        "--config",
        type=str,
        required=True,
        help="Path to configuration YAML file"
    )

    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Set logging level (overrides config)"
    )

    parser.add_argument(
        "--duration",
        type=float,
        default=10,
        help="Recording duration in seconds (default: 10)"
    )

    parser.add_argument(
        "--output",
        type=str,
        help="Write the WAV file here instead of the data directory"
    )

    parser.add_argument(
        "--check-microphone",
        action="store_true",
        help="Only check that an input device can be opened"
    )

    parser.add_argument(
        "--list",
        action="store_true",
        help="List saved recordings instead of recording"
    )

    parser.add_argument(
        "--version",
        action="version",
        version="WavRecorder v0.1.0"
    )

    args = parser.parse_args()
    console = Console()

    if args.check_microphone:
        if check_microphone_available():
            console.print("✅ Microphone Ready", style="green")
            return
        console.print("❌ Microphone Not Available", style="red")
        sys.exit(1)

    recorder = None
    try:
        recorder = Recorder(args.config, args.log_level)
        if args.list:
            recorder.show_recordings()
            return
        path = recorder.run(args.duration, args.output)
        console.print(f"✅ Saved {path}", style="green")
    except KeyboardInterrupt:
        console.print("\n👋 Goodbye!")
    except (RecorderError, OSError) as e:
        console.print(f"❌ Error: {e}", style="red")
        logging.error(f"Application error: {e}")
        sys.exit(1)
    finally:
        if recorder:
            recorder.cleanup()


if __name__ == "__main__":
    main()
