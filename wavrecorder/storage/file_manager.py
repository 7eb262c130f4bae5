"""File management module for exported recordings and their metadata."""

import json
import logging
import random
import string
from pathlib import Path
from datetime import datetime
from typing import List, Optional
from dataclasses import asdict

from ..models.recording import RecordingInfo

logger = logging.getLogger(__name__)

INFO_FILENAME = "recording_info.json"


class FileManager:
    """Manages storage of exported WAV recordings."""

    def __init__(self, data_dir: str = "./data"):
        """Initialize file manager with data directory.

        Args:
            data_dir: Base directory for storing all data
        """
        self.data_dir = Path(data_dir)
        self.recordings_dir = self.data_dir / "recordings"

        self._ensure_directories()

        logger.info(f"FileManager initialized with data_dir: {self.data_dir}")

    def _ensure_directories(self) -> None:
        """Ensure all required directories exist."""
        for directory in [self.data_dir, self.recordings_dir]:
            directory.mkdir(parents=True, exist_ok=True)
            logger.debug(f"Ensured directory exists: {directory}")

    def create_recording_id(self) -> str:
        """Create a new recording directory named by timestamp and random suffix.

        Returns:
            Recording ID (YYYYMMDD_HHMMSS_xxxx)
        """
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        random_suffix = ''.join(random.choices(string.ascii_lowercase + string.digits, k=4))
        recording_id = f"{timestamp}_{random_suffix}"
        recording_path = self.recordings_dir / recording_id
        recording_path.mkdir(exist_ok=True)

        logger.info(f"Created recording directory: {recording_path}")
        return recording_id

    def save_recording(self, wav_data: bytes, recording_id: str, filename: Optional[str] = None) -> str:
        """Write exported WAV bytes into the recording's directory.

        Args:
            wav_data: Complete WAV container bytes
            recording_id: Recording identifier
            filename: Optional custom filename

        Returns:
            Full path to saved audio file
        """
        if filename is None:
            filename = f"recording_{recording_id}.wav"

        if not filename.endswith('.wav'):
            filename += '.wav'

        recording_path = self.recordings_dir / recording_id
        recording_path.mkdir(exist_ok=True)

        audio_file_path = recording_path / filename

        try:
            with open(audio_file_path, 'wb') as f:
                f.write(wav_data)
        except OSError as e:
            logger.error(f"Error saving audio file: {e}")
            raise

        logger.info(f"Audio file saved: {audio_file_path} ({len(wav_data)} bytes)")
        return str(audio_file_path)

    def save_recording_info(self, info: RecordingInfo) -> str:
        """Save recording information to JSON file.

        Returns:
            Path to saved info file
        """
        recording_path = self.recordings_dir / info.recording_id
        recording_path.mkdir(exist_ok=True)

        info_file = recording_path / INFO_FILENAME

        info_dict = asdict(info)
        info_dict['created_at'] = info.created_at.isoformat()

        try:
            with open(info_file, 'w') as f:
                json.dump(info_dict, f, indent=2)
        except OSError as e:
            logger.error(f"Error saving recording info: {e}")
            raise

        logger.info(f"Recording info saved: {info_file}")
        return str(info_file)

    def load_recording_info(self, recording_id: str) -> Optional[RecordingInfo]:
        """Load recording information from JSON file.

        Returns:
            RecordingInfo or None if missing or unreadable
        """
        info_file = self.recordings_dir / recording_id / INFO_FILENAME

        if not info_file.exists():
            logger.warning(f"Recording info file not found: {info_file}")
            return None

        try:
            with open(info_file, 'r') as f:
                data = json.load(f)
            data['created_at'] = datetime.fromisoformat(data['created_at'])
            return RecordingInfo(**data)
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.error(f"Error loading recording info: {e}")
            return None

    def list_recordings(self) -> List[RecordingInfo]:
        """Load the metadata of every saved recording, newest first.

        Directories without readable metadata are skipped.
        """
        recordings = []
        for path in self.recordings_dir.iterdir():
            if not path.is_dir() or not (path / INFO_FILENAME).exists():
                continue
            info = self.load_recording_info(path.name)
            if info is not None:
                recordings.append(info)

        recordings.sort(key=lambda info: (info.created_at, info.recording_id), reverse=True)
        logger.debug(f"Found {len(recordings)} recordings")
        return recordings
