"""YAML configuration loader and recorder options for WavRecorder."""

import os
import yaml
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Any, Optional
import logging

from ..errors import InvalidConfiguration

logger = logging.getLogger(__name__)

SUPPORTED_CHANNEL_COUNTS = (1, 2)
SUPPORTED_BIT_DEPTHS = (8, 16)
SUPPORTED_SAMPLE_RATES = (8000, 11025, 16000, 22050, 24000, 44100, 48000)

DEFAULT_CHANNEL_COUNT = 2
DEFAULT_BIT_DEPTH = 16
DEFAULT_CHUNK_SIZE = 4096

# Option names as accepted in config dictionaries, including camelCase aliases
_OPTION_ALIASES = {
    "channelCount": "channel_count",
    "numChannels": "channel_count",
    "outputBitDepth": "output_bit_depth",
    "sampleBits": "output_bit_depth",
    "outputSampleRate": "output_sample_rate",
    "sampleRate": "output_sample_rate",
}


@dataclass
class RecorderOptions:
    """Output format requested for a recording session.

    ``output_sample_rate`` of None means "same as the input rate".
    """
    channel_count: int = DEFAULT_CHANNEL_COUNT
    output_bit_depth: int = DEFAULT_BIT_DEPTH
    output_sample_rate: Optional[int] = None

    def __post_init__(self):
        if self.channel_count not in SUPPORTED_CHANNEL_COUNTS:
            logger.warning(f"Unsupported channel count {self.channel_count!r}, "
                           f"using {DEFAULT_CHANNEL_COUNT}")
            self.channel_count = DEFAULT_CHANNEL_COUNT

        if self.output_bit_depth not in SUPPORTED_BIT_DEPTHS:
            logger.warning(f"Unsupported bit depth {self.output_bit_depth!r}, "
                           f"using {DEFAULT_BIT_DEPTH}")
            self.output_bit_depth = DEFAULT_BIT_DEPTH

        if self.output_sample_rate is not None and self.output_sample_rate not in SUPPORTED_SAMPLE_RATES:
            logger.warning(f"Unsupported output sample rate {self.output_sample_rate!r}, "
                           f"using the input rate")
            self.output_sample_rate = None

    @classmethod
    def from_dict(cls, values: Optional[Dict[str, Any]]) -> "RecorderOptions":
        """Build options from a config mapping, ignoring unknown keys."""
        kwargs = {}
        for key, value in (values or {}).items():
            name = _OPTION_ALIASES.get(key, key)
            if name in ("channel_count", "output_bit_depth", "output_sample_rate"):
                kwargs[name] = value
            else:
                logger.debug(f"Ignoring unknown recorder option: {key}")
        return cls(**kwargs)


class RecorderConfig:
    """WavRecorder configuration loader."""

    def __init__(self, config_path: str):
        """Initialize configuration loader.

        Args:
            config_path: Path to YAML config file
        """
        self.config_file = Path(config_path)

        if not self.config_file.exists():
            raise FileNotFoundError(f"Configuration file not found: {self.config_file}")

        logger.info(f"Loading configuration from: {self.config_file}")
        self.config = self._load_config()

    def _load_config(self) -> Dict[str, Any]:
        """Load and parse YAML configuration file."""
        try:
            with open(self.config_file, 'r', encoding='utf-8') as f:
                config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise InvalidConfiguration(f"Invalid YAML in configuration file: {e}") from e
        except OSError as e:
            raise InvalidConfiguration(f"Failed to load configuration: {e}") from e

        if not config:
            raise InvalidConfiguration("Configuration file is empty")
        if not isinstance(config, dict):
            raise InvalidConfiguration("Configuration file must contain a mapping")

        self._resolve_paths(config)

        logger.info("Configuration loaded successfully")
        return config

    def _resolve_paths(self, config: Dict[str, Any]) -> None:
        """Resolve relative paths in configuration relative to config file location."""
        config_dir = self.config_file.parent

        if 'storage' in config and 'data_directory' in config['storage']:
            data_dir = config['storage']['data_directory']
            if not os.path.isabs(data_dir):
                config['storage']['data_directory'] = str(config_dir / data_dir)

        if 'logging' in config and 'file_path' in config['logging']:
            log_path = config['logging']['file_path']
            if not os.path.isabs(log_path):
                config['logging']['file_path'] = str(config_dir / log_path)

    def get(self, key_path: str, default: Any = None) -> Any:
        """Get configuration value using dot notation (e.g., 'recorder.channel_count').

        Args:
            key_path: Dot-separated key path
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        keys = key_path.split('.')
        value = self.config

        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default

        return value

    def set(self, key_path: str, value: Any) -> None:
        """Set configuration value using dot notation.

        Args:
            key_path: Dot-separated path to config value
            value: Value to set
        """
        keys = key_path.split('.')
        config_dict = self.config

        for key in keys[:-1]:
            if key not in config_dict:
                config_dict[key] = {}
            config_dict = config_dict[key]

        config_dict[keys[-1]] = value
        logger.debug(f"Configuration key '{key_path}' set to: {value}")

    def get_recorder_options(self) -> RecorderOptions:
        """Get output format options from the ``recorder`` section."""
        return RecorderOptions.from_dict(self.get('recorder', {}))

    def get_chunk_size(self) -> int:
        """Samples per channel in each captured chunk."""
        return int(self.get('capture.chunk_size', DEFAULT_CHUNK_SIZE))

    def get_device_index(self) -> Optional[int]:
        """PyAudio input device index, or None for the system default."""
        return self.get('capture.device_index')

    def get_data_directory(self) -> str:
        """Get data directory path."""
        data_dir = self.get('storage.data_directory', 'data')
        return str(Path(data_dir).absolute())
