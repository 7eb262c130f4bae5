"""WavRecorder - buffered multi-channel audio recording with WAV export."""

__version__ = "0.1.0"
