"""Event-stream framing and streaming transcription sessions."""

__version__ = "0.1.0"
