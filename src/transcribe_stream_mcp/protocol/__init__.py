"""Protocol layer: CRC-checked event-stream framing, headers and payload classification."""

from .framing import Message, build_audio_event, build_message, parse_message
from .parser import EventKind, TranscriptEvent, classify_message
