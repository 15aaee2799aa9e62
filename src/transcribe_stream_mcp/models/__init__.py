"""Data models for transcript results and stream options."""

from .options import StreamOptions
from .transcript import Alternative, TranscriptItem, TranscriptResult
