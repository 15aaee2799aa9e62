"""Streaming transcription options.

These become the query parameters of the streaming endpoint URL. Signing
the URL and opening the connection belong to the transport.
"""

from __future__ import annotations

from dataclasses import dataclass

LANGUAGE_CODES = (
    "en-AU", "en-GB", "en-US", "es-US", "fr-CA", "fr-FR",
    "de-DE", "ja-JP", "ko-KR", "pt-BR", "zh-CN", "it-IT",
)
MEDIA_ENCODINGS = ("pcm", "ogg-opus", "flac")

ENDPOINT_TEMPLATE = "transcribestreaming.{region}.amazonaws.com:8443"
STREAM_PATH = "/stream-transcription-websocket"


@dataclass
class StreamOptions:
    """Parameters of one streaming transcription session.

    Args:
        language_code: One of :data:`LANGUAGE_CODES`.
        media_encoding: One of :data:`MEDIA_ENCODINGS`.
        sample_rate: Sample rate of the audio in Hz (8000 for telephony
            audio, 16000 or more for high quality audio).
        session_id: Optional caller-chosen session id.
        vocabulary_name: Optional custom vocabulary.
    """

    language_code: str = "en-US"
    media_encoding: str = "pcm"
    sample_rate: int = 16000
    session_id: str | None = None
    vocabulary_name: str | None = None

    def __post_init__(self) -> None:
        if self.language_code not in LANGUAGE_CODES:
            raise ValueError(
                f"Unknown language code '{self.language_code}'. "
                f"Valid: {list(LANGUAGE_CODES)}"
            )
        if self.media_encoding not in MEDIA_ENCODINGS:
            raise ValueError(
                f"Unknown media encoding '{self.media_encoding}'. "
                f"Valid: {list(MEDIA_ENCODINGS)}"
            )
        if self.sample_rate <= 0:
            raise ValueError(f"Sample rate must be positive, got {self.sample_rate}")

    def to_query_params(self) -> dict[str, str]:
        params = {
            "language-code": self.language_code,
            "media-encoding": self.media_encoding,
            "sample-rate": str(self.sample_rate),
        }
        if self.session_id is not None:
            params["session-id"] = self.session_id
        if self.vocabulary_name is not None:
            params["vocabulary-name"] = self.vocabulary_name
        return params

    @staticmethod
    def endpoint(region: str) -> str:
        """Host and port of the streaming service in ``region``."""
        return ENDPOINT_TEMPLATE.format(region=region)
