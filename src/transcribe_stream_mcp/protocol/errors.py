"""Error types raised by the event-stream codec and streaming session.

Every error carries a ``kind`` (the taxonomy name, or the remote
classification for :class:`ApplicationError`) and a human-readable
``message`` so that session listeners can treat local and remote failures
the same way.
"""

from __future__ import annotations


class EventStreamError(Exception):
    """Base class for all codec and session errors."""

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message

    @property
    def kind(self) -> str:
        return type(self).__name__


# Frame-level validation failures

class FrameError(EventStreamError, ValueError):
    """An inbound frame failed validation and was rejected as a whole."""


class FrameTooShort(FrameError):
    """Fewer bytes than the 16-byte minimum frame."""


class PreludeChecksumInvalid(FrameError):
    """The CRC-32 over the prelude does not match the stored value."""


class LengthMismatch(FrameError):
    """Declared lengths disagree with the received buffer."""


class MessageChecksumInvalid(FrameError):
    """The trailing CRC-32 does not match the header block and payload."""


class HeaderDecodeError(FrameError):
    """The header block could not be decoded.

    ``reason`` is one of the ``*`` constants below.
    """

    TRUNCATED_NAME = "truncated-name"
    TRUNCATED_VALUE = "truncated-value"
    UNSUPPORTED_TYPE = "unsupported-type"
    TRAILING_BYTES = "trailing-bytes"
    DUPLICATE_NAME = "duplicate-name"
    INVALID_UTF8 = "invalid-utf8"

    def __init__(self, reason: str, message: str) -> None:
        super().__init__(message)
        self.reason = reason


class PayloadDecodeError(FrameError):
    """A valid frame carried a payload that is not a JSON object."""


class HeaderEncodeError(EventStreamError, ValueError):
    """Headers could not be encoded (too long, duplicated or wrong type)."""


# Session-level errors

class SessionNotOpen(EventStreamError, RuntimeError):
    """``send`` was called before the session was ready or after it closed."""


class TransportError(EventStreamError, ConnectionError):
    """The underlying transport reported a failure."""


class ApplicationError(EventStreamError):
    """An error event signalled by the remote service."""

    def __init__(self, kind: str, message: str) -> None:
        super().__init__(message)
        self._kind = kind

    @property
    def kind(self) -> str:
        return self._kind

    def __repr__(self) -> str:
        return f"ApplicationError(kind={self._kind!r}, message={self.message!r})"
