"""Message frame builder and parser for event-stream messages.

Frame layout::

    +--------------+---------------+-------------+--------------+---------+-------------+
    | Total Length | Header Length | Prelude CRC | Header Block | Payload | Message CRC |
    | 4 bytes      | 4 bytes       | 4 bytes     | variable     | variable| 4 bytes     |
    +--------------+---------------+-------------+--------------+---------+-------------+

- All integers are unsigned big-endian
- Total Length counts every byte of the frame, itself included
- Prelude CRC: CRC-32 over the first 8 bytes
- Message CRC: CRC-32 over the header block and payload
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from ..utils.crc import CRC32, crc32
from .errors import (
    FrameTooShort,
    LengthMismatch,
    MessageChecksumInvalid,
    PreludeChecksumInvalid,
)
from .headers import HeadersLike, decode_headers, encode_headers

logger = logging.getLogger(__name__)

PRELUDE_LENGTH = 8
CHECKSUM_LENGTH = 4
HEADERS_OFFSET = PRELUDE_LENGTH + CHECKSUM_LENGTH  # 12
MINIMUM_MESSAGE_LENGTH = PRELUDE_LENGTH + CHECKSUM_LENGTH * 2  # 16

MESSAGE_TYPE = ":message-type"
EVENT_TYPE = ":event-type"
CONTENT_TYPE = ":content-type"
EXCEPTION_TYPE = ":exception-type"
ERROR_CODE = ":error-code"
ERROR_MESSAGE = ":error-message"

AUDIO_EVENT_HEADERS = {
    MESSAGE_TYPE: "event",
    EVENT_TYPE: "AudioEvent",
    CONTENT_TYPE: "application/octet-stream",
}


@dataclass(frozen=True)
class Prelude:
    """The 12 bytes that open every frame."""

    total_length: int
    header_length: int
    checksum: int

    @property
    def payload_length(self) -> int:
        return self.total_length - self.header_length - MINIMUM_MESSAGE_LENGTH

    @classmethod
    def for_sizes(cls, header_length: int, payload_length: int) -> Prelude:
        total_length = MINIMUM_MESSAGE_LENGTH + header_length + payload_length
        lengths = total_length.to_bytes(4, "big") + header_length.to_bytes(4, "big")
        return cls(total_length, header_length, crc32(lengths))

    @classmethod
    def from_bytes(cls, data: bytes) -> Prelude:
        """Parse and verify the prelude at the start of ``data``.

        Raises:
            FrameTooShort: If ``data`` is shorter than a minimal frame.
            PreludeChecksumInvalid: If the prelude CRC does not match.
        """
        if len(data) < MINIMUM_MESSAGE_LENGTH:
            raise FrameTooShort(
                f"Message too short: {len(data)} bytes, "
                f"need at least {MINIMUM_MESSAGE_LENGTH}"
            )

        lengths = bytes(data[:PRELUDE_LENGTH])
        stored = int.from_bytes(data[PRELUDE_LENGTH:HEADERS_OFFSET], "big")
        actual = crc32(lengths)
        if actual != stored:
            raise PreludeChecksumInvalid(
                f"Prelude checksum invalid: stored 0x{stored:08X}, "
                f"computed 0x{actual:08X}"
            )
        return cls(
            total_length=int.from_bytes(lengths[:4], "big"),
            header_length=int.from_bytes(lengths[4:], "big"),
            checksum=stored,
        )

    def to_bytes(self) -> bytes:
        return (
            self.total_length.to_bytes(4, "big")
            + self.header_length.to_bytes(4, "big")
            + self.checksum.to_bytes(4, "big")
        )


@dataclass
class Message:
    """A decoded frame: its headers and raw payload."""

    headers: dict[str, str] = field(default_factory=dict)
    payload: bytes = b""

    def encode(self) -> bytes:
        return build_message(self.headers, self.payload)

    def __repr__(self) -> str:
        return (
            f"Message(headers={self.headers!r}, "
            f"payload={len(self.payload)} bytes)"
        )


def build_message(headers: HeadersLike, payload: bytes = b"") -> bytes:
    """Build one complete frame.

    Args:
        headers: Header mapping or entries, encoded in insertion order.
        payload: Application payload bytes.

    Returns:
        A contiguous ``bytes`` object ready to send as one transport unit.

    Raises:
        HeaderEncodeError: If the headers cannot be encoded.
    """
    header_bytes = encode_headers(headers)
    prelude = Prelude.for_sizes(len(header_bytes), len(payload))

    crc = CRC32()
    crc.update(header_bytes)
    checksum = crc.update(payload)

    frame = (
        prelude.to_bytes()
        + header_bytes
        + bytes(payload)
        + checksum.to_bytes(4, "big")
    )
    logger.debug(
        "Built frame: total=%d headers=%d payload=%d",
        prelude.total_length,
        prelude.header_length,
        len(payload),
    )
    return frame


def build_audio_event(chunk: bytes) -> bytes:
    """Build an ``AudioEvent`` frame carrying one chunk of audio."""
    return build_message(AUDIO_EVENT_HEADERS, chunk)


def parse_message(data: bytes) -> Message:
    """Parse and verify one complete frame.

    Args:
        data: Exactly one frame as delivered by the transport.

    Returns:
        The decoded :class:`Message`.

    Raises:
        FrameTooShort: Fewer than 16 bytes.
        PreludeChecksumInvalid: Prelude CRC mismatch.
        LengthMismatch: Declared lengths disagree with the buffer.
        MessageChecksumInvalid: Trailing CRC mismatch.
        HeaderDecodeError: The header block is malformed.
    """
    prelude = Prelude.from_bytes(data)

    if prelude.total_length != len(data):
        raise LengthMismatch(
            f"Length mismatch: prelude declares {prelude.total_length} bytes, "
            f"received {len(data)}"
        )
    if prelude.payload_length < 0:
        raise LengthMismatch(
            f"Length mismatch: header length {prelude.header_length} does not "
            f"fit in a {prelude.total_length}-byte message"
        )

    headers_end = HEADERS_OFFSET + prelude.header_length
    payload_end = prelude.total_length - CHECKSUM_LENGTH

    # Trailer is verified before the header block is walked
    stored = int.from_bytes(data[payload_end:], "big")
    actual = crc32(data[HEADERS_OFFSET:payload_end])
    if actual != stored:
        raise MessageChecksumInvalid(
            f"Message checksum invalid: stored 0x{stored:08X}, "
            f"computed 0x{actual:08X}"
        )

    headers = decode_headers(bytes(data[HEADERS_OFFSET:headers_end]))
    payload = bytes(data[headers_end:payload_end])
    logger.debug("Parsed frame: headers=%r payload=%d", headers, len(payload))
    return Message(headers=headers, payload=payload)
