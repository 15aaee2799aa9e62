"""Tests for message frame building and parsing."""

import pytest

from transcribe_stream_mcp.protocol.errors import (
    FrameTooShort,
    HeaderDecodeError,
    LengthMismatch,
    MessageChecksumInvalid,
    PreludeChecksumInvalid,
)
from transcribe_stream_mcp.protocol.framing import (
    AUDIO_EVENT_HEADERS,
    HEADERS_OFFSET,
    MINIMUM_MESSAGE_LENGTH,
    Message,
    Prelude,
    build_audio_event,
    build_message,
    parse_message,
)
from transcribe_stream_mcp.protocol.headers import encode_headers
from transcribe_stream_mcp.utils.crc import crc32


def _reseal(frame: bytearray) -> bytes:
    """Recompute both checksums after editing a frame."""
    frame[8:12] = crc32(bytes(frame[:8])).to_bytes(4, "big")
    frame[-4:] = crc32(bytes(frame[12:-4])).to_bytes(4, "big")
    return bytes(frame)


def test_audio_event_frame_size():
    """Total length is 16 + header block + payload."""
    frame = build_audio_event(b"\x01\x02\x03")
    header_length = len(encode_headers(AUDIO_EVENT_HEADERS))
    assert header_length == 88
    assert len(frame) == 16 + header_length + 3
    assert int.from_bytes(frame[0:4], "big") == len(frame)
    assert int.from_bytes(frame[4:8], "big") == header_length


def test_audio_event_roundtrip():
    """Decoding an audio event recovers the headers and payload."""
    frame = build_audio_event(b"\x01\x02\x03")
    message = parse_message(frame)
    assert message.headers == {
        ":message-type": "event",
        ":event-type": "AudioEvent",
        ":content-type": "application/octet-stream",
    }
    assert message.payload == b"\x01\x02\x03"


def test_frame_layout():
    """Check every field of a small frame."""
    frame = build_message({"a": "b"}, b"xyz")
    # header block: 01 'a' 07 00 01 'b' = 6 bytes
    assert frame[0:4] == (16 + 6 + 3).to_bytes(4, "big")
    assert frame[4:8] == (6).to_bytes(4, "big")
    assert frame[8:12] == crc32(frame[0:8]).to_bytes(4, "big")
    assert frame[12:18] == b"\x01a\x07\x00\x01b"
    assert frame[18:21] == b"xyz"
    assert frame[21:25] == crc32(frame[12:21]).to_bytes(4, "big")


def test_roundtrip_empty_frame():
    """No headers and no payload make a minimal 16-byte frame."""
    frame = build_message({}, b"")
    assert len(frame) == MINIMUM_MESSAGE_LENGTH
    message = parse_message(frame)
    assert message.headers == {}
    assert message.payload == b""


@pytest.mark.parametrize(
    "headers,payload",
    [
        ({}, b"\x00" * 1000),
        ({"k": "v"}, b""),
        ({"n" * 255: "v" * 65535}, bytes(range(256))),
        ({":message-type": "event", "x": "é"}, b"{}"),
    ],
)
def test_roundtrip(headers, payload):
    """decode(encode(headers, payload)) returns the inputs."""
    message = parse_message(build_message(headers, payload))
    assert message.headers == headers
    assert message.payload == payload


def test_message_encode():
    """Message.encode() is build_message over its fields."""
    message = Message(headers={"a": "b"}, payload=b"1")
    assert message.encode() == build_message({"a": "b"}, b"1")
    assert parse_message(message.encode()) == message


def test_parse_accepts_bytearray_and_memoryview():
    frame = build_audio_event(b"abc")
    assert parse_message(bytearray(frame)).payload == b"abc"
    assert parse_message(memoryview(frame)).payload == b"abc"


def test_parse_too_short():
    """Anything under 16 bytes is rejected before reading fields."""
    with pytest.raises(FrameTooShort):
        parse_message(b"\x00" * 15)
    with pytest.raises(FrameTooShort):
        parse_message(b"")


def test_parse_bad_prelude_checksum():
    frame = bytearray(build_audio_event(b"abc"))
    frame[8] ^= 0xFF
    with pytest.raises(PreludeChecksumInvalid):
        parse_message(bytes(frame))


def test_parse_bad_message_checksum():
    frame = bytearray(build_audio_event(b"abc"))
    frame[-1] ^= 0x01
    with pytest.raises(MessageChecksumInvalid):
        parse_message(bytes(frame))


def test_parse_length_mismatch_extra_bytes():
    """A frame followed by extra bytes does not match its declared length."""
    frame = build_audio_event(b"abc")
    with pytest.raises(LengthMismatch):
        parse_message(frame + b"\x00")


def test_parse_length_mismatch_truncated():
    frame = build_audio_event(b"abc")
    with pytest.raises(LengthMismatch):
        parse_message(frame[:-1])


def test_parse_length_mismatch_skips_header_decode():
    """Length is checked before the (broken) header block is touched."""
    frame = bytearray(build_message({}, b""))
    # declare a total length that disagrees with the buffer
    frame[0:4] = (100).to_bytes(4, "big")
    with pytest.raises(LengthMismatch):
        parse_message(_reseal(frame) + b"\xff\x99")


def test_parse_header_length_exceeds_total():
    """A header length that leaves negative payload room is a length mismatch."""
    frame = bytearray(build_message({}, b"1234"))
    frame[4:8] = (10).to_bytes(4, "big")
    with pytest.raises(LengthMismatch):
        parse_message(_reseal(frame))


def test_parse_propagates_header_errors():
    """A checksum-valid frame with a malformed header block is rejected."""
    frame = bytearray(build_message({"a": "b"}, b""))
    frame[HEADERS_OFFSET + 2] = 4  # type tag -> integer
    with pytest.raises(HeaderDecodeError) as exc:
        parse_message(_reseal(frame))
    assert exc.value.reason == HeaderDecodeError.UNSUPPORTED_TYPE


def test_every_single_bit_flip_is_detected():
    """Flipping any one bit fails with a checksum error."""
    frame = build_audio_event(b"\x01\x02\x03")
    for index in range(len(frame)):
        for bit in range(8):
            corrupted = bytearray(frame)
            corrupted[index] ^= 1 << bit
            with pytest.raises((PreludeChecksumInvalid, MessageChecksumInvalid)):
                parse_message(bytes(corrupted))


def test_prelude_from_bytes():
    frame = build_message({"a": "b"}, b"xyz")
    prelude = Prelude.from_bytes(frame)
    assert prelude.total_length == 25
    assert prelude.header_length == 6
    assert prelude.payload_length == 3
    assert prelude.to_bytes() == frame[:12]


def test_prelude_for_sizes():
    prelude = Prelude.for_sizes(header_length=6, payload_length=3)
    assert prelude.total_length == 25
    assert prelude.checksum == crc32(prelude.to_bytes()[:8])


def test_message_repr():
    """Message repr shows headers and payload size."""
    r = repr(Message(headers={"a": "b"}, payload=b"12345"))
    assert "5 bytes" in r
    assert "'a'" in r
