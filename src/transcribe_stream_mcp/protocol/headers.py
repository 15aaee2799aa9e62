"""Header block codec.

Each header entry is laid out as::

    +----------+-----------+----------+-----------+-------------+
    | Name Len |   Name    | Type Tag | Value Len |    Value    |
    | 1 byte   | <= 255 B  | 1 byte   | 2 bytes   | <= 65535 B  |
    +----------+-----------+----------+-----------+-------------+

- Value Len is big-endian
- Only string values (type tag 7) are supported
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import IntEnum
from typing import Tuple, Union

from .errors import HeaderDecodeError, HeaderEncodeError

MAX_NAME_LENGTH = 255
MAX_VALUE_LENGTH = 65535
# name length + type tag + value length, with empty name and value
MIN_ENTRY_LENGTH = 4


class HeaderType(IntEnum):
    """Event-stream header value type tags."""

    BOOL_TRUE = 0
    BOOL_FALSE = 1
    BYTE = 2
    SHORT = 3
    INTEGER = 4
    LONG = 5
    BYTE_ARRAY = 6
    STRING = 7
    TIMESTAMP = 8
    UUID = 9


def _type_name(tag: int) -> str:
    try:
        return HeaderType(tag).name
    except ValueError:
        return f"0x{tag:02X}"


@dataclass(frozen=True)
class Header:
    """A single header entry."""

    name: str
    value: str
    type: int = HeaderType.STRING


HeadersLike = Union[Mapping[str, str], Iterable[Union[Header, Tuple[str, str]]]]


def _as_entries(headers: HeadersLike) -> list[Header]:
    if isinstance(headers, Mapping):
        return [Header(name, value) for name, value in headers.items()]

    entries = []
    seen: set[str] = set()
    for item in headers:
        entry = item if isinstance(item, Header) else Header(*item)
        if entry.name in seen:
            raise HeaderEncodeError(f"Duplicate header name {entry.name!r}")
        seen.add(entry.name)
        entries.append(entry)
    return entries


def encode_header(header: Header) -> bytes:
    """Encode one header entry."""
    if header.type != HeaderType.STRING:
        raise HeaderEncodeError(
            f"Unsupported header type {_type_name(header.type)} "
            f"for {header.name!r}"
        )

    name = header.name.encode("utf-8")
    if len(name) > MAX_NAME_LENGTH:
        raise HeaderEncodeError(
            f"Header name must be at most {MAX_NAME_LENGTH} bytes, got {len(name)}"
        )
    value = header.value.encode("utf-8")
    if len(value) > MAX_VALUE_LENGTH:
        raise HeaderEncodeError(
            f"Header value for {header.name!r} must be at most "
            f"{MAX_VALUE_LENGTH} bytes, got {len(value)}"
        )

    return (
        bytes([len(name)])
        + name
        + bytes([HeaderType.STRING])
        + len(value).to_bytes(2, "big")
        + value
    )


def encode_headers(headers: HeadersLike) -> bytes:
    """Encode headers in insertion order.

    Args:
        headers: A mapping of name to value, or an iterable of
            :class:`Header` objects or ``(name, value)`` pairs.

    Returns:
        The header block bytes.

    Raises:
        HeaderEncodeError: If a name or value is too long, a name repeats,
            or a non-string type is requested.
    """
    return b"".join(encode_header(entry) for entry in _as_entries(headers))


def _text(raw: bytes, what: str) -> str:
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise HeaderDecodeError(
            HeaderDecodeError.INVALID_UTF8, f"Header {what} is not valid UTF-8"
        ) from e


def decode_headers(data: bytes) -> dict[str, str]:
    """Decode a complete header block.

    The whole block is rejected on the first problem; nothing is returned
    for a partially valid block.

    Raises:
        HeaderDecodeError: On truncation, an unsupported type tag, a
            repeated name or undecodable text.
    """
    headers: dict[str, str] = {}
    end = len(data)
    offset = 0

    while offset < end:
        if end - offset < MIN_ENTRY_LENGTH:
            raise HeaderDecodeError(
                HeaderDecodeError.TRAILING_BYTES,
                f"{end - offset} trailing bytes after header entries",
            )
        name_length = data[offset]
        offset += 1
        if offset + name_length > end:
            raise HeaderDecodeError(
                HeaderDecodeError.TRUNCATED_NAME,
                f"Header name of {name_length} bytes runs past the header block",
            )
        name = _text(data[offset : offset + name_length], "name")
        offset += name_length

        # Type tag and the 2-byte value length must both be present
        if offset + 3 > end:
            raise HeaderDecodeError(
                HeaderDecodeError.TRUNCATED_VALUE,
                f"Header {name!r} is missing its type or value length",
            )
        type_tag = data[offset]
        if type_tag != HeaderType.STRING:
            raise HeaderDecodeError(
                HeaderDecodeError.UNSUPPORTED_TYPE,
                f"Header {name!r} has unsupported type {_type_name(type_tag)}",
            )
        value_length = int.from_bytes(data[offset + 1 : offset + 3], "big")
        offset += 3
        if offset + value_length > end:
            raise HeaderDecodeError(
                HeaderDecodeError.TRUNCATED_VALUE,
                f"Header {name!r} value of {value_length} bytes runs past "
                f"the header block",
            )
        value = _text(data[offset : offset + value_length], "value")
        offset += value_length

        if name in headers:
            raise HeaderDecodeError(
                HeaderDecodeError.DUPLICATE_NAME, f"Duplicate header {name!r}"
            )
        headers[name] = value

    return headers
