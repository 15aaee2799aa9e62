"""MCP server entry point for event-stream frame inspection.

Exposes the event-stream codec as tools, resources and prompts via the
Model Context Protocol using the official Python MCP SDK with stdio
transport. Frames and payloads are exchanged as hex strings.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from mcp.server.fastmcp import FastMCP

from .models.options import STREAM_PATH, StreamOptions
from .protocol.errors import EventStreamError
from .protocol.framing import (
    AUDIO_EVENT_HEADERS,
    CHECKSUM_LENGTH,
    HEADERS_OFFSET,
    MINIMUM_MESSAGE_LENGTH,
    PRELUDE_LENGTH,
    Prelude,
    build_audio_event,
    build_message,
    parse_message,
)
from .protocol.headers import MAX_NAME_LENGTH, MAX_VALUE_LENGTH
from .protocol.parser import classify_message

logger = logging.getLogger(__name__)

mcp = FastMCP(
    "transcribe-stream",
    instructions=(
        "Encode, decode and classify streaming transcription event-stream frames"
    ),
)


def _from_hex(text: str) -> bytes:
    """Parse hex with optional whitespace, raising ValueError on bad input."""
    return bytes.fromhex("".join(text.split()))


def _error(e: Exception) -> dict[str, Any]:
    logger.debug("Codec tool failed: %s", e)
    kind = e.kind if isinstance(e, EventStreamError) else type(e).__name__
    return {"error": str(e), "kind": kind}


def _describe(frame: bytes) -> dict[str, Any]:
    prelude = Prelude.from_bytes(frame)
    return {
        "frame_hex": frame.hex(),
        "total_length": prelude.total_length,
        "header_length": prelude.header_length,
        "payload_length": prelude.payload_length,
        "prelude_crc": f"0x{prelude.checksum:08X}",
        "message_crc": f"0x{int.from_bytes(frame[-CHECKSUM_LENGTH:], 'big'):08X}",
    }


# ─── CODEC TOOLS ─────────────────────────────────────────────────────

@mcp.tool()
def encode_audio_event(payload_hex: str) -> dict[str, Any]:
    """Frame one chunk of audio as an AudioEvent message.

    Args:
        payload_hex: Audio bytes as a hex string.
    """
    try:
        frame = build_audio_event(_from_hex(payload_hex))
    except ValueError as e:
        return _error(e)
    return _describe(frame)


@mcp.tool()
def encode_message(headers: dict[str, str], payload_hex: str = "") -> dict[str, Any]:
    """Frame an arbitrary message.

    Args:
        headers: String headers, encoded in the given order.
        payload_hex: Payload bytes as a hex string.
    """
    try:
        frame = build_message(headers, _from_hex(payload_hex))
    except ValueError as e:
        return _error(e)
    return _describe(frame)


@mcp.tool()
def decode_message(frame_hex: str) -> dict[str, Any]:
    """Verify and decode one frame.

    Args:
        frame_hex: The complete frame as a hex string.
    """
    try:
        message = parse_message(_from_hex(frame_hex))
    except ValueError as e:
        return _error(e)

    result: dict[str, Any] = {
        "headers": message.headers,
        "payload_hex": message.payload.hex(),
        "payload_length": len(message.payload),
    }
    try:
        result["payload_text"] = message.payload.decode("utf-8")
    except UnicodeDecodeError:
        pass
    return result


@mcp.tool()
def classify_frame(frame_hex: str) -> dict[str, Any]:
    """Decode one frame and classify it as a partial result, final result or error.

    Frames carrying no results classify as ``{"event": None}``.

    Args:
        frame_hex: The complete frame as a hex string.
    """
    try:
        event = classify_message(parse_message(_from_hex(frame_hex)))
    except ValueError as e:
        return _error(e)
    if event is None:
        return {"event": None}
    return event.to_dict()


@mcp.tool()
def stream_parameters(
    language_code: str = "en-US",
    media_encoding: str = "pcm",
    sample_rate: int = 16000,
    region: str = "us-east-1",
    session_id: str | None = None,
    vocabulary_name: str | None = None,
) -> dict[str, Any]:
    """Validate stream options and return the endpoint query parameters.

    Args:
        language_code: e.g. en-US, en-GB, de-DE.
        media_encoding: pcm, ogg-opus or flac.
        sample_rate: Audio sample rate in Hz.
        region: Service region.
        session_id: Optional session id.
        vocabulary_name: Optional custom vocabulary name.
    """
    try:
        options = StreamOptions(
            language_code=language_code,
            media_encoding=media_encoding,
            sample_rate=sample_rate,
            session_id=session_id,
            vocabulary_name=vocabulary_name,
        )
    except ValueError as e:
        return {"error": str(e)}
    return {
        "endpoint": StreamOptions.endpoint(region),
        "path": STREAM_PATH,
        "query": options.to_query_params(),
    }


# ─── MCP RESOURCES ───────────────────────────────────────────────────

@mcp.resource("transcribe://protocol/layout")
def resource_protocol_layout() -> str:
    """Event-stream frame layout and limits."""
    return json.dumps({
        "byte_order": "big-endian",
        "fields": [
            {"name": "total_length", "offset": 0, "size": 4},
            {"name": "header_length", "offset": 4, "size": 4},
            {"name": "prelude_crc", "offset": PRELUDE_LENGTH, "size": 4},
            {"name": "header_block", "offset": HEADERS_OFFSET, "size": "header_length"},
            {"name": "payload", "offset": "12 + header_length",
             "size": "total_length - header_length - 16"},
            {"name": "message_crc", "offset": "total_length - 4", "size": 4},
        ],
        "minimum_length": MINIMUM_MESSAGE_LENGTH,
        "max_header_name": MAX_NAME_LENGTH,
        "max_header_value": MAX_VALUE_LENGTH,
        "audio_event_headers": AUDIO_EVENT_HEADERS,
    })


# ─── MCP PROMPTS ─────────────────────────────────────────────────────

@mcp.prompt()
def diagnose_frame(frame_hex: str) -> str:
    """Guide the AI through diagnosing a frame that a session rejected.

    Args:
        frame_hex: The rejected frame as a hex string.
    """
    return f"""Diagnose this event-stream frame:

{frame_hex}

Use decode_message first. If it reports an error, explain which field is
wrong using the transcribe://protocol/layout resource:
- FrameTooShort: fewer than 16 bytes were received
- PreludeChecksumInvalid: the first 8 bytes were corrupted
- LengthMismatch: the frame was truncated or two frames were concatenated
- MessageChecksumInvalid: the header block or payload was corrupted
- HeaderDecodeError: the header block itself is malformed

If it decodes, use classify_frame and summarize the transcript or error."""


# ─── ENTRY POINT ─────────────────────────────────────────────────────

def main():
    """Run the MCP server with stdio transport."""
    logging.basicConfig(level=logging.INFO)
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
