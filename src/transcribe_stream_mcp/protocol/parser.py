"""Interpretation of decoded messages as transcription events."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any

from ..models.transcript import TranscriptResult
from .errors import ApplicationError, PayloadDecodeError
from .framing import (
    ERROR_CODE,
    ERROR_MESSAGE,
    EXCEPTION_TYPE,
    MESSAGE_TYPE,
    Message,
    parse_message,
)

logger = logging.getLogger(__name__)


class EventKind(str, Enum):
    """Observable event names."""

    PARTIAL_RESULT = "partial_result"
    FINAL_RESULT = "final_result"
    ERROR = "error"


@dataclass
class TranscriptEvent:
    """A classified inbound message.

    Exactly one of ``result`` and ``error`` is set, according to ``kind``.
    """

    kind: EventKind
    result: TranscriptResult | None = None
    error: ApplicationError | None = None

    def to_dict(self) -> dict[str, Any]:
        if self.kind is EventKind.ERROR:
            return {
                "event": self.kind.value,
                "kind": self.error.kind,
                "message": self.error.message,
            }
        return {"event": self.kind.value, "result": self.result.to_dict()}


def _header(headers: dict[str, str], name: str) -> str | None:
    """Look up a header by its wire name, accepting it without the colon."""
    if name in headers:
        return headers[name]
    return headers.get(name.lstrip(":"))


def decode_body(payload: bytes) -> dict[str, Any]:
    """Decode a JSON object payload.

    Raises:
        PayloadDecodeError: If the payload is not UTF-8 JSON or not an object.
    """
    try:
        body = json.loads(payload.decode("utf-8")) if payload else {}
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise PayloadDecodeError(f"Payload is not valid JSON: {e}") from e
    if not isinstance(body, dict):
        raise PayloadDecodeError(
            f"Payload must be a JSON object, got {type(body).__name__}"
        )
    return body


def parse_exception(message: Message) -> ApplicationError | None:
    """Parse an ``exception`` or ``error`` message into an ApplicationError.

    Returns ``None`` for any other message type.
    """
    message_type = _header(message.headers, MESSAGE_TYPE)

    if message_type == "exception":
        body = decode_body(message.payload)
        kind = _header(message.headers, EXCEPTION_TYPE) or "UnknownException"
        text = body.get("Message", body.get("message", ""))
        return ApplicationError(kind, str(text))

    if message_type == "error":
        kind = _header(message.headers, ERROR_CODE) or "UnknownError"
        text = _header(message.headers, ERROR_MESSAGE) or ""
        return ApplicationError(kind, text)

    return None


def parse_results(message: Message) -> list[TranscriptResult]:
    """Return the transcript results carried by an event message.

    Raises:
        PayloadDecodeError: If any result entry is malformed.
    """
    body = decode_body(message.payload)
    transcript = body.get("Transcript")
    if not isinstance(transcript, dict):
        return []
    results = transcript.get("Results") or []
    if not isinstance(results, list):
        raise PayloadDecodeError("Transcript.Results must be a list")
    try:
        return [TranscriptResult.from_dict(r) for r in results]
    except ValueError as e:
        raise PayloadDecodeError(f"Malformed transcript result: {e}") from e


def classify_message(message: Message) -> TranscriptEvent | None:
    """Classify a decoded message.

    Returns:
        An ``error`` event for exception and error messages, a
        ``partial_result`` or ``final_result`` event decided by the first
        result's ``IsPartial`` flag, or ``None`` when the message carries
        no results.

    Raises:
        PayloadDecodeError: If the payload is not a JSON object or a
            result entry is malformed.
    """
    error = parse_exception(message)
    if error is not None:
        return TranscriptEvent(kind=EventKind.ERROR, error=error)

    results = parse_results(message)
    if not results:
        logger.debug("Dropping message with no results")
        return None

    first = results[0]
    kind = EventKind.PARTIAL_RESULT if first.is_partial else EventKind.FINAL_RESULT
    return TranscriptEvent(kind=kind, result=first)


def classify_frame(data: bytes) -> TranscriptEvent | None:
    """Decode one frame and classify it.

    Raises:
        FrameError: If the frame or its payload is malformed.
    """
    return classify_message(parse_message(data))
