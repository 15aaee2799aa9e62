"""Transcript result model: the ``Transcript.Results[]`` entries of a
``TranscriptEvent`` payload.

Structure of one result::

    {
        "ResultId": "...",
        "IsPartial": true,
        "StartTime": 0.12,
        "EndTime": 1.73,
        "Alternatives": [
            {"Transcript": "hello world", "Items": [...]},
        ],
        "ChannelId": "ch_0",        # optional
        "LanguageCode": "en-US",    # optional
    }
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any

_TYPE_NAMES = {str: "a string", bool: "a boolean", float: "a number", list: "a list"}


def _check(key: str, value: Any, kind: type) -> Any:
    if kind is float:
        valid = isinstance(value, (int, float)) and not isinstance(value, bool)
    else:
        valid = isinstance(value, kind)
    if not valid:
        raise ValueError(f"{key} must be {_TYPE_NAMES[kind]}, got {type(value).__name__}")
    return float(value) if kind is float else value


def _required(data: dict[str, Any], key: str, kind: type, default: Any) -> Any:
    """Field that may be absent but is never null."""
    if key not in data:
        return default
    return _check(key, data[key], kind)


def _optional(data: dict[str, Any], key: str, kind: type) -> Any:
    value = data.get(key)
    if value is None:
        return None
    return _check(key, value, kind)


def _object(name: str, data: Any) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise ValueError(f"{name} must be an object, got {type(data).__name__}")
    return data


@dataclass
class TranscriptItem:
    """A word, phrase or punctuation mark within an alternative."""

    content: str = ""
    type: str = "pronunciation"
    start_time: float = 0.0
    end_time: float = 0.0
    confidence: float | None = None
    stable: bool | None = None
    speaker: str | None = None
    vocabulary_filter_match: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TranscriptItem:
        data = _object("Item", data)
        return cls(
            content=_required(data, "Content", str, ""),
            type=_required(data, "Type", str, "pronunciation"),
            start_time=_required(data, "StartTime", float, 0.0),
            end_time=_required(data, "EndTime", float, 0.0),
            confidence=_optional(data, "Confidence", float),
            stable=_optional(data, "Stable", bool),
            speaker=_optional(data, "Speaker", str),
            vocabulary_filter_match=_required(data, "VocabularyFilterMatch", bool, False),
        )


@dataclass
class Alternative:
    """One possible transcription of the audio segment."""

    transcript: str = ""
    items: list[TranscriptItem] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Alternative:
        data = _object("Alternative", data)
        return cls(
            transcript=_required(data, "Transcript", str, ""),
            items=[TranscriptItem.from_dict(i) for i in _required(data, "Items", list, [])],
        )


@dataclass
class TranscriptResult:
    """One partial or final result for a segment of streamed audio.

    Partial and final revisions of the same segment share ``result_id``.
    ``raw`` keeps the result exactly as received.
    """

    result_id: str = ""
    is_partial: bool = False
    start_time: float = 0.0
    end_time: float = 0.0
    alternatives: list[Alternative] = field(default_factory=list)
    channel_id: str | None = None
    language_code: str | None = None
    raw: dict[str, Any] = field(default_factory=dict, repr=False)

    @property
    def transcript(self) -> str:
        """Text of the first (most likely) alternative."""
        if not self.alternatives:
            return ""
        return self.alternatives[0].transcript

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TranscriptResult:
        """Build a result from its JSON object.

        Absent fields take their defaults; optional fields may be null.

        Raises:
            ValueError: If ``data`` is not an object or a field has the
                wrong type.
        """
        data = _object("Result", data)
        return cls(
            result_id=_required(data, "ResultId", str, ""),
            is_partial=_required(data, "IsPartial", bool, False),
            start_time=_required(data, "StartTime", float, 0.0),
            end_time=_required(data, "EndTime", float, 0.0),
            alternatives=[
                Alternative.from_dict(a) for a in _required(data, "Alternatives", list, [])
            ],
            channel_id=_optional(data, "ChannelId", str),
            language_code=_optional(data, "LanguageCode", str),
            raw=data,
        )

    def to_dict(self) -> dict[str, Any]:
        return copy.deepcopy(self.raw)
