"""Shared fixtures: an in-memory transport and frame factories."""

from __future__ import annotations

import json

import pytest

from transcribe_stream_mcp.protocol.framing import build_message
from transcribe_stream_mcp.session import StreamingSession
from transcribe_stream_mcp.transport.base import Transport


class FakeTransport(Transport):
    """Records outbound units; tests drive the inbound side by hand."""

    def __init__(self, defer_close: bool = False) -> None:
        super().__init__()
        self.sent: list[bytes] = []
        self.close_requests = 0
        self.defer_close = defer_close
        self._connected = False

    @property
    def connected(self) -> bool:
        return self._connected

    def open(self) -> None:
        self._connected = True
        self.notify("open")

    def deliver(self, data: bytes) -> None:
        self.notify("unit", data)

    def fail(self, error: Exception) -> None:
        self.notify("error", error)

    def send_unit(self, data: bytes) -> None:
        self.sent.append(data)

    def close(self) -> None:
        self.close_requests += 1
        if not self.defer_close:
            self.confirm_close()

    def confirm_close(self) -> None:
        self._connected = False
        self.notify("close")


@pytest.fixture
def transport_cls() -> type[FakeTransport]:
    return FakeTransport


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def session(transport) -> StreamingSession:
    """A session whose transport is already open."""
    s = StreamingSession(transport)
    transport.open()
    return s


@pytest.fixture
def result_frame():
    """Factory for TranscriptEvent frames carrying a single result."""

    def make(
        transcript: str = "hello world",
        is_partial: bool = False,
        result_id: str = "res-1",
        start_time: float = 0.0,
        end_time: float = 1.0,
    ) -> bytes:
        body = {
            "Transcript": {
                "Results": [
                    {
                        "Alternatives": [
                            {
                                "Transcript": transcript,
                                "Items": [
                                    {
                                        "Content": word,
                                        "Type": "pronunciation",
                                        "StartTime": start_time,
                                        "EndTime": end_time,
                                    }
                                    for word in transcript.split()
                                ],
                            }
                        ],
                        "EndTime": end_time,
                        "IsPartial": is_partial,
                        "ResultId": result_id,
                        "StartTime": start_time,
                    }
                ]
            }
        }
        return build_message(
            {
                ":message-type": "event",
                ":event-type": "TranscriptEvent",
                ":content-type": "application/json",
            },
            json.dumps(body).encode("utf-8"),
        )

    return make


@pytest.fixture
def empty_frame() -> bytes:
    """A TranscriptEvent frame with no results."""
    return build_message(
        {":message-type": "event", ":event-type": "TranscriptEvent"},
        json.dumps({"Transcript": {"Results": []}}).encode("utf-8"),
    )


@pytest.fixture
def exception_frame():
    """Factory for exception frames."""

    def make(
        exception_type: str = "BadRequestException",
        message: str = "invalid audio",
    ) -> bytes:
        return build_message(
            {
                ":message-type": "exception",
                ":exception-type": exception_type,
                ":content-type": "application/json",
            },
            json.dumps({"Message": message}).encode("utf-8"),
        )

    return make
