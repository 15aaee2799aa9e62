"""Streaming transcription session over a frame-delimited transport.

Usage::

    session = StreamingSession(transport)
    session.on("partial_result", lambda r: print("...", r.transcript))
    session.on("final_result", lambda r: print(r.transcript))
    session.on("error", lambda e: print(e.kind, e.message))
    session.wait_ready(timeout=5)
    for chunk in audio_chunks:
        session.send(chunk)
    session.close()
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from enum import Enum

from .models.options import StreamOptions
from .protocol.errors import (
    EventStreamError,
    FrameError,
    SessionNotOpen,
    TransportError,
)
from .protocol.framing import build_audio_event
from .protocol.parser import EventKind, classify_frame
from .transport.base import Transport

logger = logging.getLogger(__name__)

SESSION_EVENTS = ("partial_result", "final_result", "error", "closed")


class SessionState(Enum):
    CONNECTING = "connecting"
    OPEN = "open"
    CLOSING = "closing"
    CLOSED = "closed"


class StreamingSession:
    """One bidirectional transcription exchange on one transport.

    Outbound audio chunks are framed as ``AudioEvent`` messages. Inbound
    frames are decoded, classified and emitted to listeners:

    - ``partial_result(result)`` / ``final_result(result)`` with a
      :class:`~transcribe_stream_mcp.models.transcript.TranscriptResult`
    - ``error(error)`` with an exception exposing ``kind`` and ``message``;
      malformed frames, remote exceptions and transport failures all
      arrive here and none of them closes the session
    - ``closed()`` once, when the transport confirms shutdown

    A session is not reusable after it closes.
    """

    def __init__(
        self,
        transport: Transport,
        options: StreamOptions | None = None,
    ) -> None:
        self._transport = transport
        self.options = options or StreamOptions()
        self._state = SessionState.CONNECTING
        self._errored = False
        self._lock = threading.RLock()
        self._listeners: dict[str, list[Callable[..., None]]] = {
            event: [] for event in SESSION_EVENTS
        }
        self.ready = threading.Event()

        transport.on("open", self._on_open)
        transport.on("unit", self._on_unit)
        transport.on("error", self._on_error)
        transport.on("close", self._on_close)

        if transport.connected:
            self._on_open()

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def errored(self) -> bool:
        """Whether any error event has been emitted."""
        return self._errored

    def on(self, event: str, handler: Callable[..., None]) -> None:
        """Register a listener for one of :data:`SESSION_EVENTS`."""
        if event not in self._listeners:
            raise ValueError(
                f"Unknown session event '{event}'. Valid: {list(SESSION_EVENTS)}"
            )
        self._listeners[event].append(handler)

    def wait_ready(self, timeout: float | None = None) -> bool:
        """Block until the transport is open.

        Returns:
            True if the session is ready, False if ``timeout`` elapsed.
        """
        return self.ready.wait(timeout)

    def send(self, chunk: bytes) -> None:
        """Frame an audio chunk and send it as one transport unit.

        Raises:
            SessionNotOpen: If the session is not open.
        """
        with self._lock:
            if self._state is not SessionState.OPEN:
                raise SessionNotOpen(
                    f"Session not open (state: {self._state.value})"
                )
        frame = build_audio_event(chunk)
        logger.debug(
            "Sending audio chunk: %d bytes, frame %d bytes", len(chunk), len(frame)
        )
        self._transport.send_unit(frame)

    def close(self) -> None:
        """Request shutdown. ``closed`` is emitted once the transport confirms."""
        with self._lock:
            if self._state in (SessionState.CLOSING, SessionState.CLOSED):
                return
            self._state = SessionState.CLOSING
        logger.info("Closing session")

        try:
            self._transport.close()
        except Exception as e:
            logger.warning("Error closing transport: %s", e)
            self._on_close()

    def __enter__(self) -> StreamingSession:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # --- transport notifications ---

    def _on_open(self) -> None:
        with self._lock:
            if self._state is not SessionState.CONNECTING:
                return
            self._state = SessionState.OPEN
        self.ready.set()
        logger.info("Session open")

    def _on_unit(self, data: bytes) -> None:
        with self._lock:
            state = self._state
        if state in (SessionState.CONNECTING, SessionState.CLOSED):
            logger.debug(
                "Dropping %d-byte frame received while %s", len(data), state.value
            )
            return

        try:
            event = classify_frame(data)
        except FrameError as e:
            logger.warning("Rejected inbound frame: %s", e)
            self._emit_error(e)
            return

        if event is None:
            return
        if event.kind is EventKind.ERROR:
            logger.warning("Remote error %s: %s", event.error.kind, event.error.message)
            self._emit_error(event.error)
        else:
            self._emit(event.kind.value, event.result)

    def _on_error(self, error: Exception) -> None:
        logger.warning("Transport error: %s", error)
        if not isinstance(error, EventStreamError):
            wrapped = TransportError(str(error))
            wrapped.__cause__ = error
            error = wrapped
        self._emit_error(error)

    def _on_close(self) -> None:
        with self._lock:
            if self._state is SessionState.CLOSED:
                return
            self._state = SessionState.CLOSED
        logger.info("Session closed")
        self._emit("closed")

    # --- listener dispatch ---

    def _emit_error(self, error: EventStreamError) -> None:
        self._errored = True
        self._emit("error", error)

    def _emit(self, event: str, *args) -> None:
        for handler in list(self._listeners[event]):
            try:
                handler(*args)
            except Exception:
                logger.exception("Listener for '%s' failed", event)
