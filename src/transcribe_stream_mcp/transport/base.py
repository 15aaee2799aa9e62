"""Transport interface.

A transport delivers whole frames: one outbound ``send_unit`` call is one
frame on the wire, and every ``unit`` notification carries exactly one
inbound frame. Opening the connection (URL signing, TLS, handshake) is the
concrete transport's business; the session only sees the notifications.

Notifications::

    open   ()                 connection is ready for traffic
    unit   (data: bytes)      one inbound frame, in arrival order
    error  (error: Exception) transport-level failure
    close  ()                 connection has closed
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable

TRANSPORT_EVENTS = ("open", "unit", "error", "close")


class Transport(ABC):
    """Minimal contract for a frame-delimited duplex transport."""

    def __init__(self) -> None:
        self._handlers: dict[str, list[Callable[..., None]]] = {
            event: [] for event in TRANSPORT_EVENTS
        }

    def on(self, event: str, handler: Callable[..., None]) -> None:
        """Register ``handler`` for a lifecycle or data notification."""
        if event not in self._handlers:
            raise ValueError(
                f"Unknown transport event '{event}'. Valid: {list(TRANSPORT_EVENTS)}"
            )
        self._handlers[event].append(handler)

    def notify(self, event: str, *args) -> None:
        """Deliver a notification to every registered handler.

        Concrete transports call this from their receive loop or callbacks.
        """
        for handler in list(self._handlers[event]):
            handler(*args)

    @property
    def connected(self) -> bool:
        """Whether the transport is currently open."""
        return False

    @abstractmethod
    def send_unit(self, data: bytes) -> None:
        """Send ``data`` as one outbound unit."""

    @abstractmethod
    def close(self) -> None:
        """Request shutdown; a ``close`` notification confirms it."""
