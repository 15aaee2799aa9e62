"""Transport contract consumed by the streaming session."""

from .base import Transport
