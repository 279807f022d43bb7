"""Terminal IPC transports and the focus serialization queue."""

from roomdispatch.transports.base import Transport, TransportResult
from roomdispatch.transports.queue import SerializationQueue
from roomdispatch.transports.router import TerminalRouter, default_transports

__all__ = [
    "SerializationQueue",
    "TerminalRouter",
    "Transport",
    "TransportResult",
    "default_transports",
]
