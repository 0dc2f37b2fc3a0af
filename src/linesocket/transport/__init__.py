"""
Transport layer for linesocket.

A transport is the event-emitting duplex stream underneath a connection.
"""

from linesocket.transport.events import EventEmitter, EventSubscription
from linesocket.transport.protocol import (
    CLOSE,
    DATA,
    ERROR,
    EVENTS,
    READY,
    TIMEOUT,
    Subscription,
    Transport,
    TransportFactory,
)
from linesocket.transport.registry import (
    TransportFactoryRegistry,
    get_transport_factory_registry,
)
from linesocket.transport.tcp import TCPTransport, TCPTransportFactory

__all__ = [
    "Transport",
    "TransportFactory",
    "Subscription",
    "EventEmitter",
    "EventSubscription",
    "TCPTransport",
    "TCPTransportFactory",
    "TransportFactoryRegistry",
    "get_transport_factory_registry",
    "READY",
    "DATA",
    "TIMEOUT",
    "CLOSE",
    "ERROR",
    "EVENTS",
]
