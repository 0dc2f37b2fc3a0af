"""
Registry for transport factories.

Connections look up the factory for their ``transport_type`` here. The
``"tcp"`` factory is registered when the registry is first created.
"""

from typing import Dict, List, Optional

from linesocket.transport.protocol import Transport, TransportFactory
from linesocket.transport.tcp import TCPTransportFactory


class TransportFactoryRegistry:
    """Registry for transport factories."""

    def __init__(self):
        """Initialize a new transport factory registry."""
        self._factories: Dict[str, TransportFactory] = {}

    def register(self, name: str, factory: TransportFactory) -> None:
        """Register a transport factory.

        Args:
            name: The name to register the factory under.
            factory: The factory instance.
        """
        self._factories[name] = factory

    def unregister(self, name: str) -> None:
        """Remove a factory; unknown names are ignored."""
        self._factories.pop(name, None)

    def get(self, name: str) -> TransportFactory:
        """Get a transport factory by name.

        Raises:
            KeyError: If no factory is registered with the given name.
        """
        return self._factories[name]

    def get_registered_names(self) -> List[str]:
        return sorted(self._factories)

    def create_transport(self, name: str, host: str, port: int) -> Transport:
        """Create a transport using a registered factory.

        Raises:
            KeyError: If no factory is registered with the given name.
        """
        return self.get(name).create_transport(host, port)


_registry: Optional[TransportFactoryRegistry] = None


def get_transport_factory_registry() -> TransportFactoryRegistry:
    """Return the process-wide registry, creating it on first use."""
    global _registry
    if _registry is None:
        _registry = TransportFactoryRegistry()
        _registry.register("tcp", TCPTransportFactory())
    return _registry
