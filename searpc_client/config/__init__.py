"""Connection settings and transport factories."""

from searpc_client.config.loader import load_transport_config, open_async_transport, open_transport
from searpc_client.config.schema import FramingMode, TransportConfig

__all__ = [
    "FramingMode",
    "TransportConfig",
    "load_transport_config",
    "open_transport",
    "open_async_transport",
]
