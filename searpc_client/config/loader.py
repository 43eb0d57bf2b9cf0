"""Validate connection settings and open transports from them."""

import logging
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from searpc_client.config.schema import FramingMode, TransportConfig
from searpc_client.core.errors import ConfigError
from searpc_client.transport.aio import StreamTransport
from searpc_client.transport.sync import SocketTransport

logger = logging.getLogger(__name__)


def load_transport_config(data: Mapping[str, Any]) -> TransportConfig:
    """Validate a mapping of connection settings.

    Args:
        data: Settings as plain data, e.g. parsed from JSON by the caller.

    Returns:
        Validated TransportConfig.

    Raises:
        ConfigError: If the settings fail validation.
    """
    try:
        return TransportConfig.model_validate(dict(data))
    except ValidationError as e:
        raise ConfigError(f"Transport config validation failed: {e}") from e


def open_transport(config: TransportConfig) -> SocketTransport:
    """Connect a blocking transport as described by ``config``.

    Raises:
        TransportError: If the connection cannot be established.
    """
    max_frame_size = config.effective_max_frame_size()
    if config.framing is FramingMode.PACKET:
        assert config.host is not None and config.port is not None
        logger.debug("Opening packet transport to %s:%s", config.host, config.port)
        return SocketTransport.connect_tcp(
            config.host,
            config.port,
            timeout=config.connect_timeout,
            max_frame_size=max_frame_size,
        )
    assert config.socket_path is not None and config.service is not None
    logger.debug("Opening named-pipe transport to %s", config.socket_path)
    return SocketTransport.connect_unix(
        config.socket_path,
        config.service,
        timeout=config.connect_timeout,
        max_frame_size=max_frame_size,
    )


async def open_async_transport(config: TransportConfig) -> StreamTransport:
    """Connect an asyncio transport as described by ``config``.

    Raises:
        TransportError: If the connection cannot be established.
    """
    max_frame_size = config.effective_max_frame_size()
    if config.framing is FramingMode.PACKET:
        assert config.host is not None and config.port is not None
        logger.debug("Opening async packet transport to %s:%s", config.host, config.port)
        return await StreamTransport.open_tcp(
            config.host,
            config.port,
            timeout=config.connect_timeout,
            max_frame_size=max_frame_size,
        )
    assert config.socket_path is not None and config.service is not None
    logger.debug("Opening async named-pipe transport to %s", config.socket_path)
    return await StreamTransport.open_unix(
        config.socket_path,
        config.service,
        timeout=config.connect_timeout,
        max_frame_size=max_frame_size,
    )
