"""Listen address parsing for service registration."""

from __future__ import annotations

import logging

from service_registrar.core.exceptions import ConfigError

logger = logging.getLogger(__name__)

MAX_PORT = 65535


def parse_listen_port(listen: str) -> int:
    """Extract the port from a ``host:port`` listen address.

    The port is the text after the last ``:``, so bracketed IPv6 hosts
    (``[::1]:8080``) work as well.

    Args:
        listen: Listen address, e.g. ``"0.0.0.0:8080"`` or ``":8080"``.

    Returns:
        Port number.

    Raises:
        ConfigError: If there is no ``:``, or the port is not a decimal
            integer in 0-65535.

    Example:
        >>> parse_listen_port("0.0.0.0:8080")
        8080
    """
    host, sep, port_text = listen.rpartition(":")
    if not sep:
        logger.warning("fail parse service port. not found ':'", extra={"listen": listen})
        raise ConfigError(
            detail=f"can't parse service port: no ':' in listen address {listen!r}",
            extra={"listen": listen},
        )

    if not (port_text.isascii() and port_text.isdigit()):
        logger.warning("fail parse service port", extra={"listen": listen, "port": port_text})
        raise ConfigError(
            detail=f"can't parse service port: {port_text!r} is not an integer",
            extra={"listen": listen, "host": host},
        )

    port = int(port_text)
    if port > MAX_PORT:
        raise ConfigError(
            detail=f"can't parse service port: {port} is out of range",
            extra={"listen": listen, "host": host},
        )
    return port
