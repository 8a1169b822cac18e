"""Backend selection for the discovery lifecycle."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from service_registrar.infra.discovery.client import ConsulClient
from service_registrar.infra.discovery.null_client import NullBackendClient

if TYPE_CHECKING:
    from service_registrar.core.settings.consul import ConsulSettings
    from service_registrar.infra.discovery.protocols import BackendClientProtocol

logger = logging.getLogger(__name__)


def get_backend(settings: ConsulSettings | None = None) -> BackendClientProtocol:
    """Build the registry backend for the current configuration.

    Args:
        settings: Consul settings. If None, loads the cached settings.

    Returns:
        ConsulClient when discovery is enabled, NullBackendClient otherwise.
    """
    if settings is None:
        from service_registrar.core.settings import get_consul_settings

        settings = get_consul_settings()

    if not settings.enabled:
        logger.debug("Consul service discovery not enabled, using null backend")
        return NullBackendClient()

    return ConsulClient(settings)
