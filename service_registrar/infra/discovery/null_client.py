"""Backend used when service discovery is disabled."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from service_registrar.infra.discovery.models import ServiceRegistration

logger = logging.getLogger(__name__)


class NullBackendClient:
    """Backend that accepts every call and talks to nothing."""

    async def register(self, registration: ServiceRegistration) -> None:
        logger.debug("NullBackendClient: skip register %s", registration.service_id)

    async def deregister(self, service_id: str) -> None:
        logger.debug("NullBackendClient: skip deregister %s", service_id)

    async def report_health(self, service_id: str, failure_message: str) -> None:
        return None

    async def close(self) -> None:
        return None
