"""Protocol definitions for the discovery backend abstraction.

The lifecycle only ever talks to a backend through this protocol, which
keeps registration policy (what and when) apart from transport (how).
Implementations raise :class:`BackendError` on failure; they do not
retry.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from service_registrar.infra.discovery.models import ServiceRegistration


@runtime_checkable
class BackendClientProtocol(Protocol):
    """Registry operations required by the discovery lifecycle."""

    async def register(self, registration: ServiceRegistration) -> None:
        """Register (or re-register) a service record.

        Raises:
            BackendError: If the registry rejected the call or was unreachable.
        """
        ...

    async def deregister(self, service_id: str) -> None:
        """Remove a service record by id.

        Raises:
            BackendError: If the registry rejected the call or was unreachable.
        """
        ...

    async def report_health(self, service_id: str, failure_message: str) -> None:
        """Update the TTL check of a registered service.

        Args:
            service_id: Registered service id.
            failure_message: Empty for a passing signal, otherwise the
                diagnostic text of a failing signal.

        Raises:
            BackendError: If the registry rejected the call or was unreachable.
        """
        ...

    async def close(self) -> None:
        """Release transport resources."""
        ...
