"""Consul service discovery infrastructure.

This package provides optional Consul integration with:
- Registration of the service with a 5 second TTL check
- A Prometheus endpoint registered as a second service (tag "prom")
- Caller-driven health signals, optionally via TTLHeartbeat
- Clean deregistration on shutdown

Key characteristics:
- Enablement is a single boot-time flag; when off, every call is a no-op
- Registry failures are raised once as RegistryError, never retried
- The backend is a narrow protocol (ConsulClient, NullBackendClient,
  MockConsulClient)

Usage:
    from service_registrar.core.settings import get_consul_settings
    from service_registrar.infra.discovery import DiscoveryLifecycle, get_backend

    settings = get_consul_settings()
    lifecycle = DiscoveryLifecycle.from_listen_address(
        "0.0.0.0:8080",
        get_backend(settings),
        service_name="orders",
        service_id="orders-1",
        enabled=settings.enabled,
    )
    await lifecycle.start_metrics(9100, "orders-1-prom")
    await lifecycle.register(["api"], version="1.4.2")

Testing:
    from service_registrar.infra.discovery import DiscoveryLifecycle, MockConsulClient

    mock_client = MockConsulClient()
    lifecycle = DiscoveryLifecycle(identity, mock_client, enabled=True)
    await lifecycle.register()
    assert mock_client.services
"""

from service_registrar.infra.discovery.address import parse_listen_port
from service_registrar.infra.discovery.client import ConsulClient
from service_registrar.infra.discovery.factory import get_backend
from service_registrar.infra.discovery.heartbeat import TTLHeartbeat
from service_registrar.infra.discovery.lifecycle import DiscoveryLifecycle, ListenAddressPolicy
from service_registrar.infra.discovery.mock_client import MockConsulClient
from service_registrar.infra.discovery.models import (
    METRICS_TAG,
    PRIMARY_TTL,
    CheckKind,
    HealthCheckSpec,
    HealthState,
    RegistrationState,
    ServiceIdentity,
    ServiceRegistration,
)
from service_registrar.infra.discovery.null_client import NullBackendClient
from service_registrar.infra.discovery.protocols import BackendClientProtocol

__all__ = [
    # Protocol
    "BackendClientProtocol",
    # Clients
    "ConsulClient",
    "MockConsulClient",
    "NullBackendClient",
    "get_backend",
    # Lifecycle
    "DiscoveryLifecycle",
    "ListenAddressPolicy",
    "TTLHeartbeat",
    "parse_listen_port",
    # Models
    "CheckKind",
    "HealthCheckSpec",
    "HealthState",
    "METRICS_TAG",
    "PRIMARY_TTL",
    "RegistrationState",
    "ServiceIdentity",
    "ServiceRegistration",
]
