"""Service discovery lifecycle.

This module provides DiscoveryLifecycle, the facade a service uses to:
- Register itself with a TTL health check
- Register and serve an auxiliary Prometheus endpoint
- Keep its TTL check alive with health signals
- Deregister both records on shutdown

Every operation is gated by a boot-time enablement flag. When the flag is
off, all operations succeed without touching the backend or the network,
so callers never branch on enablement themselves.

Registry failures are wrapped in RegistryError and raised to the caller
once. Nothing is retried.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Sequence
from enum import Enum
from typing import TYPE_CHECKING

from service_registrar.core.exceptions import BackendError, ConfigError, RegistryError
from service_registrar.infra.discovery.address import parse_listen_port
from service_registrar.infra.discovery.models import (
    PRIMARY_TTL,
    HealthCheckSpec,
    HealthState,
    RegistrationState,
    ServiceIdentity,
    ServiceRegistration,
    metrics_registration,
)
from service_registrar.infra.metrics.server import MetricsEndpointRunner

if TYPE_CHECKING:
    from service_registrar.infra.discovery.protocols import BackendClientProtocol

logger = logging.getLogger(__name__)

RunnerFactory = Callable[[str, int], MetricsEndpointRunner]
FailureCallback = Callable[[BaseException], None]


class ListenAddressPolicy(str, Enum):
    """What to do when the listen address has no usable port."""

    RAISE = "raise"  # construction fails with ConfigError
    DISABLE = "disable"  # facade is built without a port and never registers


class DiscoveryLifecycle:
    """Registration and health lifecycle for one service instance.

    Example:
        lifecycle = DiscoveryLifecycle.from_listen_address(
            "0.0.0.0:8080",
            get_backend(settings),
            service_name="orders",
            service_id="orders-1",
            enabled=settings.enabled,
        )
        await lifecycle.start_metrics(9100, "orders-1-prom")
        await lifecycle.register(["api"], version="1.4.2")
        await lifecycle.send_health_check()          # repeat every < 5s
        await lifecycle.deregister()
        await lifecycle.stop_metrics()
    """

    def __init__(
        self,
        identity: ServiceIdentity,
        backend: BackendClientProtocol,
        *,
        enabled: bool,
        address: str | None = None,
        runner_factory: RunnerFactory = MetricsEndpointRunner,
        on_metrics_failure: FailureCallback | None = None,
    ) -> None:
        """Initialize the lifecycle. Does not contact the registry.

        Args:
            identity: Name, id and port of the primary service.
            backend: Registry backend (NullBackendClient when disabled).
            enabled: Boot-time discovery flag, fixed for the lifetime.
            address: Advertised address, or None to let the agent decide.
            runner_factory: Builds the metrics endpoint runner from
                (service_name, monitor_port).
            on_metrics_failure: Called if the metrics listener dies, e.g.
                because the port is taken. Defaults to logging the error.
        """
        self._identity = identity
        self._backend = backend
        self._enabled = enabled
        self._address = address
        self._runner_factory = runner_factory
        self._on_metrics_failure = on_metrics_failure or _log_metrics_failure

        self._metrics_service_id: str | None = None
        self._runner: MetricsEndpointRunner | None = None
        self._state = RegistrationState.UNREGISTERED
        self._health = HealthState.UNKNOWN

    @classmethod
    def from_listen_address(
        cls,
        listen: str,
        backend: BackendClientProtocol,
        service_name: str,
        service_id: str,
        *,
        enabled: bool,
        on_invalid_listen: ListenAddressPolicy = ListenAddressPolicy.RAISE,
        **kwargs,
    ) -> DiscoveryLifecycle:
        """Build a lifecycle from a ``host:port`` listen address.

        Args:
            listen: Address the service listens on.
            backend: Registry backend.
            service_name: Logical service name.
            service_id: Unique registration id.
            enabled: Boot-time discovery flag.
            on_invalid_listen: RAISE to fail with ConfigError, DISABLE to
                build a lifecycle whose registry operations are no-ops.
            **kwargs: Passed through to the constructor.

        Raises:
            ConfigError: If the port cannot be parsed and the policy is RAISE.
        """
        try:
            port: int | None = parse_listen_port(listen)
        except ConfigError:
            if on_invalid_listen == ListenAddressPolicy.RAISE:
                raise
            logger.warning(
                "Service port unavailable, service discovery disabled",
                extra={"listen": listen, "service_id": service_id},
            )
            port = None

        identity = ServiceIdentity(name=service_name, service_id=service_id, port=port)
        return cls(identity, backend, enabled=enabled, **kwargs)

    # ──────────────────────────────────────────────────────────────
    # State
    # ──────────────────────────────────────────────────────────────

    @property
    def identity(self) -> ServiceIdentity:
        return self._identity

    @property
    def is_enabled(self) -> bool:
        """Whether registry operations do anything at all."""
        return self._enabled and self._identity.port is not None

    @property
    def state(self) -> RegistrationState:
        """Registration state of the primary service."""
        return self._state

    @property
    def health(self) -> HealthState:
        """Last health signal accepted by the registry."""
        return self._health

    @property
    def metrics_service_id(self) -> str | None:
        return self._metrics_service_id

    @property
    def metrics_runner(self) -> MetricsEndpointRunner | None:
        return self._runner

    # ──────────────────────────────────────────────────────────────
    # Metrics endpoint
    # ──────────────────────────────────────────────────────────────

    async def start_metrics(self, monitor_port: int, metrics_service_id: str) -> None:
        """Serve the metrics endpoint and register it as a service.

        The listener starts on its own task and this call does not wait
        for it. A bind failure is reported to ``on_metrics_failure``, never
        raised here.

        Raises:
            ConfigError: If ``metrics_service_id`` equals the primary id,
                or the metrics endpoint is already started.
            RegistryError: If the metrics registration fails.
        """
        if not self.is_enabled:
            return

        if metrics_service_id == self._identity.service_id:
            raise ConfigError(
                detail="metrics service id must differ from the service id",
                extra={"service_id": metrics_service_id},
            )
        if self._runner is not None:
            raise ConfigError(
                detail="metrics endpoint already started",
                extra={"metrics_service_id": self._metrics_service_id},
            )

        self._runner = self._runner_factory(self._identity.name, monitor_port)
        self._runner.start(on_failure=self._on_metrics_failure)
        self._metrics_service_id = metrics_service_id

        registration = metrics_registration(
            self._identity.name,
            metrics_service_id,
            monitor_port,
            address=self._address,
        )
        await self._call("register", metrics_service_id, self._backend.register(registration))

    async def stop_metrics(self) -> None:
        """Deregister the metrics endpoint record.

        Raises:
            RegistryError: If the deregistration fails.
        """
        if not self.is_enabled:
            return

        service_id = self._metrics_service_id
        if service_id is None:
            logger.debug("Metrics endpoint was never started, nothing to deregister")
            return
        await self._call("deregister", service_id, self._backend.deregister(service_id))

    # ──────────────────────────────────────────────────────────────
    # Primary service
    # ──────────────────────────────────────────────────────────────

    async def register(self, tags: Sequence[str] = (), version: str = "") -> None:
        """Register the primary service with a 5 second TTL check.

        Args:
            tags: Caller tags, kept in order.
            version: Appended after the caller tags when non-empty.

        Raises:
            RegistryError: If the registration fails.
        """
        if not self.is_enabled:
            return

        all_tags = list(tags)
        if version:
            all_tags.append(version)

        registration = ServiceRegistration(
            identity=self._identity,
            tags=tuple(all_tags),
            check=HealthCheckSpec.ttl_check(PRIMARY_TTL),
            address=self._address,
        )
        service_id = self._identity.service_id
        await self._call("register", service_id, self._backend.register(registration))

        self._state = RegistrationState.REGISTERED
        self._health = HealthState.UNKNOWN
        logger.info(
            "Service registered",
            extra={"service_id": service_id, "tags": all_tags},
        )

    async def deregister(self) -> None:
        """Deregister the primary service.

        A second call is passed to the backend like the first one; whatever
        the backend answers for an unknown id is surfaced.

        Raises:
            RegistryError: If the deregistration fails.
        """
        if not self.is_enabled:
            return

        service_id = self._identity.service_id
        await self._call("deregister", service_id, self._backend.deregister(service_id))

        self._state = RegistrationState.DEREGISTERED
        self._health = HealthState.UNKNOWN
        logger.info("Service deregistered", extra={"service_id": service_id})

    async def send_health_check(self, error: BaseException | None = None) -> None:
        """Report the service's health to its TTL check.

        Must be called more often than the 5 second TTL, or the registry
        marks the service critical.

        Args:
            error: None for a passing signal, otherwise the error whose text
                becomes the failing check's note.

        Raises:
            RegistryError: If the health update fails.
        """
        if not self.is_enabled:
            return

        message = "" if error is None else str(error)
        service_id = self._identity.service_id
        await self._call(
            "health_check",
            service_id,
            self._backend.report_health(service_id, message),
        )
        # Passing/failing only tracks a live registration
        if self._state is RegistrationState.REGISTERED:
            self._health = HealthState.FAILING if error is not None else HealthState.PASSING

    async def aclose(self) -> None:
        """Stop the metrics endpoint task, if running.

        Never contacts the registry; call deregister/stop_metrics first.
        """
        if self._runner is not None:
            await self._runner.stop()
            self._runner = None

    async def _call(self, operation: str, service_id: str, call: Awaitable[None]) -> None:
        try:
            await call
        except BackendError as e:
            logger.warning(
                "Registry call failed",
                extra={"service_id": service_id, "operation": operation, "error": str(e)},
            )
            raise RegistryError(service_id=service_id, operation=operation, cause=e) from e


def _log_metrics_failure(error: BaseException) -> None:
    logger.error("Metrics endpoint failed", extra={"error": str(error)})

