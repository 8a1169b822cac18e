"""Consul HTTP API client with observability.

This module provides the real backend client that:
- Uses httpx for async HTTP operations against the local Consul agent
- Includes OpenTelemetry tracing for all API calls
- Records Prometheus metrics for monitoring
- Raises BackendError on any failure, without retrying
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Any

import httpx
from opentelemetry import trace

from service_registrar.core.exceptions import BackendError
from service_registrar.infra.discovery.metrics import (
    service_discovery_deregistrations_total,
    service_discovery_errors_total,
    service_discovery_operation_duration_seconds,
    service_discovery_registrations_total,
    service_discovery_ttl_updates_total,
)
from service_registrar.infra.discovery.models import PASSING_NOTE

if TYPE_CHECKING:
    from collections.abc import Callable

    from service_registrar.core.settings.consul import ConsulSettings
    from service_registrar.infra.discovery.models import ServiceRegistration

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)


class ConsulClient:
    """HTTP client for the Consul Agent API.

    Implements BackendClientProtocol:
    - register       -> PUT /v1/agent/service/register
    - deregister     -> PUT /v1/agent/service/deregister/{id}
    - report_health  -> PUT /v1/agent/check/{pass|fail}/service:{id}

    Example:
        client = ConsulClient(get_consul_settings())
        await client.register(registration)
        await client.report_health(registration.service_id, "")
        await client.close()
    """

    def __init__(
        self,
        settings: ConsulSettings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the Consul client.

        Args:
            settings: ConsulSettings instance with connection configuration.
            transport: Optional httpx transport (tests pass httpx.MockTransport).
        """
        self._settings = settings
        self._base_url = settings.base_url

        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            headers=settings.get_auth_headers(),
            timeout=httpx.Timeout(settings.connect_timeout),
            verify=settings.verify_ssl,
            transport=transport,
        )

        logger.debug("ConsulClient initialized", extra={"base_url": self._base_url})

    async def register(self, registration: ServiceRegistration) -> None:
        payload = registration.to_payload()

        with tracer.start_as_current_span("consul.register_service") as span:
            span.set_attribute("consul.service_id", registration.service_id)
            span.set_attribute("consul.service_name", registration.identity.name)
            span.set_attribute("consul.port", payload["Port"])

            await self._put(
                span,
                operation="register",
                url="/v1/agent/service/register",
                json=payload,
                record=lambda status: service_discovery_registrations_total.labels(
                    status=status
                ).inc(),
            )

        logger.info(
            "Service registered with Consul",
            extra={
                "service_id": registration.service_id,
                "service_name": registration.identity.name,
                "port": payload["Port"],
                "tags": payload["Tags"],
            },
        )

    async def deregister(self, service_id: str) -> None:
        with tracer.start_as_current_span("consul.deregister_service") as span:
            span.set_attribute("consul.service_id", service_id)

            await self._put(
                span,
                operation="deregister",
                url=f"/v1/agent/service/deregister/{service_id}",
                record=lambda status: service_discovery_deregistrations_total.labels(
                    status=status
                ).inc(),
            )

        logger.info("Service deregistered from Consul", extra={"service_id": service_id})

    async def report_health(self, service_id: str, failure_message: str) -> None:
        check_status = "fail" if failure_message else "pass"
        note = failure_message or PASSING_NOTE
        check_id = f"service:{service_id}"
        operation = f"ttl_{check_status}"

        with tracer.start_as_current_span(f"consul.{operation}") as span:
            span.set_attribute("consul.check_id", check_id)
            span.set_attribute("consul.status", check_status)

            await self._put(
                span,
                operation=operation,
                url=f"/v1/agent/check/{check_status}/{check_id}",
                params={"note": note},
                record=lambda status: service_discovery_ttl_updates_total.labels(
                    status=status, check_status=check_status
                ).inc(),
            )

        logger.debug("TTL %s sent to Consul", check_status, extra={"check_id": check_id})

    async def close(self) -> None:
        """Close the HTTP client and release resources."""
        await self._client.aclose()
        logger.debug("ConsulClient closed")

    async def _put(
        self,
        span: trace.Span,
        *,
        operation: str,
        url: str,
        record: Callable[[str], None],
        json: dict[str, Any] | None = None,
        params: dict[str, str] | None = None,
    ) -> None:
        """Send one PUT to the agent, recording metrics and span status.

        Raises:
            BackendError: On non-200 responses, timeouts and transport errors.
        """
        start_time = time.perf_counter()
        try:
            response = await self._client.put(url, json=json, params=params)
        except httpx.TimeoutException as e:
            self._record_failure(span, operation, record, "timeout", start_time, e)
            raise BackendError(
                detail=f"consul {operation} timed out: {e}",
                operation=operation,
            ) from e
        except httpx.HTTPError as e:
            self._record_failure(span, operation, record, "connection", start_time, e)
            raise BackendError(
                detail=f"consul {operation} connection error: {e}",
                operation=operation,
            ) from e

        service_discovery_operation_duration_seconds.labels(operation=operation).observe(
            time.perf_counter() - start_time
        )

        if response.status_code != 200:
            span.set_attribute("consul.success", False)
            span.set_attribute("consul.status_code", response.status_code)
            record("failure")
            service_discovery_errors_total.labels(
                operation=operation, error_type="http_error"
            ).inc()
            detail = response.text.strip()[:200]
            logger.warning(
                "Consul %s failed",
                operation,
                extra={"status_code": response.status_code, "response": detail},
            )
            raise BackendError(
                detail=f"Unexpected response code: {response.status_code} ({detail})",
                operation=operation,
                status_code=response.status_code,
            )

        span.set_attribute("consul.success", True)
        record("success")

    @staticmethod
    def _record_failure(
        span: trace.Span,
        operation: str,
        record: Callable[[str], None],
        error_type: str,
        start_time: float,
        error: Exception,
    ) -> None:
        service_discovery_operation_duration_seconds.labels(operation=operation).observe(
            time.perf_counter() - start_time
        )
        span.set_attribute("consul.success", False)
        span.record_exception(error)
        record("failure")
        service_discovery_errors_total.labels(operation=operation, error_type=error_type).inc()
        logger.warning(
            "Consul %s %s error",
            operation,
            error_type,
            extra={"error": str(error)},
        )
