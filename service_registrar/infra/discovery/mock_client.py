"""Mock Consul client for testing without a real Consul agent.

This module provides a MockConsulClient that implements
BackendClientProtocol and stores all state in memory, making it ideal for
unit tests.

Usage in tests:
    from service_registrar.infra.discovery.mock_client import MockConsulClient

    @pytest.fixture
    def mock_consul():
        return MockConsulClient()

    async def test_registration(mock_consul):
        lifecycle = DiscoveryLifecycle(identity, mock_consul, enabled=True)
        await lifecycle.register(["api"], "v1")
        assert mock_consul.get_service(identity.service_id).tags == ("api", "v1")
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any

from service_registrar.core.exceptions import BackendError
from service_registrar.infra.discovery.models import ServiceRegistration

logger = logging.getLogger(__name__)


class TTLState(str, Enum):
    """TTL check states in Consul."""

    PASSING = "passing"
    CRITICAL = "critical"


@dataclass
class CallRecord:
    """Record of a method call for assertion in tests."""

    method: str
    args: dict[str, Any]
    success: bool


class MockConsulClient:
    """In-memory mock Consul client for testing.

    Behaves like the agent where it matters to callers: deregistering an
    unknown id and updating the TTL of an unknown service both fail with a
    404 BackendError.

    Attributes:
        services: Registered services by service id.
        ttl_states: TTL check states by service id.
        notes: Last TTL note by service id.
        call_history: All method calls, in order.
        fail_next_call: Set to True to simulate a failure on the next call.
        closed: Whether close() has been called.
    """

    def __init__(self) -> None:
        self.services: dict[str, ServiceRegistration] = {}
        self.ttl_states: dict[str, TTLState] = {}
        self.notes: dict[str, str] = {}
        self.call_history: list[CallRecord] = []
        self.fail_next_call: bool = False
        self.closed: bool = False

    def _should_fail(self) -> bool:
        """Check if the next call should fail and reset flag."""
        if self.fail_next_call:
            self.fail_next_call = False
            return True
        return False

    def _fail(self, method: str, call_args: dict[str, Any], detail: str, status_code: int) -> BackendError:
        self.call_history.append(CallRecord(method, call_args, False))
        logger.debug("MockConsulClient: %s failed: %s", method, detail)
        return BackendError(detail=detail, operation=method, status_code=status_code)

    async def register(self, registration: ServiceRegistration) -> None:
        call_args = {"registration": registration}

        if self._should_fail():
            raise self._fail("register", call_args, "simulated failure", 500)

        self.services[registration.service_id] = registration
        if registration.check is not None and registration.check.ttl is not None:
            # Consul starts TTL checks as critical until the first update
            self.ttl_states[registration.service_id] = TTLState.CRITICAL

        self.call_history.append(CallRecord("register", call_args, True))
        logger.debug("MockConsulClient: registered service %s", registration.service_id)

    async def deregister(self, service_id: str) -> None:
        call_args = {"service_id": service_id}

        if self._should_fail():
            raise self._fail("deregister", call_args, "simulated failure", 500)
        if service_id not in self.services:
            raise self._fail(
                "deregister", call_args, f'Unknown service ID "{service_id}"', 404
            )

        del self.services[service_id]
        self.ttl_states.pop(service_id, None)
        self.notes.pop(service_id, None)

        self.call_history.append(CallRecord("deregister", call_args, True))
        logger.debug("MockConsulClient: deregistered service %s", service_id)

    async def report_health(self, service_id: str, failure_message: str) -> None:
        call_args = {"service_id": service_id, "failure_message": failure_message}

        if self._should_fail():
            raise self._fail("report_health", call_args, "simulated failure", 500)
        if service_id not in self.ttl_states:
            raise self._fail(
                "report_health", call_args, f'Unknown check ID "service:{service_id}"', 404
            )

        if failure_message:
            self.ttl_states[service_id] = TTLState.CRITICAL
            self.notes[service_id] = failure_message
        else:
            self.ttl_states[service_id] = TTLState.PASSING
            self.notes[service_id] = "ok"

        self.call_history.append(CallRecord("report_health", call_args, True))

    async def close(self) -> None:
        self.closed = True
        self.call_history.append(CallRecord("close", {}, True))

    # ──────────────────────────────────────────────────────────────
    # Test helper methods
    # ──────────────────────────────────────────────────────────────

    def get_service(self, service_id: str) -> ServiceRegistration | None:
        """Get a registered service by ID (test helper)."""
        return self.services.get(service_id)

    def get_ttl_state(self, service_id: str) -> TTLState | None:
        """Get TTL state for a service (test helper)."""
        return self.ttl_states.get(service_id)

    def get_calls(self, method: str | None = None) -> list[CallRecord]:
        """Get call history, optionally filtered by method (test helper)."""
        if method is None:
            return list(self.call_history)
        return [c for c in self.call_history if c.method == method]

    def reset(self) -> None:
        """Reset all state (test helper)."""
        self.services.clear()
        self.ttl_states.clear()
        self.notes.clear()
        self.call_history.clear()
        self.fail_next_call = False
        self.closed = False
