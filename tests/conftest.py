"""Pytest configuration and shared fixtures.

Organization:
    - Environment Fixtures: isolate settings from the host environment
    - Discovery Fixtures: mock backend, identities and lifecycles
    - Metrics Fixtures: fake metrics endpoint runner
"""

from __future__ import annotations

import os
from collections.abc import Callable

import pytest

from service_registrar.core.settings import clear_all_caches
from service_registrar.infra.discovery import (
    DiscoveryLifecycle,
    MockConsulClient,
    ServiceIdentity,
)

# ============================================================================
# Environment Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch, tmp_path):
    """Remove CONSUL_* variables and point YAML config at an empty directory.

    Every test starts with discovery disabled by the environment and fresh
    settings caches.
    """
    for name in list(os.environ):
        if "CONSUL_" in name:
            monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("REGISTRAR_CONFIG_DIR", str(tmp_path / "conf"))

    clear_all_caches()
    yield
    clear_all_caches()


# ============================================================================
# Metrics Fixtures
# ============================================================================


class FakeMetricsRunner:
    """Stand-in for MetricsEndpointRunner that never opens a socket."""

    def __init__(self, service_name: str, port: int) -> None:
        self.service_name = service_name
        self.port = port
        self.on_failure: Callable[[BaseException], None] | None = None
        self.started = False
        self.stopped = False

    def start(self, on_failure=None):
        self.started = True
        self.on_failure = on_failure

    async def stop(self) -> None:
        self.stopped = True

    def fail(self, error: BaseException) -> None:
        """Simulate the listener dying."""
        assert self.on_failure is not None
        self.on_failure(error)


@pytest.fixture
def runners() -> list[FakeMetricsRunner]:
    """Runners created by ``runner_factory``, in creation order."""
    return []


@pytest.fixture
def runner_factory(runners):
    """Runner factory that records every FakeMetricsRunner it builds."""

    def factory(service_name: str, port: int) -> FakeMetricsRunner:
        runner = FakeMetricsRunner(service_name, port)
        runners.append(runner)
        return runner

    return factory


# ============================================================================
# Discovery Fixtures
# ============================================================================


@pytest.fixture
def mock_consul() -> MockConsulClient:
    """In-memory Consul backend."""
    return MockConsulClient()


@pytest.fixture
def identity() -> ServiceIdentity:
    return ServiceIdentity(name="orders", service_id="orders-1", port=8080)


@pytest.fixture
def lifecycle(identity, mock_consul, runner_factory) -> DiscoveryLifecycle:
    """Enabled lifecycle on the mock backend with a fake metrics runner."""
    return DiscoveryLifecycle(
        identity,
        mock_consul,
        enabled=True,
        runner_factory=runner_factory,
    )


@pytest.fixture
def disabled_lifecycle(identity, mock_consul, runner_factory) -> DiscoveryLifecycle:
    """Lifecycle built with discovery switched off."""
    return DiscoveryLifecycle(
        identity,
        mock_consul,
        enabled=False,
        runner_factory=runner_factory,
    )
