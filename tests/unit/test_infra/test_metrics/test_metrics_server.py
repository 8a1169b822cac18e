"""Tests for the Prometheus metrics endpoint."""

from __future__ import annotations

import asyncio
import socket

import httpx
import pytest
from prometheus_client import CollectorRegistry, Counter

from service_registrar.core.exceptions import ListenerFatalError
from service_registrar.infra.metrics import MetricsEndpointRunner, create_metrics_app


@pytest.fixture
def registry() -> CollectorRegistry:
    registry = CollectorRegistry()
    Counter("orders_processed_total", "Processed orders.", registry=registry).inc(3)
    return registry


@pytest.mark.unit
class TestMetricsApp:
    """Routes served by the metrics application."""

    @pytest.mark.asyncio
    async def test_banner(self, registry):
        app = create_metrics_app("orders", registry)

        async with httpx.AsyncClient(
            transport=httpx.ASGITransport(app=app), base_url="http://test"
        ) as client:
            response = await client.get("/")

        assert response.status_code == 200
        assert response.text == "orders metrics"
        assert response.headers["content-type"].startswith("text/plain")

    @pytest.mark.asyncio
    async def test_metrics_exposition(self, registry):
        app = create_metrics_app("orders", registry)

        async with httpx.AsyncClient(
            transport=httpx.ASGITransport(app=app), base_url="http://test"
        ) as client:
            response = await client.get("/metrics")

        assert response.status_code == 200
        assert "orders_processed_total 3.0" in response.text
        assert response.headers["content-type"].startswith("text/plain")


@pytest.mark.unit
class TestMetricsEndpointRunner:
    """Listener lifecycle on a real socket."""

    @pytest.mark.asyncio
    async def test_serves_until_stopped(self, registry):
        runner = MetricsEndpointRunner("orders", 0, host="127.0.0.1", registry=registry)
        runner.start()
        await runner.wait_started()

        async with httpx.AsyncClient(trust_env=False) as client:
            response = await client.get(f"http://127.0.0.1:{runner.bound_port}/")

        await runner.stop()

        assert response.text == "orders metrics"
        assert runner.task.done()

    @pytest.mark.asyncio
    async def test_bind_failure_reported_through_task(self, registry):
        """A taken port ends the task with ListenerFatalError and calls on_failure."""
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as taken:
            taken.bind(("127.0.0.1", 0))
            taken.listen()
            port = taken.getsockname()[1]

            failures: list[BaseException] = []
            runner = MetricsEndpointRunner("orders", port, host="127.0.0.1", registry=registry)
            task = runner.start(on_failure=failures.append)

            with pytest.raises(ListenerFatalError) as exc_info:
                await task
            await asyncio.sleep(0)

        assert exc_info.value.port == port
        assert failures == [exc_info.value]

    @pytest.mark.asyncio
    async def test_wait_started_raises_bind_failure(self, registry):
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as taken:
            taken.bind(("127.0.0.1", 0))
            taken.listen()

            runner = MetricsEndpointRunner(
                "orders", taken.getsockname()[1], host="127.0.0.1", registry=registry
            )
            runner.start()

            with pytest.raises(ListenerFatalError):
                await runner.wait_started()

    @pytest.mark.asyncio
    async def test_start_twice_fails(self, registry):
        runner = MetricsEndpointRunner("orders", 0, host="127.0.0.1", registry=registry)
        runner.start()

        with pytest.raises(RuntimeError):
            runner.start()

        await runner.stop()
