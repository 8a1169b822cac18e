"""Background Prometheus endpoint for service discovery.

Serves two routes on ``0.0.0.0:<monitor_port>``:

    GET /metrics - Prometheus scrape endpoint
    GET /        - plain-text banner "<service name> metrics"

The endpoint runs as an asyncio task. It does not terminate the process
when the listener cannot bind: the task finishes with
:class:`ListenerFatalError` and the optional ``on_failure`` callback is
invoked, leaving the exit decision to the process supervisor.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import socket
from collections.abc import Callable

import uvicorn
from fastapi import APIRouter, FastAPI, Response
from fastapi.responses import PlainTextResponse
from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, generate_latest

from service_registrar.core.exceptions import ListenerFatalError
from service_registrar.infra.metrics.prometheus import REGISTRY, service_info

logger = logging.getLogger(__name__)

FailureCallback = Callable[[BaseException], None]


def create_metrics_app(service_name: str, registry: CollectorRegistry = REGISTRY) -> FastAPI:
    """Build the FastAPI application behind the metrics endpoint."""
    router = APIRouter(tags=["observability"])

    @router.get("/metrics")
    async def metrics() -> Response:
        data = generate_latest(registry)
        return Response(
            content=data,
            media_type=CONTENT_TYPE_LATEST,
            headers={"Cache-Control": "no-cache, no-store, must-revalidate"},
        )

    @router.get("/", response_class=PlainTextResponse)
    async def banner() -> str:
        return f"{service_name} metrics"

    app = FastAPI(
        title=f"{service_name} metrics",
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.include_router(router)
    return app


class _EmbeddedServer(uvicorn.Server):
    """uvicorn server that leaves signal handling to the host process."""

    @contextlib.contextmanager
    def capture_signals(self):
        yield


class MetricsEndpointRunner:
    """Long-lived metrics listener running on its own asyncio task.

    Example:
        runner = MetricsEndpointRunner("orders", 9100)
        task = runner.start(on_failure=supervisor.fail)
        ...
        await runner.stop()
    """

    def __init__(
        self,
        service_name: str,
        port: int,
        *,
        host: str = "0.0.0.0",
        registry: CollectorRegistry = REGISTRY,
    ) -> None:
        self.service_name = service_name
        self.port = port
        self.host = host
        self._registry = registry
        self._server: _EmbeddedServer | None = None
        self._socket: socket.socket | None = None
        self._task: asyncio.Task[None] | None = None

    @property
    def task(self) -> asyncio.Task[None] | None:
        """The serving task, or None before start()."""
        return self._task

    @property
    def bound_port(self) -> int | None:
        """Port actually bound (differs from ``port`` when ``port`` is 0)."""
        if self._socket is None:
            return None
        return self._socket.getsockname()[1]

    @property
    def is_serving(self) -> bool:
        return self._server is not None and self._server.started

    def start(self, on_failure: FailureCallback | None = None) -> asyncio.Task[None]:
        """Launch the listener task and return immediately.

        Args:
            on_failure: Called with the exception if the task ends with one.

        Returns:
            The serving task. Its outcome is the listener's outcome.
        """
        if self._task is not None:
            raise RuntimeError("metrics endpoint already started")

        self._task = asyncio.create_task(
            self._serve(),
            name=f"metrics-endpoint-{self.port}",
        )
        if on_failure is not None:
            self._task.add_done_callback(_failure_reporter(on_failure))
        return self._task

    async def wait_started(self, timeout: float = 5.0) -> None:
        """Wait until the listener accepts connections.

        Raises:
            ListenerFatalError: If the listener could not bind.
            TimeoutError: If the listener is not up within ``timeout``.
        """
        if self._task is None:
            raise RuntimeError("metrics endpoint not started")

        async with asyncio.timeout(timeout):
            while not self.is_serving:
                if self._task.done():
                    # Re-raises the listener failure, if any
                    self._task.result()
                    raise RuntimeError("metrics endpoint exited before serving")
                await asyncio.sleep(0.01)

    async def stop(self) -> None:
        """Shut the listener down and wait for the task to finish."""
        if self._task is None:
            return

        if self._server is not None:
            self._server.should_exit = True
        else:
            self._task.cancel()

        with contextlib.suppress(asyncio.CancelledError, ListenerFatalError):
            await self._task

    async def _serve(self) -> None:
        addr = f"{self.host}:{self.port}"
        try:
            sock = self._bind()
        except OSError as e:
            logger.error(
                "Metrics endpoint failed to bind",
                extra={"address": addr, "error": str(e)},
            )
            raise ListenerFatalError(self.host, self.port, e) from e

        self._socket = sock
        service_info.info({"service_name": self.service_name})

        config = uvicorn.Config(
            create_metrics_app(self.service_name, self._registry),
            log_config=None,
            access_log=False,
            lifespan="off",
        )
        self._server = _EmbeddedServer(config)

        logger.info("start prometheus monitoring at %s", addr)
        try:
            await self._server.serve(sockets=[sock])
        finally:
            sock.close()
            logger.debug("Metrics endpoint stopped", extra={"address": addr})

    def _bind(self) -> socket.socket:
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            sock.bind((self.host, self.port))
        except OSError:
            sock.close()
            raise
        sock.set_inheritable(True)
        return sock


def _failure_reporter(on_failure: FailureCallback) -> Callable[[asyncio.Task[None]], None]:
    def _report(task: asyncio.Task[None]) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            on_failure(exc)

    return _report
