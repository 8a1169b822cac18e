"""Caller-side TTL heartbeat.

The lifecycle never schedules health checks itself. TTLHeartbeat is the
optional helper a service can run to do it: every ``interval`` seconds it
asks a probe for the current health and forwards the answer with
``send_health_check``. A failed update is logged and the loop moves on to
the next tick; there is no retry in between.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Awaitable, Callable
from datetime import timedelta
from typing import TYPE_CHECKING

from service_registrar.core.exceptions import ConfigError, RegistryError
from service_registrar.infra.discovery.models import PRIMARY_TTL

if TYPE_CHECKING:
    from service_registrar.infra.discovery.lifecycle import DiscoveryLifecycle

logger = logging.getLogger(__name__)

# Returns None when healthy, or the error describing why not
HealthProbe = Callable[[], Awaitable[BaseException | None]]


async def _always_healthy() -> BaseException | None:
    return None


class TTLHeartbeat:
    """Periodic health reporting for a DiscoveryLifecycle.

    Example:
        heartbeat = TTLHeartbeat(lifecycle, probe=check_database, interval=2.0)
        heartbeat.start()
        ...
        await heartbeat.stop()
    """

    def __init__(
        self,
        lifecycle: DiscoveryLifecycle,
        probe: HealthProbe | None = None,
        interval: float = 2.0,
        ttl: timedelta = PRIMARY_TTL,
    ) -> None:
        """Initialize the heartbeat.

        Args:
            lifecycle: Lifecycle whose TTL check is kept alive.
            probe: Async health probe. Defaults to always healthy.
            interval: Seconds between health checks.
            ttl: TTL of the check; ``interval`` must be shorter.

        Raises:
            ConfigError: If the interval is not positive or not below the TTL.
        """
        ttl_seconds = ttl.total_seconds()
        if interval <= 0 or interval >= ttl_seconds:
            raise ConfigError(
                detail=(
                    f"heartbeat interval ({interval}s) must be positive and "
                    f"less than the TTL ({ttl_seconds:g}s)"
                ),
                extra={"interval": interval, "ttl": ttl_seconds},
            )

        self._lifecycle = lifecycle
        self._probe = probe or _always_healthy
        self._interval = interval
        self._task: asyncio.Task[None] | None = None
        self._stop_event = asyncio.Event()
        self.beats = 0
        self.failures = 0

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def beat(self) -> None:
        """Probe health once and report it. Never raises RegistryError."""
        try:
            error = await self._probe()
        except Exception as e:
            # A crashing probe is itself a failing health signal
            error = e

        try:
            await self._lifecycle.send_health_check(error)
        except RegistryError as e:
            self.failures += 1
            logger.warning(
                "Health check update failed",
                extra={"service_id": e.service_id, "error": str(e.cause)},
            )
        finally:
            self.beats += 1

    def start(self) -> asyncio.Task[None]:
        """Start the heartbeat loop on a background task."""
        if self.is_running:
            raise RuntimeError("heartbeat already running")

        self._stop_event.clear()
        self._task = asyncio.create_task(
            self._run(),
            name=f"ttl-heartbeat-{self._lifecycle.identity.service_id}",
        )
        return self._task

    async def stop(self) -> None:
        """Stop the loop and wait for it to finish."""
        if self._task is None:
            return

        self._stop_event.set()
        try:
            await asyncio.wait_for(self._task, timeout=5.0)
        except TimeoutError:
            logger.warning("Heartbeat task did not stop in time, cancelling")
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
        finally:
            self._task = None

    async def _run(self) -> None:
        while not self._stop_event.is_set():
            await self.beat()

            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=self._interval)
                break
            except TimeoutError:
                continue
