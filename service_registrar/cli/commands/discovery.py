"""Service discovery commands."""

import asyncio
import contextlib
import signal
from collections.abc import Awaitable, Callable

import click
from pydantic import ValidationError

from service_registrar.cli.utils import error, info, success, warning
from service_registrar.core.exceptions import ConfigError, RegistryError
from service_registrar.core.settings import discovery_variables, get_consul_settings
from service_registrar.infra.discovery import (
    DiscoveryLifecycle,
    ListenAddressPolicy,
    TTLHeartbeat,
    get_backend,
)

EXIT_LISTENER_FAILED = 1
EXIT_CONFIG_ERROR = 2


@click.command(name="check-env")
def check_env() -> None:
    """Show whether service discovery is enabled by the environment."""
    names = discovery_variables()
    if not names:
        info("Service discovery disabled (no CONSUL_* variables set)")
        return

    success("Service discovery enabled")
    for name in names:
        click.echo(f"  {name}")


@click.command()
@click.option("--listen", required=True, help="Address the service listens on (host:port)")
@click.option("--name", "service_name", required=True, help="Logical service name")
@click.option("--id", "service_id", required=True, help="Unique registration id")
@click.option("--tag", "tags", multiple=True, help="Service tag (repeatable, order kept)")
@click.option("--version", "service_version", default="", help="Version tag appended last")
@click.option(
    "--monitor-port",
    type=click.IntRange(0, 65535),
    required=True,
    help="Port of the Prometheus endpoint",
)
@click.option("--metrics-id", required=True, help="Registration id of the metrics endpoint")
@click.option(
    "--interval",
    type=float,
    default=2.0,
    show_default=True,
    help="Seconds between TTL health checks",
)
@click.option(
    "--lenient-listen",
    is_flag=True,
    help="Disable discovery instead of failing when --listen has no port",
)
@click.pass_context
def run(
    ctx: click.Context,
    listen: str,
    service_name: str,
    service_id: str,
    tags: tuple[str, ...],
    service_version: str,
    monitor_port: int,
    metrics_id: str,
    interval: float,
    lenient_listen: bool,
) -> None:
    """Register a service and keep its TTL check alive until interrupted.

    \b
    Exit codes:
      0  clean shutdown
      1  metrics listener or registry failure
      2  configuration error
    """
    policy = ListenAddressPolicy.DISABLE if lenient_listen else ListenAddressPolicy.RAISE
    try:
        exit_code = asyncio.run(
            _run_lifecycle(
                listen=listen,
                service_name=service_name,
                service_id=service_id,
                tags=tags,
                service_version=service_version,
                monitor_port=monitor_port,
                metrics_id=metrics_id,
                interval=interval,
                policy=policy,
            )
        )
    except ConfigError as e:
        error(f"Configuration error: {e.detail}")
        ctx.exit(EXIT_CONFIG_ERROR)
    except ValidationError as e:
        error(f"Invalid settings: {e}")
        ctx.exit(EXIT_CONFIG_ERROR)

    ctx.exit(exit_code)


async def _run_lifecycle(
    *,
    listen: str,
    service_name: str,
    service_id: str,
    tags: tuple[str, ...],
    service_version: str,
    monitor_port: int,
    metrics_id: str,
    interval: float,
    policy: ListenAddressPolicy,
) -> int:
    stop_event = asyncio.Event()
    exit_code = 0

    def on_metrics_failure(exc: BaseException) -> None:
        nonlocal exit_code
        error(f"Metrics endpoint failed: {exc}")
        exit_code = EXIT_LISTENER_FAILED
        stop_event.set()

    settings = get_consul_settings()
    backend = get_backend(settings)
    try:
        lifecycle = DiscoveryLifecycle.from_listen_address(
            listen,
            backend,
            service_name,
            service_id,
            enabled=settings.enabled,
            on_invalid_listen=policy,
            address=settings.service_address,
            on_metrics_failure=on_metrics_failure,
        )
        heartbeat = TTLHeartbeat(lifecycle, interval=interval)
    except ConfigError:
        await backend.close()
        raise

    if not lifecycle.is_enabled:
        warning("Service discovery disabled, registry calls are skipped")

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        with contextlib.suppress(NotImplementedError):
            loop.add_signal_handler(sig, stop_event.set)

    metrics_registered = False
    try:
        try:
            await lifecycle.start_metrics(monitor_port, metrics_id)
            metrics_registered = True
            await lifecycle.register(tags, version=service_version)
        except RegistryError as e:
            error(str(e))
            if metrics_registered:
                await _run_step(lifecycle.stop_metrics)
            return EXIT_LISTENER_FAILED

        heartbeat.start()
        info(f"Service {service_id} running, press Ctrl+C to stop")
        await stop_event.wait()

        await heartbeat.stop()
        await _run_step(lifecycle.deregister)
        await _run_step(lifecycle.stop_metrics)
        return exit_code
    finally:
        for sig in (signal.SIGINT, signal.SIGTERM):
            with contextlib.suppress(NotImplementedError):
                loop.remove_signal_handler(sig)
        await heartbeat.stop()
        await lifecycle.aclose()
        await backend.close()


async def _run_step(step: Callable[[], Awaitable[None]]) -> None:
    """Run a shutdown step; a registry failure is reported and does not stop the next one."""
    try:
        await step()
    except RegistryError as e:
        warning(str(e))
