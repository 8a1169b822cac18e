"""Main CLI entry point for service-registrar."""

import click

from service_registrar.cli.commands import discovery
from service_registrar.infra.logging.config import setup_logging


@click.group()
@click.version_option(version="0.1.0", prog_name="service-registrar")
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Service Registrar - Consul registration for a running service.

    \b
    Commands:
      check-env  Show whether discovery is enabled by the environment
      run        Register a service and keep its TTL check alive

    \b
    Quick Start:
      CONSUL_HOST=127.0.0.1 service-registrar check-env
      service-registrar run --listen 0.0.0.0:8080 --name orders \\
          --id orders-1 --monitor-port 9100 --metrics-id orders-1-prom
    """
    ctx.ensure_object(dict)


cli.add_command(discovery.check_env)
cli.add_command(discovery.run)


def main() -> None:
    """Entry point for CLI."""
    setup_logging()
    cli(obj={})


if __name__ == "__main__":
    main()
