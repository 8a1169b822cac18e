"""Command-line interface for the service registrar."""

from service_registrar.cli.main import cli, main

__all__ = ["cli", "main"]
