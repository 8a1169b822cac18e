"""CLI output helpers."""

from service_registrar.cli.utils.formatters import error, info, success, warning

__all__ = [
    "error",
    "info",
    "success",
    "warning",
]
