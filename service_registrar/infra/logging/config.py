"""Logging configuration setup.

Configures the root logger with ``logging.config.dictConfig``:
- JSONL format for machine parsing, or a plain text format
- Console handler on stderr, optional rotating file handler
- All handlers on root logger (child loggers propagate)
"""

from __future__ import annotations

import logging
import logging.config
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from service_registrar.core.settings.logs import LoggingSettings

logger = logging.getLogger(__name__)
_LOGGING_INITIALIZED = False


def setup_logging(
    log_settings: LoggingSettings | None = None,
    *,
    force: bool = False,
    **configure_kwargs: Any,
) -> None:
    """Ensure logging is configured once across entrypoints.

    Args:
        log_settings: Optional logging settings instance. If omitted, settings
            are loaded via get_logging_settings().
        force: Reconfigure logging even if it was already initialized.
        **configure_kwargs: Explicit overrides for configure_logging().
    """
    global _LOGGING_INITIALIZED

    if _LOGGING_INITIALIZED and not force:
        return

    settings_obj = log_settings
    if settings_obj is None:
        from service_registrar.core.settings import get_logging_settings

        settings_obj = get_logging_settings()

    log_config = {**settings_obj.to_logging_kwargs(), **configure_kwargs}
    configure_logging(**log_config)
    _LOGGING_INITIALIZED = True


def configure_logging(
    log_level: str = "INFO",
    service_name: str = "service-registrar",
    json_logs: bool = True,
    console_enabled: bool = True,
    file_path: str | Path | None = None,
    file_max_bytes: int = 10 * 1024 * 1024,
    file_backup_count: int = 5,
    capture_warnings: bool = True,
) -> None:
    """Configure logging with dictConfig.

    Args:
        log_level: Root logger level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        service_name: Static ``service`` field for JSON lines.
        json_logs: Enable JSONL (JSON Lines) structured logging.
        console_enabled: Enable console/stderr logging.
        file_path: Path to log file. None disables file logging.
        file_max_bytes: Maximum log file size before rotation.
        file_backup_count: Number of rotated log files to keep.
        capture_warnings: Forward Python warnings to logging system.

    Example:
        from service_registrar.core.settings import get_logging_settings
        configure_logging(**get_logging_settings().to_logging_kwargs())
    """
    if capture_warnings:
        logging.captureWarnings(True)

    formatter = "json" if json_logs else "text"
    handlers: dict[str, Any] = {}

    if console_enabled:
        handlers["console"] = {
            "class": "logging.StreamHandler",
            "level": log_level,
            "formatter": formatter,
            "stream": "ext://sys.stderr",
        }

    if file_path:
        path = Path(file_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "level": log_level,
            "formatter": formatter,
            "filename": str(path),
            "maxBytes": file_max_bytes,
            "backupCount": file_backup_count,
            "encoding": "utf-8",
        }

    config: dict[str, Any] = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": _build_formatters_config(service_name),
        "handlers": handlers,
        "root": {"level": log_level, "handlers": list(handlers)},
        "loggers": {
            # uvicorn serves the metrics endpoint; access lines are noise
            "uvicorn.access": {"level": "WARNING"},
            "httpx": {"level": "WARNING"},
        },
    }

    logging.config.dictConfig(config)
    logger.debug(
        "Logging configured",
        extra={"log_level": log_level, "json_logs": json_logs, "file_path": str(file_path)},
    )


def _build_formatters_config(service_name: str) -> dict[str, Any]:
    """Build formatters configuration for dictConfig."""
    return {
        "json": {
            "()": "service_registrar.infra.logging.formatters.JSONFormatter",
            "fmt_keys": {"level": "levelname", "logger": "name", "message": "message"},
            "static": {"service": service_name},
        },
        "text": {
            "format": "%(asctime)s - %(levelname)s - %(name)s - %(message)s",
            "datefmt": "%Y-%m-%d %H:%M:%S",
        },
    }
