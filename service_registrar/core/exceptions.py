"""Custom exception classes for service registration."""

from __future__ import annotations

from typing import Any


class RegistrarError(Exception):
    """Base registrar exception.

    All custom exceptions should inherit from this class.

    Attributes:
        detail: Human-readable error message.
        type: Error type identifier.
        extra: Additional context-specific information about the error.

    Example:
        raise RegistrarError(
            detail="Registry unavailable",
            type="registry-unavailable",
            extra={"service_id": "api-1"},
        )
    """

    def __init__(
        self,
        detail: str,
        type: str = "registrar-error",
        extra: dict[str, Any] | None = None,
    ) -> None:
        """Initialize registrar exception.

        Args:
            detail: Human-readable error message.
            type: Error type identifier.
            extra: Additional context about the error.
        """
        self.detail = detail
        self.type = type
        self.extra = extra or {}
        super().__init__(detail)


class ConfigError(RegistrarError):
    """Exception raised for invalid configuration.

    Example:
        raise ConfigError(
            detail="listen address 'noport' has no ':'",
            extra={"listen": "noport"},
        )
    """

    def __init__(
        self,
        detail: str,
        type: str = "config-error",
        extra: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(detail=detail, type=type, extra=extra)


class BackendError(RegistrarError):
    """Exception raised by a discovery backend client.

    Attributes:
        operation: Backend operation that failed (register, deregister, ...).
        status_code: HTTP status code returned by the agent, if any.
    """

    def __init__(
        self,
        detail: str,
        operation: str,
        status_code: int | None = None,
        type: str = "backend-error",
        extra: dict[str, Any] | None = None,
    ) -> None:
        """Initialize backend exception.

        Args:
            detail: Human-readable error message.
            operation: Backend operation that failed.
            status_code: HTTP status code, or None for transport errors.
            type: Error type identifier.
            extra: Additional context about the error.
        """
        self.operation = operation
        self.status_code = status_code
        super().__init__(
            detail=detail,
            type=type,
            extra={"operation": operation, "status_code": status_code, **(extra or {})},
        )


class RegistryError(RegistrarError):
    """Registry call failure surfaced by the discovery lifecycle.

    Wraps the underlying backend failure with the affected service id and
    the operation name. The original exception is kept as ``cause`` and
    chained as ``__cause__``.

    Example:
        try:
            await lifecycle.deregister()
        except RegistryError as e:
            logger.error("deregistration failed", extra=e.extra)
    """

    def __init__(
        self,
        service_id: str,
        operation: str,
        cause: BaseException,
        type: str = "registry-error",
    ) -> None:
        """Initialize registry exception.

        Args:
            service_id: Registration id the call referred to.
            operation: Lifecycle operation (register, deregister, health_check).
            cause: Underlying backend exception.
            type: Error type identifier.
        """
        self.service_id = service_id
        self.operation = operation
        self.cause = cause
        super().__init__(
            detail=f"cannot {operation.replace('_', ' ')} service {service_id}: {cause}",
            type=type,
            extra={"service_id": service_id, "operation": operation, "error": str(cause)},
        )


class ListenerFatalError(RegistrarError):
    """Metrics listener could not be established.

    The listener runs on its own task, so this is delivered through the
    task outcome rather than raised to the caller of ``start_metrics``.
    """

    def __init__(
        self,
        host: str,
        port: int,
        cause: BaseException,
        type: str = "listener-fatal",
    ) -> None:
        self.host = host
        self.port = port
        self.cause = cause
        super().__init__(
            detail=f"fail start http prometheus interface on {host}:{port}: {cause}",
            type=type,
            extra={"host": host, "port": port, "error": str(cause)},
        )
