"""Prometheus registry and background metrics endpoint."""

from service_registrar.infra.metrics.prometheus import DEFAULT_LATENCY_BUCKETS, REGISTRY
from service_registrar.infra.metrics.server import MetricsEndpointRunner, create_metrics_app

__all__ = [
    "DEFAULT_LATENCY_BUCKETS",
    "REGISTRY",
    "MetricsEndpointRunner",
    "create_metrics_app",
]
