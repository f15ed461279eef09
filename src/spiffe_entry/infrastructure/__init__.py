"""Infrastructure layer - cross-cutting concerns."""

from spiffe_entry.infrastructure.config import Config, get_config
from spiffe_entry.infrastructure.logging import setup_logging, get_logger
from spiffe_entry.infrastructure.metrics import setup_metrics, MetricsRegistry
from spiffe_entry.infrastructure.tracing import setup_tracing, get_tracer

__all__ = [
    "Config",
    "get_config",
    "setup_logging",
    "get_logger",
    "setup_metrics",
    "MetricsRegistry",
    "setup_tracing",
    "get_tracer",
]
