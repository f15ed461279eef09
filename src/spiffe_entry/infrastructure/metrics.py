"""Prometheus metrics for entry derivation."""

from __future__ import annotations

from prometheus_client import (
    Counter, Histogram, Info, start_http_server, REGISTRY, CollectorRegistry,
)


class MetricsRegistry:
    """Registry of all entry derivation metrics."""

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        self._registry = registry or REGISTRY

        # Derivation metrics
        self.entries_derived_total = Counter(
            "entries_derived_total", "Entry derivations", ["status"],
            registry=self._registry,
        )

        self.entry_derivation_failures_total = Counter(
            "entry_derivation_failures_total", "Entry derivation failures", ["reason"],
            registry=self._registry,
        )

        self.entry_derivation_latency_seconds = Histogram(
            "entry_derivation_latency_seconds", "Per-pod entry derivation latency",
            buckets=(0.00005, 0.0001, 0.0005, 0.001, 0.005, 0.01, 0.05),
            registry=self._registry,
        )

        # Template metrics
        self.template_compilations_total = Counter(
            "template_compilations_total", "Identity template set compilations", ["status"],
            registry=self._registry,
        )

        self.info = Info("spiffe_entry", "Entry deriver information", registry=self._registry)


_metrics: MetricsRegistry | None = None


def setup_metrics(port: int = 8082, registry: CollectorRegistry | None = None) -> MetricsRegistry:
    """Set up Prometheus metrics."""
    global _metrics
    _metrics = MetricsRegistry(registry)
    from spiffe_entry import __version__
    _metrics.info.info({"version": __version__})
    start_http_server(port, registry=registry or REGISTRY)
    return _metrics


def get_metrics() -> MetricsRegistry:
    """Get the metrics registry."""
    global _metrics
    if _metrics is None:
        _metrics = MetricsRegistry()
    return _metrics
