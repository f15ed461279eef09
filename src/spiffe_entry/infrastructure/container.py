"""Dependency injection container for entry derivation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

import structlog
from opentelemetry import trace

from spiffe_entry.application.coordinator import EntryCoordinator
from spiffe_entry.domain.services.endpoint_index import EndpointIndex
from spiffe_entry.infrastructure.config import Config, get_config
from spiffe_entry.infrastructure.logging import setup_logging
from spiffe_entry.infrastructure.metrics import MetricsRegistry, get_metrics
from spiffe_entry.infrastructure.tracing import setup_tracing


@dataclass
class Container:
    """Dependency injection container for entry derivation components."""

    config: Config
    logger: structlog.BoundLogger
    tracer: trace.Tracer
    metrics: MetricsRegistry
    endpoint_index: EndpointIndex
    coordinator: EntryCoordinator

    _instance: ClassVar[Container | None] = None

    @classmethod
    def create(cls, config: Config | None = None, metrics: MetricsRegistry | None = None) -> Container:
        """Create and initialize the container with all dependencies."""
        if cls._instance is not None:
            return cls._instance

        config = config or get_config()
        logger = setup_logging(
            config.observability.log_level,
            config.observability.log_format,
            config.observability.otel_service_name,
        )
        tracer = setup_tracing(config.observability.otel_service_name, config.observability.otel_endpoint)
        metrics = metrics or get_metrics()
        endpoint_index = EndpointIndex()

        cls._instance = cls(
            config=config,
            logger=logger,
            tracer=tracer,
            metrics=metrics,
            endpoint_index=endpoint_index,
            coordinator=EntryCoordinator(config.cluster, endpoints=endpoint_index, metrics=metrics),
        )

        logger.info(
            "spiffe_entry_container_initialized",
            trust_domain=config.cluster.trust_domain,
            cluster_name=config.cluster.cluster_name,
        )

        return cls._instance

    @classmethod
    def get(cls) -> Container:
        """Get the singleton container instance."""
        if cls._instance is None:
            return cls.create()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset the container (useful for testing)."""
        cls._instance = None


def get_container() -> Container:
    """Get the dependency injection container."""
    return Container.get()
