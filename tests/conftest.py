"""Pytest configuration and fixtures for spiffe_entry tests."""

from __future__ import annotations

import pytest
from prometheus_client import CollectorRegistry

from spiffe_entry.domain.entities.kubernetes import (
    EndpointAddress,
    Endpoints,
    EndpointSubset,
    Node,
    ObjectMeta,
    ObjectReference,
    Pod,
    PodSpec,
)
from spiffe_entry.domain.services.render_context import RenderContext, build_render_context
from spiffe_entry.domain.value_objects.identifiers import TrustDomain
from spiffe_entry.infrastructure.config import ClusterConfig
from spiffe_entry.infrastructure.metrics import MetricsRegistry

TRUST_DOMAIN = "example.org"
CLUSTER_NAME = "test"
CLUSTER_DOMAIN = "cluster.local"


@pytest.fixture
def trust_domain() -> TrustDomain:
    return TrustDomain.parse(TRUST_DOMAIN)


@pytest.fixture
def pod() -> Pod:
    """Pod ``namespace/test`` running as service account ``test``."""
    return Pod(
        metadata=ObjectMeta(
            name="test",
            namespace="namespace",
            uid="pod-uid-1",
            labels={"app": "web", "app.kubernetes.io/name": "web-frontend"},
        ),
        spec=PodSpec(service_account_name="test", node_name="node-1"),
    )


@pytest.fixture
def node() -> Node:
    return Node(metadata=ObjectMeta(name="node-1", uid="uid"))


@pytest.fixture
def endpoints() -> list[Endpoints]:
    """Service endpoints targeting the ``pod`` fixture."""
    target = ObjectReference(kind="Pod", name="test", namespace="namespace", uid="pod-uid-1")
    return [
        Endpoints(
            metadata=ObjectMeta(name=name, namespace="namespace"),
            subsets=[EndpointSubset(addresses=[EndpointAddress(ip="10.0.0.1", target_ref=target)])],
        )
        for name in ("endpoint", "other-endpoint")
    ]


@pytest.fixture
def context(pod: Pod, node: Node) -> RenderContext:
    return build_render_context(TRUST_DOMAIN, CLUSTER_NAME, CLUSTER_DOMAIN, pod, node)


@pytest.fixture
def cluster_config() -> ClusterConfig:
    return ClusterConfig(
        trust_domain=TRUST_DOMAIN,
        cluster_name=CLUSTER_NAME,
        cluster_domain=CLUSTER_DOMAIN,
    )


@pytest.fixture
def registry() -> CollectorRegistry:
    return CollectorRegistry(auto_describe=True)


@pytest.fixture
def metrics_registry(registry: CollectorRegistry) -> MetricsRegistry:
    """Provide a fresh metrics registry."""
    return MetricsRegistry(registry=registry)


def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests")
