"""Application coordinator for entry derivation.

Drives the pure derivation engine for a population of pods:
- Compiles ClusterSPIFFEID specs into identity template sets
- Resolves Service endpoints for each pod
- Derives entries, skipping (and reporting) pods that fail

The derivation engine never logs or retries; this layer logs each failure
with its context, counts it, and leaves requeue decisions to the caller.

References:
    - Hexagonal Architecture pattern
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Iterable, Optional

from spiffe_entry.domain.entities.entry import Entry
from spiffe_entry.domain.entities.kubernetes import Node, Pod
from spiffe_entry.domain.entities.template_set import ClusterSPIFFEIDSpec, IdentityTemplateSet
from spiffe_entry.domain.errors import EntryDerivationError
from spiffe_entry.domain.services.entry_renderer import derive_entry
from spiffe_entry.domain.services.template_compiler import compile_template_set
from spiffe_entry.infrastructure.config import ClusterConfig
from spiffe_entry.infrastructure.logging import get_logger
from spiffe_entry.infrastructure.metrics import MetricsRegistry, get_metrics
from spiffe_entry.infrastructure.tracing import trace_span
from spiffe_entry.ports.outbound import EndpointsLookupPort

logger = get_logger(__name__)


@dataclass
class DerivationFailure:
    """A pod for which no entry could be derived."""
    pod: str
    error: EntryDerivationError


@dataclass
class DerivationResult:
    """Outcome of deriving entries for a batch of pods."""
    entries: list[Entry] = field(default_factory=list)
    failures: list[DerivationFailure] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)  # pods in ignored namespaces


class EntryCoordinator:
    """Orchestrates entry derivation for a cluster.

    Holds only immutable configuration and collaborators; derivation calls
    may run concurrently.
    """

    def __init__(
        self,
        cluster: ClusterConfig,
        endpoints: Optional[EndpointsLookupPort] = None,
        metrics: Optional[MetricsRegistry] = None,
    ) -> None:
        self._cluster = cluster
        self._trust_domain = cluster.parsed_trust_domain()
        self._ignore_namespaces = frozenset(cluster.ignore_namespaces)
        self._endpoints = endpoints
        self._metrics = metrics or get_metrics()

    @property
    def trust_domain(self) -> str:
        return str(self._trust_domain)

    def compile(self, spec: ClusterSPIFFEIDSpec, name: str = "") -> IdentityTemplateSet:
        """Compile a ClusterSPIFFEID spec.

        Raises:
            EntryDerivationError: If a template or federatesWith value is invalid.
        """
        try:
            template_set = compile_template_set(spec)
        except EntryDerivationError as e:
            self._metrics.template_compilations_total.labels(status="error").inc()
            logger.error("template_set_compile_failed", cluster_spiffeid=name, error=e.message, **e.context())
            raise
        self._metrics.template_compilations_total.labels(status="success").inc()
        logger.debug("template_set_compiled", cluster_spiffeid=name)
        return template_set

    def is_ignored(self, pod: Pod) -> bool:
        return pod.metadata.namespace in self._ignore_namespaces

    def derive_entry(self, template_set: IdentityTemplateSet, pod: Pod, node: Node) -> Entry:
        """Derive the entry for one pod, recording metrics.

        Raises:
            EntryDerivationError: If derivation fails.
        """
        endpoints = []
        if template_set.auto_populate_dns_names and self._endpoints is not None:
            endpoints = self._endpoints.endpoints_for_pod(pod.metadata.uid)

        start = time.perf_counter()
        try:
            entry = derive_entry(
                template_set,
                self._trust_domain,
                self._cluster.cluster_name,
                self._cluster.cluster_domain,
                pod,
                node,
                endpoints,
            )
        except EntryDerivationError as e:
            self._metrics.entries_derived_total.labels(status="error").inc()
            self._metrics.entry_derivation_failures_total.labels(reason=e.reason).inc()
            raise
        finally:
            self._metrics.entry_derivation_latency_seconds.observe(time.perf_counter() - start)

        self._metrics.entries_derived_total.labels(status="success").inc()
        return entry

    def derive_entries(
        self,
        template_set: IdentityTemplateSet,
        workloads: Iterable[tuple[Pod, Node]],
    ) -> DerivationResult:
        """Derive entries for (pod, node) pairs.

        Pods in ignored namespaces are skipped. A pod whose derivation fails
        is logged and reported in ``failures``; other pods are unaffected.
        """
        result = DerivationResult()
        with trace_span("derive_entries", {"trust_domain": self.trust_domain}) as span:
            for pod, node in workloads:
                if self.is_ignored(pod):
                    result.skipped.append(pod.ref)
                    continue
                try:
                    result.entries.append(self.derive_entry(template_set, pod, node))
                except EntryDerivationError as e:
                    logger.warning("entry_derivation_failed", error=e.message, **e.context())
                    result.failures.append(DerivationFailure(pod=pod.ref, error=e))

            span.set_attribute("entries", len(result.entries))
            span.set_attribute("failures", len(result.failures))

        logger.info(
            "entries_derived",
            entries=len(result.entries),
            failures=len(result.failures),
            skipped=len(result.skipped),
        )
        return result
