"""Integration tests for entry derivation."""

from concurrent.futures import ThreadPoolExecutor
from datetime import timedelta

import pytest

from spiffe_entry.application.coordinator import EntryCoordinator
from spiffe_entry.domain.entities.entry import Selector
from spiffe_entry.domain.entities.kubernetes import Node, ObjectMeta, Pod, PodSpec
from spiffe_entry.domain.entities.template_set import ClusterSPIFFEIDSpec
from spiffe_entry.domain.errors import (
    InvalidDNSNameError,
    InvalidSPIFFEIDError,
    TemplateExecutionError,
    TemplateSyntaxError,
    TrustDomainMismatchError,
)
from spiffe_entry.domain.services.endpoint_index import EndpointIndex
from spiffe_entry.domain.services.entry_renderer import derive_entry
from spiffe_entry.domain.services.template_compiler import compile_template_set
from spiffe_entry.domain.value_objects.identifiers import TrustDomain
from spiffe_entry.infrastructure.config import ClusterConfig, Config
from spiffe_entry.infrastructure.container import Container

SPIFFE_ID_TEMPLATE = "spiffe://{{ .TrustDomain }}/ns/{{ .PodMeta.Namespace }}/sa/{{ .PodSpec.ServiceAccountName }}"


def _template_set(**overrides):
    spec = {"spiffe_id_template": SPIFFE_ID_TEMPLATE, **overrides}
    return compile_template_set(ClusterSPIFFEIDSpec(**spec))


def _derive(template_set, pod, node, endpoints=(), trust_domain=None):
    return derive_entry(
        template_set,
        trust_domain or TrustDomain("example.org"),
        "test",
        "cluster.local",
        pod,
        node,
        endpoints,
    )


@pytest.mark.integration
class TestDeriveEntry:
    """End-to-end entry derivation."""

    def test_pod_entry(self, pod, node, endpoints):
        """Test the full entry for a pod targeted by two services."""
        template_set = _template_set(
            dns_name_templates=[
                "{{ .PodSpec.ServiceAccountName }}.{{ .PodMeta.Namespace }}.svc.{{ .ClusterDomain }}",
                "{{ .PodMeta.Name }}.{{ .PodMeta.Namespace }}.svc.{{ .ClusterDomain }}",
                "{{ .PodMeta.Name }}.{{ .TrustDomain }}.svc",
            ],
            workload_selector_templates=["k8s:ns:{{ .PodMeta.Namespace }}"],
            ttl=timedelta(hours=1),
            federates_with=["other.org"],
            downstream=True,
        )

        entry = _derive(template_set, pod, node, endpoints)

        assert str(entry.spiffe_id) == "spiffe://example.org/ns/namespace/sa/test"
        assert str(entry.parent_id) == "spiffe://example.org/spire/agent/k8s_psat/test/uid"
        assert entry.dns_names == (
            "endpoint",
            "endpoint.namespace",
            "endpoint.namespace.svc",
            "endpoint.namespace.svc.cluster.local",
            "other-endpoint",
            "other-endpoint.namespace",
            "other-endpoint.namespace.svc",
            "other-endpoint.namespace.svc.cluster.local",
            "test.example.org.svc",
            "test.namespace.svc.cluster.local",
        )
        assert entry.selectors == (
            Selector("k8s", "pod-uid:pod-uid-1"),
            Selector("k8s", "ns:namespace"),
        )
        assert entry.x509_svid_ttl == timedelta(hours=1)
        assert [str(td) for td in entry.federates_with] == ["other.org"]
        assert entry.admin is False
        assert entry.downstream is True

    def test_idempotent(self, pod, node, endpoints):
        template_set = _template_set(dns_name_templates=["{{ .PodMeta.Name }}.svc"])
        first = _derive(template_set, pod, node, endpoints)
        second = _derive(template_set, pod, node, endpoints)
        assert first == second
        assert first.to_dict() == second.to_dict()

    def test_auto_populate_disabled(self, pod, node, endpoints):
        template_set = _template_set(auto_populate_dns_names=False, dns_name_templates=["web"])
        entry = _derive(template_set, pod, node, endpoints)
        assert entry.dns_names == ("web",)

    def test_no_dns_names(self, pod, node):
        entry = _derive(_template_set(), pod, node)
        assert entry.dns_names == ()
        assert entry.selectors == (Selector("k8s", "pod-uid:pod-uid-1"),)

    def test_trust_domain_mismatch_produces_no_entry(self, pod, node):
        template_set = _template_set(spiffe_id_template="spiffe://evil.org/ns/{{ .PodMeta.Namespace }}")
        with pytest.raises(TrustDomainMismatchError) as exc_info:
            _derive(template_set, pod, node)
        assert exc_info.value.pod == "namespace/test"

    @pytest.mark.parametrize(
        "suffix,reason",
        [
            ("-", "label does not match regex"),
            ("@end", "label does not match regex"),
            ("-" * 57 + "end", "label length exceeded"),
        ],
    )
    def test_invalid_dns_name(self, pod, node, endpoints, suffix, reason):
        template_set = _template_set(dns_name_templates=["{{ .PodMeta.Name }}" + suffix])
        with pytest.raises(InvalidDNSNameError) as exc_info:
            _derive(template_set, pod, node, endpoints)
        name = "test" + suffix
        assert str(exc_info.value) == f'invalid DNS name "{name}": {reason}: {name}'
        assert exc_info.value.template == "dnsNameTemplates[0]"
        assert exc_info.value.pod == "namespace/test"

    def test_trailing_newline_spiffe_id_rejected(self, pod, node):
        """Test a block-scalar template ending in a newline produces no entry."""
        template_set = _template_set(spiffe_id_template="spiffe://{{ .TrustDomain }}/ns/{{ .PodMeta.Namespace }}\n")
        with pytest.raises(InvalidSPIFFEIDError, match="path segment characters") as exc_info:
            _derive(template_set, pod, node)
        assert exc_info.value.template == "spiffeIDTemplate"
        assert exc_info.value.pod == "namespace/test"

    def test_trailing_newline_dns_name_rejected(self, pod, node):
        template_set = _template_set(dns_name_templates=["{{ .PodMeta.Name }}\n"])
        with pytest.raises(InvalidDNSNameError, match="label does not match regex") as exc_info:
            _derive(template_set, pod, node)
        assert exc_info.value.value == "test\n"

    def test_invalid_parent_id(self, pod):
        node = Node(metadata=ObjectMeta(uid="bad uid"))
        with pytest.raises(InvalidSPIFFEIDError, match="failed to render parent ID"):
            _derive(_template_set(), pod, node)

    def test_concurrent_derivation(self, node):
        """Test derivation across many pods from multiple threads."""
        template_set = _template_set(dns_name_templates=["{{ .PodMeta.Name }}.{{ .PodMeta.Namespace }}"])
        pods = [
            Pod(
                metadata=ObjectMeta(name=f"pod-{i}", namespace="ns", uid=f"uid-{i}"),
                spec=PodSpec(service_account_name=f"sa-{i % 3}"),
            )
            for i in range(100)
        ]
        with ThreadPoolExecutor(max_workers=8) as pool:
            entries = list(pool.map(lambda p: _derive(template_set, p, node), pods))

        for i, entry in enumerate(entries):
            assert str(entry.spiffe_id) == f"spiffe://example.org/ns/ns/sa/sa-{i % 3}"
            assert entry.dns_names == (f"pod-{i}.ns",)
            assert entry.selectors[0] == Selector("k8s", f"pod-uid:uid-{i}")


@pytest.mark.integration
class TestEntryCoordinator:
    """Coordinator-driven derivation with metrics."""

    def test_derive_entries_batch(self, cluster_config, node, metrics_registry, registry):
        """Test failures and ignored namespaces do not affect other pods."""
        coordinator = EntryCoordinator(cluster_config, metrics=metrics_registry)
        template_set = coordinator.compile(
            ClusterSPIFFEIDSpec(
                spiffe_id_template='spiffe://{{ .TrustDomain }}/app/{{ index .PodMeta.Labels "app" }}'
            ),
            name="apps",
        )
        good = Pod(metadata=ObjectMeta(name="good", namespace="apps", uid="1", labels={"app": "web"}))
        unlabeled = Pod(metadata=ObjectMeta(name="unlabeled", namespace="apps", uid="2"))
        system = Pod(metadata=ObjectMeta(name="dns", namespace="kube-system", uid="3", labels={"app": "dns"}))

        result = coordinator.derive_entries(template_set, [(good, node), (unlabeled, node), (system, node)])

        assert [str(e.spiffe_id) for e in result.entries] == ["spiffe://example.org/app/web"]
        assert [f.pod for f in result.failures] == ["apps/unlabeled"]
        assert isinstance(result.failures[0].error, TemplateExecutionError)
        assert result.skipped == ["kube-system/dns"]

        assert registry.get_sample_value("entries_derived_total", {"status": "success"}) == 1
        assert registry.get_sample_value("entries_derived_total", {"status": "error"}) == 1
        assert registry.get_sample_value(
            "entry_derivation_failures_total", {"reason": "template_execution"}
        ) == 1
        assert registry.get_sample_value("template_compilations_total", {"status": "success"}) == 1

    def test_compile_failure(self, cluster_config, metrics_registry, registry):
        coordinator = EntryCoordinator(cluster_config, metrics=metrics_registry)
        with pytest.raises(TemplateSyntaxError):
            coordinator.compile(ClusterSPIFFEIDSpec(spiffe_id_template="spiffe://{{ .Nope }}"))
        assert registry.get_sample_value("template_compilations_total", {"status": "error"}) == 1

    def test_endpoints_resolved_from_index(self, cluster_config, pod, node, endpoints, metrics_registry):
        index = EndpointIndex()
        for ep in endpoints:
            index.upsert(ep)
        coordinator = EntryCoordinator(cluster_config, endpoints=index, metrics=metrics_registry)
        template_set = coordinator.compile(ClusterSPIFFEIDSpec(spiffe_id_template=SPIFFE_ID_TEMPLATE))

        entry = coordinator.derive_entry(template_set, pod, node)
        assert "endpoint.namespace.svc.cluster.local" in entry.dns_names
        assert "other-endpoint" in entry.dns_names


@pytest.mark.integration
class TestContainer:
    """Dependency wiring."""

    def test_create(self, metrics_registry):
        Container.reset()
        try:
            config = Config(cluster=ClusterConfig(trust_domain="corp.example", cluster_name="prod"))
            container = Container.create(config=config, metrics=metrics_registry)

            assert Container.get() is container
            assert container.coordinator.trust_domain == "corp.example"
            assert len(container.endpoint_index) == 0
        finally:
            Container.reset()
