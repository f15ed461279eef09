"""Entry derivation.

Derives the registration entry for a single pod: the pod is targeted by
the ``k8s:pod-uid`` selector and the node it runs on by the parent ID.
Derivation is a pure function of its inputs and safe to call concurrently.
"""

from __future__ import annotations

from typing import Iterable, Optional

from spiffe_entry.domain.entities.entry import Entry
from spiffe_entry.domain.entities.kubernetes import Endpoints, Node, Pod
from spiffe_entry.domain.entities.template_set import IdentityTemplateSet
from spiffe_entry.domain.errors import EntryDerivationError, InvalidSPIFFEIDError
from spiffe_entry.domain.services.dns_names import build_dns_names
from spiffe_entry.domain.services.render_context import build_render_context
from spiffe_entry.domain.services.selectors import build_selectors
from spiffe_entry.domain.services.spiffe_id_renderer import render_spiffe_id
from spiffe_entry.domain.value_objects.identifiers import SpiffeId, TrustDomain


def agent_parent_id(trust_domain: TrustDomain, cluster_name: str, node_uid: str) -> SpiffeId:
    """SPIFFE ID of the k8s_psat-attested agent running on a node.

    Raises:
        InvalidSPIFFEIDError: If the cluster name or node UID cannot form a
            valid SPIFFE ID path.
    """
    try:
        return SpiffeId.from_path(trust_domain, f"/spire/agent/k8s_psat/{cluster_name}/{node_uid}")
    except InvalidSPIFFEIDError as e:
        raise InvalidSPIFFEIDError(f"failed to render parent ID: {e.message}", value=e.value) from e


def derive_entry(
    template_set: IdentityTemplateSet,
    trust_domain: TrustDomain,
    cluster_name: str,
    cluster_domain: Optional[str],
    pod: Pod,
    node: Node,
    endpoints: Iterable[Endpoints] = (),
) -> Entry:
    """Derive the registration entry for a pod.

    Args:
        template_set: Compiled identity templates and static entry fields.
        trust_domain: Configured trust domain.
        cluster_name: Cluster name (part of the parent ID).
        cluster_domain: Cluster DNS domain, may be empty.
        pod: Pod to derive an entry for.
        node: Node the pod is scheduled on.
        endpoints: Service endpoints targeting the pod.

    Returns:
        Fully validated entry.

    Raises:
        EntryDerivationError: A typed subclass describing the failure, with
            the pod reference attached. No partial entry is produced.
    """
    try:
        parent_id = agent_parent_id(trust_domain, cluster_name, node.metadata.uid)
        context = build_render_context(trust_domain, cluster_name, cluster_domain, pod, node)

        spiffe_id = render_spiffe_id(template_set.spiffe_id_template, context, trust_domain)
        dns_names = build_dns_names(
            template_set.dns_name_templates,
            context,
            endpoints if template_set.auto_populate_dns_names else (),
        )
        selectors = build_selectors(pod.metadata.uid, template_set.workload_selector_templates, context)
    except EntryDerivationError as e:
        e.attach_pod(pod.ref)
        raise

    return Entry(
        spiffe_id=spiffe_id,
        parent_id=parent_id,
        selectors=selectors,
        x509_svid_ttl=template_set.ttl,
        federates_with=template_set.federates_with,
        dns_names=dns_names,
        admin=template_set.admin,
        downstream=template_set.downstream,
    )
