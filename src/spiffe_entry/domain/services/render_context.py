"""Render context construction.

The render context is the closed set of values identity templates can
address. Field names follow the Go-style names used in ClusterSPIFFEID
templates (``{{ .PodMeta.Namespace }}``).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from spiffe_entry.domain.entities.kubernetes import Node, NodeSpec, ObjectMeta, Pod, PodSpec
from spiffe_entry.domain.value_objects.identifiers import TrustDomain


@dataclass(frozen=True)
class RenderContext:
    trust_domain: str
    cluster_name: str
    cluster_domain: str
    pod_meta: ObjectMeta
    pod_spec: PodSpec
    node_meta: ObjectMeta
    node_spec: NodeSpec


# Template name -> (attribute, static type)
CONTEXT_SCHEMA: dict[str, tuple[str, type]] = {
    "TrustDomain": ("trust_domain", str),
    "ClusterName": ("cluster_name", str),
    "ClusterDomain": ("cluster_domain", str),
    "PodMeta": ("pod_meta", ObjectMeta),
    "PodSpec": ("pod_spec", PodSpec),
    "NodeMeta": ("node_meta", ObjectMeta),
    "NodeSpec": ("node_spec", NodeSpec),
}


def build_render_context(
    trust_domain: TrustDomain | str,
    cluster_name: str,
    cluster_domain: Optional[str],
    pod: Pod,
    node: Node,
) -> RenderContext:
    """Assemble the render context for one pod on one node.

    No validation is performed; an absent cluster domain becomes "".
    """
    return RenderContext(
        trust_domain=str(trust_domain),
        cluster_name=cluster_name or "",
        cluster_domain=cluster_domain or "",
        pod_meta=pod.metadata,
        pod_spec=pod.spec,
        node_meta=node.metadata,
        node_spec=node.spec,
    )
