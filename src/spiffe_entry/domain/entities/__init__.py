"""Domain entities."""

from spiffe_entry.domain.entities.entry import Entry, Selector
from spiffe_entry.domain.entities.kubernetes import (
    EndpointAddress,
    Endpoints,
    EndpointSubset,
    Node,
    NodeSpec,
    ObjectMeta,
    ObjectReference,
    Pod,
    PodSecurityContext,
    PodSpec,
)
from spiffe_entry.domain.entities.template_set import ClusterSPIFFEIDSpec, IdentityTemplateSet

__all__ = [
    "Entry",
    "Selector",
    "EndpointAddress",
    "Endpoints",
    "EndpointSubset",
    "Node",
    "NodeSpec",
    "ObjectMeta",
    "ObjectReference",
    "Pod",
    "PodSecurityContext",
    "PodSpec",
    "ClusterSPIFFEIDSpec",
    "IdentityTemplateSet",
]
