"""Kubernetes object models consumed by entry derivation.

Only the subset of the Kubernetes API that identity templates may address
is modelled. Models parse the API's camelCase JSON (``Pod.model_validate``
on a watch event object) and are immutable once built.

References:
    - k8s.io/api/core/v1 (Pod, Node, Endpoints)
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class K8sModel(BaseModel):
    """Base for Kubernetes API models."""

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")


class ObjectMeta(K8sModel):
    """Standard object metadata."""

    name: str = ""
    namespace: str = ""
    uid: str = ""
    generate_name: str = Field("", alias="generateName")
    resource_version: str = Field("", alias="resourceVersion")
    labels: dict[str, str] = Field(default_factory=dict)
    annotations: dict[str, str] = Field(default_factory=dict)


class PodSecurityContext(K8sModel):
    """Pod-level security attributes."""

    run_as_user: Optional[int] = Field(None, alias="runAsUser")
    run_as_group: Optional[int] = Field(None, alias="runAsGroup")
    run_as_non_root: Optional[bool] = Field(None, alias="runAsNonRoot")
    fs_group: Optional[int] = Field(None, alias="fsGroup")


class PodSpec(K8sModel):
    """Pod specification."""

    service_account_name: str = Field("", alias="serviceAccountName")
    node_name: str = Field("", alias="nodeName")
    hostname: str = ""
    subdomain: str = ""
    scheduler_name: str = Field("", alias="schedulerName")
    priority_class_name: str = Field("", alias="priorityClassName")
    restart_policy: str = Field("", alias="restartPolicy")
    dns_policy: str = Field("", alias="dnsPolicy")
    host_network: bool = Field(False, alias="hostNetwork")
    node_selector: dict[str, str] = Field(default_factory=dict, alias="nodeSelector")
    security_context: Optional[PodSecurityContext] = Field(None, alias="securityContext")


class NodeSpec(K8sModel):
    """Node specification."""

    pod_cidr: str = Field("", alias="podCIDR")
    pod_cidrs: list[str] = Field(default_factory=list, alias="podCIDRs")
    provider_id: str = Field("", alias="providerID")
    unschedulable: bool = False


class Pod(K8sModel):
    metadata: ObjectMeta = Field(default_factory=ObjectMeta)
    spec: PodSpec = Field(default_factory=PodSpec)

    @property
    def ref(self) -> str:
        """``<namespace>/<name>`` reference used in logs and errors."""
        return f"{self.metadata.namespace}/{self.metadata.name}"


class Node(K8sModel):
    metadata: ObjectMeta = Field(default_factory=ObjectMeta)
    spec: NodeSpec = Field(default_factory=NodeSpec)


class ObjectReference(K8sModel):
    """Reference to another object (e.g. an endpoint address target)."""

    kind: str = ""
    name: str = ""
    namespace: str = ""
    uid: str = ""


class EndpointAddress(K8sModel):
    ip: str = ""
    hostname: str = ""
    node_name: Optional[str] = Field(None, alias="nodeName")
    target_ref: Optional[ObjectReference] = Field(None, alias="targetRef")


class EndpointSubset(K8sModel):
    addresses: list[EndpointAddress] = Field(default_factory=list)
    not_ready_addresses: list[EndpointAddress] = Field(default_factory=list, alias="notReadyAddresses")


class Endpoints(K8sModel):
    """Endpoints of a Service; ``metadata.name`` is the Service name."""

    metadata: ObjectMeta = Field(default_factory=ObjectMeta)
    subsets: list[EndpointSubset] = Field(default_factory=list)
