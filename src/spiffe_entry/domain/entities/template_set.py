"""Identity template set (ClusterSPIFFEID spec) entities.

``ClusterSPIFFEIDSpec`` is the raw, declarative form as stored in the
custom resource. ``IdentityTemplateSet`` is its compiled form: templates
are parsed once per configuration change and reused across many pods.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import timedelta
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from spiffe_entry.domain.value_objects.identifiers import TrustDomain

if TYPE_CHECKING:
    from spiffe_entry.domain.services.template_compiler import Template

_DURATION_RE = re.compile(r"[-+]?(?:(?:\d+(?:\.\d*)?|\.\d+)(?:ns|us|\u00b5s|\u03bcs|ms|s|m|h))+")
_DURATION_PART_RE = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|\u00b5s|\u03bcs|ms|s|m|h)")

# Nanoseconds per Go duration unit.
_DURATION_UNITS = {
    "ns": 1,
    "us": 1_000,
    "\u00b5s": 1_000,
    "\u03bcs": 1_000,
    "ms": 1_000_000,
    "s": 1_000_000_000,
    "m": 60_000_000_000,
    "h": 3_600_000_000_000,
}


def parse_go_duration(value: str) -> timedelta:
    """Parse a Go duration string such as ``"1h30m"`` or ``"1.5s"``.

    Sub-microsecond precision is truncated.

    Raises:
        ValueError: If ``value`` is not a Go duration.
    """
    if value == "0":
        return timedelta(0)
    if not _DURATION_RE.fullmatch(value):
        raise ValueError(f"invalid duration {value!r}")
    nanos = sum(
        Decimal(number) * _DURATION_UNITS[unit] for number, unit in _DURATION_PART_RE.findall(value)
    )
    if value.startswith("-"):
        nanos = -nanos
    return timedelta(microseconds=int(nanos // 1000))


class ClusterSPIFFEIDSpec(BaseModel):
    """Raw ClusterSPIFFEID spec, using the CRD's field names as aliases."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    spiffe_id_template: str = Field(..., alias="spiffeIDTemplate")
    dns_name_templates: list[str] = Field(default_factory=list, alias="dnsNameTemplates")
    workload_selector_templates: list[str] = Field(default_factory=list, alias="workloadSelectorTemplates")
    ttl: timedelta = Field(default=timedelta(0))
    federates_with: list[str] = Field(default_factory=list, alias="federatesWith")
    admin: bool = False
    downstream: bool = False
    auto_populate_dns_names: bool = Field(True, alias="autoPopulateDNSNames")

    @field_validator("ttl", mode="before")
    @classmethod
    def _parse_ttl(cls, value: Any) -> Any:
        # metav1.Duration, e.g. "1h30m0s"
        if isinstance(value, str) and (value == "0" or _DURATION_RE.fullmatch(value)):
            return parse_go_duration(value)
        return value


@dataclass(frozen=True)
class IdentityTemplateSet:
    """Compiled templates plus the static (non-templated) entry fields."""
    spiffe_id_template: Template
    dns_name_templates: tuple[Template, ...] = field(default_factory=tuple)
    workload_selector_templates: tuple[Template, ...] = field(default_factory=tuple)
    ttl: timedelta = timedelta(0)
    federates_with: tuple[TrustDomain, ...] = field(default_factory=tuple)
    admin: bool = False
    downstream: bool = False
    auto_populate_dns_names: bool = True
