"""Registration entry entities.

An entry binds a SPIFFE ID to selectors, a parent (agent) identity and
issuance attributes. Entries are value objects: they are recomputed from
scratch on every derivation and compared by content.

References:
    - SPIRE Server entry API (spire-api-sdk, types.Entry)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any

from spiffe_entry.domain.value_objects.identifiers import SpiffeId, TrustDomain


@dataclass(frozen=True)
class Selector:
    """Workload selector matched by the issuing server."""
    type: str   # e.g. "k8s"
    value: str  # e.g. "pod-uid:1234"; may itself contain colons

    def __str__(self) -> str:
        return f"{self.type}:{self.value}"


@dataclass(frozen=True)
class Entry:
    """Registration entry for a single pod."""
    spiffe_id: SpiffeId
    parent_id: SpiffeId
    selectors: tuple[Selector, ...]
    x509_svid_ttl: timedelta = timedelta(0)
    federates_with: tuple[TrustDomain, ...] = field(default_factory=tuple)
    dns_names: tuple[str, ...] = field(default_factory=tuple)
    admin: bool = False
    downstream: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Canonical plain representation, stable for content comparison."""
        return {
            "spiffe_id": str(self.spiffe_id),
            "parent_id": str(self.parent_id),
            "selectors": [{"type": s.type, "value": s.value} for s in self.selectors],
            "x509_svid_ttl": int(self.x509_svid_ttl.total_seconds()),
            "federates_with": [str(td) for td in self.federates_with],
            "dns_names": list(self.dns_names),
            "admin": self.admin,
            "downstream": self.downstream,
        }
