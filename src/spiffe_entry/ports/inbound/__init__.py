"""Inbound ports - API contracts for entry derivation.

Inbound ports define the interface the reconciliation loop (an external
collaborator) uses to obtain registration entries for pods.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import Iterable, Optional, Protocol

from spiffe_entry.domain.entities.entry import Entry
from spiffe_entry.domain.entities.kubernetes import Endpoints, Node, Pod
from spiffe_entry.domain.entities.template_set import IdentityTemplateSet
from spiffe_entry.domain.value_objects.identifiers import TrustDomain


class EntryDerivationPort(Protocol):
    """Protocol for deriving a registration entry for one pod.

    Implementations are pure: no I/O, no logging, no retries.

    Thread Safety:
        All methods must be safe to call concurrently.

    Example:
        entry = deriver.derive_entry(template_set, td, "prod", "cluster.local", pod, node, endpoints)
    """

    @abstractmethod
    def derive_entry(
        self,
        template_set: IdentityTemplateSet,
        trust_domain: TrustDomain,
        cluster_name: str,
        cluster_domain: Optional[str],
        pod: Pod,
        node: Node,
        endpoints: Iterable[Endpoints] = (),
    ) -> Entry:
        """Derive the entry for ``pod`` running on ``node``.

        Raises:
            EntryDerivationError: Typed failure; no entry is produced.
        """
        ...
