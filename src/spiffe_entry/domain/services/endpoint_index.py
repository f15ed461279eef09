"""Endpoint-to-pod indexing.

Maps pod UIDs to the Service endpoints targeting them, so entry
derivation can auto-populate Service DNS names for a pod.
"""

from __future__ import annotations

import threading

from spiffe_entry.domain.entities.kubernetes import Endpoints


def pod_uids_for_endpoints(endpoints: Endpoints) -> list[str]:
    """UIDs of pods targeted by ready or not-ready endpoint addresses."""
    pod_uids = []
    for subset in endpoints.subsets:
        for address in (*subset.addresses, *subset.not_ready_addresses):
            if address.target_ref is not None and address.target_ref.kind == "Pod":
                pod_uids.append(address.target_ref.uid)
    return pod_uids


class EndpointIndex:
    """In-memory index of Endpoints keyed by targeted pod UID.

    Thread Safety:
        All methods are thread-safe.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._endpoints: dict[tuple[str, str], Endpoints] = {}

    @staticmethod
    def _key(endpoints: Endpoints) -> tuple[str, str]:
        return endpoints.metadata.namespace, endpoints.metadata.name

    def upsert(self, endpoints: Endpoints) -> None:
        """Add or replace an Endpoints object."""
        with self._lock:
            self._endpoints[self._key(endpoints)] = endpoints

    def remove(self, namespace: str, name: str) -> None:
        with self._lock:
            self._endpoints.pop((namespace, name), None)

    def endpoints_for_pod(self, pod_uid: str) -> list[Endpoints]:
        """Endpoints targeting a pod, ordered by namespace then name."""
        with self._lock:
            snapshot = sorted(self._endpoints.items())
        return [ep for _, ep in snapshot if pod_uid in pod_uids_for_endpoints(ep)]

    def __len__(self) -> int:
        with self._lock:
            return len(self._endpoints)
