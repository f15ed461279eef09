"""Domain value objects."""

from spiffe_entry.domain.value_objects.identifiers import SpiffeId, TrustDomain

__all__ = ["SpiffeId", "TrustDomain"]
