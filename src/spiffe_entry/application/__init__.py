"""Application layer for entry derivation."""

from spiffe_entry.application.coordinator import (
    DerivationFailure,
    DerivationResult,
    EntryCoordinator,
)

__all__ = [
    "DerivationFailure",
    "DerivationResult",
    "EntryCoordinator",
]
