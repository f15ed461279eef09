"""Outbound ports - External dependency interfaces.

The entry registry (SPIRE Server) and the endpoint lookup are external
collaborators; only their contracts are defined here.
"""

from __future__ import annotations

from abc import abstractmethod
from dataclasses import dataclass
from typing import Protocol, Sequence

from spiffe_entry.domain.entities.entry import Entry
from spiffe_entry.domain.entities.kubernetes import Endpoints


# =============================================================================
# Entry Registry Port
# =============================================================================


@dataclass(frozen=True)
class RegisteredEntry:
    """An entry as stored by the registry, with its registry-assigned ID."""
    entry_id: str
    entry: Entry


@dataclass(frozen=True)
class EntryStatus:
    """Per-entry outcome of a batch registry call."""
    entry_id: str
    ok: bool
    message: str = ""


class EntryClientPort(Protocol):
    """Protocol for the registration entry API of the issuing server.

    Entries are matched across reconciliation passes by content, so
    updates carry the full desired entry.
    """

    @abstractmethod
    def list_entries(self) -> list[RegisteredEntry]:
        """List all registered entries."""
        ...

    @abstractmethod
    def create_entries(self, entries: Sequence[Entry]) -> list[EntryStatus]:
        """Create entries in a batch."""
        ...

    @abstractmethod
    def update_entries(self, entries: Sequence[RegisteredEntry]) -> list[EntryStatus]:
        """Update entries in a batch."""
        ...

    @abstractmethod
    def delete_entries(self, entry_ids: Sequence[str]) -> list[EntryStatus]:
        """Delete entries by ID in a batch."""
        ...


# =============================================================================
# Endpoints Lookup Port
# =============================================================================


class EndpointsLookupPort(Protocol):
    """Protocol for resolving the Service endpoints targeting a pod."""

    @abstractmethod
    def endpoints_for_pod(self, pod_uid: str) -> list[Endpoints]:
        """Endpoints whose addresses target the pod with ``pod_uid``."""
        ...
