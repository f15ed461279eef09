"""SPIFFE Entry domain layer."""

from spiffe_entry.domain.entities import (
    ClusterSPIFFEIDSpec,
    Endpoints,
    Entry,
    IdentityTemplateSet,
    Node,
    Pod,
    Selector,
)
from spiffe_entry.domain.errors import (
    EntryDerivationError,
    InvalidDNSNameError,
    InvalidSelectorError,
    InvalidSPIFFEIDError,
    TemplateExecutionError,
    TemplateSyntaxError,
    TrustDomainMismatchError,
)
from spiffe_entry.domain.services import (
    EndpointIndex,
    compile_template,
    compile_template_set,
    derive_entry,
)
from spiffe_entry.domain.value_objects import SpiffeId, TrustDomain

__all__ = [
    # Value objects
    "SpiffeId",
    "TrustDomain",
    # Entities
    "ClusterSPIFFEIDSpec",
    "Endpoints",
    "Entry",
    "IdentityTemplateSet",
    "Node",
    "Pod",
    "Selector",
    # Errors
    "EntryDerivationError",
    "InvalidDNSNameError",
    "InvalidSelectorError",
    "InvalidSPIFFEIDError",
    "TemplateExecutionError",
    "TemplateSyntaxError",
    "TrustDomainMismatchError",
    # Services
    "EndpointIndex",
    "compile_template",
    "compile_template_set",
    "derive_entry",
]
