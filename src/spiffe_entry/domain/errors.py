"""Typed errors raised while deriving a registration entry.

Every error is fatal to the single entry being derived: an entry is either
fully valid or not produced at all. Errors carry enough context for the
caller to log them usefully (which template, which pod, which value).
"""

from __future__ import annotations

from typing import Optional


class EntryDerivationError(Exception):
    """Base class for all entry derivation failures."""

    def __init__(
        self,
        message: str,
        *,
        template: Optional[str] = None,
        value: Optional[str] = None,
        pod: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.template = template  # e.g. "dnsNameTemplates[1]"
        self.value = value  # offending rendered value, if any
        self.pod = pod  # "<namespace>/<name>"

    def attach_pod(self, pod: str) -> None:
        """Record the pod being processed when the error was raised."""
        self.pod = pod

    @property
    def reason(self) -> str:
        """Short machine-friendly failure reason (used as a metric label)."""
        return _REASONS.get(type(self), "unknown")

    def context(self) -> dict[str, str]:
        """Structured context suitable for log binding."""
        ctx = {"reason": self.reason}
        if self.template is not None:
            ctx["template"] = self.template
        if self.value is not None:
            ctx["value"] = self.value
        if self.pod is not None:
            ctx["pod"] = self.pod
        return ctx


class TemplateSyntaxError(EntryDerivationError):
    """Template failed to compile or references an unknown field."""


class TemplateExecutionError(EntryDerivationError):
    """Template failed to execute against a specific render context."""


class InvalidSPIFFEIDError(EntryDerivationError):
    """A rendered or derived SPIFFE ID is malformed."""


class TrustDomainMismatchError(InvalidSPIFFEIDError):
    """A rendered SPIFFE ID lies outside the configured trust domain."""


class InvalidDNSNameError(EntryDerivationError):
    """A candidate DNS name fails label syntax or length rules."""


class InvalidSelectorError(EntryDerivationError):
    """A rendered workload selector is malformed."""


_REASONS: dict[type, str] = {
    TemplateSyntaxError: "template_syntax",
    TemplateExecutionError: "template_execution",
    InvalidSPIFFEIDError: "invalid_spiffe_id",
    TrustDomainMismatchError: "trust_domain_mismatch",
    InvalidDNSNameError: "invalid_dns_name",
    InvalidSelectorError: "invalid_selector",
}
