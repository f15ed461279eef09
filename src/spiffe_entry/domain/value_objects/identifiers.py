"""SPIFFE identifiers (trust domains and SPIFFE IDs).

Value objects are immutable and validated on construction through
``parse``/``from_path``.

References:
    - SPIFFE ID specification (github.com/spiffe/spiffe, standards/SPIFFE-ID.md)
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from spiffe_entry.domain.errors import InvalidSPIFFEIDError

SPIFFE_SCHEME = "spiffe://"

_TRUST_DOMAIN_RE = re.compile(r"[a-z0-9._-]+")
_PATH_SEGMENT_RE = re.compile(r"[A-Za-z0-9._-]+")


def _fail(value: str, reason: str) -> InvalidSPIFFEIDError:
    return InvalidSPIFFEIDError(f"invalid SPIFFE ID {value!r}: {reason}", value=value)


def _validate_trust_domain_name(name: str, value: str) -> None:
    if not name:
        raise _fail(value, "trust domain is missing")
    if not _TRUST_DOMAIN_RE.fullmatch(name):
        raise _fail(
            value,
            "trust domain characters are limited to lowercase letters, numbers, dots, dashes, and underscores",
        )


def _validate_path(path: str, value: str) -> None:
    if not path:
        return
    if not path.startswith("/"):
        raise _fail(value, "path must have a leading slash")

    segments = path[1:].split("/")
    for i, segment in enumerate(segments):
        if segment == "":
            if i == len(segments) - 1:
                raise _fail(value, "path cannot have a trailing slash")
            raise _fail(value, "path cannot contain empty segments")
        if segment in (".", ".."):
            raise _fail(value, "path cannot contain dot segments")
        if not _PATH_SEGMENT_RE.fullmatch(segment):
            raise _fail(
                value,
                "path segment characters are limited to letters, numbers, dots, dashes, and underscores",
            )


@dataclass(frozen=True)
class TrustDomain:
    """SPIFFE trust domain (e.g. ``example.org``)."""
    name: str

    @classmethod
    def parse(cls, value: str) -> TrustDomain:
        """Parse a trust domain name, or a bare ``spiffe://<td>`` ID.

        Raises:
            InvalidSPIFFEIDError: If the name is not a valid trust domain.
        """
        name = value
        if value.startswith(SPIFFE_SCHEME):
            spiffe_id = SpiffeId.parse(value)
            if spiffe_id.path:
                raise _fail(value, "trust domain cannot contain a path")
            return spiffe_id.trust_domain
        _validate_trust_domain_name(name, value)
        return cls(name)

    def id_string(self) -> str:
        """The SPIFFE ID of the trust domain itself."""
        return f"{SPIFFE_SCHEME}{self.name}"

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class SpiffeId:
    """SPIFFE ID: ``spiffe://<trust-domain>[/<path>]``."""
    trust_domain: TrustDomain
    path: str = ""

    @classmethod
    def parse(cls, value: str) -> SpiffeId:
        """Parse a SPIFFE ID string.

        Raises:
            InvalidSPIFFEIDError: If the string is not a valid SPIFFE ID.
        """
        if not value:
            raise _fail(value, "cannot be empty")
        if not value.startswith(SPIFFE_SCHEME):
            raise _fail(value, "scheme is missing or invalid")

        rest = value[len(SPIFFE_SCHEME):]
        name, slash, path = rest.partition("/")
        _validate_trust_domain_name(name, value)
        path = slash + path
        _validate_path(path, value)
        return cls(TrustDomain(name), path)

    @classmethod
    def from_path(cls, trust_domain: TrustDomain, path: str) -> SpiffeId:
        """Build a SPIFFE ID in ``trust_domain`` from an absolute path.

        Raises:
            InvalidSPIFFEIDError: If the path is not a valid SPIFFE ID path.
        """
        _validate_path(path, f"{trust_domain.id_string()}{path}")
        return cls(trust_domain, path)

    def member_of(self, trust_domain: TrustDomain) -> bool:
        return self.trust_domain == trust_domain

    def __str__(self) -> str:
        return f"{self.trust_domain.id_string()}{self.path}"
