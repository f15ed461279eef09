"""DNS name set construction and validation.

Names come from two sources, merged in a fixed order: names of the
Services whose endpoints target the pod, then template-rendered names.
The result is deduplicated and sorted so downstream comparison sees a
canonical ordering.
"""

from __future__ import annotations

import re
from typing import Iterable, Iterator

from spiffe_entry.domain.entities.kubernetes import Endpoints
from spiffe_entry.domain.errors import InvalidDNSNameError
from spiffe_entry.domain.services.render_context import RenderContext
from spiffe_entry.domain.services.template_compiler import Template

MAX_LABEL_LENGTH = 63

_LABEL_RE = re.compile(r"[a-zA-Z0-9]([-a-zA-Z0-9]*[a-zA-Z0-9])?")


def validate_dns_name(dns_name: str) -> None:
    """Validate every label of a DNS name.

    Only per-label rules are enforced; the 253 character total length
    limit is not checked.

    Raises:
        InvalidDNSNameError: Naming the full offending name.
    """
    for label in dns_name.split("."):
        if not _LABEL_RE.fullmatch(label):
            raise InvalidDNSNameError(
                f'invalid DNS name "{dns_name}": label does not match regex: {dns_name}',
                value=dns_name,
            )
        if len(label) > MAX_LABEL_LENGTH:
            raise InvalidDNSNameError(
                f'invalid DNS name "{dns_name}": label length exceeded: {dns_name}',
                value=dns_name,
            )


def service_dns_names(endpoints: Iterable[Endpoints], cluster_domain: str) -> Iterator[str]:
    """Yield the in-cluster names of each Service, in endpoint order."""
    for endpoint in endpoints:
        name = endpoint.metadata.name
        namespace = endpoint.metadata.namespace
        yield name
        yield f"{name}.{namespace}"
        yield f"{name}.{namespace}.svc"
        if cluster_domain:
            yield f"{name}.{namespace}.svc.{cluster_domain}"


def build_dns_names(
    templates: Iterable[Template],
    context: RenderContext,
    endpoints: Iterable[Endpoints] = (),
) -> tuple[str, ...]:
    """Build the sorted, deduplicated DNS name set for a pod.

    Args:
        templates: Compiled DNS name templates, in declared order.
        context: Render context for the pod.
        endpoints: Service endpoints targeting the pod, already resolved.

    Returns:
        DNS names sorted ascending.

    Raises:
        TemplateExecutionError: If a template fails to execute.
        InvalidDNSNameError: If any name fails validation.
    """
    seen: set[str] = set()
    names: list[str] = []

    def add(name: str) -> None:
        if name not in seen:
            seen.add(name)
            names.append(name)

    for name in service_dns_names(endpoints, context.cluster_domain):
        validate_dns_name(name)
        add(name)

    for template in templates:
        rendered = template.render(context)
        try:
            validate_dns_name(rendered)
        except InvalidDNSNameError as e:
            e.template = template.name
            raise
        add(rendered)

    return tuple(sorted(names))
