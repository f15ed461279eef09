"""SPIFFE ID rendering with trust-domain containment."""

from __future__ import annotations

from spiffe_entry.domain.errors import InvalidSPIFFEIDError, TrustDomainMismatchError
from spiffe_entry.domain.services.render_context import RenderContext
from spiffe_entry.domain.services.template_compiler import Template
from spiffe_entry.domain.value_objects.identifiers import SpiffeId, TrustDomain


def render_spiffe_id(template: Template, context: RenderContext, expected: TrustDomain) -> SpiffeId:
    """Render a SPIFFE ID and check it belongs to the expected trust domain.

    Args:
        template: Compiled SPIFFE ID template.
        context: Render context for the pod.
        expected: Configured trust domain.

    Returns:
        Parsed SPIFFE ID.

    Raises:
        TemplateExecutionError: If the template fails to execute.
        InvalidSPIFFEIDError: If the rendered value is not a SPIFFE ID.
        TrustDomainMismatchError: If the ID is outside ``expected``.
    """
    rendered = template.render(context)
    try:
        spiffe_id = SpiffeId.parse(rendered)
    except InvalidSPIFFEIDError as e:
        raise InvalidSPIFFEIDError(e.message, template=template.name, value=rendered) from e

    if not spiffe_id.member_of(expected):
        raise TrustDomainMismatchError(
            f'invalid SPIFFE ID: expected trust domain "{expected}" but got "{spiffe_id.trust_domain}"',
            template=template.name,
            value=rendered,
        )
    return spiffe_id
