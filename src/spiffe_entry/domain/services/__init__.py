"""Domain services."""

from spiffe_entry.domain.services.dns_names import build_dns_names, validate_dns_name
from spiffe_entry.domain.services.endpoint_index import EndpointIndex, pod_uids_for_endpoints
from spiffe_entry.domain.services.entry_renderer import agent_parent_id, derive_entry
from spiffe_entry.domain.services.render_context import RenderContext, build_render_context
from spiffe_entry.domain.services.selectors import build_selectors, parse_selector
from spiffe_entry.domain.services.spiffe_id_renderer import render_spiffe_id
from spiffe_entry.domain.services.template_compiler import (
    Template,
    compile_template,
    compile_template_set,
)

__all__ = [
    "build_dns_names",
    "validate_dns_name",
    "EndpointIndex",
    "pod_uids_for_endpoints",
    "agent_parent_id",
    "derive_entry",
    "RenderContext",
    "build_render_context",
    "build_selectors",
    "parse_selector",
    "render_spiffe_id",
    "Template",
    "compile_template",
    "compile_template_set",
]
