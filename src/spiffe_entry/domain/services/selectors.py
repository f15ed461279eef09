"""Workload selector construction."""

from __future__ import annotations

from typing import Iterable

from spiffe_entry.domain.entities.entry import Selector
from spiffe_entry.domain.errors import InvalidSelectorError
from spiffe_entry.domain.services.render_context import RenderContext
from spiffe_entry.domain.services.template_compiler import Template


def pod_uid_selector(pod_uid: str) -> Selector:
    """Selector uniquely targeting a pod."""
    return Selector(type="k8s", value=f"pod-uid:{pod_uid}")


def parse_selector(selector: str) -> Selector:
    """Split ``<type>:<value>`` on the first colon.

    The value may itself contain colons.

    Raises:
        InvalidSelectorError: If the type or value is missing.
    """
    selector_type, sep, value = selector.partition(":")
    if not sep:
        reason = "expected at least one colon to separate the type from the value"
    elif not selector_type:
        reason = "type cannot be empty"
    elif not value:
        reason = "value cannot be empty"
    else:
        return Selector(type=selector_type, value=value)
    raise InvalidSelectorError(f'invalid workload selector "{selector}": {reason}', value=selector)


def build_selectors(
    pod_uid: str,
    templates: Iterable[Template],
    context: RenderContext,
) -> tuple[Selector, ...]:
    """Build the selector list: pod UID selector first, then rendered selectors.

    Declared order is preserved.

    Raises:
        TemplateExecutionError: If a template fails to execute.
        InvalidSelectorError: If a rendered selector is malformed.
    """
    selectors = [pod_uid_selector(pod_uid)]
    for template in templates:
        rendered = template.render(context)
        try:
            selectors.append(parse_selector(rendered))
        except InvalidSelectorError as e:
            e.template = template.name
            raise
    return tuple(selectors)
