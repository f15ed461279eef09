"""Identity template compiler.

Compiles ClusterSPIFFEID templates, a subset of Go's text/template syntax,
into immutable renderers bound to the render context schema. Field
references are resolved against the schema at compile time, so a template
naming an unknown field never reaches a pod.

Supported actions:
    {{ .PodMeta.Namespace }}                 field chain
    {{ .PodMeta.Labels.app }}                map key (identifier keys)
    {{ index .PodMeta.Labels "app/name" }}   map key (any key)
    {{/* comment */}}                        renders nothing
    {{- .ClusterName -}}                     trims surrounding whitespace

References:
    - https://pkg.go.dev/text/template
"""

from __future__ import annotations

import json
import re
import types
import typing
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Optional, Union

from pydantic import BaseModel

from spiffe_entry.domain.entities.template_set import ClusterSPIFFEIDSpec, IdentityTemplateSet
from spiffe_entry.domain.errors import (
    InvalidSPIFFEIDError,
    TemplateExecutionError,
    TemplateSyntaxError,
)
from spiffe_entry.domain.services.render_context import CONTEXT_SCHEMA, RenderContext
from spiffe_entry.domain.value_objects.identifiers import TrustDomain

_ACTION_RE = re.compile(
    r"\{\{(?P<ltrim>-\s)?(?:/\*(?P<comment>.*?)\*/|(?P<body>.*?))(?P<rtrim>\s-)?\}\}",
    re.DOTALL,
)
_TOKEN_RE = re.compile(r'"(?:[^"\\\n]|\\.)*"|`[^`]*`|[^\s"`]+')
_CHAIN_RE = re.compile(r"(?:\.[A-Za-z_][A-Za-z0-9_]*)+")
_IDENT_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")

# JSON field names whose Go field name is not a plain capitalisation.
_GO_NAMES = {
    "uid": "UID",
    "dnsPolicy": "DNSPolicy",
    "ip": "IP",
    "fsGroup": "FSGroup",
}

_SCALARS = (str, int, bool)


@dataclass(frozen=True)
class _Step:
    name: str
    attr: Optional[str]  # None when ``name`` is a map key


@dataclass(frozen=True)
class _Action:
    source: str
    steps: tuple[_Step, ...]

    def path(self, upto: int) -> str:
        return "." + ".".join(step.name for step in self.steps[:upto])


@dataclass(frozen=True)
class Template:
    """A compiled template.

    Immutable and free of render state; a single instance can be rendered
    concurrently against any number of contexts.
    """
    name: str
    source: str
    nodes: tuple[Union[str, _Action], ...]

    def render(self, context: RenderContext) -> str:
        """Execute the template against a render context.

        Raises:
            TemplateExecutionError: If a referenced value is absent for this
                context (nil object, missing map key) or cannot be rendered.
        """
        parts = []
        for node in self.nodes:
            parts.append(node if isinstance(node, str) else self._evaluate(node, context))
        return "".join(parts)

    def _evaluate(self, action: _Action, context: RenderContext) -> str:
        value: Any = context
        for i, step in enumerate(action.steps):
            if value is None:
                raise self._exec_error(f"nil pointer evaluating {action.path(i)}.{step.name}")
            if step.attr is None:
                try:
                    value = value[step.name]
                except KeyError:
                    raise self._exec_error(
                        f'map has no entry for key "{step.name}" in {{{{{action.source}}}}}'
                    ) from None
            else:
                value = getattr(value, step.attr)

        if value is None:
            raise self._exec_error(f"nil value for {action.path(len(action.steps))}")
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, _SCALARS):
            return str(value)
        raise self._exec_error(f"cannot render value of type {type(value).__name__}")

    def _exec_error(self, reason: str) -> TemplateExecutionError:
        return TemplateExecutionError(
            f"failed to execute template {self.name}: {reason}",
            template=self.name,
        )


def _unwrap_optional(tp: Any) -> Any:
    if typing.get_origin(tp) in (Union, types.UnionType):
        args = [arg for arg in typing.get_args(tp) if arg is not type(None)]
        if len(args) == 1:
            return args[0]
    return tp


def _type_name(tp: Any) -> str:
    return getattr(tp, "__name__", None) or str(tp)


def _is_model(tp: Any) -> bool:
    return typing.get_origin(tp) is None and isinstance(tp, type) and issubclass(tp, BaseModel)


@lru_cache(maxsize=None)
def template_fields(model: type[BaseModel]) -> dict[str, tuple[str, Any]]:
    """Map Go-style field names to (attribute, type) for a Kubernetes model."""
    fields = {}
    for attr, info in model.model_fields.items():
        json_name = info.alias or attr
        go_name = _GO_NAMES.get(json_name, json_name[:1].upper() + json_name[1:])
        fields[go_name] = (attr, _unwrap_optional(info.annotation))
    return fields


class _Compiler:
    def __init__(self, name: str, source: str) -> None:
        self.name = name
        self.source = source

    def fail(self, reason: str) -> TemplateSyntaxError:
        return TemplateSyntaxError(
            f"template {self.name}: {reason}",
            template=self.name,
            value=self.source,
        )

    def compile(self) -> Template:
        nodes: list[Union[str, _Action]] = []
        pos = 0
        trim_next = False
        for match in _ACTION_RE.finditer(self.source):
            text = self.source[pos:match.start()]
            if trim_next:
                text = text.lstrip()
            if match.group("ltrim"):
                text = text.rstrip()
            self._add_text(nodes, text)

            if match.group("comment") is None:
                action = self._compile_action(match.group("body"))
                if action is not None:
                    nodes.append(action)
            trim_next = match.group("rtrim") is not None
            pos = match.end()

        tail = self.source[pos:]
        self._add_text(nodes, tail.lstrip() if trim_next else tail)
        return Template(name=self.name, source=self.source, nodes=tuple(nodes))

    def _add_text(self, nodes: list[Union[str, _Action]], text: str) -> None:
        if "{{" in text:
            raise self.fail("unclosed action")
        if text:
            nodes.append(text)

    def _compile_action(self, body: str) -> Optional[_Action]:
        stripped = body.strip()
        if stripped.startswith("/*"):
            if not stripped.endswith("*/"):
                raise self.fail("unclosed comment")
            return None

        tokens = self._tokenize(stripped)
        if not tokens:
            raise self.fail("missing value for command")

        head = tokens[0]
        if head == "index":
            if len(tokens) < 3:
                raise self.fail("wrong number of args for index: want at least 2")
            names = self._chain_names(tokens[1])
            keys = [self._string_literal(token) for token in tokens[2:]]
            steps, tp = self._resolve(names)
            for key in keys:
                if typing.get_origin(tp) is not dict:
                    raise self.fail(f"can't index item of type {_type_name(tp)}")
                steps.append(_Step(key, None))
                tp = typing.get_args(tp)[1]
        elif head.startswith("."):
            if len(tokens) > 1:
                raise self.fail(f"can't give argument to non-function {head}")
            steps, tp = self._resolve(self._chain_names(head))
        elif _IDENT_RE.fullmatch(head):
            raise self.fail(f'function "{head}" not defined')
        else:
            raise self.fail(f"unexpected {head!r} in command")

        if tp not in _SCALARS:
            raise self.fail(f"cannot render value of type {_type_name(tp)} in {{{{{stripped}}}}}")
        return _Action(source=stripped, steps=tuple(steps))

    def _tokenize(self, body: str) -> list[str]:
        tokens = []
        pos = 0
        while pos < len(body):
            match = _TOKEN_RE.match(body, pos)
            if match is None:
                raise self.fail("unterminated quoted string")
            tokens.append(match.group())
            pos = match.end()
            while pos < len(body) and body[pos].isspace():
                pos += 1
        return tokens

    def _chain_names(self, token: str) -> list[str]:
        if token == ".":
            raise self.fail("cannot render value of type RenderContext")
        if not _CHAIN_RE.fullmatch(token):
            raise self.fail(f"bad field reference {token!r}")
        return token[1:].split(".")

    def _string_literal(self, token: str) -> str:
        if token.startswith("`"):
            return token[1:-1]
        if token.startswith('"'):
            try:
                return json.loads(token)
            except ValueError:
                raise self.fail(f"invalid quoted string {token}") from None
        raise self.fail(f"index key must be a string literal, got {token!r}")

    def _resolve(self, names: list[str]) -> tuple[list[_Step], Any]:
        root = names[0]
        if root not in CONTEXT_SCHEMA:
            raise self.fail(f"can't evaluate field {root} in type RenderContext")
        attr, tp = CONTEXT_SCHEMA[root]
        steps = [_Step(root, attr)]

        for name in names[1:]:
            if typing.get_origin(tp) is dict:
                steps.append(_Step(name, None))
                tp = typing.get_args(tp)[1]
            elif _is_model(tp):
                fields = template_fields(tp)
                if name not in fields:
                    raise self.fail(f"can't evaluate field {name} in type {_type_name(tp)}")
                attr, tp = fields[name]
                steps.append(_Step(name, attr))
            else:
                raise self.fail(f"can't evaluate field {name} in type {_type_name(tp)}")
        return steps, tp


@lru_cache(maxsize=1024)
def compile_template(source: str, name: str = "template") -> Template:
    """Compile a template string against the render context schema.

    Args:
        source: Template text.
        name: Name used in error messages (e.g. "dnsNameTemplates[0]").

    Returns:
        Compiled, reusable template.

    Raises:
        TemplateSyntaxError: If the template is malformed or references a
            field outside the render context schema.
    """
    return _Compiler(name, source).compile()


def compile_template_set(spec: ClusterSPIFFEIDSpec) -> IdentityTemplateSet:
    """Compile a ClusterSPIFFEID spec into an identity template set.

    Raises:
        TemplateSyntaxError: If any template fails to compile.
        InvalidSPIFFEIDError: If a federatesWith value is not a trust domain.
    """
    federates_with = []
    for i, value in enumerate(spec.federates_with):
        try:
            federates_with.append(TrustDomain.parse(value))
        except InvalidSPIFFEIDError as e:
            raise InvalidSPIFFEIDError(
                f"invalid federatesWith value: {e.message}",
                template=f"federatesWith[{i}]",
                value=value,
            ) from e

    return IdentityTemplateSet(
        spiffe_id_template=compile_template(spec.spiffe_id_template, "spiffeIDTemplate"),
        dns_name_templates=tuple(
            compile_template(source, f"dnsNameTemplates[{i}]")
            for i, source in enumerate(spec.dns_name_templates)
        ),
        workload_selector_templates=tuple(
            compile_template(source, f"workloadSelectorTemplates[{i}]")
            for i, source in enumerate(spec.workload_selector_templates)
        ),
        ttl=spec.ttl,
        federates_with=tuple(federates_with),
        admin=spec.admin,
        downstream=spec.downstream,
        auto_populate_dns_names=spec.auto_populate_dns_names,
    )
