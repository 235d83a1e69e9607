"""Translate schema nodes into TypeScript type expressions.

:func:`resolve` is the schema-to-type engine. It dispatches on the node
variant, in this priority order:

1. ``ref`` -- the referenced name itself; the target is never inlined.
2. ``enum`` -- a literal union of the values.
3. ``union`` -- ``oneOf``/``anyOf`` members, flattened and de-duplicated.
4. ``intersection`` -- ``allOf``: ``RefA & RefB & { merged inline props }``.
5. ``nullable`` -- the inner type with ``null`` appended once.
6. ``array`` -- ``T[]``, or ``unknown[]`` without ``items``.
7. ``object`` with properties -- an inline structural type.
8. ``object`` without properties -- ``Record<string, ...>``.
9. ``primitive`` -- the fixed scalar table (date formats stay ``string``).
10. ``unknown`` -- ``unknown``.

Besides the expression, every call reports the schema names it referenced
and any diagnostics. Nothing in here raises: an unresolvable ``$ref`` or a
composition cycle degrades to ``unknown`` with a diagnostic.

Because references are never inlined, ``A -> B -> A`` through ``$ref``
terminates at the reference nodes. The ``visiting`` set guards the only
other recursion, inline composition, by node identity.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Optional

from hookgen.generator.naming import property_key, type_identifier
from hookgen.models import (
    ArrayNode,
    EnumNode,
    IntersectionNode,
    NullableNode,
    ObjectNode,
    PrimitiveNode,
    RefNode,
    Registry,
    SchemaNode,
    UnionNode,
    UnknownNode,
)

UNKNOWN = "unknown"
MAP_TYPE = "Record<string, unknown>"
INDENT = "  "

_SCALARS = {
    "string": "string",
    "integer": "number",
    "number": "number",
    "boolean": "boolean",
    "null": "null",
}


@dataclass(frozen=True)
class Resolution:
    """The result of resolving one schema node.

    Attributes:
        type_expr: The TypeScript type expression.
        refs: Schema names referenced by the expression, in first-seen
            order, without duplicates. Only names present in the registry
            are reported.
        diagnostics: Non-fatal problems met while resolving.
        members: The top-level union members when ``type_expr`` is a union,
            otherwise empty.
        intersection: ``True`` when ``type_expr`` is a top-level
            intersection.
    """

    type_expr: str
    refs: tuple[str, ...] = ()
    diagnostics: tuple[str, ...] = ()
    members: tuple[str, ...] = ()
    intersection: bool = False

    @property
    def is_compound(self) -> bool:
        """Whether the expression needs parentheses inside ``[]`` or ``&``."""
        return len(self.members) > 1 or self.intersection


@dataclass(frozen=True)
class TypeDefinition:
    """A top-level ``export interface``/``export type`` for one schema."""

    name: str
    identifier: str
    text: str
    refs: tuple[str, ...] = ()
    diagnostics: tuple[str, ...] = field(default_factory=tuple)


def resolve(
    node: SchemaNode,
    registry: Registry,
    visiting: frozenset[int] = frozenset(),
    depth: int = 0,
) -> Resolution:
    """Resolve *node* to a TypeScript type expression.

    Args:
        node: The schema node to translate.
        registry: Name lookup for ``$ref`` targets.
        visiting: Identities of the composite nodes on the current inline
            composition path. Callers normally leave the default.
        depth: Nesting level, used only to indent inline object types.

    Returns:
        The :class:`Resolution`.
    """
    if isinstance(node, RefNode):
        return _resolve_ref(node, registry)
    if isinstance(node, EnumNode):
        return _resolve_enum(node)
    if isinstance(node, PrimitiveNode):
        return Resolution(_SCALARS[node.type])
    if isinstance(node, UnknownNode):
        if node.reason:
            return Resolution(UNKNOWN, diagnostics=(f"Unsupported schema ({node.reason})",))
        return Resolution(UNKNOWN)

    if id(node) in visiting:
        return Resolution(
            UNKNOWN,
            diagnostics=(f"Composition cycle through {node.kind} schema; using {UNKNOWN}",),
        )
    visiting = visiting | {id(node)}

    if isinstance(node, UnionNode):
        return _resolve_union(node, registry, visiting, depth)
    if isinstance(node, IntersectionNode):
        return _resolve_intersection(node, registry, visiting, depth)
    if isinstance(node, NullableNode):
        return _resolve_nullable(node, registry, visiting, depth)
    if isinstance(node, ArrayNode):
        return _resolve_array(node, registry, visiting, depth)
    if isinstance(node, ObjectNode):
        return _resolve_object(node, registry, visiting, depth)

    return Resolution(
        UNKNOWN, diagnostics=(f"Unhandled schema node {type(node).__name__}",)
    )


def _combine(
    type_expr: str,
    parts: list[Resolution],
    members: tuple[str, ...] = (),
    intersection: bool = False,
    extra_diagnostics: tuple[str, ...] = (),
) -> Resolution:
    """Build a resolution whose refs/diagnostics are the union of *parts*."""
    refs: dict[str, None] = {}
    diagnostics: list[str] = []
    for part in parts:
        refs.update(dict.fromkeys(part.refs))
        diagnostics.extend(part.diagnostics)
    diagnostics.extend(extra_diagnostics)
    return Resolution(
        type_expr=type_expr,
        refs=tuple(refs),
        diagnostics=tuple(diagnostics),
        members=members,
        intersection=intersection,
    )


def _resolve_ref(node: RefNode, registry: Registry) -> Resolution:
    if node.name not in registry:
        return Resolution(UNKNOWN, diagnostics=(f"Unresolvable $ref '{node.ref}'",))
    return Resolution(registry.identifiers[node.name], refs=(node.name,))


def _literal(value: Any) -> Optional[str]:
    """Render an enum value as a TypeScript literal type, or ``None`` if impossible."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return json.dumps(value)
    if isinstance(value, str):
        return json.dumps(value, ensure_ascii=False)
    return None


def _resolve_enum(node: EnumNode) -> Resolution:
    literals: list[str] = []
    diagnostics: list[str] = []
    for value in node.values:
        literal = _literal(value)
        if literal is None:
            diagnostics.append(f"Enum value {value!r} has no literal type; skipped")
        elif literal not in literals:
            literals.append(literal)
    if not literals:
        return Resolution(UNKNOWN, diagnostics=tuple(diagnostics))
    return Resolution(
        " | ".join(literals),
        diagnostics=tuple(diagnostics),
        members=tuple(literals) if len(literals) > 1 else (),
    )


def _union_of(parts: list[Resolution], extra: tuple[str, ...] = ()) -> Resolution:
    """Flatten *parts* into one de-duplicated union, then append *extra* members."""
    members: list[str] = []
    for part in parts:
        for member in part.members or (part.type_expr,):
            if member not in members:
                members.append(member)
    for member in extra:
        if member not in members:
            members.append(member)
    if not members:
        return _combine(UNKNOWN, parts)
    if len(members) == 1:
        only = next((p for p in parts if p.type_expr == members[0]), None)
        return _combine(
            members[0], parts, intersection=bool(only and only.intersection)
        )
    return _combine(" | ".join(members), parts, members=tuple(members))


def _resolve_union(
    node: UnionNode, registry: Registry, visiting: frozenset[int], depth: int
) -> Resolution:
    parts = [resolve(member, registry, visiting, depth) for member in node.members]
    return _union_of(parts)


def _resolve_nullable(
    node: NullableNode, registry: Registry, visiting: frozenset[int], depth: int
) -> Resolution:
    inner = resolve(node.inner, registry, visiting, depth)
    return _union_of([inner], extra=("null",))


def _resolve_array(
    node: ArrayNode, registry: Registry, visiting: frozenset[int], depth: int
) -> Resolution:
    if node.items is None:
        return Resolution(f"{UNKNOWN}[]")
    item = resolve(node.items, registry, visiting, depth)
    expr = f"({item.type_expr})" if item.is_compound else item.type_expr
    return _combine(f"{expr}[]", [item])


def _resolve_intersection(
    node: IntersectionNode, registry: Registry, visiting: frozenset[int], depth: int
) -> Resolution:
    ref_parts: list[Resolution] = []
    other_parts: list[Resolution] = []
    merged: dict[str, SchemaNode] = {}
    required: list[str] = list(node.required)

    for member in node.members:
        if isinstance(member, RefNode):
            ref_parts.append(_resolve_ref(member, registry))
        elif isinstance(member, ObjectNode) and member.properties:
            # Later members overwrite earlier same-named properties.
            merged.update(member.properties)
            required.extend(n for n in member.required if n not in required)
        elif isinstance(member, ObjectNode) and member.additional is None:
            continue
        else:
            other_parts.append(resolve(member, registry, visiting, depth))

    parts = ref_parts + other_parts
    if merged:
        parts.append(_render_object(merged, tuple(required), registry, visiting, depth))

    exprs: list[str] = []
    for part in parts:
        if part.type_expr == UNKNOWN:
            continue
        expr = f"({part.type_expr})" if len(part.members) > 1 else part.type_expr
        if expr not in exprs:
            exprs.append(expr)

    if not exprs:
        return _combine(UNKNOWN, parts)
    if len(exprs) == 1:
        single = next(p for p in parts if p.type_expr == exprs[0] or f"({p.type_expr})" == exprs[0])
        return _combine(
            single.type_expr, parts, members=single.members, intersection=single.intersection
        )
    return _combine(" & ".join(exprs), parts, intersection=True)


def _resolve_object(
    node: ObjectNode, registry: Registry, visiting: frozenset[int], depth: int
) -> Resolution:
    if node.properties:
        return _render_object(node.properties, node.required, registry, visiting, depth)
    if node.additional is not None:
        value = resolve(node.additional, registry, visiting, depth)
        return _combine(f"Record<string, {value.type_expr}>", [value])
    return Resolution(MAP_TYPE)


def _render_object(
    properties: dict[str, SchemaNode],
    required: tuple[str, ...],
    registry: Registry,
    visiting: frozenset[int],
    depth: int,
) -> Resolution:
    """Render an inline ``{ ... }`` object type."""
    lines, parts = render_fields(properties, required, registry, visiting, depth + 1)
    body = "\n".join(lines)
    return _combine(f"{{\n{body}\n{INDENT * depth}}}", parts)


def render_fields(
    properties: dict[str, SchemaNode],
    required: tuple[str, ...],
    registry: Registry,
    visiting: frozenset[int] = frozenset(),
    depth: int = 1,
) -> tuple[list[str], list[Resolution]]:
    """Render the property lines of an object type at indentation *depth*.

    Each property is optional unless listed in *required* and gets a
    leading doc comment from its ``description`` (or ``title``).

    Returns:
        The rendered lines and the per-property resolutions (for their
        refs and diagnostics).
    """
    pad = INDENT * depth
    lines: list[str] = []
    parts: list[Resolution] = []
    for name, prop in properties.items():
        resolution = resolve(prop, registry, visiting, depth)
        parts.append(resolution)
        comment = doc_comment(prop, pad)
        if comment:
            lines.append(comment)
        optional = "" if name in required else "?"
        lines.append(f"{pad}{property_key(name)}{optional}: {resolution.type_expr};")
    return lines, parts


def doc_comment(node: SchemaNode, pad: str = "") -> Optional[str]:
    """Return a JSDoc comment from the node's ``description`` or ``title``."""
    return jsdoc(node.description or node.title, pad)


def jsdoc(text: Optional[str], pad: str = "") -> Optional[str]:
    """Format *text* as a JSDoc comment indented by *pad*, or ``None`` if blank."""
    if not text or not text.strip():
        return None
    text = text.strip().replace("*/", "*\\/")
    lines = text.splitlines()
    if len(lines) == 1:
        return f"{pad}/** {lines[0]} */"
    body = "\n".join(f"{pad} * {line}".rstrip() for line in lines)
    return f"{pad}/**\n{body}\n{pad} */"


def render_type_definition(name: str, node: SchemaNode, registry: Registry) -> TypeDefinition:
    """Render the top-level definition for the schema *name*.

    Objects with properties become ``export interface``; every other shape
    becomes an ``export type`` alias.
    """
    identifier = registry.identifiers.get(name) or type_identifier(name)
    header = doc_comment(node)
    prefix = f"{header}\n" if header else ""

    if isinstance(node, ObjectNode) and node.properties:
        lines, parts = render_fields(node.properties, node.required, registry, frozenset({id(node)}))
        body = "\n".join(lines)
        text = f"{prefix}export interface {identifier} {{\n{body}\n}}\n"
        combined = _combine("", parts)
        return TypeDefinition(name, identifier, text, combined.refs, combined.diagnostics)

    resolution = resolve(node, registry)
    text = f"{prefix}export type {identifier} = {resolution.type_expr};\n"
    return TypeDefinition(name, identifier, text, resolution.refs, resolution.diagnostics)
