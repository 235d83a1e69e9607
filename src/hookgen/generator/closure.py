"""Reference closure over the schema registry.

A tag group's types file has to define every schema its hooks mention and
everything those schemas mention in turn. This module answers both halves:

* :func:`directly_used_schemas` -- the schemas an endpoint list references
  anywhere in its response, parameter or request-body schemas.
* :func:`closure` -- those roots plus every schema reachable from them
  through ``$ref``.

Node walking never follows a reference into its target, so the walk over a
single node is finite even when schemas reference each other. Inline
composition is still guarded by node identity in the same way
:func:`hookgen.generator.types.resolve` guards it.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from hookgen.models import (
    ArrayNode,
    Endpoint,
    IntersectionNode,
    NullableNode,
    ObjectNode,
    RefNode,
    Registry,
    SchemaNode,
    UnionNode,
)


def _children(node: SchemaNode) -> Iterator[SchemaNode]:
    if isinstance(node, ArrayNode):
        if node.items is not None:
            yield node.items
    elif isinstance(node, ObjectNode):
        if node.properties:
            yield from node.properties.values()
        if node.additional is not None:
            yield node.additional
    elif isinstance(node, (UnionNode, IntersectionNode)):
        yield from node.members
    elif isinstance(node, NullableNode):
        yield node.inner


def collect_refs(node: SchemaNode, visiting: frozenset[int] = frozenset()) -> list[str]:
    """Return the schema names referenced anywhere inside *node*.

    Names are listed once each, in depth-first, declaration order.
    """
    found: dict[str, None] = {}
    _walk(node, visiting, found)
    return list(found)


def _walk(node: SchemaNode, visiting: frozenset[int], found: dict[str, None]) -> None:
    if isinstance(node, RefNode):
        found.setdefault(node.name, None)
        return
    if id(node) in visiting:
        return
    visiting = visiting | {id(node)}
    for child in _children(node):
        _walk(child, visiting, found)


def schema_contains_ref(node: SchemaNode, name: str) -> bool:
    """Return ``True`` if *node* references *name* at any nesting depth."""
    return name in collect_refs(node)


def closure(root_names: Iterable[str], registry: Registry) -> list[str]:
    """Compute the transitive reference closure of *root_names*.

    Repeats passes over the names found so far, adding every referenced
    name that exists in *registry*, until a full pass adds nothing. Roots
    keep their given order; discovered names follow in discovery order.
    Roots missing from the registry are kept, so the caller can report
    them.
    """
    visited: list[str] = []
    for name in root_names:
        if name not in visited:
            visited.append(name)

    changed = True
    while changed:
        changed = False
        for name in list(visited):
            node = registry.get(name)
            if node is None:
                continue
            for ref in collect_refs(node):
                if ref not in visited and ref in registry:
                    visited.append(ref)
                    changed = True
    return visited


def _endpoint_nodes(endpoint: Endpoint) -> Iterator[SchemaNode]:
    """Yield every schema node an endpoint carries."""
    for response in endpoint.responses.values():
        yield from response.content.values()
    for param in endpoint.parameters:
        yield param.schema_
    if endpoint.request_body is not None:
        yield from endpoint.request_body.content.values()


def is_schema_used(name: str, endpoints: Iterable[Endpoint]) -> bool:
    """Return ``True`` if any endpoint references the schema *name*.

    Response content, parameter and request-body schemas are all checked,
    including references nested inside properties, array items and
    compositions.
    """
    return any(
        schema_contains_ref(node, name)
        for endpoint in endpoints
        for node in _endpoint_nodes(endpoint)
    )


def directly_used_schemas(endpoints: Iterable[Endpoint], registry: Registry) -> list[str]:
    """Return the registry names directly used by *endpoints*, in registry order."""
    used: set[str] = set()
    for endpoint in endpoints:
        for node in _endpoint_nodes(endpoint):
            used.update(collect_refs(node))
    return [name for name in registry if name in used]
