"""Convert raw JSON Schema dicts into the :data:`~hookgen.models.SchemaNode` tagged union.

The OpenAPI document describes types as loosely-shaped dicts. This module
classifies each dict exactly once, in a fixed priority order, so that every
later stage can dispatch on ``node.kind`` instead of probing keys:

1. ``$ref`` -- :class:`~hookgen.models.RefNode` (never inlined)
2. ``enum`` / ``const`` -- :class:`~hookgen.models.EnumNode`
3. ``oneOf`` / ``anyOf`` -- :class:`~hookgen.models.UnionNode`
4. ``allOf`` -- :class:`~hookgen.models.IntersectionNode`
5. ``type`` arrays -- union of members, wrapped in
   :class:`~hookgen.models.NullableNode` when ``"null"`` is present
6. ``array`` -- :class:`~hookgen.models.ArrayNode`
7. ``object`` (explicit, or implied by ``properties``) --
   :class:`~hookgen.models.ObjectNode`
8. scalar types -- :class:`~hookgen.models.PrimitiveNode`
9. anything else -- :class:`~hookgen.models.UnknownNode`

OpenAPI 3.0 ``nullable: true`` wraps whatever was parsed in a
:class:`~hookgen.models.NullableNode`.

YAML anchors can make a raw dict contain itself. The parser tracks the raw
dicts on the current descent path and cuts such a loop with an
``UnknownNode`` carrying a reason.
"""

from __future__ import annotations

from typing import Any, Optional

from hookgen.models import (
    ArrayNode,
    EnumNode,
    IntersectionNode,
    NullableNode,
    ObjectNode,
    PrimitiveNode,
    RefNode,
    SchemaNode,
    UnionNode,
    UnknownNode,
)

_PRIMITIVE_TYPES = frozenset({"string", "integer", "number", "boolean", "null"})

# Keys that belong to the type-array wrapper, not to each member variant.
_TYPE_ARRAY_DROPPED_KEYS = frozenset({"type", "title", "description", "nullable"})


def ref_name(ref: str) -> str:
    """Return the schema name a ``$ref`` points at.

    Takes the last JSON Pointer segment and undoes RFC 6901 escaping
    (``~1`` for ``/``, ``~0`` for ``~``).

    Example::

        ref_name("#/components/schemas/User")  # -> "User"
    """
    segment = ref.rstrip("/").rsplit("/", 1)[-1]
    return segment.replace("~1", "/").replace("~0", "~")


def parse_schema(raw: Any, visiting: Optional[frozenset[int]] = None) -> SchemaNode:
    """Parse a raw schema value into a schema node.

    Args:
        raw: The schema as found in the document. Non-dict values produce
            an :class:`~hookgen.models.UnknownNode` with a reason.
        visiting: Identities of the raw dicts on the current descent path.
            ``None`` on the initial call.

    Returns:
        The parsed node. Parsing never raises.
    """
    if visiting is None:
        visiting = frozenset()

    if raw is None:
        return UnknownNode()
    if not isinstance(raw, dict):
        return UnknownNode(reason=f"schema is a {type(raw).__name__}, not an object")
    if id(raw) in visiting:
        return UnknownNode(reason="self-referencing schema structure")

    visiting = visiting | {id(raw)}
    node = _parse_dict(raw, visiting)

    if raw.get("nullable") is True and not isinstance(node, NullableNode):
        return NullableNode(inner=node, title=node.title, description=node.description)
    return node


def _doc(raw: dict[str, Any]) -> dict[str, Optional[str]]:
    """Pick the title/description fields every node carries."""
    title = raw.get("title")
    description = raw.get("description")
    return {
        "title": title if isinstance(title, str) else None,
        "description": description if isinstance(description, str) else None,
    }


def _parse_dict(raw: dict[str, Any], visiting: frozenset[int]) -> SchemaNode:
    doc = _doc(raw)

    ref = raw.get("$ref")
    if isinstance(ref, str):
        return RefNode(name=ref_name(ref), ref=ref, **doc)

    if isinstance(raw.get("enum"), list):
        return EnumNode(values=tuple(raw["enum"]), **doc)
    if "const" in raw:
        return EnumNode(values=(raw["const"],), **doc)

    for combinator in ("oneOf", "anyOf"):
        members = raw.get(combinator)
        if isinstance(members, list):
            return UnionNode(
                combinator=combinator,
                members=tuple(parse_schema(m, visiting) for m in members),
                **doc,
            )

    members = raw.get("allOf")
    if isinstance(members, list):
        parsed = [parse_schema(m, visiting) for m in members]
        if isinstance(raw.get("properties"), dict):
            # Sibling properties act as one more inline member.
            parsed.append(_parse_object({"properties": raw["properties"]}, visiting))
        return IntersectionNode(
            members=tuple(parsed),
            required=_required(raw),
            **doc,
        )

    type_value = raw.get("type")
    if isinstance(type_value, list):
        return _parse_type_array(raw, type_value, visiting)

    if type_value == "array":
        items = raw.get("items")
        return ArrayNode(
            items=parse_schema(items, visiting) if items is not None else None,
            **doc,
        )

    if type_value == "object" or (type_value is None and "properties" in raw):
        return _parse_object(raw, visiting)

    if type_value in _PRIMITIVE_TYPES:
        fmt = raw.get("format")
        return PrimitiveNode(
            type=type_value,
            format=fmt if isinstance(fmt, str) else None,
            **doc,
        )

    if type_value is not None:
        return UnknownNode(reason=f"unrecognised type {type_value!r}", **doc)
    return UnknownNode(**doc)


def _parse_type_array(
    raw: dict[str, Any], types: list[Any], visiting: frozenset[int]
) -> SchemaNode:
    """Parse an OpenAPI 3.1 ``type: [...]`` list.

    Each non-null member is parsed as a copy of *raw* with a scalar
    ``type``, so ``items``, ``properties`` and ``format`` still apply.
    """
    non_null: list[str] = []
    for t in types:
        if t != "null" and t not in non_null:
            non_null.append(t)
    has_null = "null" in types
    doc = _doc(raw)

    members = []
    for t in non_null:
        variant = {k: v for k, v in raw.items() if k not in _TYPE_ARRAY_DROPPED_KEYS}
        variant["type"] = t
        members.append(parse_schema(variant, visiting))

    if not members:
        inner: SchemaNode = PrimitiveNode(type="null") if has_null else UnknownNode()
        return inner.model_copy(update=doc) if any(doc.values()) else inner

    if len(members) == 1:
        inner = members[0]
    else:
        inner = UnionNode(combinator="type", members=tuple(members))

    if has_null:
        return NullableNode(inner=inner, **doc)
    return inner.model_copy(update=doc) if any(doc.values()) else inner


def _parse_object(raw: dict[str, Any], visiting: frozenset[int]) -> ObjectNode:
    doc = _doc(raw)
    properties: Optional[dict[str, SchemaNode]] = None
    raw_props = raw.get("properties")
    if isinstance(raw_props, dict):
        properties = {
            str(name): parse_schema(prop, visiting) for name, prop in raw_props.items()
        }

    additional: Optional[SchemaNode] = None
    raw_additional = raw.get("additionalProperties")
    if isinstance(raw_additional, dict):
        additional = parse_schema(raw_additional, visiting)

    return ObjectNode(
        properties=properties,
        required=_required(raw),
        additional=additional,
        **doc,
    )


def _required(raw: dict[str, Any]) -> tuple[str, ...]:
    required = raw.get("required")
    if not isinstance(required, list):
        return ()
    return tuple(str(name) for name in required)
