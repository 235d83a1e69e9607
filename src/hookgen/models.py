"""Canonical Pydantic models shared across all hookgen modules.

This is the single source of truth for data shapes in the project. Every other
module imports from here rather than defining its own models. The models fall
into three groups:

**Schema nodes** -- the type description language, as an explicit tagged
union discriminated on ``kind``:
    :class:`PrimitiveNode`, :class:`EnumNode`, :class:`ArrayNode`,
    :class:`ObjectNode`, :class:`RefNode`, :class:`UnionNode`,
    :class:`IntersectionNode`, :class:`NullableNode`, :class:`UnknownNode`,
    plus the :class:`Registry` that maps schema names to nodes.

**Parser output models** -- produced from the OpenAPI document and consumed
by the generator:
    :class:`HTTPMethod`, :class:`ParameterLocation`,
    :class:`EndpointParameter`, :class:`RequestBody`,
    :class:`ResponseContent`, :class:`Endpoint`, and :class:`APIInfo`.

**Generator models** -- :class:`Artifact` (one per tag group) and
:class:`GeneratorConfig`.

Schema nodes are frozen. A :class:`RefNode` never holds its target; it is
resolved by name against the :class:`Registry`.
"""

from __future__ import annotations

import enum
from collections.abc import Iterator, Mapping
from functools import cached_property
from types import MappingProxyType
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


# --- Schema nodes ---


class _BaseNode(BaseModel):
    """Fields shared by every schema node variant."""

    model_config = ConfigDict(frozen=True)

    title: Optional[str] = None
    description: Optional[str] = None


class PrimitiveNode(_BaseNode):
    """A scalar JSON Schema type (``string``, ``integer``, ``number``, ``boolean``, ``null``)."""

    kind: Literal["primitive"] = "primitive"
    type: Literal["string", "integer", "number", "boolean", "null"]
    format: Optional[str] = None


class EnumNode(_BaseNode):
    """A closed set of literal values (``enum``, or ``const`` as a one-value enum)."""

    kind: Literal["enum"] = "enum"
    values: tuple[Any, ...] = ()


class ArrayNode(_BaseNode):
    """An ``array`` schema. ``items`` is ``None`` when the schema omits it."""

    kind: Literal["array"] = "array"
    items: Optional[SchemaNode] = None


class ObjectNode(_BaseNode):
    """An ``object`` schema.

    ``properties`` keeps declaration order and is ``None`` when the schema
    declares no ``properties`` at all (a free-form map). ``additional`` holds
    the ``additionalProperties`` schema when one is given.
    """

    kind: Literal["object"] = "object"
    properties: Optional[dict[str, SchemaNode]] = None
    required: tuple[str, ...] = ()
    additional: Optional[SchemaNode] = None


class RefNode(_BaseNode):
    """A ``$ref`` to a named schema in ``components.schemas``."""

    kind: Literal["ref"] = "ref"
    name: str
    ref: str


class UnionNode(_BaseNode):
    """A union: ``oneOf``, ``anyOf``, or a multi-member ``type`` array."""

    kind: Literal["union"] = "union"
    combinator: Literal["oneOf", "anyOf", "type"] = "oneOf"
    members: tuple[SchemaNode, ...] = ()


class IntersectionNode(_BaseNode):
    """An ``allOf`` composition.

    ``required`` carries the composing schema's own ``required`` list, which
    applies to properties merged in from inline members.
    """

    kind: Literal["intersection"] = "intersection"
    members: tuple[SchemaNode, ...] = ()
    required: tuple[str, ...] = ()


class NullableNode(_BaseNode):
    """A node that also admits ``null`` (``type: [T, "null"]`` or ``nullable: true``)."""

    kind: Literal["nullable"] = "nullable"
    inner: SchemaNode


class UnknownNode(_BaseNode):
    """An unconstrained or unrecognised schema.

    ``reason`` is set when the source schema had a shape the parser could
    not classify; an empty ``{}`` schema has no reason and is simply
    unconstrained.
    """

    kind: Literal["unknown"] = "unknown"
    reason: Optional[str] = None


SchemaNode = Annotated[
    Union[
        PrimitiveNode,
        EnumNode,
        ArrayNode,
        ObjectNode,
        RefNode,
        UnionNode,
        IntersectionNode,
        NullableNode,
        UnknownNode,
    ],
    Field(discriminator="kind"),
]
"""Discriminated union of every schema node variant."""

for _model in (ArrayNode, ObjectNode, UnionNode, IntersectionNode, NullableNode):
    _model.model_rebuild()


class Registry(Mapping):
    """Immutable ``name -> SchemaNode`` lookup built once per generation pass.

    Iteration follows the declaration order of ``components.schemas`` so
    that everything derived from the registry is deterministic.

    Args:
        schemas: Initial mapping. It is copied; later changes to the
            argument do not affect the registry.
    """

    def __init__(self, schemas: Optional[Mapping[str, Any]] = None) -> None:
        self._schemas = MappingProxyType(dict(schemas or {}))

    def __getitem__(self, name: str) -> Any:
        return self._schemas[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._schemas)

    def __len__(self) -> int:
        return len(self._schemas)

    def __repr__(self) -> str:
        return f"Registry({list(self._schemas)!r})"

    @cached_property
    def identifiers(self) -> dict[str, str]:
        """``name -> TypeScript identifier``, distinct across the registry."""
        from hookgen.generator.naming import type_identifiers

        return type_identifiers(self._schemas)


# --- Parser Output Models ---


class HTTPMethod(str, enum.Enum):
    """HTTP methods recognised by OpenAPI 3.x path-item objects."""

    GET = "get"
    POST = "post"
    PUT = "put"
    PATCH = "patch"
    DELETE = "delete"
    HEAD = "head"
    OPTIONS = "options"
    TRACE = "trace"


class ParameterLocation(str, enum.Enum):
    """Locations where an API parameter can appear, per OpenAPI ``in`` field.

    Only ``path`` and ``query`` parameters reach the generated hooks; header
    and cookie parameters are parsed but not emitted.
    """

    QUERY = "query"
    HEADER = "header"
    PATH = "path"
    COOKIE = "cookie"


class EndpointParameter(BaseModel):
    """A single parameter of an endpoint, with its schema parsed to a node."""

    name: str
    location: ParameterLocation
    required: bool = False
    description: Optional[str] = None
    schema_: SchemaNode = Field(default_factory=UnknownNode, alias="schema")

    model_config = {"populate_by_name": True}


class RequestBody(BaseModel):
    """Request body schemas keyed by media type."""

    required: bool = False
    description: Optional[str] = None
    content: dict[str, SchemaNode] = Field(default_factory=dict)


class ResponseContent(BaseModel):
    """One declared response: its description and schemas keyed by media type."""

    description: Optional[str] = None
    content: dict[str, SchemaNode] = Field(default_factory=dict)


class Endpoint(BaseModel):
    """A single API operation (one URL path + HTTP method pair).

    Derived once from the document and read-only for the rest of the
    pipeline. Each endpoint becomes exactly one generated hook.
    """

    path: str
    method: HTTPMethod
    operation_id: Optional[str] = None
    summary: Optional[str] = None
    description: Optional[str] = None
    tags: list[str] = Field(default_factory=list)
    deprecated: bool = False
    parameters: list[EndpointParameter] = Field(default_factory=list)
    request_body: Optional[RequestBody] = None
    responses: dict[str, ResponseContent] = Field(default_factory=dict)


class APIInfo(BaseModel):
    """API metadata extracted from the OpenAPI document's *Info Object*."""

    title: str = "Untitled API"
    version: str = "0.0.0"
    description: Optional[str] = None


# --- Generator Models ---


class Artifact(BaseModel):
    """Generated output for one tag group.

    ``types`` and ``bindings`` are the two text blocks consumed by the
    writer. ``imports`` lists the library entry points the bindings
    actually use and ``imported_types`` the schema type names they
    reference; both are minimal by construction.
    """

    tag: str
    file_stem: str
    types: str = ""
    bindings: str = ""
    type_names: list[str] = Field(default_factory=list)
    imported_types: list[str] = Field(default_factory=list)
    imports: list[str] = Field(default_factory=list)
    diagnostics: list[str] = Field(default_factory=list)


DEFAULT_SUCCESS_CODES = ["200", "201", "204", "202", "203", "205"]
"""Status codes scanned, in order, when picking an endpoint's response type."""


class GeneratorConfig(BaseModel):
    """Effective generator settings.

    Loaded from ``./hookgen.json`` by :func:`~hookgen.config.load_project_config`
    and layered with environment variables and CLI flags by
    :func:`~hookgen.config.resolve_config`.
    """

    spec: Optional[str] = Field(
        default=None, description="URL or file path of the OpenAPI document"
    )
    output_dir: str = Field(default="./hooks", description="Hooks output directory")
    types_output: str = Field(
        default="./types", description="Directory or .ts file for the full types file"
    )
    docs_output: str = Field(
        default="./docs/api-documentation.md", description="Markdown documentation path"
    )
    hooks_template: Optional[str] = Field(
        default=None, description="Custom Jinja2 template for the hooks file"
    )
    template_fallback: bool = Field(
        default=True,
        description="Fall back to the built-in renderer when the custom template fails",
    )
    query_library: str = Field(
        default="@tanstack/react-query", description="Module providing useQuery/useMutation"
    )
    http_library: str = Field(default="axios", description="Module providing the HTTP client")
    default_tag: str = Field(
        default="General", description="Tag for endpoints that declare none"
    )
    success_codes: list[str] = Field(default_factory=lambda: list(DEFAULT_SUCCESS_CODES))
    format_output: bool = Field(default=False, description="Run Prettier on written files")
    workers: int = Field(default=1, ge=1, description="Tag groups emitted in parallel")
