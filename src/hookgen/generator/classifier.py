"""Group endpoints by tag and derive their identifiers and binding names."""

from __future__ import annotations

import re
from collections.abc import Iterable
from typing import Any

from hookgen.generator.naming import to_pascal_case, unique_names
from hookgen.models import Endpoint, HTTPMethod
from hookgen.parser.extractor import extract_endpoints

DEFAULT_TAG = "General"
"""Tag assigned to endpoints that declare none."""

_PATH_DELIMITERS_RE = re.compile(r"[/{}]")

_READ_METHODS = frozenset({HTTPMethod.GET, HTTPMethod.HEAD})


def group_by_tag(
    endpoints: Iterable[Endpoint], default_tag: str = DEFAULT_TAG
) -> dict[str, list[Endpoint]]:
    """Group endpoints by their first declared tag.

    Groups appear in the order their first endpoint appears, and keep the
    endpoints in input order.
    """
    groups: dict[str, list[Endpoint]] = {}
    for endpoint in endpoints:
        tag = endpoint.tags[0] if endpoint.tags else default_tag
        groups.setdefault(tag, []).append(endpoint)
    return groups


def classify_endpoints(
    document: dict[str, Any], default_tag: str = DEFAULT_TAG
) -> dict[str, list[Endpoint]]:
    """Extract the endpoints of *document* and group them by tag."""
    return group_by_tag(extract_endpoints(document), default_tag)


def has_explicit_id(endpoint: Endpoint) -> bool:
    return bool(endpoint.operation_id)


def operation_id(endpoint: Endpoint) -> str:
    """Return the endpoint's operation id, synthesizing one when absent.

    The synthesized form is ``<method>_<path>`` with every ``/``, ``{`` and
    ``}`` in the path replaced by ``_``, e.g. ``get__users__id_`` for
    ``GET /users/{id}``.
    """
    if endpoint.operation_id:
        return endpoint.operation_id
    return f"{endpoint.method.value}_{_PATH_DELIMITERS_RE.sub('_', endpoint.path)}"


def binding_name(op_id: str, synthesized: bool = False) -> str:
    """Derive the hook name for an operation id.

    Explicit ids of the form ``owner_action`` drop the owner, so
    ``userController_getUser`` becomes ``useGetUser``. Synthesized ids and
    ids without ``_`` use the whole id.
    """
    source = op_id
    if not synthesized and "_" in op_id:
        segments = [s for s in op_id.split("_") if s]
        if segments:
            source = segments[-1]
    pascal = to_pascal_case(source)
    if not pascal:
        pascal = "Operation"
    elif pascal[0].isdigit():
        pascal = f"_{pascal}"
    return f"use{pascal}"


def assign_binding_names(endpoints: Iterable[Endpoint]) -> list[str]:
    """Return one unique binding name per endpoint, in input order.

    Colliding names get a numeric suffix in order of appearance, so two
    ``*_getUser`` operations become ``useGetUser`` and ``useGetUser2``.
    """
    return unique_names(
        binding_name(operation_id(e), synthesized=not has_explicit_id(e)) for e in endpoints
    )


def is_read_style(method: HTTPMethod) -> bool:
    """Whether *method* maps to a cached query rather than a mutation."""
    return method in _READ_METHODS
