"""Build the schema registry and endpoint descriptors from a raw OpenAPI document.

This module walks the raw document once and produces the two read-only
inputs of the generation core:

* :func:`build_registry` -- ``components.schemas`` parsed into a
  :class:`~hookgen.models.Registry` of schema nodes.
* :func:`extract_endpoints` -- every path + HTTP method combination as an
  :class:`~hookgen.models.Endpoint`.

Missing ``paths`` or ``components.schemas`` are treated as empty; the
pipeline then produces empty artifacts rather than failing.

Parameter merging follows the OpenAPI specification: path-level parameters
provide defaults, and operation-level parameters override them when they
share the same ``name`` and ``in`` values. A parameter, request body or
response whose component ``$ref`` cannot be followed is logged and skipped;
the rest of the endpoint is still extracted.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from hookgen.exceptions import SpecParseError
from hookgen.models import (
    APIInfo,
    Endpoint,
    EndpointParameter,
    HTTPMethod,
    ParameterLocation,
    Registry,
    RequestBody,
    ResponseContent,
    SchemaNode,
)
from hookgen.parser.resolver import resolve_component
from hookgen.parser.schema import parse_schema

logger = logging.getLogger(__name__)

# HTTP methods recognized by OpenAPI, in the order they are emitted per path
_HTTP_METHODS = tuple(m.value for m in HTTPMethod)


def build_registry(document: dict[str, Any]) -> Registry:
    """Parse ``components.schemas`` into a :class:`~hookgen.models.Registry`.

    Args:
        document: The raw OpenAPI document.

    Returns:
        A registry preserving the declaration order of the schemas. Empty
        when the document has no components or no schemas.
    """
    components = document.get("components") or {}
    schemas = components.get("schemas") if isinstance(components, dict) else None
    if not isinstance(schemas, dict):
        return Registry()
    return Registry({str(name): parse_schema(raw) for name, raw in schemas.items()})


def extract_info(document: dict[str, Any]) -> APIInfo:
    """Extract API metadata from the document's ``info`` object.

    Missing fields fall back to the :class:`~hookgen.models.APIInfo`
    defaults.
    """
    info = document.get("info") or {}
    return APIInfo(
        title=str(info.get("title") or "Untitled API"),
        version=str(info.get("version") or "0.0.0"),
        description=info.get("description"),
    )


def extract_endpoints(document: dict[str, Any]) -> list[Endpoint]:
    """Extract all endpoints from the document's ``paths`` object.

    Endpoints are returned in document order: paths as declared, and per
    path the methods in the order of :class:`~hookgen.models.HTTPMethod`.

    Args:
        document: The raw OpenAPI document.

    Returns:
        A list of endpoints; empty when ``paths`` is missing.
    """
    paths = document.get("paths") or {}
    if not isinstance(paths, dict):
        return []

    endpoints: list[Endpoint] = []
    for path, path_item in paths.items():
        if not isinstance(path_item, dict):
            continue

        path_params = path_item.get("parameters", [])

        for method_str in _HTTP_METHODS:
            operation = path_item.get(method_str)
            if operation is None or not isinstance(operation, dict):
                continue

            merged_params = _merge_parameters(
                _resolve_list(path_params, document, f"{path} parameters"),
                _resolve_list(
                    operation.get("parameters", []),
                    document,
                    f"{method_str.upper()} {path} parameters",
                ),
            )

            tags = operation.get("tags") or []
            endpoints.append(
                Endpoint(
                    path=path,
                    method=HTTPMethod(method_str),
                    operation_id=operation.get("operationId") or None,
                    summary=operation.get("summary"),
                    description=operation.get("description"),
                    tags=[str(t) for t in tags] if isinstance(tags, list) else [],
                    deprecated=bool(operation.get("deprecated", False)),
                    parameters=_extract_parameters(merged_params),
                    request_body=_extract_request_body(
                        operation.get("requestBody"), document, f"{method_str.upper()} {path}"
                    ),
                    responses=_extract_responses(
                        operation.get("responses") or {}, document, f"{method_str.upper()} {path}"
                    ),
                )
            )

    return endpoints


def _resolve_list(items: Any, document: dict[str, Any], where: str) -> list[dict[str, Any]]:
    """Follow component refs in a parameter list, dropping broken entries."""
    if not isinstance(items, list):
        return []
    resolved: list[dict[str, Any]] = []
    for item in items:
        try:
            target = resolve_component(item, document)
        except SpecParseError as exc:
            logger.warning("Skipping parameter in %s: %s", where, exc)
            continue
        if isinstance(target, dict):
            resolved.append(target)
    return resolved


def _merge_parameters(
    path_params: list[dict[str, Any]],
    op_params: list[dict[str, Any]],
) -> list[dict[str, Any]]:
    """Merge path-level and operation-level parameters.

    Operation-level parameters override path-level parameters with the same
    name and location (``in`` field), per the OpenAPI spec.
    """
    op_keys = {(p.get("name", ""), p.get("in", "")) for p in op_params}

    merged = [
        p for p in path_params if (p.get("name", ""), p.get("in", "")) not in op_keys
    ]
    merged.extend(op_params)
    return merged


def _extract_parameters(params_list: list[dict[str, Any]]) -> list[EndpointParameter]:
    """Convert raw parameter dicts into :class:`~hookgen.models.EndpointParameter` models.

    Path parameters are always required regardless of the ``required``
    field in the source. Parameters with unrecognised ``in`` locations are
    skipped.
    """
    parameters: list[EndpointParameter] = []

    for param in params_list:
        name = param.get("name")
        if not name:
            continue
        try:
            location = ParameterLocation(param.get("in", "query"))
        except ValueError:
            continue

        required = bool(param.get("required", False))
        if location == ParameterLocation.PATH:
            required = True

        parameters.append(
            EndpointParameter(
                name=str(name),
                location=location,
                required=required,
                description=param.get("description"),
                schema=parse_schema(param.get("schema")),
            )
        )

    return parameters


def _extract_content(content: Any) -> dict[str, SchemaNode]:
    """Parse a ``content`` map into media type -> schema node."""
    if not isinstance(content, dict):
        return {}
    result: dict[str, SchemaNode] = {}
    for media_type, media in content.items():
        if isinstance(media, dict) and "schema" in media:
            result[str(media_type)] = parse_schema(media["schema"])
    return result


def _extract_request_body(
    body: Any, document: dict[str, Any], where: str
) -> Optional[RequestBody]:
    """Extract the request body, following a ``#/components/requestBodies`` ref."""
    if body is None:
        return None
    try:
        body = resolve_component(body, document)
    except SpecParseError as exc:
        logger.warning("Skipping request body of %s: %s", where, exc)
        return None
    if not isinstance(body, dict):
        return None

    return RequestBody(
        required=bool(body.get("required", False)),
        description=body.get("description"),
        content=_extract_content(body.get("content")),
    )


def _extract_responses(
    responses: Any, document: dict[str, Any], where: str
) -> dict[str, ResponseContent]:
    """Extract every declared response keyed by status code string."""
    if not isinstance(responses, dict):
        return {}

    result: dict[str, ResponseContent] = {}
    for status_code, response in responses.items():
        try:
            response = resolve_component(response, document)
        except SpecParseError as exc:
            logger.warning("Skipping %s response of %s: %s", status_code, where, exc)
            continue
        if not isinstance(response, dict):
            continue

        result[str(status_code)] = ResponseContent(
            description=response.get("description"),
            content=_extract_content(response.get("content")),
        )

    return result
