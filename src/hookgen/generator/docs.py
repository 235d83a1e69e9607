"""Render a Markdown reference of every endpoint in an OpenAPI document.

This is the ``hookgen generate`` output when neither types nor hooks are
requested. It works on the raw document rather than the parsed models
because it shows request/response examples and schemas as written.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, select_autoescape

from hookgen.exceptions import SpecParseError
from hookgen.models import HTTPMethod
from hookgen.parser.extractor import extract_info
from hookgen.parser.resolver import resolve_component

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).parent / "doc_templates"
"""Directory holding ``api-documentation.md.j2``."""

_HTTP_METHODS = tuple(m.value for m in HTTPMethod)


def _create_jinja_env() -> Environment:
    return Environment(
        loader=FileSystemLoader(str(TEMPLATE_DIR)),
        autoescape=select_autoescape(disabled_extensions=("md.j2",)),
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )


def _media_entries(content: Any) -> list[dict[str, Any]]:
    """One entry per media type, showing the example if there is one, else the schema."""
    if not isinstance(content, dict):
        return []
    entries = []
    for content_type, media in content.items():
        if not isinstance(media, dict):
            continue
        if "example" in media:
            payload, is_example = media["example"], True
        elif "schema" in media:
            payload, is_example = media["schema"], False
        else:
            continue
        entries.append(
            {
                "content_type": content_type,
                "is_example": is_example,
                "json": json.dumps(payload, indent=2, ensure_ascii=False, default=str),
            }
        )
    return entries


def _resolved(obj: Any, document: dict[str, Any], where: str) -> Any:
    try:
        return resolve_component(obj, document)
    except SpecParseError as exc:
        logger.warning("Skipping %s: %s", where, exc)
        return None


def _operation_context(
    path: str, method: str, operation: dict[str, Any], document: dict[str, Any]
) -> dict[str, Any]:
    where = f"{method.upper()} {path}"
    parameters = []
    for raw in operation.get("parameters") or []:
        param = _resolved(raw, document, f"parameter of {where}")
        if isinstance(param, dict) and param.get("name"):
            parameters.append(
                {
                    "name": param["name"],
                    "location": param.get("in", ""),
                    "description": param.get("description") or "",
                    "required": bool(param.get("required")),
                }
            )

    body = _resolved(operation.get("requestBody"), document, f"request body of {where}")
    request_body = _media_entries(body.get("content")) if isinstance(body, dict) else []

    responses = []
    for status, raw in (operation.get("responses") or {}).items():
        response = _resolved(raw, document, f"{status} response of {where}")
        if not isinstance(response, dict):
            continue
        responses.append(
            {
                "status": status,
                "description": response.get("description") or "",
                "content": _media_entries(response.get("content")),
            }
        )

    return {
        "method": method.upper(),
        "path": path,
        "summary": operation.get("summary"),
        "description": operation.get("description"),
        "deprecated": bool(operation.get("deprecated")),
        "parameters": parameters,
        "request_body": request_body,
        "responses": responses,
    }


def generate_documentation(document: dict[str, Any]) -> str:
    """Render the Markdown documentation for *document*.

    Lists the API title, description and version, then every operation
    with its summary, description, parameters, request body and
    responses. Examples are shown in preference to schemas.
    """
    info = extract_info(document)
    operations = []
    paths = document.get("paths") or {}
    if not isinstance(paths, dict):
        paths = {}
    for path, path_item in paths.items():
        if not isinstance(path_item, dict):
            continue
        for method in _HTTP_METHODS:
            operation = path_item.get(method)
            if isinstance(operation, dict):
                operations.append(_operation_context(path, method, operation, document))

    template = _create_jinja_env().get_template("api-documentation.md.j2")
    return template.render(
        title=info.title,
        description=info.description or info.title,
        version=info.version,
        operations=operations,
    )
