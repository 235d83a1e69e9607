"""Load OpenAPI documents from a URL, local file, or stdin.

This module is the document-source collaborator of the pipeline: it
handles all I/O for fetching raw OpenAPI documents and converting them into
Python dictionaries.  It supports both JSON and YAML formats with automatic
format detection.

The two public functions are:

* :func:`load_spec` -- Load and parse a document from any supported source.
* :func:`detect_openapi_version` -- Report the declared version without
  rejecting anything; hookgen does not validate conformance.

Every failure is raised as :class:`~hookgen.exceptions.SpecLoadError` (I/O)
or :class:`~hookgen.exceptions.SpecParseError` (content) with the operation
and the target in the message. Nothing is retried. The generation core only
starts once :func:`load_spec` has returned.
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Any, Optional

import httpx
import yaml

from hookgen.exceptions import SpecLoadError, SpecParseError

logger = logging.getLogger(__name__)


_SUFFIX_FORMATS = {".json": "json", ".yaml": "yaml", ".yml": "yaml"}


def load_spec(source: str, timeout: float = 30.0) -> dict[str, Any]:
    """Load an OpenAPI document from a URL, a file path, or ``-`` (stdin).

    JSON and YAML are both accepted. A file suffix or response content type
    narrows the choice; otherwise JSON is tried before YAML.

    Args:
        source: ``http(s)://`` URL, file path, or ``-``.
        timeout: Network timeout in seconds for URL sources.

    Raises:
        SpecLoadError: If the source cannot be fetched or read.
        SpecParseError: If the content is not a JSON/YAML mapping.
    """
    if source == "-":
        return _load_from_stdin()
    if source.startswith(("http://", "https://")):
        return _load_from_url(source, timeout)
    return _load_from_file(source)


def _load_from_stdin() -> dict[str, Any]:
    try:
        content = sys.stdin.read()
    except (OSError, UnicodeDecodeError) as exc:
        raise SpecLoadError(f"Failed to read spec from stdin: {exc}") from exc
    if not content.strip():
        raise SpecLoadError("No input received from stdin")
    return _parse_content(content, source="stdin")


def _load_from_url(url: str, timeout: float = 30.0) -> dict[str, Any]:
    logger.debug("Fetching spec from %s", url)
    try:
        response = httpx.get(url, timeout=timeout, follow_redirects=True)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise SpecLoadError(
            f"Failed to fetch spec from {url}: HTTP {exc.response.status_code}"
        ) from exc
    except httpx.RequestError as exc:
        raise SpecLoadError(f"Failed to fetch spec from {url}: {exc}") from exc

    content_type = response.headers.get("content-type", "").lower()
    fmt = None
    if "json" in content_type:
        fmt = "json"
    elif "yaml" in content_type or "yml" in content_type:
        fmt = "yaml"
    return _parse_content(response.text, fmt, source=url)


def _load_from_file(path: str) -> dict[str, Any]:
    """Read a local document; unknown suffixes fall back to content sniffing."""
    file_path = Path(path)
    if not file_path.is_file():
        raise SpecLoadError(f"Failed to load spec from {path}: file not found")
    try:
        content = file_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise SpecLoadError(f"Failed to load spec from {path}: {exc}") from exc
    if not content.strip():
        raise SpecLoadError(f"Failed to load spec from {path}: file is empty")
    return _parse_content(content, _SUFFIX_FORMATS.get(file_path.suffix.lower()), source=path)


def _expect_mapping(value: Any, source: str) -> dict[str, Any]:
    if isinstance(value, dict):
        return value
    got = "empty document" if value is None else type(value).__name__
    raise SpecParseError(f"{source} must contain a JSON/YAML object (got {got})")


def _parse_content(
    content: str, fmt: Optional[str] = None, source: str = "document"
) -> dict[str, Any]:
    """Parse *content* as ``fmt`` (``"json"``/``"yaml"``) or, when ``None``,
    as JSON and then YAML.

    Raises:
        SpecParseError: If no allowed format parses, or the top level is
            not a mapping.
    """
    errors: list[str] = []
    if fmt in (None, "json"):
        try:
            return _expect_mapping(json.loads(content), source)
        except json.JSONDecodeError as exc:
            if fmt == "json":
                raise SpecParseError(f"Invalid JSON in {source}: {exc}") from exc
            errors.append(f"JSON error: {exc}")
    try:
        return _expect_mapping(yaml.safe_load(content), source)
    except yaml.YAMLError as exc:
        errors.append(f"YAML error: {exc}")
    raise SpecParseError(
        f"Failed to parse {source} as JSON or YAML\n  " + "\n  ".join(errors)
    )


def detect_openapi_version(spec: dict[str, Any]) -> Optional[str]:
    """Return the declared OpenAPI (or Swagger) version, if any.

    Generation reads ``paths`` and ``components.schemas`` regardless of the
    declared version. Swagger 2.x documents keep their schemas under
    ``definitions``, so they usually produce no types; that case is logged
    as a warning rather than rejected.

    Args:
        spec: The parsed document.

    Returns:
        The version string (e.g. ``"3.0.3"`` or ``"2.0"``), or ``None`` if
        the document declares neither ``openapi`` nor ``swagger``.
    """
    if "swagger" in spec:
        version = str(spec["swagger"])
        logger.warning(
            "Swagger %s document: only OpenAPI 3.x components.schemas are read", version
        )
        return version

    openapi_version = spec.get("openapi")
    if openapi_version is None:
        logger.warning("Missing 'openapi' field; treating document as OpenAPI 3.x")
        return None

    version = str(openapi_version)
    if not version.startswith("3."):
        logger.warning("Unrecognised OpenAPI version %s", version)
    return version
