"""OpenAPI document parser -- load, follow component refs, and extract inputs.

This sub-package turns a raw OpenAPI 3.x document (JSON or YAML, local file
or remote URL) into the two read-only inputs of the generation core: a
:class:`~hookgen.models.Registry` of schema nodes and a list of
:class:`~hookgen.models.Endpoint` descriptors.

Typical usage::

    from hookgen.parser import build_registry, extract_endpoints, load_spec

    raw = load_spec("https://petstore3.swagger.io/api/v3/openapi.json")
    registry = build_registry(raw)
    endpoints = extract_endpoints(raw)

Sub-modules:

* :mod:`~hookgen.parser.loader` -- I/O layer (URL, file, stdin) plus format
  detection.
* :mod:`~hookgen.parser.resolver` -- JSON-pointer resolution for component
  references.
* :mod:`~hookgen.parser.schema` -- raw schema dicts to the
  :data:`~hookgen.models.SchemaNode` tagged union.
* :mod:`~hookgen.parser.extractor` -- registry and endpoint extraction.
"""

from hookgen.parser.extractor import build_registry, extract_endpoints, extract_info
from hookgen.parser.loader import detect_openapi_version, load_spec

__all__ = [
    "build_registry",
    "detect_openapi_version",
    "extract_endpoints",
    "extract_info",
    "load_spec",
]
