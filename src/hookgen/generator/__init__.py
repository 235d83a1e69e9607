"""TypeScript generation core: types, reference closure, classification and hooks."""

from hookgen.generator.classifier import classify_endpoints, group_by_tag
from hookgen.generator.closure import closure, directly_used_schemas
from hookgen.generator.docs import generate_documentation
from hookgen.generator.emitter import emit_artifact, emit_artifacts, generate_type_definitions
from hookgen.generator.types import resolve

__all__ = [
    "classify_endpoints",
    "closure",
    "directly_used_schemas",
    "emit_artifact",
    "emit_artifacts",
    "generate_documentation",
    "generate_type_definitions",
    "group_by_tag",
    "resolve",
]
