"""Generate command -- write TypeScript types, React Query hooks, or docs.

Implements ``hookgen generate``. The document is loaded from ``--url``,
``--input`` or the configured ``spec``; then, depending on the flags:

* ``--types`` writes one file with every schema in the document;
* ``--hooks`` writes one ``<tag>/<tag>.hooks.ts`` (and ``.types.ts``) per
  tag group;
* neither writes the Markdown API documentation.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any, Optional

import typer

from hookgen.exceptions import HookgenError, InvalidUsageError
from hookgen.models import GeneratorConfig

_WHITESPACE_RE = re.compile(r"\s+")


def resolve_source(url: Optional[str], input_path: Optional[str]) -> Optional[str]:
    """Pick the document source from ``--url``/``--input``.

    Raises:
        InvalidUsageError: If both are given.
    """
    if url and input_path:
        raise InvalidUsageError("Only one of --url or --input can be provided")
    return url or input_path


def load_document(config: GeneratorConfig) -> dict[str, Any]:
    """Load the configured document, reporting progress on stderr.

    Raises:
        InvalidUsageError: If no source is configured.
        SpecLoadError: If the source cannot be read.
        SpecParseError: If the content cannot be parsed.
    """
    from hookgen.output import debug, info
    from hookgen.parser import detect_openapi_version, load_spec

    if not config.spec:
        raise InvalidUsageError("Either --url or --input must be provided")

    if config.spec.startswith(("http://", "https://")):
        info(f"Fetching OpenAPI document from: {config.spec}")
    else:
        info(f"Loading OpenAPI document from: {config.spec}")
    document = load_spec(config.spec)
    version = detect_openapi_version(document)
    debug(f"Document version: {version or 'unknown'}")
    return document


def types_output_path(types_output: str, title: str) -> Path:
    """Return the types file path.

    A ``.ts`` path is used as is; anything else is a directory that gets
    ``<Title_With_Underscores>_types.ts``.
    """
    if types_output.endswith(".ts"):
        return Path(types_output)
    stem = _WHITESPACE_RE.sub("_", title.strip())
    return Path(types_output) / f"{stem}_types.ts"


def generate_command(
    url: Optional[str] = typer.Option(
        None, "--url", "-u", help="URL of the OpenAPI document."
    ),
    input_path: Optional[str] = typer.Option(
        None, "--input", "-i", help="Path to a local OpenAPI document ('-' for stdin)."
    ),
    types: bool = typer.Option(
        False, "--types/--no-types", help="Generate a TypeScript file with every schema."
    ),
    hooks: bool = typer.Option(
        False, "--hooks/--no-hooks", help="Generate React Query hooks grouped by tag."
    ),
    output: Optional[str] = typer.Option(
        None, "--output", "-o", help="Markdown documentation path."
    ),
    types_output: Optional[str] = typer.Option(
        None, "--types-output", help="Directory or .ts file for the types file."
    ),
    hooks_output: Optional[str] = typer.Option(
        None, "--hooks-output", help="Directory for the generated hooks."
    ),
    template: Optional[str] = typer.Option(
        None, "--template", "-t", help="Custom Jinja2 template for the hooks file."
    ),
    strict_template: bool = typer.Option(
        False,
        "--strict-template",
        help="Fail instead of falling back when the custom template fails.",
    ),
    format_output: Optional[bool] = typer.Option(
        None, "--format/--no-format", help="Run Prettier over written files."
    ),
    workers: Optional[int] = typer.Option(
        None, "--workers", "-w", min=1, help="Tag groups emitted in parallel."
    ),
) -> None:
    """Generate types, hooks, or Markdown docs from an OpenAPI document.

    Example::

        hookgen generate -i openapi.json --hooks --hooks-output src/api
        hookgen generate -u https://api.example.com/openapi.json --types
        hookgen generate -i openapi.yaml -o docs/api.md
    """
    from hookgen.config import resolve_config
    from hookgen.output import error

    try:
        config = resolve_config(
            {
                "spec": resolve_source(url, input_path),
                "docs_output": output,
                "types_output": types_output,
                "output_dir": hooks_output,
                "hooks_template": template,
                "template_fallback": False if strict_template else None,
                "format_output": format_output,
                "workers": workers,
            }
        )
        run_generate(config, types=types, hooks=hooks)
    except HookgenError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None


def run_generate(config: GeneratorConfig, types: bool = False, hooks: bool = False) -> None:
    """Load the configured document and write the requested outputs.

    Raises:
        HookgenError: On any load, template or write failure.
    """
    from hookgen.generator import (
        classify_endpoints,
        emit_artifacts,
        generate_documentation,
        generate_type_definitions,
    )
    from hookgen.output import info, report_diagnostics, success, suggest
    from hookgen.parser import build_registry, extract_info
    from hookgen.writer import format_code, write_artifacts, write_document

    document = load_document(config)
    formatter = format_code if config.format_output else None

    registry = build_registry(document) if (types or hooks) else None

    if types:
        info("Generating TypeScript type definitions...")
        path = types_output_path(config.types_output, extract_info(document).title)
        write_document(path, generate_type_definitions(registry), formatter)
        success(f"Type definitions generated at: {path}")

    if hooks:
        info("Generating React Query hooks...")
        tagged = classify_endpoints(document, config.default_tag)
        artifacts = emit_artifacts(tagged, registry, config)
        write_artifacts(artifacts, config.output_dir, formatter)
        for artifact in artifacts.values():
            report_diagnostics(artifact.tag, artifact.diagnostics)
        success(f"Hooks for {len(artifacts)} tag group(s) generated in: {config.output_dir}/")

    if not types and not hooks:
        info("Generating documentation...")
        write_document(config.docs_output, generate_documentation(document), formatter)
        success(f"Documentation generated at: {config.docs_output}")
        suggest("Pass --types or --hooks to generate TypeScript instead.")
