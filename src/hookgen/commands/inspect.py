"""Inspect command -- preview tag groups, hook names and type closures.

Implements ``hookgen inspect``: loads the document, classifies its
endpoints exactly as ``generate --hooks`` would, and prints one row per
endpoint without writing any files.
"""

from __future__ import annotations

from typing import Optional

import typer


def inspect_command(
    url: Optional[str] = typer.Option(
        None, "--url", "-u", help="URL of the OpenAPI document."
    ),
    input_path: Optional[str] = typer.Option(
        None, "--input", "-i", help="Path to a local OpenAPI document ('-' for stdin)."
    ),
) -> None:
    """Show how endpoints are grouped and named.

    Columns: tag, HTTP method, path, hook name, hook style (query or
    mutation) and the number of schemas the tag's types file would define.

    Example::

        hookgen inspect -i openapi.json
        hookgen --json inspect -u https://api.example.com/openapi.json
    """
    from hookgen.commands.generate import load_document, resolve_source
    from hookgen.config import resolve_config
    from hookgen.exceptions import HookgenError
    from hookgen.generator import classify_endpoints, closure, directly_used_schemas
    from hookgen.generator.classifier import assign_binding_names, is_read_style
    from hookgen.output import error, get_output, info
    from hookgen.parser import build_registry, extract_info

    try:
        config = resolve_config({"spec": resolve_source(url, input_path)})
        document = load_document(config)
    except HookgenError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    registry = build_registry(document)
    tagged = classify_endpoints(document, config.default_tag)

    if not tagged:
        info("No endpoints defined in this document.")
        return

    headers = ["Tag", "Method", "Path", "Hook", "Style", "Types"]
    rows: list[list[str]] = []
    for tag, endpoints in tagged.items():
        type_count = len(closure(directly_used_schemas(endpoints, registry), registry))
        for endpoint, name in zip(endpoints, assign_binding_names(endpoints)):
            rows.append([
                tag,
                endpoint.method.value.upper(),
                endpoint.path,
                name,
                "query" if is_read_style(endpoint.method) else "mutation",
                str(type_count),
            ])

    title = extract_info(document).title
    get_output().print_table(headers, rows, title=f"{title} -- Endpoints ({len(rows)})")
