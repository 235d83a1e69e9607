"""hookgen -- Generate typed React Query hooks from OpenAPI 3.x documents.

This package turns an OpenAPI document (paths plus reusable
``components.schemas``) into TypeScript client artifacts grouped by API tag:
structural type definitions and one React Query hook per endpoint.

Typical workflow::

    hookgen generate --input openapi.json --types --hooks

Modules:
    app: Typer application and CLI entry point.
    models: Pydantic models shared across the entire package.
    config: Project config file and environment variable resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting system with Rich support.
    writer: Atomic file writes and the optional Prettier pass.
"""

__version__ = "0.3.0"
