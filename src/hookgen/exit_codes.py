"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~hookgen.exceptions.HookgenError` subclass.
CI scripts can inspect the exit code to tell a broken spec apart from a
broken template without parsing stderr.

Example::

    $ hookgen generate --url https://api.example.com/openapi.json --hooks
    $ echo $?
    6   # EXIT_SPEC_LOAD_ERROR -- the document could not be fetched
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or missing required options."""

EXIT_OUTPUT_ERROR = 5
"""Generated files could not be written to disk."""

EXIT_SPEC_LOAD_ERROR = 6
"""The OpenAPI document could not be fetched or read (network or disk)."""

EXIT_SPEC_PARSE_ERROR = 7
"""The OpenAPI document could not be parsed as JSON or YAML."""

EXIT_TEMPLATE_ERROR = 8
"""A custom hooks template failed to compile and fallback was disabled."""
