"""Exception hierarchy for hookgen.

All exceptions inherit from :class:`HookgenError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`hookgen.exit_codes`.
The top-level error handler in :func:`hookgen.app.main` catches
``HookgenError`` and exits with the appropriate code, while unexpected
exceptions produce a crash log and exit with :data:`EXIT_GENERIC_FAILURE`.

Errors inside the generation core (unresolvable ``$ref``, composition
cycles, one broken endpoint) are *not* raised; they are recorded as
diagnostics on the produced artifact so the rest of the document still
generates.

Subclass hierarchy::

    HookgenError (exit 1)
    +-- InvalidUsageError   (exit 2)
    +-- OutputError         (exit 5)
    +-- SpecParseError      (exit 7)
    |   +-- SpecLoadError   (exit 6)
    +-- TemplateError       (exit 8)
    +-- ConfigError         (exit 1)
"""

from hookgen.exit_codes import (
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_OUTPUT_ERROR,
    EXIT_SPEC_LOAD_ERROR,
    EXIT_SPEC_PARSE_ERROR,
    EXIT_TEMPLATE_ERROR,
)


class HookgenError(Exception):
    """Base exception for all hookgen errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`hookgen.exit_codes`. The entry point catches
    this exception type and calls ``sys.exit(exc.exit_code)``.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(HookgenError):
    """Raised for invalid CLI arguments (e.g. both ``--url`` and ``--input``)."""

    exit_code = EXIT_INVALID_USAGE


class OutputError(HookgenError):
    """Raised when a generated file or directory cannot be written."""

    exit_code = EXIT_OUTPUT_ERROR


class SpecParseError(HookgenError):
    """Raised when the OpenAPI document cannot be parsed."""

    exit_code = EXIT_SPEC_PARSE_ERROR


class SpecLoadError(SpecParseError):
    """Raised when the OpenAPI document cannot be fetched or read.

    The message always names the operation and the target, e.g.
    ``Failed to fetch spec from https://...: <reason>``.
    """

    exit_code = EXIT_SPEC_LOAD_ERROR


class TemplateError(HookgenError):
    """Raised when a custom Jinja2 hooks template cannot be read or rendered."""

    exit_code = EXIT_TEMPLATE_ERROR


class ConfigError(HookgenError):
    """Raised for configuration problems (invalid ``hookgen.json``, bad values)."""

    exit_code = EXIT_GENERIC_FAILURE
