"""Console output for the hookgen CLI.

Generated TypeScript always goes to files; the terminal only carries two
kinds of text:

* **stdout** -- data: the ``inspect`` table, rendered as a Rich table on a
  terminal, tab-separated values when piped, or JSON with ``--json``.
* **stderr** -- progress, results, warnings, errors, hints and (with
  ``--verbose``) per-tag generation diagnostics.

Colour is disabled by ``--no-color``, ``NO_COLOR`` (any value) or
``TERM=dumb``; without colour every stderr line is written with a plain
text prefix instead of Rich markup.

The :class:`OutputManager` is installed once per invocation by
:func:`~hookgen.app.main_callback`; commands call the module-level helpers.
"""

from __future__ import annotations

import json
import os
import sys
from collections.abc import Sequence
from enum import Enum
from typing import NamedTuple, Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table


class OutputFormat(str, Enum):
    """How tables are written to stdout. ``AUTO`` picks ``RICH`` or ``PLAIN``."""

    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


class _Style(NamedTuple):
    prefix: str
    markup: Optional[str]
    quiet: bool
    verbose_only: bool = False


_STYLES: dict[str, _Style] = {
    "info": _Style("", None, quiet=True),
    "success": _Style("", "green", quiet=True),
    "hint": _Style("Hint: ", "dim", quiet=True),
    "debug": _Style("[debug] ", "dim", quiet=False, verbose_only=True),
    "warning": _Style("Warning: ", "yellow", quiet=False),
    "error": _Style("Error: ", "bold red", quiet=False),
}
"""Per message kind: plain prefix, Rich style, whether ``--quiet`` hides it."""


class OutputManager:
    """Writes tables to stdout and status messages to stderr.

    Args:
        format: Table format. ``AUTO`` becomes ``RICH`` on a colour
            terminal and ``PLAIN`` otherwise.
        no_color: Disable colour even on a terminal.
        quiet: Hide progress, success and hint messages.
        verbose: Show debug messages.
    """

    def __init__(
        self,
        format: OutputFormat = OutputFormat.AUTO,
        no_color: bool = False,
        quiet: bool = False,
        verbose: bool = False,
    ) -> None:
        self._no_color = no_color or _should_disable_color()
        self._quiet = quiet
        self._verbose = verbose
        if format == OutputFormat.AUTO:
            format = OutputFormat.RICH if _is_tty() and not self._no_color else OutputFormat.PLAIN
        self._format = format
        self._stdout = Console(
            file=sys.stdout,
            no_color=self._no_color,
            force_terminal=format == OutputFormat.RICH,
        )
        self._stderr = Console(file=sys.stderr, no_color=self._no_color, stderr=True)

    @property
    def format(self) -> OutputFormat:
        return self._format

    @property
    def is_quiet(self) -> bool:
        return self._quiet

    @property
    def is_verbose(self) -> bool:
        return self._verbose

    # --- stdout ---

    def print_data(self, text: str) -> None:
        sys.stdout.write(text + "\n")
        sys.stdout.flush()

    def print_table(
        self,
        headers: Sequence[str],
        rows: Sequence[Sequence[str]],
        title: Optional[str] = None,
    ) -> None:
        """Write *rows* to stdout; *title* is only shown by the Rich table."""
        if self._format == OutputFormat.JSON:
            records = [dict(zip(headers, row)) for row in rows]
            self.print_data(json.dumps(records, indent=2, ensure_ascii=False))
            return
        if self._format == OutputFormat.PLAIN:
            for line in (headers, *rows):
                self.print_data("\t".join(line))
            return
        table = Table(title=title, header_style="bold cyan")
        for header in headers:
            table.add_column(header)
        for row in rows:
            table.add_row(*row)
        self._stdout.print(table)

    # --- stderr ---

    def _emit(self, kind: str, message: str) -> None:
        style = _STYLES[kind]
        if style.verbose_only and not self._verbose:
            return
        if style.quiet and self._quiet:
            return
        if self._no_color:
            sys.stderr.write(f"{style.prefix}{message}\n")
            sys.stderr.flush()
        elif style.markup is None:
            self._stderr.print(escape(message))
        elif style.prefix:
            self._stderr.print(f"[{style.markup}]{escape(style.prefix)}[/]{escape(message)}")
        else:
            self._stderr.print(f"[{style.markup}]{escape(message)}[/]")

    def info(self, message: str) -> None:
        self._emit("info", message)

    def success(self, message: str) -> None:
        self._emit("success", message)

    def warning(self, message: str) -> None:
        self._emit("warning", message)

    def error(self, message: str) -> None:
        self._emit("error", message)

    def suggest(self, message: str) -> None:
        self._emit("hint", message)

    def debug(self, message: str) -> None:
        self._emit("debug", message)

    def report_diagnostics(self, tag: str, diagnostics: Sequence[str]) -> None:
        """Summarise a tag group's generation diagnostics.

        The count is a warning; the individual messages are debug output.
        """
        if not diagnostics:
            return
        for message in diagnostics:
            self.debug(f"[{tag}] {message}")
        self.warning(
            f"{tag}: {len(diagnostics)} diagnostic(s); rerun with --verbose for details"
        )


def _is_tty() -> bool:
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _should_disable_color() -> bool:
    """True when ``NO_COLOR`` is set (to anything) or ``TERM`` is ``dumb``."""
    return "NO_COLOR" in os.environ or os.environ.get("TERM") == "dumb"


_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the installed :class:`OutputManager`, creating a default one."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    global _output
    _output = output


def reset_output() -> None:
    """Forget the installed manager so the next call builds a fresh one."""
    global _output
    _output = None


def print_data(text: str) -> None:
    get_output().print_data(text)


def print_table(
    headers: Sequence[str],
    rows: Sequence[Sequence[str]],
    title: Optional[str] = None,
) -> None:
    get_output().print_table(headers, rows, title)


def info(message: str) -> None:
    get_output().info(message)


def success(message: str) -> None:
    get_output().success(message)


def warning(message: str) -> None:
    get_output().warning(message)


def error(message: str) -> None:
    get_output().error(message)


def suggest(message: str) -> None:
    get_output().suggest(message)


def debug(message: str) -> None:
    get_output().debug(message)


def report_diagnostics(tag: str, diagnostics: Sequence[str]) -> None:
    get_output().report_diagnostics(tag, diagnostics)
