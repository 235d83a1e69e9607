"""Render user-supplied hook templates with Jinja2.

A custom hooks template receives the same building blocks the built-in
renderer assembles (type names, parameter interfaces, individual hooks) and
decides how to lay them out. Two filters are registered in addition to the
Jinja2 built-ins:

* ``camel_case`` -- :func:`~hookgen.generator.naming.to_camel_case`
* ``pascal_case`` -- :func:`~hookgen.generator.naming.to_pascal_case`

Any failure (missing or unreadable file, syntax error, undefined variable,
an exception raised while rendering) is raised as
:class:`~hookgen.exceptions.TemplateError`. Whether that aborts the run or
falls back to the built-in renderer is the emitter's decision.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined, TemplateError as JinjaTemplateError

from hookgen.exceptions import TemplateError
from hookgen.generator.naming import to_camel_case, to_pascal_case


def _make_environment(directory: Path) -> Environment:
    env = Environment(
        loader=FileSystemLoader(str(directory)),
        autoescape=False,
        keep_trailing_newline=True,
        undefined=StrictUndefined,
    )
    env.filters["camel_case"] = to_camel_case
    env.filters["pascal_case"] = to_pascal_case
    return env


def compile_template(template_path: str | Path, context: dict[str, Any]) -> str:
    """Render the Jinja2 template at *template_path* with *context*.

    Args:
        template_path: Path to the template file. Other templates in the
            same directory can be included or extended.
        context: Template variables.

    Returns:
        The rendered text.

    Raises:
        TemplateError: If the file is missing or rendering fails.
    """
    path = Path(template_path)
    if not path.is_file():
        raise TemplateError(f"Failed to compile template {path}: file not found")

    env = _make_environment(path.parent)
    try:
        return env.get_template(path.name).render(**context)
    except JinjaTemplateError as exc:
        raise TemplateError(f"Failed to compile template {path}: {exc}") from exc
    except Exception as exc:  # errors raised by template code or while reading the file
        raise TemplateError(
            f"Failed to compile template {path}: {type(exc).__name__}: {exc}"
        ) from exc
