"""Write generated files to disk and optionally run Prettier over them.

Layout produced by :func:`write_artifacts`::

    <output_dir>/
        <stem>/
            <stem>.hooks.ts
            <stem>.types.ts     (only when the group has types)

Every file is written atomically (temp file in the same directory, then
``os.replace``) so an interrupted run never leaves half-written output.

Formatting is cosmetic: :func:`format_code` shells out to
``npx prettier`` and returns its input unchanged, with a warning, if that
fails for any reason.
"""

from __future__ import annotations

import logging
import os
import subprocess
import tempfile
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Optional

from hookgen.exceptions import OutputError
from hookgen.models import Artifact

logger = logging.getLogger(__name__)

Formatter = Callable[[str, str], str]
"""``(text, hint_extension) -> text``."""

PRETTIER_ARGS = (
    "--single-quote",
    "--trailing-comma",
    "es5",
    "--tab-width",
    "2",
    "--semi",
    "--print-width",
    "80",
)

_PRETTIER_TIMEOUT = 60


def ensure_dir(path: str | Path) -> Path:
    """Create *path* (and parents) if needed and return it.

    Raises:
        OutputError: If the directory cannot be created.
    """
    directory = Path(path)
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise OutputError(f"Failed to create directory {directory}: {exc}") from exc
    return directory


def write_text(path: str | Path, text: str) -> Path:
    """Write *text* to *path* atomically using temp file + rename.

    The temporary file is created next to *path* so the final
    ``os.replace`` is an atomic rename on POSIX systems. On any failure the
    temp file is removed.

    Raises:
        OutputError: If the file cannot be written.
    """
    target = Path(path)
    ensure_dir(target.parent)

    fd = None
    tmp_path: Optional[str] = None
    try:
        fd = tempfile.NamedTemporaryFile(
            mode="w",
            dir=target.parent,
            prefix=f".{target.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        )
        tmp_path = fd.name
        fd.write(text)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None
        os.replace(tmp_path, target)
    except BaseException as exc:
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        if isinstance(exc, OSError):
            raise OutputError(f"Failed to write {target}: {exc}") from exc
        raise
    return target


def format_code(text: str, hint_extension: str) -> str:
    """Format *text* with Prettier, treating it as a ``hint_extension`` file.

    Prettier picks its parser from the file extension, so the text is
    written to a temporary ``*<hint_extension>`` file, formatted in place,
    and read back.

    Returns:
        The formatted text, or *text* unchanged if Prettier is missing or
        fails.
    """
    suffix = hint_extension if hint_extension.startswith(".") else f".{hint_extension}"
    tmp_path: Optional[str] = None
    try:
        with tempfile.NamedTemporaryFile(
            mode="w", suffix=suffix, prefix="hookgen-", delete=False, encoding="utf-8"
        ) as fd:
            fd.write(text)
            tmp_path = fd.name
        result = subprocess.run(
            ["npx", "prettier", "--write", tmp_path, *PRETTIER_ARGS],
            capture_output=True,
            text=True,
            timeout=_PRETTIER_TIMEOUT,
        )
        if result.returncode != 0:
            logger.warning("Prettier failed (%s); leaving output unformatted", result.stderr.strip())
            return text
        return Path(tmp_path).read_text(encoding="utf-8")
    except (OSError, subprocess.SubprocessError) as exc:
        logger.warning("Prettier unavailable (%s); leaving output unformatted", exc)
        return text
    finally:
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass


def _identity(text: str, hint_extension: str) -> str:
    return text


def write_artifacts(
    artifacts: Mapping[str, Artifact],
    output_dir: str | Path,
    formatter: Optional[Formatter] = None,
) -> list[Path]:
    """Write one directory per artifact under *output_dir*.

    Args:
        artifacts: Tag -> artifact, as returned by
            :func:`~hookgen.generator.emitter.emit_artifacts`.
        output_dir: Root directory for the generated hooks.
        formatter: Optional ``(text, extension) -> text`` post-processor,
            usually :func:`format_code`.

    Returns:
        The written file paths, in write order.

    Raises:
        OutputError: If a directory or file cannot be written.
    """
    fmt = formatter or _identity
    root = ensure_dir(output_dir)
    written: list[Path] = []
    for artifact in artifacts.values():
        group_dir = ensure_dir(root / artifact.file_stem)
        hooks_path = group_dir / f"{artifact.file_stem}.hooks.ts"
        written.append(write_text(hooks_path, fmt(artifact.bindings, ".ts")))
        if artifact.types.strip():
            types_path = group_dir / f"{artifact.file_stem}.types.ts"
            written.append(write_text(types_path, fmt(artifact.types, ".ts")))
        logger.debug("Wrote %s artifact to %s", artifact.tag, group_dir)
    return written


def write_document(path: str | Path, text: str, formatter: Optional[Formatter] = None) -> Path:
    """Write a single generated document (types file or Markdown docs)."""
    target = Path(path)
    fmt = formatter or _identity
    return write_text(target, fmt(text, target.suffix or ".txt"))
