"""Shared test fixtures for hookgen.

Provides reusable fixtures for loading document fixtures, isolating the
configuration environment, managing output state, and running CLI
commands. These fixtures are automatically discovered by pytest and
available to all test modules without explicit imports.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import pytest
from typer.testing import CliRunner

from hookgen.models import Registry
from hookgen.output import reset_output
from hookgen.parser.extractor import build_registry


FIXTURES_DIR = Path(__file__).parent / "fixtures"


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time. When Typer's CliRunner redirects those streams during
    a test and the test finishes, the cached references become stale.
    Resetting forces a fresh manager to be created on next use.
    """
    yield
    reset_output()


@pytest.fixture(autouse=True)
def _restore_root_logging() -> None:
    """Undo the ``logging.basicConfig(force=True)`` done by the CLI callback.

    Its handler points at the stream CliRunner swapped in, which is closed
    once the invocation returns.
    """
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep a developer's HOOKGEN_* variables out of the tests."""
    for name in ("HOOKGEN_SPEC", "HOOKGEN_OUTPUT", "HOOKGEN_TEMPLATE"):
        monkeypatch.delenv(name, raising=False)


# ---------------------------------------------------------------------------
# Raw document fixtures (plain dicts loaded from JSON files)
# ---------------------------------------------------------------------------


@pytest.fixture
def users_raw() -> dict[str, Any]:
    """Load the single-endpoint users document."""
    with open(FIXTURES_DIR / "users.json") as f:
        return json.load(f)


@pytest.fixture
def shop_raw() -> dict[str, Any]:
    """Load the shop document (several tags, writes, cycles, allOf)."""
    with open(FIXTURES_DIR / "shop.json") as f:
        return json.load(f)


# ---------------------------------------------------------------------------
# Parsed fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def users_registry(users_raw: dict[str, Any]) -> Registry:
    return build_registry(users_raw)


@pytest.fixture
def shop_registry(shop_raw: dict[str, Any]) -> Registry:
    return build_registry(shop_raw)


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner() -> CliRunner:
    """A Typer CliRunner for invoking the hookgen app."""
    return CliRunner()
