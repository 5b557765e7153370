"""Shared test fixtures for specgraph.

Provides fixture documents, a factory for parser states over ad-hoc schema
maps, config isolation, output state management and a CLI runner.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable

import pytest
import yaml

from specgraph.output import OutputFormat, OutputManager, reset_output, set_output
from specgraph.parser.state import ParserState


FIXTURES_DIR = Path(__file__).parent / "fixtures"


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The manager keeps references to the streams it was created with;
    CliRunner swaps those streams per invocation.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Documents
# ---------------------------------------------------------------------------


@pytest.fixture
def petstore_document() -> dict[str, Any]:
    """Petstore 3.0 document with five declared schemas."""
    with open(FIXTURES_DIR / "petstore.json") as f:
        return json.load(f)


@pytest.fixture
def recursive_document() -> dict[str, Any]:
    """3.1 document with a self-referential Node and mutually-referential A/B."""
    with open(FIXTURES_DIR / "recursive.yaml") as f:
        return yaml.safe_load(f)


def make_document(schemas: dict[str, Any]) -> dict[str, Any]:
    return {
        "openapi": "3.0.3",
        "info": {"title": "Test", "version": "1.0"},
        "paths": {},
        "components": {"schemas": schemas},
    }


@pytest.fixture
def make_state() -> Callable[[dict[str, Any]], ParserState]:
    """Factory building a fresh ParserState over a ``components.schemas`` map."""

    def _make(schemas: dict[str, Any]) -> ParserState:
        return ParserState(make_document(schemas))

    return _make


# ---------------------------------------------------------------------------
# Config isolation
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point XDG directories at tmp_path, clear SPECGRAPH_* vars and chdir there."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.setattr("specgraph.config._is_xdg_platform", lambda: True)
    for var in ("SPECGRAPH_SCHEMAS_BASE", "SPECGRAPH_FORMAT", "NO_COLOR"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------


@pytest.fixture
def plain_output() -> OutputManager:
    output = OutputManager(format=OutputFormat.PLAIN, no_color=True)
    set_output(output)
    yield output
    reset_output()


@pytest.fixture
def cli_runner():
    from typer.testing import CliRunner

    return CliRunner()
