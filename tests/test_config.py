"""Tests for specgraph.config -- XDG paths, config files, precedence."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from specgraph.config import (
    get_config_dir,
    get_data_dir,
    load_project_config,
    load_user_config,
    resolve_config,
)
from specgraph.exceptions import ConfigError
from specgraph.models import DEFAULT_SCHEMAS_BASE


def _write_json(path: Path, data: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")


# ---------------------------------------------------------------------------
# XDG path resolution
# ---------------------------------------------------------------------------


class TestXDGPaths:
    def test_config_dir_default(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("specgraph.config._is_xdg_platform", lambda: True)
        monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))

        result = get_config_dir()
        assert result == tmp_path / ".config" / "specgraph"
        assert result.is_dir()

    def test_config_dir_custom(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("specgraph.config._is_xdg_platform", lambda: True)
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))

        assert get_config_dir() == tmp_path / "xdg" / "specgraph"

    def test_data_dir_default(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("specgraph.config._is_xdg_platform", lambda: True)
        monkeypatch.delenv("XDG_DATA_HOME", raising=False)
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))

        assert get_data_dir() == tmp_path / ".local" / "share" / "specgraph"


class TestNonXDGPaths:
    def test_config_dir(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("specgraph.config._is_xdg_platform", lambda: False)
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))

        assert get_config_dir() == tmp_path / ".specgraph"

    def test_data_dir(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("specgraph.config._is_xdg_platform", lambda: False)
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))

        result = get_data_dir()
        assert result == tmp_path / ".specgraph" / "logs"
        assert result.is_dir()


# ---------------------------------------------------------------------------
# Config files
# ---------------------------------------------------------------------------


class TestConfigFiles:
    def test_absent_files(self, isolated_config: Path) -> None:
        assert load_user_config() is None
        assert load_project_config() is None

    def test_user_config(self, isolated_config: Path) -> None:
        _write_json(
            isolated_config / "config" / "specgraph" / "config.json",
            {"output": {"format": "plain"}},
        )
        assert load_user_config() == {"output": {"format": "plain"}}

    def test_project_config(self, isolated_config: Path) -> None:
        _write_json(isolated_config / "specgraph.json", {"parser": {"schemas_base": "#/defs"}})
        assert load_project_config() == {"parser": {"schemas_base": "#/defs"}}

    def test_invalid_json(self, isolated_config: Path) -> None:
        (isolated_config / "specgraph.json").write_text("{nope", encoding="utf-8")
        with pytest.raises(ConfigError, match="Invalid project config"):
            load_project_config()

    def test_not_an_object(self, isolated_config: Path) -> None:
        _write_json(isolated_config / "specgraph.json", ["a"])
        with pytest.raises(ConfigError, match="expected a JSON object"):
            load_project_config()


# ---------------------------------------------------------------------------
# Precedence
# ---------------------------------------------------------------------------


class TestResolveConfig:
    def test_defaults(self, isolated_config: Path) -> None:
        config = resolve_config()
        assert config.parser.schemas_base == DEFAULT_SCHEMAS_BASE
        assert config.output.format == "auto"

    def test_project_overrides_user_key_by_key(self, isolated_config: Path) -> None:
        _write_json(
            isolated_config / "config" / "specgraph" / "config.json",
            {"parser": {"schemas_base": "#/user"}, "output": {"format": "plain"}},
        )
        _write_json(isolated_config / "specgraph.json", {"parser": {"schemas_base": "#/project"}})

        config = resolve_config()

        assert config.parser.schemas_base == "#/project"
        assert config.output.format == "plain"

    def test_env_overrides_files(self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        _write_json(isolated_config / "specgraph.json", {"parser": {"schemas_base": "#/project"}})
        monkeypatch.setenv("SPECGRAPH_SCHEMAS_BASE", "#/env")
        monkeypatch.setenv("SPECGRAPH_FORMAT", "json")

        config = resolve_config()

        assert config.parser.schemas_base == "#/env"
        assert config.output.format == "json"

    def test_cli_overrides_env(self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SPECGRAPH_SCHEMAS_BASE", "#/env")
        monkeypatch.setenv("SPECGRAPH_FORMAT", "json")

        config = resolve_config(cli_schemas_base="#/cli", cli_format="rich")

        assert config.parser.schemas_base == "#/cli"
        assert config.output.format == "rich"

    def test_unknown_key(self, isolated_config: Path) -> None:
        _write_json(isolated_config / "specgraph.json", {"profiles": {}})
        with pytest.raises(ConfigError, match="Invalid configuration"):
            resolve_config()
