"""Tests for simterm.kernel.config."""

from __future__ import annotations

from pathlib import Path

import pytest

from simterm.kernel.config import (
    ConfigLoader,
    DispatcherConfig,
    HistoryConfig,
    SimTermConfig,
    clamp_history_size,
    load_config,
)
from simterm.kernel.exceptions import ConfigurationError, ValidationError


def _write(tmp_path: Path, name: str, body: str) -> Path:
    path = tmp_path / name
    path.write_text(body, encoding="utf-8")
    return path


class TestLoadConfig:
    def test_defaults_when_nothing_found(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.chdir(tmp_path)
        config = load_config()
        assert config == SimTermConfig()

    def test_explicit_missing_path_raises(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "missing.toml")

    def test_standalone_file(self, tmp_path: Path) -> None:
        path = _write(
            tmp_path,
            "simterm.toml",
            """
user = "ada"
hostname = "lab"

[history]
max_size = 50

[dispatcher]
command_timeout_seconds = 5
simulated_delay_ms = 10

[security]
allowed_commands = ["ls", "pwd"]
""",
        )
        config = load_config(path)
        assert config.user == "ada"
        assert config.hostname == "lab"
        assert config.history.max_size == 50
        assert config.dispatcher == DispatcherConfig(
            command_timeout_seconds=5, simulated_delay_ms=10
        )
        assert config.security.allowed_commands == ("ls", "pwd")

    def test_pyproject_tool_table(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        _write(
            tmp_path,
            "pyproject.toml",
            '[project]\nname = "demo"\n\n[tool.simterm]\nhostname = "from-pyproject"\n',
        )
        monkeypatch.chdir(tmp_path)
        assert load_config().hostname == "from-pyproject"

    def test_env_var_substitution(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SIMTERM_TEST_USER", "grace")
        path = _write(tmp_path, "simterm.toml", 'user = "${SIMTERM_TEST_USER}"\n')
        assert load_config(path).user == "grace"

    def test_env_overrides(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        history_file = tmp_path / "history.json"
        monkeypatch.setenv("SIMTERM_HISTORY_SIZE", "20")
        monkeypatch.setenv("SIMTERM_HISTORY_FILE", str(history_file))
        monkeypatch.setenv("SIMTERM_LOG_LEVEL", "debug")
        path = _write(tmp_path, "simterm.toml", "[history]\nmax_size = 500\n")

        config = load_config(path)

        assert config.history.max_size == 20
        assert config.history.storage == "file"
        assert config.history.path == str(history_file)
        assert config.logging.level == "DEBUG"

    def test_invalid_toml(self, tmp_path: Path) -> None:
        path = _write(tmp_path, "simterm.toml", "user = \n")
        with pytest.raises(ConfigurationError):
            ConfigLoader().load_config_file(path)

    def test_invalid_section_is_configuration_error(self, tmp_path: Path) -> None:
        path = _write(tmp_path, "simterm.toml", '[history]\nstorage = "redis"\n')
        with pytest.raises(ConfigurationError):
            load_config(path)


class TestModels:
    def test_history_size_is_clamped(self) -> None:
        assert clamp_history_size(1) == 10
        assert clamp_history_size(20_000) == 10_000
        assert HistoryConfig(max_size=3).effective_max_size == 10

    def test_file_storage_needs_a_path(self) -> None:
        with pytest.raises(ValidationError):
            HistoryConfig(storage="file")

    def test_timeout_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            DispatcherConfig(command_timeout_seconds=0)
