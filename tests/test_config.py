from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from termdeck.config import AppConfig, apply_env_overrides, load_config, save_config


def test_load_defaults_when_config_missing(tmp_path: Path) -> None:
    cfg = load_config(tmp_path / "config.toml", env={})

    assert cfg.shell == ""
    assert cfg.working_directory == ""
    assert cfg.scrollback_lines == 1000
    assert cfg.command_timeout_seconds is None
    assert cfg.kill_grace_seconds == 2.0
    assert cfg.log_level == "INFO"


def test_config_roundtrip(tmp_path: Path) -> None:
    path = tmp_path / "config.toml"
    original = AppConfig(
        shell="/bin/bash",
        working_directory="/srv/app",
        scrollback_lines=250,
        command_timeout_seconds=30.0,
        kill_grace_seconds=0.5,
        log_level="DEBUG",
    )

    save_config(original, path)
    loaded = load_config(path, env={})

    assert loaded == original


def test_invalid_toml_falls_back_to_defaults(tmp_path: Path) -> None:
    path = tmp_path / "config.toml"
    path.write_text("shell = [unterminated\n", encoding="utf-8")

    assert load_config(path, env={}) == AppConfig()


def test_invalid_values_are_sanitized_field_by_field(tmp_path: Path) -> None:
    path = tmp_path / "config.toml"
    path.write_text(
        "\n".join(
            [
                'shell = "  /bin/zsh  "',
                "scrollback_lines = 3",
                "command_timeout_seconds = -1",
                "kill_grace_seconds = true",
                'log_level = "warning"',
            ]
        )
        + "\n",
        encoding="utf-8",
    )

    cfg = load_config(path, env={})

    assert cfg.shell == "/bin/zsh"
    assert cfg.scrollback_lines == 1000
    assert cfg.command_timeout_seconds is None
    assert cfg.kill_grace_seconds == 2.0
    assert cfg.log_level == "WARN"


def test_env_overrides_shell_and_scrollback() -> None:
    cfg = apply_env_overrides(
        AppConfig(shell="/bin/sh"),
        {"TERMDECK_SHELL": "/usr/bin/fish", "TERMDECK_SCROLLBACK": "64"},
    )

    assert cfg.shell == "/usr/bin/fish"
    assert cfg.scrollback_lines == 64


def test_env_override_ignores_invalid_scrollback() -> None:
    cfg = apply_env_overrides(AppConfig(), {"TERMDECK_SCROLLBACK": "lots"})

    assert cfg.scrollback_lines == 1000


def test_assignment_is_validated() -> None:
    cfg = AppConfig()

    with pytest.raises(ValidationError):
        cfg.scrollback_lines = 0


def test_save_config_omits_unset_timeout(tmp_path: Path) -> None:
    path = save_config(AppConfig(), tmp_path / "nested" / "config.toml")

    text = path.read_text(encoding="utf-8")
    assert "command_timeout_seconds" not in text
    assert 'log_level = "INFO"' in text
