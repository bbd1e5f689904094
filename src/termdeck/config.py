"""XDG config loading/saving."""

from __future__ import annotations

import os
import sys
from contextlib import suppress
from pathlib import Path
from typing import Literal, cast

from pydantic import BaseModel, ConfigDict, Field, field_validator

if sys.version_info >= (3, 11):
    import tomllib
else:  # pragma: no cover
    import tomli as tomllib

from termdeck.errors import ExitCode, TermdeckError
from termdeck.logging import normalize_level

DEFAULT_CONFIG_PATH = Path("~/.config/termdeck/config.toml").expanduser()
DEFAULT_SCROLLBACK_LINES = 1000
DEFAULT_KILL_GRACE_SECONDS = 2.0
DEFAULT_LOG_LEVEL: Literal["DEBUG", "INFO", "WARN", "ERROR"] = "INFO"
MIN_SCROLLBACK_LINES = 10
MAX_SCROLLBACK_LINES = 100_000
SHELL_ENV = "TERMDECK_SHELL"
SCROLLBACK_ENV = "TERMDECK_SCROLLBACK"



class AppConfig(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    shell: str = ""
    working_directory: str = ""
    scrollback_lines: int = Field(
        default=DEFAULT_SCROLLBACK_LINES,
        ge=MIN_SCROLLBACK_LINES,
        le=MAX_SCROLLBACK_LINES,
    )
    command_timeout_seconds: float | None = Field(default=None, gt=0)
    kill_grace_seconds: float = Field(default=DEFAULT_KILL_GRACE_SECONDS, gt=0)
    log_level: Literal["DEBUG", "INFO", "WARN", "ERROR"] = DEFAULT_LOG_LEVEL

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: object) -> object:
        if isinstance(value, str):
            return normalize_level(value) or value
        return value


def get_config_path(path: str | Path | None = None) -> Path:
    if path is None:
        return DEFAULT_CONFIG_PATH
    return Path(path).expanduser()


def _escape(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')


def _toml_scalar(value: object) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str):
        return f'"{_escape(value)}"'
    raise TypeError(f"Unsupported TOML scalar type: {type(value)!r}")


def _positive_number(value: object) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if value <= 0:
        return None
    return float(value)


def _valid_scrollback(value: object) -> int | None:
    if isinstance(value, str):
        try:
            value = int(value.strip())
        except ValueError:
            return None
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    if MIN_SCROLLBACK_LINES <= value <= MAX_SCROLLBACK_LINES:
        return value
    return None


def _sanitize(raw: dict[str, object]) -> AppConfig:
    cfg = AppConfig()

    shell = raw.get("shell", cfg.shell)
    if isinstance(shell, str):
        cfg.shell = shell.strip()

    working_directory = raw.get("working_directory", cfg.working_directory)
    if isinstance(working_directory, str):
        cfg.working_directory = working_directory.strip()

    scrollback = _valid_scrollback(raw.get("scrollback_lines", cfg.scrollback_lines))
    if scrollback is not None:
        cfg.scrollback_lines = scrollback

    timeout = _positive_number(raw.get("command_timeout_seconds"))
    if timeout is not None:
        cfg.command_timeout_seconds = timeout

    grace = _positive_number(raw.get("kill_grace_seconds"))
    if grace is not None:
        cfg.kill_grace_seconds = grace

    log_level = raw.get("log_level", cfg.log_level)
    normalized = normalize_level(log_level) if isinstance(log_level, str) else None
    if normalized is not None:
        cfg.log_level = cast(Literal["DEBUG", "INFO", "WARN", "ERROR"], normalized)

    return cfg


def apply_env_overrides(config: AppConfig, env: dict[str, str] | None = None) -> AppConfig:
    source = os.environ if env is None else env
    shell = source.get(SHELL_ENV, "").strip()
    if shell:
        config.shell = shell
    scrollback = _valid_scrollback(source.get(SCROLLBACK_ENV, ""))
    if scrollback is not None:
        config.scrollback_lines = scrollback
    return config


def load_config(path: str | Path | None = None, *, env: dict[str, str] | None = None) -> AppConfig:
    resolved = get_config_path(path)
    if not resolved.exists():
        return apply_env_overrides(AppConfig(), env)
    try:
        with resolved.open("rb") as handle:
            raw = tomllib.load(handle)
    except (tomllib.TOMLDecodeError, OSError):
        return apply_env_overrides(AppConfig(), env)
    if not isinstance(raw, dict):
        return apply_env_overrides(AppConfig(), env)
    return apply_env_overrides(_sanitize(raw), env)


def save_config(config: AppConfig, path: str | Path | None = None) -> Path:
    resolved = get_config_path(path)
    try:
        resolved.parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise TermdeckError(
            f"Cannot create config directory: {resolved.parent}",
            code=ExitCode.CONFIG_ERROR,
            hint=str(exc) or "Check directory permissions.",
        ) from exc

    lines = [
        f"shell = {_toml_scalar(config.shell)}",
        f"working_directory = {_toml_scalar(config.working_directory)}",
        f"scrollback_lines = {_toml_scalar(config.scrollback_lines)}",
        f"kill_grace_seconds = {_toml_scalar(config.kill_grace_seconds)}",
        f"log_level = {_toml_scalar(config.log_level)}",
    ]
    if config.command_timeout_seconds is not None:
        lines.append(f"command_timeout_seconds = {_toml_scalar(config.command_timeout_seconds)}")

    resolved.write_text("\n".join(lines) + "\n", encoding="utf-8")
    with suppress(OSError):
        resolved.chmod(0o600)
    return resolved
