"""Platform shell resolution and command-line construction."""

from __future__ import annotations

import os
import shutil
import sys
from collections.abc import Callable, Mapping
from pathlib import PurePath
from typing import Protocol

SHELL_OVERRIDE_ENV = "TERMDECK_SHELL"
POSIX_FALLBACK_SHELL = "/bin/sh"
WINDOWS_FALLBACK_SHELL = "cmd.exe"

Which = Callable[[str], str | None]


class ShellResolver(Protocol):
    def default_shell(self) -> str: ...


class PosixShellResolver:
    def __init__(self, env: Mapping[str, str] | None = None) -> None:
        self._env = os.environ if env is None else env

    def default_shell(self) -> str:
        return self._env.get("SHELL", "").strip() or POSIX_FALLBACK_SHELL


class WindowsShellResolver:
    """Prefer PowerShell when it is on PATH, otherwise cmd.exe."""

    def __init__(self, which: Which | None = None) -> None:
        self._which = which or shutil.which

    def default_shell(self) -> str:
        return self._which("powershell.exe") or WINDOWS_FALLBACK_SHELL


def resolver_for_platform(platform: str | None = None) -> ShellResolver:
    current = platform or sys.platform
    if current.startswith("win"):
        return WindowsShellResolver()
    return PosixShellResolver()


def resolve_default_shell(
    *,
    env: Mapping[str, str] | None = None,
    resolver: ShellResolver | None = None,
) -> str:
    """Return the shell for a new session, honouring ``TERMDECK_SHELL`` first."""
    source = os.environ if env is None else env
    override = source.get(SHELL_OVERRIDE_ENV, "").strip()
    if override:
        return override
    return (resolver or resolver_for_platform()).default_shell()


def _shell_name(shell_path: str) -> str:
    name = PurePath(shell_path.replace("\\", "/")).name.lower()
    if name.endswith(".exe"):
        name = name[: -len(".exe")]
    return name


def build_shell_command(shell_path: str, command: str) -> list[str]:
    name = _shell_name(shell_path)
    if name == "cmd":
        return [shell_path, "/C", command]
    if name in {"powershell", "pwsh"}:
        return [shell_path, "-NoLogo", "-NoProfile", "-Command", command]
    return [shell_path, "-c", command]


def home_directory(env: Mapping[str, str] | None = None) -> str:
    source = os.environ if env is None else env
    for key in ("HOME", "USERPROFILE"):
        value = source.get(key, "").strip()
        if value:
            return value
    return os.path.expanduser("~")
