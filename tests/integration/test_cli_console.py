from __future__ import annotations

import io
from pathlib import Path

from termdeck import cli


def test_console_host_runs_commands_until_exit(tmp_path: Path, posix_shell: str) -> None:
    stdin = io.StringIO("echo hello\necho nope >&2\nexit\necho after-exit\n")
    stdout = io.StringIO()

    code = cli.main(
        ["--shell", posix_shell, "--cwd", str(tmp_path), "--log-file", str(tmp_path / "termdeck.log")],
        stdin=stdin,
        stdout=stdout,
    )

    output = stdout.getvalue().splitlines()
    assert code == 0
    assert "Shell: /bin/sh" in output
    assert "hello" in output
    assert "[ERROR] nope" in output
    assert output.count("Command completed successfully") == 2
    assert "after-exit" not in "\n".join(output)


def test_console_host_stops_at_eof(tmp_path: Path, posix_shell: str) -> None:
    stdin = io.StringIO("help\n")
    stdout = io.StringIO()

    code = cli.main(
        ["--shell", posix_shell, "--cwd", str(tmp_path), "--log-file", str(tmp_path / "termdeck.log")],
        stdin=stdin,
        stdout=stdout,
    )

    assert code == 0
    assert "Available Commands:" in stdout.getvalue()
