"""Child process lifecycle for external terminal commands."""

from __future__ import annotations

import logging as py_logging
import os
import signal
import subprocess
import sys
import threading
from collections.abc import Callable

from termdeck.terminal.buffer import OutputBuffer
from termdeck.terminal.models import ProcessHandle, ProcessStatus, Severity
from termdeck.terminal.session import Session
from termdeck.terminal.shell import build_shell_command
from termdeck.terminal.streams import CompletionBarrier, StreamReader

logger = py_logging.getLogger(__name__)

DEFAULT_KILL_GRACE_SECONDS = 2.0
ALREADY_RUNNING_MESSAGE = "Error: a command is already running"
SUCCESS_MESSAGE = "Command completed successfully"

Spawn = Callable[..., "subprocess.Popen[bytes]"]

_IS_WINDOWS = sys.platform.startswith("win")


def describe_exit(returncode: int) -> str:
    if returncode < 0:
        try:
            name = signal.Signals(-returncode).name
        except ValueError:
            name = str(-returncode)
        return f"terminated by signal {name}"
    return f"exit status {returncode}"


class ProcessRunner:
    """Spawns at most one shell command per session and streams its output.

    ``run`` returns as soon as the child is started. Two ``StreamReader``
    threads drain stdout and stderr, and a finalizer thread reports the exit
    status once both readers hit EOF and the process has exited.
    """

    def __init__(
        self,
        session: Session,
        buffer: OutputBuffer,
        *,
        spawn: Spawn | None = None,
        timeout_seconds: float | None = None,
        kill_grace_seconds: float = DEFAULT_KILL_GRACE_SECONDS,
        env: dict[str, str] | None = None,
    ) -> None:
        self.session = session
        self.buffer = buffer
        self.timeout_seconds = timeout_seconds
        self.kill_grace_seconds = kill_grace_seconds
        self._spawn = spawn or subprocess.Popen
        self._env = env
        self._spawn_lock = threading.Lock()
        self._idle = threading.Event()
        self._idle.set()

    @property
    def is_running(self) -> bool:
        return self.session.active_process is not None

    def run(self, command_text: str) -> ProcessHandle | None:
        with self._spawn_lock:
            if self.session.active_process is not None:
                logger.info("process-reject reason=busy command=%s", command_text)
                self.buffer.append_error(ALREADY_RUNNING_MESSAGE)
                return None

            cwd = self.session.working_directory
            argv = build_shell_command(self.session.shell_path, command_text)
            kwargs: dict[str, object] = {
                "cwd": cwd,
                "stdin": subprocess.DEVNULL,
                "stdout": subprocess.PIPE,
                "stderr": subprocess.PIPE,
                "env": self._env,
            }
            if not _IS_WINDOWS:
                kwargs["start_new_session"] = True
            try:
                process = self._spawn(argv, **kwargs)
            except (OSError, ValueError) as exc:
                logger.warning("process-spawn failed argv=%s cwd=%s error=%s", argv, cwd, exc)
                self.buffer.append_error(f"Error starting command: {exc}")
                return None

            if process.stdout is None or process.stderr is None:
                logger.error("process-pipes missing pid=%s", process.pid)
                self.buffer.append_error("Error creating output pipes for command")
                self._discard(process)
                return None

            handle = ProcessHandle(command=command_text, cwd=cwd, argv=tuple(argv), process=process)
            self.session.claim(handle)
            self._idle.clear()

        logger.info("process-spawn pid=%s cwd=%s command=%s", handle.pid, cwd, command_text)
        barrier = CompletionBarrier(2)
        readers = [
            StreamReader(process.stdout, self.buffer, severity=Severity.NORMAL, barrier=barrier, name="stdout"),
            StreamReader(process.stderr, self.buffer, severity=Severity.ERROR, barrier=barrier, name="stderr"),
        ]
        for reader in readers:
            reader.start()
        threading.Thread(
            target=self._finalize,
            args=(handle, barrier),
            name=f"termdeck-wait-{handle.pid}",
            daemon=True,
        ).start()
        return handle

    def kill(self) -> bool:
        """Request termination of the active process; safe to call at any time."""
        handle = self.session.active_process
        if handle is None:
            return False
        try:
            delivered = self._signal(handle, force=False)
        except OSError as exc:
            logger.debug("process-kill ignored pid=%s error=%s", handle.pid, exc)
            return False
        if not delivered:
            logger.debug("process-kill no-op pid=%s reason=exited", handle.pid)
            return False
        handle.kill_requested = True
        logger.info("process-kill pid=%s", handle.pid)
        timer = threading.Timer(self.kill_grace_seconds, self._force_kill, args=(handle,))
        timer.daemon = True
        timer.start()
        return True

    def wait(self, timeout: float | None = None) -> bool:
        """Block until no command is running."""
        return self._idle.wait(timeout)

    def _finalize(self, handle: ProcessHandle, barrier: CompletionBarrier) -> None:
        process = handle.process
        try:
            try:
                returncode = process.wait(timeout=self.timeout_seconds)
            except subprocess.TimeoutExpired:
                handle.timed_out = True
                logger.warning("process-timeout pid=%s timeout=%ss", handle.pid, self.timeout_seconds)
                self.kill()
                returncode = process.wait()

            self._drain(handle, barrier)

            handle.returncode = returncode
            if returncode == 0:
                handle.status = ProcessStatus.SUCCESS
                self.buffer.append(SUCCESS_MESSAGE)
            else:
                handle.status = ProcessStatus.FAILURE
                detail = describe_exit(returncode)
                if handle.timed_out:
                    detail = f"timed out after {self.timeout_seconds}s ({detail})"
                self.buffer.append(f"Command finished with error: {detail}", Severity.ERROR)
            logger.info("process-exit pid=%s returncode=%s", handle.pid, returncode)
        except Exception as exc:
            handle.status = ProcessStatus.FAILURE
            logger.exception("process-finalize failed pid=%s", handle.pid)
            self.buffer.append(f"Command finished with error: {exc}", Severity.ERROR)
        finally:
            self.session.release(handle)
            self._idle.set()

    def _drain(self, handle: ProcessHandle, barrier: CompletionBarrier) -> None:
        """Wait for both readers, terminating processes that keep the pipes open.

        A backgrounded grandchild inherits stdout and stderr, so the shell
        exiting does not mean the readers reach EOF.
        """
        if barrier.wait(self.kill_grace_seconds):
            return
        logger.warning("process-streams still open after exit pid=%s", handle.pid)
        for force in (False, True):
            try:
                self._signal(handle, force=force)
            except OSError as exc:
                logger.debug("process-drain signal ignored pid=%s error=%s", handle.pid, exc)
            if barrier.wait(self.kill_grace_seconds):
                return
        logger.error("process-streams abandoned pid=%s remaining=%s", handle.pid, barrier.remaining)

    def _force_kill(self, handle: ProcessHandle) -> None:
        if self.session.active_process is not handle:
            return
        try:
            if self._signal(handle, force=True):
                logger.warning("process-kill escalated pid=%s", handle.pid)
        except OSError as exc:
            logger.debug("process-force-kill ignored pid=%s error=%s", handle.pid, exc)

    def _signal(self, handle: ProcessHandle, *, force: bool) -> bool:
        """Signal the command's process group; False when nothing is left to signal."""
        if _IS_WINDOWS:
            if not handle.is_running():
                return False
            if force:
                handle.process.kill()
            else:
                handle.process.terminate()
            return True
        sig = signal.SIGKILL if force else signal.SIGTERM
        try:
            os.killpg(handle.pid, sig)
        except ProcessLookupError:
            return False
        except PermissionError:
            if not handle.is_running():
                return False
            handle.process.send_signal(sig)
        return True

    def _discard(self, process: subprocess.Popen[bytes]) -> None:
        try:
            process.kill()
            process.wait(timeout=self.kill_grace_seconds)
        except (OSError, subprocess.TimeoutExpired) as exc:
            logger.debug("process-discard failed error=%s", exc)
