"""
Shell command runner — the single place a probe's process is spawned.

Commands run through ``sh -c`` so catalog entries can use pipes and
redirections. Escalated commands go through ``sudo -n``: the ``-n``
flag makes sudo fail instead of prompting, so a report never stalls
on a password prompt halfway through.

Each command runs in its own session. On timeout or interrupt the
whole process group is terminated, which also stops the far end of
a pipeline.
"""

from __future__ import annotations

import logging
import os
import signal
import subprocess
import time

from sysreport.adapters.base import DEFAULT_TIMEOUT, CommandRunner
from sysreport.core.models.privilege import ESCALATION_HELPER
from sysreport.core.models.result import CommandOutcome

logger = logging.getLogger(__name__)

# Seconds to wait for a terminated process group before escalating to SIGKILL
_KILL_GRACE = 2.0

# sh exit code for "command not found"
_NOT_FOUND = 127

# sudo -n messages meaning "would have prompted" or "not allowed"
_SUDO_REFUSALS = (
    "a password is required",
    "a terminal is required",
    "is not in the sudoers",
    "may not run sudo",
    "not allowed to execute",
)


class ShellCommandRunner(CommandRunner):
    """Run command lines on the local host."""

    def __init__(self, shell: str = "sh"):
        self._shell = shell

    @property
    def name(self) -> str:
        return "shell"

    def build_argv(self, command: str, escalate: bool = False) -> list[str]:
        """The argv actually spawned for a command line."""
        argv = [self._shell, "-c", command]
        if escalate:
            argv = [ESCALATION_HELPER, "-n", *argv]
        return argv

    def run(
        self,
        command: str,
        *,
        escalate: bool = False,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> CommandOutcome:
        argv = self.build_argv(command, escalate)
        logger.debug("Executing: %s (escalate=%s, timeout=%ss)", command, escalate, timeout)
        start = time.monotonic()

        try:
            proc = subprocess.Popen(
                argv,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",
                start_new_session=True,
            )
        except Exception as e:
            return CommandOutcome.failure(
                error=f"Command execution error: {e}",
                escalated=escalate,
            )

        with proc:
            try:
                stdout, stderr = proc.communicate(timeout=timeout)
            except subprocess.TimeoutExpired:
                _terminate(proc)
                return CommandOutcome(
                    status="timeout",
                    error=f"Command timed out after {timeout:g}s",
                    escalated=escalate,
                    duration_ms=_elapsed_ms(start),
                )
            except KeyboardInterrupt:
                _terminate(proc)
                raise

        elapsed_ms = _elapsed_ms(start)
        stdout = stdout or ""
        stderr = stderr or ""

        if proc.returncode == 0:
            return CommandOutcome.success(
                stdout=stdout,
                stderr=stderr,
                escalated=escalate,
                duration_ms=elapsed_ms,
            )

        if escalate and _sudo_refused(stderr):
            return CommandOutcome(
                status="denied",
                stderr=stderr,
                return_code=proc.returncode,
                escalated=True,
                duration_ms=elapsed_ms,
                error="sudo refused to run the command without a password",
            )

        if proc.returncode == _NOT_FOUND:
            error = "command not found"
        else:
            error = f"Command exited with code {proc.returncode}"

        return CommandOutcome.failure(
            error=error,
            stdout=stdout,
            stderr=stderr,
            return_code=proc.returncode,
            escalated=escalate,
            duration_ms=elapsed_ms,
        )


def _sudo_refused(stderr: str) -> bool:
    lowered = stderr.lower()
    return any(marker in lowered for marker in _SUDO_REFUSALS)


def _terminate(proc: subprocess.Popen) -> None:
    """Stop a command's whole process group, politely first."""
    for sig in (signal.SIGTERM, signal.SIGKILL):
        try:
            os.killpg(proc.pid, sig)
        except (ProcessLookupError, PermissionError):
            proc.kill()
        try:
            proc.communicate(timeout=_KILL_GRACE)
            return
        except subprocess.TimeoutExpired:
            continue
    logger.warning("Process group %d did not exit after SIGKILL", proc.pid)


def _elapsed_ms(start: float) -> int:
    return int((time.monotonic() - start) * 1000)
