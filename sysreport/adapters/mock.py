"""
Mock runner and availability — test doubles for host state.

Used by the test suite and by ``sysreport report --mock`` to render
a complete report without spawning anything. Both doubles record
every call so tests can assert on what was (or was not) attempted.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from sysreport.adapters.base import DEFAULT_TIMEOUT, CommandRunner
from sysreport.core.models.result import CommandOutcome


@dataclass(frozen=True)
class RunCall:
    """One recorded ``MockRunner.run`` invocation."""

    command: str
    escalate: bool
    timeout: float


class MockRunner(CommandRunner):
    """Universal mock runner.

    By default every command succeeds and echoes ``[mock] <command>``.
    Responses can be set per command, optionally only for the
    escalated or the direct form.
    """

    def __init__(
        self,
        runner_name: str = "mock",
        default_output: str | None = None,
    ):
        self._name = runner_name
        self._default_output = default_output
        self._responses: dict[tuple[str, bool | None], CommandOutcome] = {}
        self._call_log: list[RunCall] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def call_log(self) -> list[RunCall]:
        """All calls this mock has received."""
        return self._call_log

    @property
    def call_count(self) -> int:
        return len(self._call_log)

    @property
    def commands(self) -> list[str]:
        """Command lines received, in call order."""
        return [c.command for c in self._call_log]

    def set_response(
        self,
        command: str,
        outcome: CommandOutcome,
        escalate: bool | None = None,
    ) -> None:
        """Set the outcome for a command (``escalate=None`` matches both forms)."""
        self._responses[(command, escalate)] = outcome

    def set_output(self, command: str, stdout: str, escalate: bool | None = None) -> None:
        """Configure a command to succeed with the given output."""
        self.set_response(command, CommandOutcome.success(stdout=stdout), escalate)

    def set_failure(
        self,
        command: str,
        error: str = "Mock failure",
        return_code: int = 1,
        stderr: str = "",
        escalate: bool | None = None,
    ) -> None:
        """Configure a command to exit non-zero."""
        self.set_response(
            command,
            CommandOutcome.failure(error=error, return_code=return_code, stderr=stderr),
            escalate,
        )

    def set_timeout(self, command: str) -> None:
        """Configure a command to time out."""
        self.set_response(command, CommandOutcome(status="timeout", error="Mock timeout"))

    def set_denied(self, command: str) -> None:
        """Configure the escalated form of a command to be refused by sudo."""
        self.set_response(
            command,
            CommandOutcome(
                status="denied",
                return_code=1,
                stderr="sudo: a password is required",
                error="sudo refused to run the command without a password",
            ),
            escalate=True,
        )

    def run(
        self,
        command: str,
        *,
        escalate: bool = False,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> CommandOutcome:
        self._call_log.append(RunCall(command=command, escalate=escalate, timeout=timeout))

        outcome = self._responses.get((command, escalate))
        if outcome is None:
            outcome = self._responses.get((command, None))
        if outcome is not None:
            return outcome.model_copy(update={"escalated": escalate})

        output = self._default_output
        if output is None:
            output = f"[mock] {command}\n"
        return CommandOutcome.success(stdout=output, escalated=escalate)

    def reset(self) -> None:
        """Clear call log and custom responses."""
        self._call_log.clear()
        self._responses.clear()


class MockAvailability:
    """Availability spy: every tool is installed unless listed as missing."""

    def __init__(self, missing: Iterable[str] = (), available: bool = True):
        self._missing = set(missing)
        self._available = available
        self.checked: list[str] = []

    def __call__(self, tool: str) -> bool:
        self.checked.append(tool)
        if tool in self._missing:
            return False
        return self._available

    def set_missing(self, *tools: str) -> None:
        self._missing.update(tools)
