"""
Outcome and result models — the execution contract.

``CommandOutcome`` is what a runner reports for one spawned command.
``ExecutionResult`` is what the executor reports for one probe, after
escalation policy and fallbacks have been applied.

Neither the runner nor the executor raises: every failure is captured
in these models.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any, Literal

from pydantic import BaseModel


class ExitStatus(StrEnum):
    """Overall status of a probe execution."""

    SUCCESS = "success"
    FAILURE = "failure"
    NOT_ATTEMPTED = "not_attempted"


class FailureKind(StrEnum):
    """Why a probe did not produce output."""

    TOOL_UNAVAILABLE = "tool_unavailable"
    EXECUTION_FAILURE = "execution_failure"
    PERMISSION_DENIED = "permission_denied"
    TIMEOUT = "timeout"


class CommandOutcome(BaseModel):
    """Result of spawning one command line."""

    status: Literal["ok", "failed", "timeout", "denied"] = "ok"
    stdout: str = ""
    stderr: str = ""
    return_code: int | None = None
    duration_ms: int = 0
    escalated: bool = False
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.status == "ok"

    @classmethod
    def success(cls, stdout: str = "", **kwargs: Any) -> CommandOutcome:
        """Create a success outcome."""
        return cls(status="ok", stdout=stdout, return_code=0, **kwargs)

    @classmethod
    def failure(cls, error: str, **kwargs: Any) -> CommandOutcome:
        """Create a failure outcome."""
        return cls(status="failed", error=error, **kwargs)


class ExecutionResult(BaseModel):
    """Result of executing a probe and its fallback chain.

    ``command`` is the literal command line that produced this result:
    the fallback's when ``used_fallback`` is set.
    """

    command: str
    exit_status: ExitStatus = ExitStatus.SUCCESS
    stdout: str = ""
    used_fallback: bool = False
    failure: FailureKind | None = None

    escalated: bool = False
    return_code: int | None = None
    stderr: str = ""
    error: str | None = None
    duration_ms: int = 0
    attempts: int = 0

    @property
    def ok(self) -> bool:
        """Whether the probe produced output."""
        return self.exit_status == ExitStatus.SUCCESS

    @property
    def failed(self) -> bool:
        """Whether the probe ran and failed."""
        return self.exit_status == ExitStatus.FAILURE

    @classmethod
    def success(cls, command: str, stdout: str = "", **kwargs: Any) -> ExecutionResult:
        """Create a success result."""
        return cls(
            command=command,
            exit_status=ExitStatus.SUCCESS,
            stdout=stdout,
            **kwargs,
        )

    @classmethod
    def failure_of(
        cls,
        command: str,
        kind: FailureKind,
        error: str = "",
        **kwargs: Any,
    ) -> ExecutionResult:
        """Create a failure result."""
        return cls(
            command=command,
            exit_status=ExitStatus.FAILURE,
            failure=kind,
            error=error or None,
            **kwargs,
        )

    @classmethod
    def not_attempted(
        cls,
        command: str,
        kind: FailureKind = FailureKind.TOOL_UNAVAILABLE,
        reason: str = "",
        **kwargs: Any,
    ) -> ExecutionResult:
        """Create a result for a probe that was never spawned."""
        return cls(
            command=command,
            exit_status=ExitStatus.NOT_ATTEMPTED,
            failure=kind,
            error=reason or None,
            **kwargs,
        )
