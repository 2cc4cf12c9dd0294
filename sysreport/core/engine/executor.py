"""
Scoped executor — run one probe, its escalation policy and fallbacks.

Flow for each link of a probe's fallback chain:
    available? → escalate? → run → success | classify failure → next link

``execute`` always returns an ``ExecutionResult``. A failing, missing,
hanging or refused command is a result, never an exception, so one
broken subsystem cannot hide the state of the others.
"""

from __future__ import annotations

import logging

from sysreport.adapters.base import DEFAULT_TIMEOUT, Availability, CommandRunner
from sysreport.adapters.shell.availability import is_available
from sysreport.adapters.shell.command import ShellCommandRunner
from sysreport.core.models.privilege import PrivilegeContext
from sysreport.core.models.probe import Probe
from sysreport.core.models.result import (
    CommandOutcome,
    ExecutionResult,
    ExitStatus,
    FailureKind,
)
from sysreport.core.reliability.budget import RunBudget

logger = logging.getLogger(__name__)


def probe_timeout(probe: Probe, timeout: float, budget: RunBudget | None = None) -> float:
    """Effective timeout for one attempt of ``probe``.

    Sampling probes declare how long they block on purpose; that time
    is added on top of the base timeout so it is not taken for a hang.
    """
    effective = timeout + max(probe.expected_seconds, 0.0)
    if budget is not None:
        effective = budget.clip(effective)
    return effective


def chain_available(probe: Probe, availability: Availability = is_available) -> bool:
    """Whether any link of the fallback chain has its tool installed."""
    return any(_safe_available(availability, p.governing_tool) for p in probe.chain())


def execute(
    probe: Probe,
    ctx: PrivilegeContext,
    *,
    runner: CommandRunner | None = None,
    availability: Availability = is_available,
    timeout: float = DEFAULT_TIMEOUT,
    budget: RunBudget | None = None,
) -> ExecutionResult:
    """Execute a probe, falling back along its chain on failure.

    Args:
        probe: The probe to run.
        ctx: Privilege context of the run.
        runner: Command runner (default: a ShellCommandRunner).
        availability: Tool availability check.
        timeout: Base per-attempt timeout in seconds.
        budget: Optional run budget used to clip timeouts.

    Returns:
        The result of the first successful link, or the most relevant
        failure when every link failed.
    """
    runner = runner or ShellCommandRunner()
    try:
        return _execute_link(
            probe, ctx, runner, availability, timeout, budget,
            used_fallback=False, attempts=0,
        )
    except Exception as e:
        # Runners never raise; anything else is reported as a probe failure
        logger.error("Probe %r raised during execution: %s", probe.command, e)
        return ExecutionResult.failure_of(
            command=probe.command,
            kind=FailureKind.EXECUTION_FAILURE,
            error=f"Unexpected error: {e}",
        )


def _execute_link(
    probe: Probe,
    ctx: PrivilegeContext,
    runner: CommandRunner,
    availability: Availability,
    timeout: float,
    budget: RunBudget | None,
    *,
    used_fallback: bool,
    attempts: int,
) -> ExecutionResult:
    tool = probe.governing_tool
    if _safe_available(availability, tool):
        result = _attempt(probe, ctx, runner, timeout, budget, used_fallback, attempts + 1)
        if result.ok:
            return result
    else:
        logger.debug("Tool %r not installed, skipping %r", tool, probe.command)
        result = ExecutionResult.not_attempted(
            command=probe.command,
            reason=f"{tool} is not installed",
            used_fallback=used_fallback,
            attempts=attempts,
        )

    if probe.fallback is None:
        return result

    if budget is not None and budget.stopped:
        return result

    logger.info(
        "Probe %r did not succeed (%s), trying fallback %r",
        probe.command,
        result.failure,
        probe.fallback.command,
    )
    fallback = _execute_link(
        probe.fallback, ctx, runner, availability, timeout, budget,
        used_fallback=True, attempts=result.attempts,
    )

    # A fallback that could not even be tried reports nothing new: keep
    # this link's own failure, or its not-attempted result when the
    # whole rest of the chain is missing too
    if fallback.exit_status == ExitStatus.NOT_ATTEMPTED:
        return result.model_copy(update={"attempts": fallback.attempts})
    return fallback


def _attempt(
    probe: Probe,
    ctx: PrivilegeContext,
    runner: CommandRunner,
    timeout: float,
    budget: RunBudget | None,
    used_fallback: bool,
    attempts: int,
) -> ExecutionResult:
    """Spawn one link of the chain."""
    escalate = False
    if probe.requires_elevation and not ctx.is_elevated:
        if ctx.escalation_available:
            escalate = True
        else:
            logger.debug("No escalation helper, running %r unescalated", probe.command)

    effective_timeout = probe_timeout(probe, timeout, budget)
    if probe.expected_seconds:
        logger.info(
            "Running %r (samples for ~%gs)", probe.command, probe.expected_seconds
        )

    outcome = runner.run(probe.command, escalate=escalate, timeout=effective_timeout)

    if outcome.stderr:
        logger.debug("stderr from %r: %s", probe.command, outcome.stderr.strip())

    common = {
        "used_fallback": used_fallback,
        "escalated": escalate,
        "return_code": outcome.return_code,
        "stderr": outcome.stderr,
        "duration_ms": outcome.duration_ms,
        "attempts": attempts,
    }

    if outcome.ok:
        return ExecutionResult.success(command=probe.command, stdout=outcome.stdout, **common)

    kind = _classify(probe, ctx, outcome, escalate)
    logger.debug("Probe %r failed: %s (%s)", probe.command, kind, outcome.error)
    return ExecutionResult.failure_of(
        command=probe.command,
        kind=kind,
        error=outcome.error or "",
        **common,
    )


def _classify(
    probe: Probe,
    ctx: PrivilegeContext,
    outcome: CommandOutcome,
    escalated: bool,
) -> FailureKind:
    if outcome.status == "timeout":
        return FailureKind.TIMEOUT
    if outcome.status == "denied":
        return FailureKind.PERMISSION_DENIED
    if probe.requires_elevation and not ctx.is_elevated and not escalated:
        return FailureKind.PERMISSION_DENIED
    return FailureKind.EXECUTION_FAILURE


def _safe_available(availability: Availability, tool: str) -> bool:
    try:
        return bool(availability(tool))
    except Exception as e:
        logger.debug("Availability check for %r raised: %s", tool, e)
        return False
