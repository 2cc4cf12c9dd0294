"""
Report use case — produce one full diagnostic report.

This is the top-level orchestrator: banner, every selected section in
catalog order, completion banner. Individual probes may fail in any
number; the report still completes with exit code 0. Only a report
destination that cannot be written makes the run fail.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from typing import TextIO

from sysreport.adapters.base import DEFAULT_TIMEOUT, Availability, CommandRunner
from sysreport.adapters.shell.availability import is_available
from sysreport.core.config.catalog_loader import load_catalog, select_sections
from sysreport.core.engine.executor import execute
from sysreport.core.engine.renderer import (
    DELIMITER,
    OutputWriteError,
    RenderStats,
    ReportStream,
    render_section,
)
from sysreport.core.models.privilege import PrivilegeContext, detect_privilege
from sysreport.core.models.probe import Catalog, Probe
from sysreport.core.reliability.budget import RunBudget

logger = logging.getLogger(__name__)

REPORT_TITLE = "=== System Diagnostics Report ==="
COMPLETION_LINE = "=== System information collection completed ==="
UNKNOWN = "Unknown"

_USER_PROBE = Probe(command="whoami", fallback=Probe(command="id -un"))
_HOSTNAME_PROBE = Probe(command="hostname -f", fallback=Probe(command="hostname"))
_KERNEL_PROBE = Probe(command="uname -srmp", fallback=Probe(command="uname -sr"))


@dataclass
class ReportOutcome:
    """Result of one report run."""

    exit_code: int = 0
    stats: RenderStats = field(default_factory=RenderStats)
    sections_rendered: int = 0
    stop_reason: str = ""
    error: str | None = None


def _local_now() -> datetime:
    return datetime.now().astimezone()


def generate_report(
    out: TextIO,
    *,
    catalog: Catalog | None = None,
    sections: list[str] | None = None,
    ctx: PrivilegeContext | None = None,
    runner: CommandRunner | None = None,
    availability: Availability = is_available,
    timeout: float = DEFAULT_TIMEOUT,
    budget_seconds: float | None = None,
    now: Callable[[], datetime] = _local_now,
    path_exists: Callable[[str], bool] = os.path.exists,
) -> ReportOutcome:
    """Write a complete diagnostic report to ``out``.

    Args:
        out: Report destination (text stream).
        catalog: Probe catalog. If None, the built-in catalog.
        sections: Section names to include. None = all.
        ctx: Privilege context. If None, detected from the process.
        runner: Command runner. If None, a ShellCommandRunner.
        availability: Tool availability check.
        timeout: Base per-probe timeout in seconds.
        budget_seconds: Overall wall-clock budget, or None.
        now: Clock used for the banner timestamp.
        path_exists: Filesystem check for path-conditional probes.

    Returns:
        ReportOutcome; ``exit_code`` is 1 only if ``out`` could not be
        written.

    Raises:
        CatalogError: If the catalog or the section selection is invalid.
            Raised before anything is written.
    """
    catalog = catalog if catalog is not None else load_catalog()
    selected = select_sections(catalog, sections)
    ctx = ctx if ctx is not None else detect_privilege()

    budget = RunBudget(seconds=budget_seconds)
    stream = ReportStream(out)
    outcome = ReportOutcome()

    run_kwargs = {
        "runner": runner,
        "availability": availability,
        "timeout": timeout,
        "budget": budget,
    }

    try:
        _render_banner(stream, ctx, now, **run_kwargs)

        for number, section in selected:
            try:
                render_section(
                    section,
                    number,
                    ctx,
                    stream,
                    stats=outcome.stats,
                    path_exists=path_exists,
                    **run_kwargs,
                )
            except KeyboardInterrupt:
                budget.cancel("interrupted by user")
                outcome.stats.stop(budget.stop_reason)
            outcome.sections_rendered += 1

        outcome.stop_reason = outcome.stats.stop_reason
        _render_completion(stream, outcome.stop_reason)
        stream.flush()
    except OutputWriteError as e:
        logger.error("%s", e)
        outcome.exit_code = 1
        outcome.error = str(e)
        outcome.stop_reason = outcome.stats.stop_reason
        return outcome

    stats = outcome.stats
    logger.info(
        "Report complete: %d probes, %d ok, %d failed, %d not installed, %d skipped",
        stats.total,
        stats.succeeded,
        stats.failed,
        stats.not_installed,
        stats.skipped,
    )
    return outcome


def _banner_value(
    probe: Probe,
    ctx: PrivilegeContext,
    budget: RunBudget,
    default: str = UNKNOWN,
    **run_kwargs,
) -> str:
    """First line of a banner probe's output, best-effort."""
    if budget.stopped:
        return default
    try:
        result = execute(probe, ctx, budget=budget, **run_kwargs)
    except KeyboardInterrupt:
        budget.cancel("interrupted by user")
        return default
    if not result.ok:
        return default
    lines = result.stdout.strip().splitlines()
    return lines[0].strip() if lines else default


def _render_banner(
    stream: ReportStream,
    ctx: PrivilegeContext,
    now: Callable[[], datetime],
    *,
    budget: RunBudget,
    **run_kwargs,
) -> None:
    user = _banner_value(_USER_PROBE, ctx, budget, default=ctx.user or UNKNOWN, **run_kwargs)
    hostname = _banner_value(_HOSTNAME_PROBE, ctx, budget, **run_kwargs)
    kernel = _banner_value(_KERNEL_PROBE, ctx, budget, **run_kwargs)

    stream.line(REPORT_TITLE)
    stream.line(f"Generated on: {now().strftime('%Y-%m-%d %H:%M:%S %Z').strip()}")
    stream.line(f"Running as: {user}")
    stream.line(f"Hostname: {hostname}")
    stream.line(f"Kernel: {kernel}")
    if not ctx.is_elevated:
        if ctx.escalation_available:
            stream.line("Privileges: unprivileged, elevated probes run through sudo -n")
        else:
            stream.line("Privileges: unprivileged, no sudo; elevated probes are best-effort")
    stream.line(DELIMITER)


def _render_completion(stream: ReportStream, stop_reason: str) -> None:
    stream.line()
    if stop_reason:
        stream.line(f"Report incomplete: {stop_reason}")
    stream.line(COMPLETION_LINE)
