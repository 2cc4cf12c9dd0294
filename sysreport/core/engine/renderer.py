"""
Section renderer — turns sections of probes into report text.

Layout:

    ####################################################################
    # 2. DISK & FILESYSTEM
    ####################################################################

    --- 2.1 Block Devices ---

    Block devices
    Command: lsblk
    ----------------------------------------
    <stdout, or a failure notice>
    ----------------------------------------

Every header is written even when every probe under it fails, so a
reader can tell "not installed" from "failed" from "skipped".
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TextIO

from sysreport.adapters.base import DEFAULT_TIMEOUT, Availability, CommandRunner
from sysreport.adapters.shell.availability import is_available
from sysreport.core.engine.executor import chain_available, execute
from sysreport.core.models.privilege import PrivilegeContext
from sysreport.core.models.probe import Probe, Section
from sysreport.core.models.result import ExecutionResult, FailureKind
from sysreport.core.reliability.budget import RunBudget

logger = logging.getLogger(__name__)

SECTION_RULE = "#" * 68
DELIMITER = "-" * 40


class OutputWriteError(Exception):
    """Raised when the report destination cannot be written."""


class ReportStream:
    """Append-only report output.

    Any failure to write is fatal for the report and surfaces as
    ``OutputWriteError``; nothing else escapes the engine.
    """

    def __init__(self, out: TextIO):
        self._out = out
        self.lines_written = 0

    def line(self, text: str = "") -> None:
        """Write one line (a trailing newline is added)."""
        self.write(text + "\n")

    def write(self, text: str) -> None:
        try:
            try:
                self._out.write(text)
            except UnicodeEncodeError:
                # Probe output the destination charset cannot hold
                self._out.write(self._encodable(text))
        except (OSError, ValueError) as e:
            raise OutputWriteError(f"Cannot write report: {e}") from e
        self.lines_written += text.count("\n")

    def _encodable(self, text: str) -> str:
        encoding = getattr(self._out, "encoding", None) or "utf-8"
        return text.encode(encoding, errors="replace").decode(encoding)

    def flush(self) -> None:
        try:
            self._out.flush()
        except (OSError, ValueError) as e:
            raise OutputWriteError(f"Cannot flush report: {e}") from e


@dataclass
class RenderStats:
    """Per-run tally of what happened to each probe."""

    results: list[ExecutionResult] = field(default_factory=list)
    not_installed: int = 0
    skipped: int = 0
    stop_reason: str = ""  # set once a probe is actually left out

    def stop(self, reason: str) -> None:
        """Record why probes were left out; the first reason wins."""
        if not self.stop_reason:
            self.stop_reason = reason

    @property
    def executed(self) -> int:
        return len(self.results)

    @property
    def succeeded(self) -> int:
        return sum(1 for r in self.results if r.ok)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if not r.ok)

    @property
    def fallbacks_used(self) -> int:
        return sum(1 for r in self.results if r.used_fallback)

    @property
    def total(self) -> int:
        return self.executed + self.not_installed + self.skipped


def render_section_header(stream: ReportStream, number: int, title: str) -> None:
    stream.line()
    stream.line(SECTION_RULE)
    stream.line(f"# {number}. {title}")
    stream.line(SECTION_RULE)


def render_subsection_header(stream: ReportStream, label: str) -> None:
    stream.line()
    stream.line(f"--- {label} ---")


def failure_notice(result: ExecutionResult, ctx: PrivilegeContext) -> str:
    """Human-readable line replacing the output of a failed probe."""
    kind = result.failure

    if kind == FailureKind.PERMISSION_DENIED:
        if result.escalated:
            return (
                "Permission denied: sudo needs a password. "
                "Re-run as root or refresh sudo credentials (sudo -v) first."
            )
        if ctx.escalation_available:
            return "Permission denied: requires elevated privileges. Re-run as root."
        return (
            "Permission denied: requires elevated privileges. "
            "Re-run as root or install sudo."
        )

    if kind == FailureKind.TIMEOUT:
        return result.error or "Command timed out"

    if kind == FailureKind.TOOL_UNAVAILABLE:
        return f"Command unavailable: {result.error or result.command}"

    if result.escalated:
        detail = f" (exit code {result.return_code})" if result.return_code is not None else ""
        return f"Command failed or requires elevated privileges{detail}"
    if result.return_code == 127:
        return "Command failed: command not found"
    if result.return_code is not None:
        return f"Command failed (exit code {result.return_code})"
    return f"Command failed: {result.error}" if result.error else "Command failed"


def render_probe(
    stream: ReportStream,
    probe: Probe,
    ctx: PrivilegeContext,
    *,
    runner: CommandRunner | None = None,
    availability: Availability = is_available,
    timeout: float = DEFAULT_TIMEOUT,
    budget: RunBudget | None = None,
    stats: RenderStats | None = None,
    path_exists: Callable[[str], bool] = os.path.exists,
) -> ExecutionResult | None:
    """Render one probe block. Returns None when nothing was executed."""
    stats = stats if stats is not None else RenderStats()

    if probe.requires_path and not path_exists(probe.requires_path):
        stream.line(f"Skipped: {probe.requires_path} not present ({probe.label})")
        stats.skipped += 1
        return None

    if not chain_available(probe, availability):
        tools = "/".join(dict.fromkeys(p.governing_tool for p in probe.chain()))
        notice = f"Not installed: {tools} ({probe.label})"
        hint = probe.hint()
        if hint:
            notice = f"{notice}. {hint}"
        stream.line(notice)
        stats.not_installed += 1
        return None

    result = execute(
        probe,
        ctx,
        runner=runner,
        availability=availability,
        timeout=timeout,
        budget=budget,
    )
    stats.results.append(result)

    label = probe.label
    if result.used_fallback:
        label = f"{label} (fallback)"

    stream.line()
    stream.line(label)
    stream.line(f"Command: {result.command}")
    stream.line(DELIMITER)
    if result.ok:
        output = result.stdout
        if not output.strip():
            stream.line("(no output)")
        else:
            stream.write(output if output.endswith("\n") else output + "\n")
    else:
        stream.line(failure_notice(result, ctx))
    stream.line(DELIMITER)
    return result


def render_section(
    section: Section,
    number: int,
    ctx: PrivilegeContext,
    stream: ReportStream,
    *,
    runner: CommandRunner | None = None,
    availability: Availability = is_available,
    timeout: float = DEFAULT_TIMEOUT,
    budget: RunBudget | None = None,
    stats: RenderStats | None = None,
    path_exists: Callable[[str], bool] = os.path.exists,
) -> RenderStats:
    """Render a section header, then each subsection in declaration order.

    A ``KeyboardInterrupt`` while a probe or a header is written
    cancels the budget: the remaining probes are not started, but
    their headers still appear, each subsection carrying a single
    "skipped" line.
    """
    stats = stats if stats is not None else RenderStats()
    budget = budget if budget is not None else RunBudget()

    logger.info("Rendering section %d: %s", number, section.title)
    _write_header(budget, render_section_header, stream, number, section.title)

    for sub_index, subsection in enumerate(section.subsections, start=1):
        _write_header(
            budget,
            render_subsection_header,
            stream,
            f"{number}.{sub_index} {subsection.title}",
        )

        if not subsection.probes:
            stream.line("No probes defined")
            continue

        for position, probe in enumerate(subsection.probes):
            if budget.stopped:
                stream.line(f"Skipped: {budget.stop_reason}")
                stats.skipped += len(subsection.probes) - position
                stats.stop(budget.stop_reason)
                break
            try:
                render_probe(
                    stream,
                    probe,
                    ctx,
                    runner=runner,
                    availability=availability,
                    timeout=timeout,
                    budget=budget,
                    stats=stats,
                    path_exists=path_exists,
                )
            except KeyboardInterrupt:
                budget.cancel("interrupted by user")
                stream.line()
                stream.line(probe.label)
                stream.line(f"Command: {probe.command}")
                stream.line(DELIMITER)
                stream.line("Interrupted by user")
                stream.line(DELIMITER)
                stats.skipped += 1
                stats.stop(budget.stop_reason)

    return stats


def _write_header(budget: RunBudget, write: Callable[..., None], *args) -> None:
    """Write a header even if the run is interrupted while writing it."""
    try:
        write(*args)
    except KeyboardInterrupt:
        budget.cancel("interrupted by user")
        write(*args)
