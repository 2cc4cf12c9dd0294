"""
Run budget — overall wall-clock limit and cancellation for one report.

States:
    RUNNING   → probes are issued normally.
    EXPIRED   → the wall-clock budget ran out.
    CANCELLED → an interrupt was received.

Once stopped, no new probe is started; the report still renders every
remaining header and its completion banner.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import StrEnum

logger = logging.getLogger(__name__)

# Per-probe timeouts are never clipped below this many seconds
MIN_PROBE_TIMEOUT = 1.0


class BudgetState(StrEnum):
    """Run budget states."""

    RUNNING = "running"
    EXPIRED = "expired"
    CANCELLED = "cancelled"


@dataclass
class RunBudget:
    """Wall-clock budget shared by every probe of one run.

    Args:
        seconds: Total budget, or None for no limit.
        clock: Monotonic clock (injectable for tests).
    """

    seconds: float | None = None
    clock: Callable[[], float] | None = None

    started_at: float = field(init=False)
    cancel_reason: str = field(init=False, default="")
    _cancelled: bool = field(init=False, default=False)

    def __post_init__(self) -> None:
        if self.clock is None:
            self.clock = time.monotonic
        self.started_at = self.clock()

    @property
    def deadline(self) -> float | None:
        if self.seconds is None:
            return None
        return self.started_at + self.seconds

    @property
    def state(self) -> BudgetState:
        if self._cancelled:
            return BudgetState.CANCELLED
        deadline = self.deadline
        if deadline is not None and self.clock() >= deadline:
            return BudgetState.EXPIRED
        return BudgetState.RUNNING

    @property
    def stopped(self) -> bool:
        """Whether new probes must no longer be issued."""
        return self.state != BudgetState.RUNNING

    @property
    def stop_reason(self) -> str:
        state = self.state
        if state == BudgetState.CANCELLED:
            return self.cancel_reason or "run cancelled"
        if state == BudgetState.EXPIRED:
            return f"time budget of {self.seconds:g}s exhausted"
        return ""

    def remaining(self) -> float | None:
        """Seconds left, or None for an unlimited budget."""
        deadline = self.deadline
        if deadline is None:
            return None
        return max(deadline - self.clock(), 0.0)

    def clip(self, timeout: float) -> float:
        """Clip a per-probe timeout to what is left of the budget."""
        remaining = self.remaining()
        if remaining is None:
            return timeout
        return max(min(timeout, remaining), MIN_PROBE_TIMEOUT)

    def cancel(self, reason: str = "run cancelled") -> None:
        """Stop issuing probes for the rest of the run."""
        if not self._cancelled:
            logger.warning("Stopping report: %s", reason)
        self._cancelled = True
        self.cancel_reason = reason
