"""
Privilege context — who we are running as, and can we escalate.

Detected once at process start and passed by parameter to everything
that needs it. The context is frozen: nothing in a run mutates it.
"""

from __future__ import annotations

import getpass
import logging
import os
import shutil

from pydantic import BaseModel, ConfigDict

logger = logging.getLogger(__name__)

ESCALATION_HELPER = "sudo"


class PrivilegeContext(BaseModel):
    """Privilege state of the current process."""

    model_config = ConfigDict(frozen=True)

    is_elevated: bool = False
    escalation_available: bool = False
    user: str = ""


def _current_user() -> str:
    try:
        return getpass.getuser()
    except Exception:
        # No passwd entry and no LOGNAME/USER in the environment
        return ""


def detect_privilege() -> PrivilegeContext:
    """Inspect the effective uid and look for an escalation helper.

    Never fails: a platform without ``geteuid`` is treated as
    unprivileged, and a missing helper simply means no escalation.
    """
    geteuid = getattr(os, "geteuid", None)
    is_elevated = geteuid is not None and geteuid() == 0
    escalation_available = shutil.which(ESCALATION_HELPER) is not None

    ctx = PrivilegeContext(
        is_elevated=is_elevated,
        escalation_available=escalation_available,
        user=_current_user(),
    )
    logger.debug(
        "Privilege context: elevated=%s escalation=%s user=%s",
        ctx.is_elevated,
        ctx.escalation_available,
        ctx.user or "?",
    )
    return ctx
