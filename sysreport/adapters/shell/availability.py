"""
Tool availability — is a probe's executable installed on this host?

Read-only: uses ``shutil.which`` against the current PATH. A missing
tool is an expected answer, never an error.
"""

from __future__ import annotations

import logging
import shutil
from collections.abc import Iterable

logger = logging.getLogger(__name__)


def is_available(tool: str) -> bool:
    """Check whether ``tool`` resolves to an executable on PATH."""
    if not tool:
        return False
    try:
        return shutil.which(tool) is not None
    except Exception as e:
        logger.debug("Availability check for %r failed: %s", tool, e)
        return False


def check_tools(tools: Iterable[str]) -> dict[str, bool]:
    """Availability of several tools, in the order given."""
    return {tool: is_available(tool) for tool in tools}
