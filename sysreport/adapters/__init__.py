"""Adapters — bindings between the engine and the host.

Public re-exports for convenient access.
"""

from sysreport.adapters.base import DEFAULT_TIMEOUT, Availability, CommandRunner
from sysreport.adapters.mock import MockAvailability, MockRunner, RunCall
from sysreport.adapters.shell.availability import check_tools, is_available
from sysreport.adapters.shell.command import ShellCommandRunner

__all__ = [
    "Availability",
    "CommandRunner",
    "DEFAULT_TIMEOUT",
    "MockAvailability",
    "MockRunner",
    "RunCall",
    "ShellCommandRunner",
    "check_tools",
    "is_available",
]
