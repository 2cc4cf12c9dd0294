"""
Runner base — the contract between the engine and the host.

The executor never spawns processes itself: it asks a ``CommandRunner``
to run a command line and gets a ``CommandOutcome`` back. Swapping the
runner (see ``sysreport.adapters.mock``) is how tests and ``--mock``
mode fabricate host state.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable

from sysreport.core.models.result import CommandOutcome

DEFAULT_TIMEOUT = 30.0

# Tool name -> installed?
Availability = Callable[[str], bool]


class CommandRunner(ABC):
    """Abstract base class for command runners.

    Runners NEVER raise for a failing, missing or hanging command:
    the failure is captured in the returned outcome.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """The runner identifier (e.g., 'shell', 'mock')."""

    @abstractmethod
    def run(
        self,
        command: str,
        *,
        escalate: bool = False,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> CommandOutcome:
        """Run a shell command line and capture its output.

        Args:
            command: Command line, interpreted by ``sh -c``.
            escalate: Run it through the escalation helper.
            timeout: Seconds before the command is terminated.
        """

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"
