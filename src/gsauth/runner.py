"""Injectable external-command execution.

Both git-config lookups and ``gcloud`` invocations go through a
:class:`CommandRunner` so that tests can substitute canned output for real
child processes.  :class:`SubprocessRunner` is the production
implementation: stdout is captured, stderr is inherited so that diagnostics
from git or gcloud reach the user directly.
"""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from typing import Optional, Protocol, Sequence

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommandResult:
    """Exit status and captured stdout of a finished command."""

    returncode: int
    stdout: bytes


class CommandRunner(Protocol):
    """Runs a command to completion and returns its result.

    Implementations raise :class:`OSError` when the executable cannot be
    spawned and :class:`subprocess.TimeoutExpired` when a deadline passes.
    A non-zero exit status is reported through
    :attr:`CommandResult.returncode`, never raised.
    """

    def run(self, args: Sequence[str]) -> CommandResult: ...


class SubprocessRunner:
    """Run commands with :func:`subprocess.run`.

    Args:
        timeout: Optional deadline in seconds for each command.  The child is
            killed when it expires.
    """

    def __init__(self, timeout: Optional[float] = None) -> None:
        self.timeout = timeout

    def run(self, args: Sequence[str]) -> CommandResult:
        logger.debug("Running %s", " ".join(args))
        completed = subprocess.run(
            list(args),
            stdout=subprocess.PIPE,
            stderr=None,
            timeout=self.timeout,
            check=False,
        )
        return CommandResult(returncode=completed.returncode, stdout=completed.stdout)
