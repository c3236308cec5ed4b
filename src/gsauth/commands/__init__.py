"""Typer front-ends for the gsauth console scripts.

Each module defines one single-command :class:`typer.Typer` application:

- :mod:`~gsauth.commands.credential_helper` -- ``git-credential-googlesource``
- :mod:`~gsauth.commands.askpass` -- ``googlesource-askpass``
- :mod:`~gsauth.commands.cookieauth` -- ``googlesource-cookieauth``
- :mod:`~gsauth.commands.secretmanager` -- ``git-credential-secretmanager``

The console-script wrappers live in :mod:`gsauth.app`.
"""

from __future__ import annotations

from gsauth.output import OutputManager, configure_logging, set_output


def setup_output(
    verbose: bool = False,
    no_color: bool = False,
    quiet: bool = False,
) -> OutputManager:
    """Install the global :class:`~gsauth.output.OutputManager` and logging.

    Called first thing by every front-end command.
    """
    output = OutputManager(no_color=no_color, quiet=quiet, verbose=verbose)
    set_output(output)
    configure_logging(verbose)
    return output
