"""Console-script entry points for the gsauth front-ends.

Each ``*_main`` function is declared in ``pyproject.toml`` and runs one of the
single-command Typer applications in :mod:`gsauth.commands` through
:func:`_run`, which installs signal handlers and turns stray exceptions into
exit codes.  Unexpected exceptions are written to a crash log under the data
directory.

See Also:
    :mod:`gsauth.config`: Data directory resolution for crash logs.
    :mod:`gsauth.output`: stderr diagnostics.
"""

from __future__ import annotations

import signal
import sys
import traceback
from datetime import datetime
from typing import Any

import typer

from gsauth.exit_codes import EXIT_GENERIC_FAILURE

ISSUES_URL = "https://github.com/google/googlesource-auth-tools/issues"


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to disk and return the log file path.

    Args:
        exc: The unhandled exception to log.

    Returns:
        Absolute path to the written crash log file.
    """
    from gsauth.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(traceback.format_exc())
    return str(log_path)


def _run(app: typer.Typer, prog_name: str) -> None:
    """Invoke *app* and map every way out of it to an exit status.

    :class:`~gsauth.exceptions.GsauthError` instances that escape a command
    cause a clean exit with the error's ``exit_code``.  All other exceptions
    produce a crash log and a generic failure exit.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        app(prog_name=prog_name)
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from gsauth.exceptions import GsauthError
        from gsauth.output import error

        if isinstance(exc, GsauthError):
            error(str(exc))
            sys.exit(exc.exit_code)
        else:
            log_path = _write_crash_log(exc)
            error(f"Unexpected error. Debug log: {log_path}")
            error(f"Please report: {ISSUES_URL}")
            sys.exit(EXIT_GENERIC_FAILURE)


def credential_helper_main() -> None:
    """Entry point of ``git-credential-googlesource``."""
    from gsauth.commands.credential_helper import credential_helper_app

    _run(credential_helper_app, "git-credential-googlesource")


def askpass_main() -> None:
    """Entry point of ``googlesource-askpass``."""
    from gsauth.commands.askpass import askpass_app

    _run(askpass_app, "googlesource-askpass")


def cookieauth_main() -> None:
    """Entry point of ``googlesource-cookieauth``."""
    from gsauth.commands.cookieauth import cookieauth_app

    _run(cookieauth_app, "googlesource-cookieauth")


def secretmanager_main() -> None:
    """Entry point of ``git-credential-secretmanager``."""
    from gsauth.commands.secretmanager import secretmanager_app

    _run(secretmanager_app, "git-credential-secretmanager")
