"""``googlesource-askpass`` -- a ``GIT_ASKPASS`` program.

git runs ``$GIT_ASKPASS PROMPT`` and reads the answer from stdout::

    export GIT_ASKPASS=googlesource-askpass

A prompt mentioning ``username`` is answered with ``git-service-account``;
one mentioning ``password`` with an access token resolved from the global
``[google]`` configuration.  The askpass protocol carries no URL, so
URL-scoped settings do not apply here.
"""

from __future__ import annotations

from typing import Optional

import typer

from gsauth.auth.manager import make_token
from gsauth.commands import setup_output
from gsauth.exceptions import GsauthError, InvalidUsageError
from gsauth.gitconfig import GitConfig
from gsauth.models import GIT_USERNAME
from gsauth.output import error, print_data
from gsauth.runner import CommandRunner, SubprocessRunner

askpass_app = typer.Typer(
    name="googlesource-askpass",
    help="GIT_ASKPASS program for googlesource.com and source.developers.google.com.",
    add_completion=False,
)


def answer_prompt(prompt: str, runner: Optional[CommandRunner] = None) -> str:
    """Return the answer to an askpass *prompt*.

    Args:
        prompt: The prompt text from git, e.g. ``"Password for 'https://...': "``.
        runner: Command runner for git and gcloud, used only when a token
            is needed.

    Raises:
        InvalidUsageError: If the prompt asks for neither username nor
            password.
        GsauthError: Any token resolution failure.
    """
    lowered = prompt.lower()
    if "username" in lowered:
        return GIT_USERNAME
    if "password" in lowered:
        return make_token(GitConfig.find(runner=runner)).access_token
    raise InvalidUsageError(f"Unrecognized prompt: {prompt!r}")


@askpass_app.command()
def askpass(
    prompt: str = typer.Argument(help="Prompt text passed by git."),
    timeout: Optional[float] = typer.Option(
        None, "--timeout", help="Deadline in seconds for each git/gcloud invocation."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug output."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
) -> None:
    """Answer a git username or password prompt."""
    setup_output(verbose=verbose, no_color=no_color)
    try:
        answer = answer_prompt(prompt, runner=SubprocessRunner(timeout=timeout))
    except GsauthError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
    print_data(answer, end="")
