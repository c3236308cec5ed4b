"""``git-credential-secretmanager`` -- a credential helper backed by Secret Manager.

The password git receives is the payload of a Secret Manager secret version;
everything else in the request is echoed back unchanged::

    [credential "https://github.com"]
        helper = "secretmanager --version=projects/p/secrets/gh-token/versions/latest"

The version may also come from ``$GIT_SECRET_MANAGER_VERSION``.  Calls are
authenticated with Application Default Credentials.
"""

from __future__ import annotations

import sys
from typing import Iterable, Optional

import typer

from gsauth.auth.base import ReuseTokenSource
from gsauth.backends.application_default import ApplicationDefaultTokenSource
from gsauth.backends.secret_manager import SecretGetter, SecretManagerClient
from gsauth.commands import setup_output
from gsauth.exceptions import GsauthError
from gsauth.exit_codes import EXIT_GENERIC_FAILURE
from gsauth.models import SCOPE_CLOUD_PLATFORM, GitCredential
from gsauth.output import debug, error, print_data
from gsauth.protocol import read_credential, render_credential

VERSION_ENV = "GIT_SECRET_MANAGER_VERSION"

secretmanager_app = typer.Typer(
    name="git-credential-secretmanager",
    help="git credential helper that answers with a Secret Manager secret.",
    add_completion=False,
)


def generate_credential(
    lines: Iterable[str],
    client: SecretGetter,
    version: str,
) -> GitCredential:
    """Read a credential request and fill its password from *version*.

    Lines without ``=`` and unknown keys are ignored.

    Raises:
        SecretAccessError: If the secret cannot be read.
    """
    request = read_credential(lines, strict=False)
    password = client.access_secret_version(version)
    return request.model_copy(update={"password": password})


def default_client() -> SecretManagerClient:
    """Secret Manager client authenticated with Application Default Credentials."""
    return SecretManagerClient(
        ReuseTokenSource(ApplicationDefaultTokenSource([SCOPE_CLOUD_PLATFORM]))
    )


@secretmanager_app.command()
def secretmanager(
    operation: str = typer.Argument(help="Credential operation from git: get, store or erase."),
    version: Optional[str] = typer.Option(
        None,
        "--version",
        envvar=VERSION_ENV,
        help="Secret Manager version, e.g. projects/my-project/secrets/my-secret/versions/latest.",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug output."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
) -> None:
    """Print a credential whose password is a Secret Manager secret."""
    setup_output(verbose=verbose, no_color=no_color)
    if not version:
        error(
            "cannot determine Secret Manager version, --version or "
            f"${{{VERSION_ENV}}} not specified"
        )
        raise typer.Exit(code=EXIT_GENERIC_FAILURE)
    if operation != "get":
        return

    debug(version)
    try:
        answer = generate_credential(sys.stdin, default_client(), version)
    except GsauthError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
    print_data(render_credential(answer), end="")
