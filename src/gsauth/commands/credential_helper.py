"""``git-credential-googlesource`` -- a git credential helper.

Answers ``get`` requests for ``*.googlesource.com`` and
``source.developers.google.com`` with an OAuth2 access token::

    [credential]
        helper = googlesource

Given::

    protocol=https
    host=chromium.googlesource.com
    path=src.git

it prints::

    protocol=https
    host=chromium.googlesource.com
    username=git-service-account
    password=ya29....

Requests for any other host are declined with empty output so that git
falls through to the next helper.  Plain ``http`` is refused unless
``google.allowHTTPForCredentialHelper`` is true for the URL.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional

import typer

from gsauth.auth.manager import TokenSourceRegistry, make_token
from gsauth.commands import setup_output
from gsauth.exceptions import GsauthError, InsecureProtocolError, InvalidUsageError
from gsauth.gitconfig import KEY_ALLOW_HTTP, GitConfig
from gsauth.models import GIT_USERNAME, GitCredential, Token
from gsauth.output import error, print_data
from gsauth.protocol import read_credential, render_credential
from gsauth.runner import SubprocessRunner

logger = logging.getLogger(__name__)

SUPPORTED_HOST = "source.developers.google.com"
SUPPORTED_HOST_SUFFIX = ".googlesource.com"

credential_helper_app = typer.Typer(
    name="git-credential-googlesource",
    help="git credential helper for googlesource.com and source.developers.google.com.",
    add_completion=False,
)


def is_supported_host(host: str) -> bool:
    """Return whether the helper answers for *host*."""
    return host == SUPPORTED_HOST or host.endswith(SUPPORTED_HOST_SUFFIX)


def request_url(request: GitCredential) -> str:
    """Build the URL described by a credential request."""
    path = request.path
    if path and not path.startswith("/"):
        path = "/" + path
    return f"{request.protocol}://{request.host}{path}"


def credential_response(request: GitCredential, token: Token) -> GitCredential:
    """Build the answer to *request*: its protocol and host plus the token."""
    return GitCredential(
        protocol=request.protocol,
        host=request.host,
        username=GIT_USERNAME,
        password=token.access_token,
    )


def answer_credential_request(
    request: GitCredential,
    git: GitConfig,
    registry: Optional[TokenSourceRegistry] = None,
) -> Optional[GitCredential]:
    """Produce the response to a ``get`` request.

    Args:
        request: The parsed request from git.
        git: git-config accessor.
        registry: Token source registry shared across requests.

    Returns:
        The credential to print, or ``None`` when the host is not served by
        this helper.

    Raises:
        InvalidUsageError: For a protocol other than ``http``/``https``.
        InsecureProtocolError: For ``http`` without
            ``google.allowHTTPForCredentialHelper``.
        GsauthError: Any token resolution failure.
    """
    if not is_supported_host(request.host):
        logger.debug("Declining credentials for %s", request.host or "(no host)")
        return None

    url = request_url(request)
    if request.protocol == "http":
        if not git.with_url(url).bool_config(KEY_ALLOW_HTTP, default=False):
            raise InsecureProtocolError(
                f"Refusing to send credentials over plain HTTP to {request.host}; "
                f"set {KEY_ALLOW_HTTP} to allow it"
            )
    elif request.protocol != "https":
        raise InvalidUsageError(f"Unknown protocol: {request.protocol!r}")

    return credential_response(request, make_token(git, url, registry))


@credential_helper_app.command()
def credential_helper(
    operation: str = typer.Argument(help="Credential operation from git: get, store or erase."),
    timeout: Optional[float] = typer.Option(
        None, "--timeout", help="Deadline in seconds for each git/gcloud invocation."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug output."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
) -> None:
    """Print a googlesource access token for git.

    Only ``get`` is answered; ``store`` and ``erase`` are accepted and
    ignored because tokens are never persisted.
    """
    setup_output(verbose=verbose, no_color=no_color)
    if operation != "get":
        return

    try:
        request = read_credential(sys.stdin)
        if not is_supported_host(request.host):
            return
        git = GitConfig.find(runner=SubprocessRunner(timeout=timeout))
        answer = answer_credential_request(request, git)
    except GsauthError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    if answer is not None:
        print_data(render_credential(answer), end="")
