"""``googlesource-cookieauth`` -- writes a Netscape cookie file for git.

Point git at the file and run the command (or its daemon) periodically::

    [http]
        cookieFile = ~/.git-credential-cache/googlesource-cookieauth-cookie

One token is resolved for every URL with a ``[google "<url>"]`` subsection in
git-config, plus ``https://googlesource.com`` and
``https://source.developers.google.com`` unless those roots are configured
already.  Each token becomes one or two ``o`` cookies (see
:mod:`gsauth.auth.cookies`).
"""

from __future__ import annotations

import logging
import time
from datetime import timedelta
from typing import Callable, Optional
from urllib.parse import urlsplit

import typer

from gsauth.auth.cookie_jar import CookieFile
from gsauth.auth.cookies import make_cookies
from gsauth.auth.manager import TokenSourceRegistry, make_token
from gsauth.commands import setup_output
from gsauth.config import COOKIE_REFRESH_INTERVAL, default_cookie_file
from gsauth.exceptions import GsauthError
from gsauth.exit_codes import EXIT_GENERIC_FAILURE
from gsauth.gitconfig import KEY_COOKIE_FILE, GitConfig
from gsauth.models import Cookie
from gsauth.output import error, info, warning
from gsauth.runner import SubprocessRunner

logger = logging.getLogger(__name__)

PROGRAM = "googlesource-cookieauth"

ROOT_URLS = (
    "https://googlesource.com",
    "https://source.developers.google.com",
)

cookieauth_app = typer.Typer(
    name=PROGRAM,
    help="Write a Netscape cookie file for googlesource.com and source.developers.google.com.",
    add_completion=False,
)


def _is_root_entry(url: str, host: str) -> bool:
    parts = urlsplit(url)
    return parts.hostname == host and parts.path in ("", "/")


def collect_urls(git: GitConfig) -> list[str]:
    """Return the URLs to mint cookies for.

    These are the URLs configured in git-config, followed by the default
    roots that are not configured.
    """
    urls = git.list_urls()
    for root in ROOT_URLS:
        host = urlsplit(root).hostname or ""
        if not any(_is_root_entry(url, host) for url in urls):
            urls.append(root)
    return urls


def collect_cookies(
    git: GitConfig,
    urls: list[str],
    registry: Optional[TokenSourceRegistry] = None,
) -> list[Cookie]:
    """Resolve a token for each of *urls* and return all their cookies.

    Raises:
        GsauthError: On the first URL whose token cannot be resolved.
    """
    if registry is None:
        registry = TokenSourceRegistry(runner=git.runner)
    cookies: list[Cookie] = []
    for url in urls:
        token = make_token(git, url, registry)
        cookies.extend(make_cookies(url, token))
    return cookies


def resolve_output_path(git: GitConfig, output: Optional[str] = None) -> str:
    """Pick the destination: *output*, then ``google.cookieFile``, then the default."""
    if output:
        return output
    configured = git.path_config(KEY_COOKIE_FILE)
    if configured:
        return configured
    return str(default_cookie_file())


def write_cookies(
    git: GitConfig,
    output: Optional[str] = None,
    program: str = PROGRAM,
) -> str:
    """Write a fresh cookie file and return where it went.

    Raises:
        GsauthError: If configuration or a token cannot be resolved.
        OSError: If the file cannot be written.
    """
    cookies = collect_cookies(git, collect_urls(git))
    destination = resolve_output_path(git, output)
    CookieFile(destination).save(cookies, program=program)
    logger.debug("Wrote %d cookies to %s", len(cookies), destination)
    return destination


def run_daemon(
    git: GitConfig,
    output: Optional[str] = None,
    interval: timedelta = COOKIE_REFRESH_INTERVAL,
    sleep: Callable[[float], None] = time.sleep,
    iterations: Optional[int] = None,
) -> None:
    """Rewrite the cookie file every *interval*.

    Failures are reported and retried on the next tick.  Runs forever unless
    *iterations* bounds the number of writes.
    """
    count = 0
    while True:
        try:
            destination = write_cookies(git, output)
        except (GsauthError, OSError) as exc:
            warning(f"Cannot write cookies: {exc}")
        except Exception:
            logger.exception("Unexpected failure while writing cookies")
        else:
            info(f"Wrote cookies to {destination}")
        count += 1
        if iterations is not None and count >= iterations:
            return
        sleep(interval.total_seconds())


@cookieauth_app.command()
def cookieauth(
    output: Optional[str] = typer.Option(
        None,
        "--output",
        "-o",
        help=(
            "Output file, '-' for stdout. Defaults to google.cookieFile, then "
            "~/.git-credential-cache/googlesource-cookieauth-cookie."
        ),
    ),
    run_as_daemon: bool = typer.Option(
        False, "--run-as-daemon", help="Keep running and refresh the cookies every 45 minutes."
    ),
    timeout: Optional[float] = typer.Option(
        None, "--timeout", help="Deadline in seconds for each git/gcloud invocation."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Do not report each daemon refresh on stderr."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug output."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
) -> None:
    """Write googlesource access tokens as git cookies."""
    setup_output(verbose=verbose, no_color=no_color, quiet=quiet)
    try:
        git = GitConfig.find(runner=SubprocessRunner(timeout=timeout))
        if run_as_daemon:
            run_daemon(git, output)
            return
        write_cookies(git, output)
    except GsauthError as exc:
        error(f"Cannot write cookies: {exc}")
        raise typer.Exit(code=exc.exit_code) from None
    except OSError as exc:
        error(f"Cannot write cookies: {exc}")
        raise typer.Exit(code=EXIT_GENERIC_FAILURE) from None
