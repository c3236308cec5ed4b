"""Token source selection -- from a resolved configuration to a token.

:func:`select_backend` is the pure routing decision over a
:class:`~gsauth.models.CredentialConfig`; :func:`token_source_from_config`
builds the matching backend and wraps it in a
:class:`~gsauth.auth.base.ReuseTokenSource`.

Routing, evaluated in order:

1. ``gcloud`` (the default) -- gcloud with its active account.
2. ``application-default`` -- Application Default Credentials for the
   configured scopes.
3. ``*.gserviceaccount.com`` -- IAM Service Account Credentials,
   authenticated by Application Default Credentials with the cloud-platform
   scope.
4. anything else -- gcloud with that account.

:class:`TokenSourceRegistry` keeps one token source per configuration so
that several URLs sharing a configuration also share a cached token, and
:func:`make_token` chains resolution, selection and fetching for one URL.

See Also:
    :mod:`gsauth.gitconfig` -- produces the configuration.
    :mod:`gsauth.auth.cookies` -- turns the token into cookies.
"""

from __future__ import annotations

import logging
import re
import threading
from typing import TYPE_CHECKING, Optional

from gsauth.auth.base import ReuseTokenSource, TokenSource
from gsauth.exceptions import GsauthError, UnsupportedAccountError
from gsauth.models import (
    ACCOUNT_APPLICATION_DEFAULT,
    ACCOUNT_GCLOUD,
    SCOPE_CLOUD_PLATFORM,
    SERVICE_ACCOUNT_SUFFIX,
    BackendKind,
    CredentialConfig,
    Token,
)

if TYPE_CHECKING:
    from gsauth.gitconfig import GitConfig
    from gsauth.runner import CommandRunner

logger = logging.getLogger(__name__)

_SERVICE_ACCOUNT_EMAIL = re.compile(r"^[^@\s]+@[^@\s]+\.gserviceaccount\.com$")
_UNPRINTABLE = re.compile(r"[\s\x00-\x1f\x7f]")


def select_backend(config: CredentialConfig) -> BackendKind:
    """Return the backend that serves *config*.

    Total over every configuration; malformed accounts are rejected by
    :func:`validate_config`, not here.
    """
    account = config.account
    if account == ACCOUNT_GCLOUD:
        return BackendKind.GCLOUD
    if account == ACCOUNT_APPLICATION_DEFAULT:
        return BackendKind.APPLICATION_DEFAULT
    if account.endswith(SERVICE_ACCOUNT_SUFFIX):
        return BackendKind.IAM_CREDENTIALS
    return BackendKind.GCLOUD


def validate_config(config: CredentialConfig) -> list[str]:
    """Check the account and delegate selectors of *config*.

    Returns:
        A list of human-readable error strings.  Empty if valid.
    """
    errors: list[str] = []
    account = config.account
    if account.startswith("-") or _UNPRINTABLE.search(account):
        errors.append(f"google.account {account!r} is not a valid account")
    elif select_backend(config) is BackendKind.IAM_CREDENTIALS:
        if not _SERVICE_ACCOUNT_EMAIL.match(account):
            errors.append(f"google.account {account!r} is not a valid service account email")
        for delegate in config.delegates:
            if not _SERVICE_ACCOUNT_EMAIL.match(delegate):
                errors.append(
                    f"google.serviceAccountDelegateEmails entry {delegate!r} "
                    "is not a valid service account email"
                )
    return errors


def token_source_from_config(
    config: CredentialConfig,
    runner: Optional[CommandRunner] = None,
) -> ReuseTokenSource:
    """Build the reusing token source for *config*.

    Args:
        config: The resolved configuration.
        runner: Command runner for the gcloud backend.

    Returns:
        A :class:`~gsauth.auth.base.ReuseTokenSource` around the selected
        backend.

    Raises:
        UnsupportedAccountError: If the account or a delegate is malformed.
        BackendUnavailableError: If gcloud or Application Default
            Credentials cannot be found.
    """
    errors = validate_config(config)
    if errors:
        raise UnsupportedAccountError("; ".join(errors))

    kind = select_backend(config)
    source: TokenSource
    if kind is BackendKind.GCLOUD:
        from gsauth.backends.gcloud import GcloudTokenSource, find_gcloud

        account = "" if config.account == ACCOUNT_GCLOUD else config.account
        source = GcloudTokenSource(find_gcloud(config.gcloud_path), account, runner=runner)
    elif kind is BackendKind.APPLICATION_DEFAULT:
        from gsauth.backends.application_default import ApplicationDefaultTokenSource

        source = ApplicationDefaultTokenSource(config.scopes)
    else:
        from gsauth.backends.application_default import ApplicationDefaultTokenSource
        from gsauth.backends.iam_credentials import IAMCredentialsTokenSource

        authenticator = ReuseTokenSource(ApplicationDefaultTokenSource([SCOPE_CLOUD_PLATFORM]))
        source = IAMCredentialsTokenSource(
            config.account,
            config.delegates,
            config.scopes,
            authenticator=authenticator,
        )
    logger.debug("Selected the %s backend for account %s", kind.value, config.account)
    return ReuseTokenSource(source)


class TokenSourceRegistry:
    """One token source per :class:`~gsauth.models.CredentialConfig`.

    Lookups are thread-safe; concurrent requests for the same configuration
    receive the same source and therefore share its cached token.

    Args:
        runner: Command runner handed to gcloud sources.
    """

    def __init__(self, runner: Optional[CommandRunner] = None) -> None:
        self._runner = runner
        self._sources: dict[CredentialConfig, TokenSource] = {}
        self._lock = threading.Lock()

    def get(self, config: CredentialConfig) -> TokenSource:
        """Return the token source for *config*, building it on first use.

        Building happens outside the lock, so a slow lookup for one
        configuration never blocks the others.  If two callers
        race to build the same configuration, the first one stored wins.
        """
        with self._lock:
            source = self._sources.get(config)
        if source is not None:
            return source
        built = token_source_from_config(config, runner=self._runner)
        with self._lock:
            return self._sources.setdefault(config, built)

    def __len__(self) -> int:
        return len(self._sources)


def make_token(
    git: GitConfig,
    url: Optional[str] = None,
    registry: Optional[TokenSourceRegistry] = None,
) -> Token:
    """Resolve the configuration for *url* and return a usable token.

    Args:
        git: git-config accessor.
        url: The URL to authenticate, or ``None`` for the global config.
        registry: Registry to share token sources across calls.  A private
            one is used when omitted.

    Raises:
        GsauthError: Any resolution, selection or backend failure, with the
            URL prepended to the message.  The original exception type and
            exit code are preserved.
    """
    from gsauth.gitconfig import resolve_credential_config

    if registry is None:
        registry = TokenSourceRegistry(runner=git.runner)
    try:
        config = resolve_credential_config(git, url)
        return registry.get(config).token()
    except GsauthError as exc:
        where = url or "the global configuration"
        raise type(exc)(f"Cannot get a token for {where}: {exc}", exc.exit_code) from exc
