"""Token-source selection, reuse and cookie adaptation.

The main entry points are:

- :class:`TokenSource` -- abstract base class for token backends.
- :class:`ReuseTokenSource` -- thread-safe caching wrapper around a backend.
- :func:`select_backend` / :func:`token_source_from_config` -- route a
  :class:`~gsauth.models.CredentialConfig` to a backend.
- :class:`TokenSourceRegistry` and :func:`make_token` -- one source per
  configuration, and the URL-to-token pipeline.
- :func:`make_cookies` and :class:`CookieFile` -- cookies for a token and
  their Netscape file representation.

Typical usage::

    from gsauth.auth import make_token
    from gsauth.gitconfig import GitConfig

    token = make_token(GitConfig.find(), "https://chromium.googlesource.com/src")
"""

from gsauth.auth.base import ReuseTokenSource, TokenSource
from gsauth.auth.cookie_jar import CookieFile, render_cookie_file
from gsauth.auth.cookies import make_cookies
from gsauth.auth.manager import (
    TokenSourceRegistry,
    make_token,
    select_backend,
    token_source_from_config,
    validate_config,
)

__all__ = [
    "CookieFile",
    "ReuseTokenSource",
    "TokenSource",
    "TokenSourceRegistry",
    "make_cookies",
    "make_token",
    "render_cookie_file",
    "select_backend",
    "token_source_from_config",
    "validate_config",
]
