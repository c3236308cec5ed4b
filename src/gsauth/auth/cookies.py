"""Token-to-cookie adaptation for googlesource.com.

Gerrit on googlesource.com accepts the access token as the ``o`` cookie.
:func:`make_cookies` applies the host sharding rules:

* ``googlesource.com`` -- one cookie for ``.googlesource.com``, covering
  every host.
* ``HOST.googlesource.com`` / ``HOST-review.googlesource.com`` -- two
  cookies, one for ``HOST.googlesource.com`` and one for
  ``HOST-review.googlesource.com``; the git and review hosts share
  credentials.
* anything else -- one cookie for exactly that host.

Cookies are never marked HttpOnly: git cannot read ``#HttpOnly_`` lines in a
Netscape cookie file.
"""

from __future__ import annotations

from urllib.parse import urlsplit

from gsauth.models import Cookie, Token

COOKIE_NAME = "o"
ROOT_DOMAIN = "googlesource.com"
_REVIEW_SUFFIX = "-review"


def cookie_path(path: str) -> str:
    """Return the cookie path for a URL path: ``/`` when empty, ``.git`` stripped."""
    path = path or "/"
    if path.endswith(".git"):
        path = path[: -len(".git")]
    return path


def cookie_domains(host: str) -> list[str]:
    """Return the cookie domains that should carry credentials for *host*."""
    if host == ROOT_DOMAIN:
        return ["." + ROOT_DOMAIN]
    suffix = "." + ROOT_DOMAIN
    if host.endswith(suffix):
        name = host[: -len(suffix)]
        if name.endswith(_REVIEW_SUFFIX):
            name = name[: -len(_REVIEW_SUFFIX)]
        return [f"{name}{suffix}", f"{name}{_REVIEW_SUFFIX}{suffix}"]
    return [host]


def make_cookies(url: str, token: Token) -> list[Cookie]:
    """Create the cookies that authenticate requests to *url* with *token*.

    Args:
        url: The URL being authenticated (e.g.
            ``https://chromium.googlesource.com/src.git``).
        token: The access token to embed.

    Returns:
        One or two cookies, see the module docstring.
    """
    parts = urlsplit(url)
    host = parts.hostname or ""
    path = cookie_path(parts.path)
    secure = parts.scheme == "https"
    return [
        Cookie(
            name=COOKIE_NAME,
            value=token.access_token,
            path=path,
            domain=domain,
            expires=token.expiry,
            secure=secure,
        )
        for domain in cookie_domains(host)
    ]
