"""Netscape cookie file output.

git reads cookies from the file named by ``http.cookieFile``.  The format is
the classic Netscape one: comment lines start with ``#`` and every cookie is
one tab-separated record::

    domain  include-subdomains  path  secure  expires  name  value

``include-subdomains`` is ``TRUE`` exactly when the domain starts with a
dot; ``expires`` is a Unix timestamp (``0`` for session cookies).

Files are written atomically with ``0o600`` permissions via
:func:`gsauth.config.atomic_write`.

See Also:
    :func:`~gsauth.auth.cookies.make_cookies` -- produces the cookies.
"""

from __future__ import annotations

import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Optional, TextIO

from gsauth.config import atomic_write
from gsauth.models import Cookie

STDOUT = "-"


def _flag(value: bool) -> str:
    return "TRUE" if value else "FALSE"


def format_cookie(cookie: Cookie) -> str:
    """Return the Netscape record for *cookie* (without a newline)."""
    expires = int(cookie.expires.timestamp()) if cookie.expires is not None else 0
    return "\t".join(
        [
            cookie.domain,
            _flag(cookie.include_subdomains),
            cookie.path,
            _flag(cookie.secure),
            str(expires),
            cookie.name,
            cookie.value,
        ]
    )


def render_cookie_file(
    cookies: Iterable[Cookie],
    program: str,
    now: Optional[datetime] = None,
) -> str:
    """Render a whole cookie file.

    Args:
        cookies: Cookies to include, in order.
        program: Name recorded in the header comment.
        now: Creation time recorded in the header; defaults to the current
            local time.

    Returns:
        The file contents, newline-terminated.
    """
    if now is None:
        now = datetime.now(timezone.utc).astimezone()
    lines = [f"# Created by {program} at {now.isoformat(timespec='seconds')}"]
    lines.extend(format_cookie(c) for c in cookies)
    return "\n".join(lines) + "\n"


class CookieFile:
    """Writes cookies to a Netscape cookie file, or to stdout for ``-``.

    Args:
        path: Destination file path, or ``"-"`` for standard output.

    Example::

        jar = CookieFile("~/.git-credential-cache/googlesource-cookieauth-cookie")
        jar.save(cookies, program="googlesource-cookieauth")
    """

    def __init__(self, path: str | Path) -> None:
        self._path = str(path)

    @property
    def path(self) -> str:
        """The destination, ``"-"`` meaning stdout."""
        return self._path

    @property
    def is_stdout(self) -> bool:
        return self._path == STDOUT

    def save(
        self,
        cookies: Iterable[Cookie],
        program: str,
        stream: Optional[TextIO] = None,
    ) -> None:
        """Write *cookies*, replacing any previous file contents.

        Args:
            cookies: Cookies to write.
            program: Name recorded in the header comment.
            stream: Stream used when the destination is ``-``; defaults to
                ``sys.stdout``.

        Raises:
            OSError: If the file cannot be written.
        """
        text = render_cookie_file(cookies, program)
        if self.is_stdout:
            out = stream or sys.stdout
            out.write(text)
            out.flush()
            return
        atomic_write(Path(self._path).expanduser(), text, mode=0o600)
