"""git credential helper line protocol.

git talks to credential helpers with ``key=value`` lines terminated by a
blank line or end of input (``git help credential``, INPUT/OUTPUT FORMAT).
:func:`read_credential` parses such input into a
:class:`~gsauth.models.GitCredential`, and :func:`render_credential` writes
one back, omitting unset attributes, in the fixed order
``protocol, host, path, username, password, url``.
"""

from __future__ import annotations

from typing import Iterable

from gsauth.exceptions import InvalidUsageError
from gsauth.models import GitCredential

FIELD_ORDER = ("protocol", "host", "path", "username", "password", "url")


def read_credential(lines: Iterable[str], strict: bool = True) -> GitCredential:
    """Parse credential-helper input.

    Reading stops at the first blank line.  Unknown keys are ignored.

    Args:
        lines: Input lines (trailing newlines are stripped).
        strict: Reject non-blank lines without ``=``.  When ``False`` such
            lines are skipped.

    Raises:
        InvalidUsageError: In strict mode, for a line without ``=``.
    """
    values: dict[str, str] = {}
    for raw in lines:
        line = raw.strip()
        if not line:
            break
        key, sep, value = line.partition("=")
        if not sep:
            if strict:
                raise InvalidUsageError(f"Cannot parse the git-credential input: {raw.rstrip()}")
            continue
        if key in FIELD_ORDER:
            values[key] = value
    return GitCredential(**values)


def render_credential(credential: GitCredential) -> str:
    """Render *credential* as newline-terminated ``key=value`` lines."""
    out = []
    for field in FIELD_ORDER:
        value = getattr(credential, field)
        if value:
            out.append(f"{field}={value}\n")
    return "".join(out)
