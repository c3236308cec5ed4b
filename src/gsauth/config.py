"""Ambient paths and atomic file writes.

Per-URL settings live in git-config (see :mod:`gsauth.gitconfig`); this
module only covers what the front-ends need from the filesystem:

* **Directory layout** -- XDG Base Directory compliant data directory on
  Linux/BSD, ``~/.gsauth/`` on macOS and Windows.  Crash logs land here.
  See :func:`get_data_dir`.
* **Cookie file location** -- :func:`default_cookie_file` is the fallback
  used by ``googlesource-cookieauth`` when neither ``--output`` nor
  ``google.cookieFile`` is set.
* **Atomic writes** -- :func:`atomic_write` writes through a temp file and
  ``os.replace`` so git never reads a half-written cookie file.
"""

from __future__ import annotations

import os
import platform
import tempfile
from datetime import timedelta
from pathlib import Path
from typing import Optional

_APP_NAME = "gsauth"

COOKIE_REFRESH_INTERVAL = timedelta(minutes=45)
"""How often ``googlesource-cookieauth --run-as-daemon`` rewrites the cookie file."""

TOKEN_EXPIRY_MARGIN = timedelta(seconds=10)
"""Tokens this close to expiry are treated as expired and refetched."""

REQUEST_TIMEOUT = 30.0
"""Timeout in seconds for Google API calls."""


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    """Fallback base directory for non-XDG platforms (macOS, Windows)."""
    return Path.home() / f".{_APP_NAME}"


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    """Resolve an XDG base directory from an env var with fallback segments under $HOME."""
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    base = Path.home()
    for seg in default_segments:
        base = base / seg
    return base


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/gsauth/`` (default ``~/.local/share/gsauth/``).
    On macOS/Windows: ``~/.gsauth/``.

    Returns:
        Absolute path to the data directory (guaranteed to exist).
    """
    if _is_xdg_platform():
        base = _xdg_base("XDG_DATA_HOME", (".local", "share"))
        path = base / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def default_cookie_file() -> Path:
    """Return ``~/.git-credential-cache/googlesource-cookieauth-cookie``."""
    return Path.home() / ".git-credential-cache" / "googlesource-cookieauth-cookie"


# --- Atomic file writes ---


def atomic_write(path: Path, data: str, mode: int = 0o600) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is guaranteed to be an atomic rename on POSIX systems.
    Permissions are set to *mode* before any content is written, so secrets
    are never world-readable, even momentarily.  Missing parent directories
    are created with ``0o700``.

    Raises:
        OSError: If the file cannot be written (permissions, disk full, etc.).
    """
    path.parent.mkdir(mode=0o700, parents=True, exist_ok=True)

    fd = None
    tmp_path: Optional[str] = None
    try:
        fd = tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        )
        tmp_path = fd.name
        os.chmod(tmp_path, mode)
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None  # prevent double-close in the except branch
        os.replace(tmp_path, path)
    except BaseException:
        # Clean up the temp file on any error (including KeyboardInterrupt).
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise
