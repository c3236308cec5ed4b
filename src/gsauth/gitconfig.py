"""git-config access and per-URL credential configuration.

git-config is the configuration store for every gsauth front-end.  Settings
live in the ``google`` section and may be scoped to a URL with a subsection,
which git matches against the URL being authenticated (``git config
--get-urlmatch``)::

    [google]
        account = me@example.com
    [google "https://chromium.googlesource.com"]
        account = builder@proj.iam.gserviceaccount.com
        scopes = https://www.googleapis.com/auth/gerritcodereview
        serviceAccountDelegateEmails = hop1@proj.iam.gserviceaccount.com

Keys read by :func:`resolve_credential_config`:

========================================  ===========  =====================
Key                                       Type         Field
========================================  ===========  =====================
``google.account``                        string       ``account``
``google.scopes``                         string list  ``scopes``
``google.serviceAccountDelegateEmails``   string list  ``delegates``
``google.gcloudPath``                     path         ``gcloud_path``
========================================  ===========  =====================

Front-ends additionally read ``google.allowHTTPForCredentialHelper`` and
``google.cookieFile``.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
from typing import Optional, Sequence
from urllib.parse import urlsplit

from gsauth.exceptions import ConfigReadError
from gsauth.models import CredentialConfig
from gsauth.runner import CommandRunner, SubprocessRunner

logger = logging.getLogger(__name__)

_SECTION = "google."

KEY_ACCOUNT = "google.account"
KEY_SCOPES = "google.scopes"
KEY_DELEGATES = "google.serviceAccountDelegateEmails"
KEY_GCLOUD_PATH = "google.gcloudPath"
KEY_ALLOW_HTTP = "google.allowHTTPForCredentialHelper"
KEY_COOKIE_FILE = "google.cookieFile"

_EXIT_KEY_NOT_FOUND = 1


class GitConfig:
    """Read-only accessor for git-config values.

    An instance is either *global* (plain ``git config KEY`` lookups) or
    *URL-scoped* (``git config --get-urlmatch KEY URL``), see
    :meth:`with_url`.  Scoping is resolved entirely by git, so the most
    specific matching ``[google "<url>"]`` subsection wins.

    Args:
        git_path: Absolute path to the git executable.
        configs: Extra ``name=value`` settings passed to git via ``-c``.
        runner: Command runner used to invoke git.
        url: URL to scope lookups to, or ``None`` for global lookups.

    Example::

        git = GitConfig.find()
        scoped = git.with_url("https://chromium.googlesource.com/src")
        account = scoped.string_config("google.account")
    """

    def __init__(
        self,
        git_path: str,
        configs: Sequence[str] = (),
        runner: Optional[CommandRunner] = None,
        url: Optional[str] = None,
    ) -> None:
        self.git_path = git_path
        self.configs = tuple(configs)
        self.runner = runner or SubprocessRunner()
        self.url = url

    @classmethod
    def find(
        cls,
        runner: Optional[CommandRunner] = None,
        configs: Sequence[str] = (),
    ) -> GitConfig:
        """Locate git on ``PATH`` and return a global accessor.

        Raises:
            ConfigReadError: If no git executable can be found.
        """
        git_path = shutil.which("git")
        if git_path is None:
            raise ConfigReadError("Cannot find the git binary on PATH")
        return cls(git_path, configs=configs, runner=runner)

    def with_url(self, url: Optional[str]) -> GitConfig:
        """Return an accessor whose lookups are scoped to *url*."""
        return GitConfig(self.git_path, self.configs, self.runner, url)

    # ------------------------------------------------------------------
    # Typed lookups
    # ------------------------------------------------------------------

    def bool_config(self, key: str, default: bool = False) -> bool:
        """Return *key* as a boolean.

        An unset key yields *default*.  A set key is false only when git
        normalises it to the literal ``false``.

        Raises:
            ConfigReadError: If git cannot be queried.
        """
        value = self._get("--bool", key)
        if value is None:
            return default
        return value != "false"

    def path_config(self, key: str) -> str:
        """Return *key* with ``~`` expanded by git, or ``""`` when unset."""
        return self._get("--path", key) or ""

    def string_config(self, key: str) -> str:
        """Return *key* verbatim, or ``""`` when unset."""
        return self._get("--no-type", key) or ""

    def string_list_config(self, key: str) -> list[str]:
        """Return *key* split on commas with each entry trimmed.

        Returns an empty list when the key is unset or empty.
        """
        value = self._get("--no-type", key)
        if not value:
            return []
        return [item.strip() for item in value.split(",")]

    # ------------------------------------------------------------------
    # Enumeration
    # ------------------------------------------------------------------

    def list_urls(self) -> list[str]:
        """Return the URLs that have a ``[google "<url>"]`` subsection.

        Subsections that do not look like URLs (no ``://``) are ignored.
        Duplicates are collapsed; the order is that of first appearance.

        Raises:
            ConfigReadError: If git cannot be queried or a subsection URL
                cannot be parsed.
        """
        args = [*self._base_args(), "config", "--name-only", "--list", "--null"]
        stdout = self._run(args, context="cannot list git-config")
        if stdout is None:
            return []

        urls: dict[str, None] = {}
        for name in stdout.decode("utf-8", errors="replace").split("\0"):
            if not name.startswith(_SECTION):
                continue
            subsection, sep, _ = name[len(_SECTION):].rpartition(".")
            if not sep or "://" not in subsection:
                continue
            try:
                url = urlsplit(subsection).geturl()
            except ValueError as exc:
                raise ConfigReadError(
                    f"Cannot parse the URL {subsection!r} in git-config: {exc}"
                ) from exc
            urls[url] = None
        return list(urls)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _base_args(self) -> list[str]:
        args = [self.git_path]
        for config in self.configs:
            args.extend(["-c", config])
        return args

    def _get(self, type_flag: str, key: str) -> Optional[str]:
        """Run a single lookup; ``None`` means the key is unset."""
        args = [*self._base_args(), "config", type_flag]
        if self.url is not None:
            args.extend(["--get-urlmatch", key, self.url])
        else:
            args.append(key)
        where = f" for {self.url}" if self.url is not None else ""
        stdout = self._run(args, context=f"cannot read {key}{where}")
        if stdout is None:
            logger.debug("git-config %s is unset%s", key, where)
            return None
        return stdout.decode("utf-8", errors="replace").strip()

    def _run(self, args: list[str], context: str) -> Optional[bytes]:
        """Run git; ``None`` signals exit status 1 (key not found)."""
        try:
            result = self.runner.run(args)
        except (OSError, subprocess.SubprocessError) as exc:
            raise ConfigReadError(f"git-config: {context}: {exc}") from exc
        if result.returncode == _EXIT_KEY_NOT_FOUND:
            return None
        if result.returncode != 0:
            raise ConfigReadError(
                f"git-config: {context}: git exited with status {result.returncode}"
            )
        return result.stdout


def resolve_credential_config(git: GitConfig, url: Optional[str] = None) -> CredentialConfig:
    """Build the :class:`~gsauth.models.CredentialConfig` that applies to *url*.

    With a URL, every key is looked up with ``--get-urlmatch`` so the most
    specific ``[google "<url>"]`` subsection wins; without one, only the
    global ``[google]`` section is consulted.  Unset keys fall back to the
    model defaults.

    Args:
        git: A git-config accessor (its own URL scope is replaced).
        url: The URL being authenticated, or ``None``.

    Returns:
        The resolved, immutable configuration.

    Raises:
        ConfigReadError: If any key cannot be read.  The message names the
            key and URL.
    """
    scoped = git.with_url(url)
    config = CredentialConfig(
        account=scoped.string_config(KEY_ACCOUNT),
        scopes=scoped.string_list_config(KEY_SCOPES),
        delegates=scoped.string_list_config(KEY_DELEGATES),
        gcloud_path=scoped.path_config(KEY_GCLOUD_PATH),
    )
    logger.debug("Resolved %s for %s", config, url or "(global)")
    return config
