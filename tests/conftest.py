"""Shared test fixtures for gsauth.

Provides a fake command runner that stands in for git and gcloud, a
git-config accessor wired to it, isolated data directories, and output
state management.  These fixtures are automatically discovered by pytest
and available to all test modules without explicit imports.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Optional, Sequence

import pytest

from gsauth.gitconfig import GitConfig
from gsauth.output import reset_output
from gsauth.runner import CommandResult

FAKE_GIT = "/usr/bin/git"
FAKE_GCLOUD = "/opt/google-cloud-sdk/bin/gcloud"
FAKE_EXPIRY = "2099-01-01 00:00:00.000000"


# ---------------------------------------------------------------------------
# Fake git / gcloud
# ---------------------------------------------------------------------------


class FakeRunner:
    """In-memory stand-in for git-config and ``gcloud auth print-access-token``.

    *values* holds global ``[google]`` settings keyed by full name
    (``google.account``).  *scoped* maps a URL prefix to settings that apply
    to URLs starting with it; the longest matching prefix wins, mirroring
    ``git config --get-urlmatch``.  Unset keys exit with status 1.

    gcloud prints a token named after the requested account
    (``ya29.active`` for the active account) unless *gcloud_output* or a
    non-zero *gcloud_returncode* is given.  Every invocation is recorded in
    :attr:`calls`.
    """

    def __init__(
        self,
        values: Optional[dict[str, str]] = None,
        scoped: Optional[dict[str, dict[str, str]]] = None,
    ) -> None:
        self.values = dict(values or {})
        self.scoped = {url: dict(kv) for url, kv in (scoped or {}).items()}
        self.gcloud_output: Optional[bytes] = None
        self.gcloud_returncode = 0
        self.git_returncode: Optional[int] = None
        self.calls: list[list[str]] = []

    def run(self, args: Sequence[str]) -> CommandResult:
        args = list(args)
        self.calls.append(args)
        if os.path.basename(args[0]) == "gcloud":
            return self._gcloud(args)
        return self._git(args)

    @property
    def gcloud_calls(self) -> list[list[str]]:
        return [c for c in self.calls if os.path.basename(c[0]) == "gcloud"]

    def _git(self, args: list[str]) -> CommandResult:
        if self.git_returncode is not None:
            return CommandResult(self.git_returncode, b"")
        rest = args[args.index("config") + 1 :]
        if rest[:3] == ["--name-only", "--list", "--null"]:
            names = list(self.values)
            for url, kv in self.scoped.items():
                names.extend(f"google.{url}.{key.split('.', 1)[1]}" for key in kv)
            return CommandResult(0, "".join(n + "\0" for n in names).encode())

        rest = rest[1:]  # type flag
        if rest[0] == "--get-urlmatch":
            value = self._match(rest[1], rest[2])
        else:
            value = self.values.get(rest[0])
        if value is None:
            return CommandResult(1, b"")
        return CommandResult(0, (value + "\n").encode())

    def _match(self, key: str, url: str) -> Optional[str]:
        best: Optional[str] = None
        best_len = -1
        for prefix, kv in self.scoped.items():
            if key in kv and url.startswith(prefix) and len(prefix) > best_len:
                best, best_len = kv[key], len(prefix)
        return best if best is not None else self.values.get(key)

    def _gcloud(self, args: list[str]) -> CommandResult:
        if self.gcloud_returncode:
            return CommandResult(self.gcloud_returncode, b"")
        if self.gcloud_output is not None:
            return CommandResult(0, self.gcloud_output)
        account = args[4] if len(args) > 4 else "active"
        payload = {
            "access_token": f"ya29.{account}",
            "token_expiry": {"datetime": FAKE_EXPIRY},
        }
        return CommandResult(0, json.dumps(payload).encode())


@pytest.fixture
def fake_runner() -> FakeRunner:
    """A :class:`FakeRunner` with ``google.gcloudPath`` pointing at a fake gcloud."""
    return FakeRunner(values={"google.gcloudPath": FAKE_GCLOUD})


@pytest.fixture
def fake_git(fake_runner: FakeRunner) -> GitConfig:
    """A global :class:`GitConfig` backed by :func:`fake_runner`."""
    return GitConfig(FAKE_GIT, runner=fake_runner)


@pytest.fixture
def patched_git(fake_git: GitConfig, monkeypatch: pytest.MonkeyPatch) -> GitConfig:
    """Make ``GitConfig.find`` return :func:`fake_git` for front-end tests."""
    monkeypatch.setattr(GitConfig, "find", lambda *args, **kwargs: fake_git)
    return fake_git


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager's Rich console binds to the stderr stream current at
    creation time.  When Typer's CliRunner swaps that stream out and the
    test finishes, the reference goes stale.  Resetting forces a fresh
    manager to be created on next use, and detaches the log handler bound
    to the old console.
    """
    yield
    reset_output()
    logger = logging.getLogger("gsauth")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


# ---------------------------------------------------------------------------
# Filesystem isolation
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point ``HOME`` and ``XDG_DATA_HOME`` into *tmp_path*.

    Returns:
        The fake home directory.
    """
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.setattr(Path, "home", classmethod(lambda cls: home))
    monkeypatch.setattr("gsauth.config._is_xdg_platform", lambda: True)
    return home


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
