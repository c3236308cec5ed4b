"""Tests for the googlesource-cookieauth front-end."""

from __future__ import annotations

import logging
import os
import stat
from datetime import timedelta
from pathlib import Path

import pytest

from gsauth.commands import cookieauth as cookieauth_module
from gsauth.commands.cookieauth import (
    collect_cookies,
    collect_urls,
    cookieauth_app,
    resolve_output_path,
    run_daemon,
    write_cookies,
)
from gsauth.exit_codes import EXIT_BACKEND_FAILURE
from gsauth.gitconfig import KEY_ACCOUNT, KEY_COOKIE_FILE


def _records(text: str) -> list[list[str]]:
    return [line.split("\t") for line in text.splitlines() if not line.startswith("#")]


class TestCollectUrls:
    def test_defaults_only(self, fake_git) -> None:
        assert collect_urls(fake_git) == [
            "https://googlesource.com",
            "https://source.developers.google.com",
        ]

    def test_configured_urls_come_first(self, fake_git, fake_runner) -> None:
        fake_runner.scoped = {"https://chromium.googlesource.com": {KEY_ACCOUNT: "me@example.com"}}
        assert collect_urls(fake_git) == [
            "https://chromium.googlesource.com",
            "https://googlesource.com",
            "https://source.developers.google.com",
        ]

    def test_configured_root_is_not_duplicated(self, fake_git, fake_runner) -> None:
        fake_runner.scoped = {
            "https://googlesource.com/": {KEY_ACCOUNT: "me@example.com"},
            "https://source.developers.google.com": {KEY_ACCOUNT: "me@example.com"},
        }
        assert collect_urls(fake_git) == [
            "https://googlesource.com/",
            "https://source.developers.google.com",
        ]

    def test_non_root_entry_keeps_default(self, fake_git, fake_runner) -> None:
        fake_runner.scoped = {"https://source.developers.google.com/p/x": {KEY_ACCOUNT: "a@b.c"}}
        assert "https://source.developers.google.com" in collect_urls(fake_git)


class TestCollectCookies:
    def test_one_token_per_configuration(self, fake_git, fake_runner) -> None:
        cookies = collect_cookies(
            fake_git, ["https://googlesource.com", "https://chromium.googlesource.com/src.git"]
        )
        assert [c.domain for c in cookies] == [
            ".googlesource.com",
            "chromium.googlesource.com",
            "chromium-review.googlesource.com",
        ]
        assert {c.value for c in cookies} == {"ya29.active"}
        assert len(fake_runner.gcloud_calls) == 1

    def test_per_url_accounts(self, fake_git, fake_runner) -> None:
        fake_runner.scoped = {"https://chromium.googlesource.com": {KEY_ACCOUNT: "me@example.com"}}
        cookies = collect_cookies(
            fake_git, ["https://chromium.googlesource.com", "https://googlesource.com"]
        )
        assert cookies[0].value == "ya29.me@example.com"
        assert cookies[-1].value == "ya29.active"


class TestResolveOutputPath:
    def test_explicit_output_wins(self, fake_git, fake_runner) -> None:
        fake_runner.values[KEY_COOKIE_FILE] = "/tmp/from-config"
        assert resolve_output_path(fake_git, "/tmp/explicit") == "/tmp/explicit"

    def test_git_config(self, fake_git, fake_runner) -> None:
        fake_runner.values[KEY_COOKIE_FILE] = "/tmp/from-config"
        assert resolve_output_path(fake_git) == "/tmp/from-config"

    def test_default(self, fake_git, isolated_home: Path) -> None:
        assert resolve_output_path(fake_git) == str(
            isolated_home / ".git-credential-cache" / "googlesource-cookieauth-cookie"
        )


class TestWriteCookies:
    def test_writes_default_file(self, fake_git, isolated_home: Path) -> None:
        destination = write_cookies(fake_git)
        path = Path(destination)
        assert path.parent == isolated_home / ".git-credential-cache"
        assert stat.S_IMODE(os.stat(path).st_mode) == 0o600
        records = _records(path.read_text(encoding="utf-8"))
        assert [r[0] for r in records] == [".googlesource.com", "source.developers.google.com"]
        assert all(r[5] == "o" and r[6] == "ya29.active" for r in records)


class TestRunDaemon:
    def test_refreshes_on_interval(self, fake_git, tmp_path: Path) -> None:
        sleeps: list[float] = []
        target = tmp_path / "cookies"
        run_daemon(
            fake_git,
            str(target),
            interval=timedelta(minutes=45),
            sleep=sleeps.append,
            iterations=3,
        )
        assert sleeps == [2700.0, 2700.0]
        assert target.exists()

    def test_failures_do_not_stop_the_loop(self, fake_git, fake_runner, tmp_path: Path) -> None:
        fake_runner.gcloud_returncode = 1
        target = tmp_path / "cookies"
        sleeps: list[float] = []

        def recover(seconds: float) -> None:
            sleeps.append(seconds)
            fake_runner.gcloud_returncode = 0

        run_daemon(fake_git, str(target), sleep=recover, iterations=2)
        assert len(sleeps) == 1
        assert "ya29.active" in target.read_text(encoding="utf-8")

    def test_unexpected_errors_do_not_stop_the_loop(
        self, fake_git, tmp_path: Path, monkeypatch: pytest.MonkeyPatch, caplog
    ) -> None:
        real_write = cookieauth_module.write_cookies
        attempts: list[int] = []

        def flaky_write(git, output=None):
            attempts.append(1)
            if len(attempts) == 1:
                raise RuntimeError("disk gremlin")
            return real_write(git, output)

        monkeypatch.setattr(cookieauth_module, "write_cookies", flaky_write)
        target = tmp_path / "cookies"
        with caplog.at_level(logging.ERROR, logger="gsauth.commands.cookieauth"):
            run_daemon(fake_git, str(target), sleep=lambda seconds: None, iterations=2)
        assert len(attempts) == 2
        assert target.exists()
        assert "disk gremlin" in caplog.text


class TestCommand:
    def test_output_option(self, cli_runner, patched_git, tmp_path: Path) -> None:
        target = tmp_path / "out" / "cookies"
        result = cli_runner.invoke(cookieauth_app, ["--output", str(target)])
        assert result.exit_code == 0
        assert target.read_text(encoding="utf-8").startswith(
            "# Created by googlesource-cookieauth at "
        )

    def test_stdout(self, cli_runner, patched_git) -> None:
        result = cli_runner.invoke(cookieauth_app, ["-o", "-"])
        assert result.exit_code == 0
        assert result.stdout.startswith("# Created by googlesource-cookieauth at ")
        assert len(_records(result.stdout)) == 2

    def test_failure(self, cli_runner, patched_git, fake_runner, tmp_path: Path) -> None:
        fake_runner.gcloud_returncode = 1
        target = tmp_path / "cookies"
        result = cli_runner.invoke(cookieauth_app, ["-o", str(target)])
        assert result.exit_code == EXIT_BACKEND_FAILURE
        assert not target.exists()

    @pytest.mark.parametrize("flags,reported", [([], True), (["--quiet"], False), (["-q"], False)])
    def test_daemon_reports_refreshes_unless_quiet(
        self,
        cli_runner,
        patched_git,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
        flags: list[str],
        reported: bool,
    ) -> None:
        monkeypatch.setattr(
            cookieauth_module,
            "run_daemon",
            lambda git, output: run_daemon(git, output, sleep=lambda seconds: None, iterations=1),
        )
        target = tmp_path / "cookies"
        result = cli_runner.invoke(
            cookieauth_app, ["--run-as-daemon", "--no-color", "-o", str(target), *flags]
        )
        assert result.exit_code == 0
        assert target.exists()
        assert ("Wrote cookies to" in result.output) is reported
