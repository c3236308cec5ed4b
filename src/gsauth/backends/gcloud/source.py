"""Token source backed by the gcloud CLI.

This module provides :class:`GcloudTokenSource`, which runs::

    gcloud --format=json auth print-access-token [ACCOUNT]

through a :class:`~gsauth.runner.CommandRunner` and parses the result::

    {
      "access_token": "ya29....",
      "token_expiry": {"datetime": "2024-05-01 12:34:56.789012", ...}
    }

``token_expiry.datetime`` carries no timezone.  gcloud writes it in UTC, so
it is parsed as UTC and stored as an aware datetime.
"""

from __future__ import annotations

import json
import logging
import os
import shutil
import subprocess
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from gsauth.auth.base import TokenSource
from gsauth.exceptions import (
    BackendInvocationError,
    BackendResponseError,
    BackendUnavailableError,
)
from gsauth.models import BackendKind, Token
from gsauth.runner import CommandRunner, SubprocessRunner

logger = logging.getLogger(__name__)

GCLOUD_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S.%f"


def parse_gcloud_timestamp(value: str) -> datetime:
    """Parse gcloud's naive ``YYYY-MM-DD HH:MM:SS.ffffff`` timestamp as UTC.

    Raises:
        ValueError: If *value* does not match the format.
    """
    return datetime.strptime(value, GCLOUD_TIMESTAMP_FORMAT).replace(tzinfo=timezone.utc)


def format_gcloud_timestamp(value: datetime) -> str:
    """Format *value* in gcloud's naive UTC timestamp format."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.strftime(GCLOUD_TIMESTAMP_FORMAT)


def find_gcloud(override: Optional[str] = None) -> str:
    """Return an absolute path to the gcloud executable.

    Args:
        override: Explicit path from ``google.gcloudPath``.  When unset, the
            executable is looked up on ``PATH``.

    Raises:
        BackendUnavailableError: If gcloud is not on ``PATH``.
    """
    path = override
    if not path:
        path = shutil.which("gcloud")
        if path is None:
            raise BackendUnavailableError(
                "Cannot find the gcloud binary on PATH; install the Google Cloud SDK "
                "or set google.gcloudPath"
            )
    return os.path.abspath(path)


class _TokenExpiry(BaseModel):
    date_time: str = Field(default="", alias="datetime")


class _GcloudCredential(BaseModel):
    model_config = ConfigDict(extra="ignore")

    access_token: str = ""
    token_expiry: _TokenExpiry = Field(default_factory=_TokenExpiry)


class GcloudTokenSource(TokenSource):
    """Fetch access tokens with ``gcloud auth print-access-token``.

    Args:
        gcloud_path: Absolute path to gcloud (see :func:`find_gcloud`).
        account: Account to print a token for.  Empty means gcloud's active
            account.
        runner: Command runner; defaults to :class:`~gsauth.runner.SubprocessRunner`.
    """

    def __init__(
        self,
        gcloud_path: str,
        account: str = "",
        runner: Optional[CommandRunner] = None,
    ) -> None:
        self.gcloud_path = gcloud_path
        self.account = account
        self.runner = runner or SubprocessRunner()

    @property
    def kind(self) -> BackendKind:
        return BackendKind.GCLOUD

    def command(self) -> list[str]:
        """Return the argv used to print a token."""
        args = [self.gcloud_path, "--format=json", "auth", "print-access-token"]
        if self.account:
            args.append(self.account)
        return args

    def fetch(self) -> Token:
        """Run gcloud and parse its JSON output.

        Raises:
            BackendInvocationError: If gcloud cannot be spawned, times out,
                or exits non-zero.
            BackendResponseError: If the output is not JSON, lacks
                ``access_token`` or ``token_expiry.datetime``, or the
                timestamp is malformed.
        """
        who = self.account or "the active gcloud account"
        try:
            result = self.runner.run(self.command())
        except (OSError, subprocess.SubprocessError) as exc:
            raise BackendInvocationError(
                f"Failed to run {self.gcloud_path} for {who}: {exc}"
            ) from exc
        if result.returncode != 0:
            raise BackendInvocationError(
                f"{self.gcloud_path} auth print-access-token exited with status "
                f"{result.returncode} for {who}"
            )

        try:
            credential = _GcloudCredential.model_validate(json.loads(result.stdout))
        except (json.JSONDecodeError, UnicodeDecodeError, ValidationError) as exc:
            raise BackendResponseError(
                f"Cannot parse gcloud print-access-token output for {who}: {exc}"
            ) from exc

        if not credential.access_token:
            raise BackendResponseError(
                f"gcloud print-access-token output for {who} has no access_token"
            )
        if not credential.token_expiry.date_time:
            raise BackendResponseError(
                f"gcloud print-access-token output for {who} has no token_expiry.datetime"
            )
        try:
            expiry = parse_gcloud_timestamp(credential.token_expiry.date_time)
        except ValueError as exc:
            raise BackendResponseError(
                f"Cannot parse gcloud token expiry "
                f"{credential.token_expiry.date_time!r}: {exc}"
            ) from exc

        logger.debug("gcloud issued a token for %s", who)
        return Token(access_token=credential.access_token, expiry=expiry)
