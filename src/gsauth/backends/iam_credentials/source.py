"""Token source backed by the IAM Service Account Credentials API.

This module provides :class:`IAMCredentialsTokenSource`, which calls::

    POST https://iamcredentials.googleapis.com/v1/projects/-/serviceAccounts/{EMAIL}:generateAccessToken
    {"delegates": ["projects/-/serviceAccounts/{HOP}", ...], "scope": [...]}

and converts the ``accessToken`` / ``expireTime`` response into a
:class:`~gsauth.models.Token`.  Failures are reported uniformly as
:class:`~gsauth.exceptions.ExchangeError`; nothing is retried here.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime
from typing import Any, Iterable

import httpx

from gsauth.auth.base import TokenSource
from gsauth.config import REQUEST_TIMEOUT
from gsauth.exceptions import ExchangeError, ExchangeResponseError, GsauthError
from gsauth.models import BackendKind, Token

logger = logging.getLogger(__name__)

IAM_CREDENTIALS_ENDPOINT = "https://iamcredentials.googleapis.com/v1"

_RFC3339 = re.compile(
    r"^(?P<base>\d{4}-\d{2}-\d{2}[Tt ]\d{2}:\d{2}:\d{2})"
    r"(?:\.(?P<frac>\d+))?"
    r"(?P<tz>[Zz]|[+-]\d{2}:\d{2})$"
)


def service_account_resource(email: str) -> str:
    """Return the API resource name for a service account email."""
    return f"projects/-/serviceAccounts/{email}"


def parse_rfc3339(value: str) -> datetime:
    """Parse an RFC 3339 timestamp with optional fractional seconds.

    Fractions beyond microseconds (the API returns nanoseconds) are
    truncated.  A timezone designator is required.

    Raises:
        ValueError: If *value* is not an RFC 3339 timestamp.
    """
    match = _RFC3339.match(value.strip())
    if match is None:
        raise ValueError(f"not an RFC 3339 timestamp: {value!r}")
    text = match.group("base").replace("t", "T").replace(" ", "T")
    frac = match.group("frac")
    if frac:
        text += "." + frac[:6].ljust(6, "0")
    tz = match.group("tz")
    text += "+00:00" if tz in ("Z", "z") else tz
    return datetime.fromisoformat(text)


class IAMCredentialsTokenSource(TokenSource):
    """Mint service account tokens with ``generateAccessToken``.

    Args:
        service_account: Email of the target service account.
        delegates: Delegate service account emails, in delegation order.
        scopes: OAuth2 scopes for the minted token.
        authenticator: Source of the bearer token that authenticates the
            API call itself.
        endpoint: Base URL of the API.
        timeout: Request timeout in seconds.
    """

    def __init__(
        self,
        service_account: str,
        delegates: Iterable[str],
        scopes: Iterable[str],
        authenticator: TokenSource,
        endpoint: str = IAM_CREDENTIALS_ENDPOINT,
        timeout: float = REQUEST_TIMEOUT,
    ) -> None:
        self.name = service_account_resource(service_account)
        self.delegates = [service_account_resource(d) for d in delegates]
        self.scopes = sorted(scopes)
        self.authenticator = authenticator
        self.endpoint = endpoint.rstrip("/")
        self.timeout = timeout

    @property
    def kind(self) -> BackendKind:
        return BackendKind.IAM_CREDENTIALS

    def request_body(self) -> dict[str, Any]:
        """Return the JSON body of the ``generateAccessToken`` request."""
        return {"delegates": self.delegates, "scope": self.scopes}

    def fetch(self) -> Token:
        """Call ``generateAccessToken`` for the target service account.

        Raises:
            ExchangeError: If the authenticating token cannot be obtained, or
                the request fails, is rejected, or returns a body that is not
                JSON or lacks ``accessToken``.
            ExchangeResponseError: If ``expireTime`` cannot be parsed.
        """
        try:
            bearer = self.authenticator.token()
        except GsauthError as exc:
            raise ExchangeError(f"Cannot obtain a credential for {self.name}: {exc}") from exc
        url = f"{self.endpoint}/{self.name}:generateAccessToken"
        try:
            response = httpx.post(
                url,
                json=self.request_body(),
                headers={
                    "Authorization": f"Bearer {bearer.access_token}",
                    "Accept": "application/json",
                },
                timeout=self.timeout,
            )
            response.raise_for_status()
            data: dict[str, Any] = response.json()
        except httpx.HTTPStatusError as exc:
            raise ExchangeError(
                f"Cannot obtain a credential for {self.name}: status "
                f"{exc.response.status_code}: {exc.response.text}"
            ) from exc
        except httpx.HTTPError as exc:
            raise ExchangeError(f"Cannot obtain a credential for {self.name}: {exc}") from exc
        except ValueError as exc:
            raise ExchangeError(
                f"Cannot obtain a credential for {self.name}: response is not JSON: {exc}"
            ) from exc

        access_token = data.get("accessToken") if isinstance(data, dict) else None
        if not access_token:
            raise ExchangeError(
                f"Cannot obtain a credential for {self.name}: response has no accessToken"
            )
        expire_time = data.get("expireTime", "")
        try:
            expiry = parse_rfc3339(str(expire_time))
        except ValueError as exc:
            raise ExchangeResponseError(
                f"Cannot parse expireTime {expire_time!r} for {self.name}: {exc}"
            ) from exc

        logger.debug("IAM credentials issued a token for %s", self.name)
        return Token(access_token=access_token, expiry=expiry)
