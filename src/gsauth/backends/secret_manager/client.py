"""Minimal Secret Manager client.

Only ``AccessSecretVersion`` is needed::

    GET https://secretmanager.googleapis.com/v1/{name}:access
    -> {"name": "...", "payload": {"data": "<base64>"}}

where *name* is a full version resource such as
``projects/my-project/secrets/git-token/versions/latest``.
"""

from __future__ import annotations

import base64
import binascii
import logging
from typing import Any, Protocol

import httpx

from gsauth.auth.base import TokenSource
from gsauth.config import REQUEST_TIMEOUT
from gsauth.exceptions import SecretAccessError

logger = logging.getLogger(__name__)

SECRET_MANAGER_ENDPOINT = "https://secretmanager.googleapis.com/v1"


class SecretGetter(Protocol):
    """Anything that can read the payload of a secret version."""

    def access_secret_version(self, name: str) -> str: ...


class SecretManagerClient:
    """Read secret payloads over the Secret Manager REST API.

    Args:
        authenticator: Source of the bearer token for API calls.
        endpoint: Base URL of the API.
        timeout: Request timeout in seconds.
    """

    def __init__(
        self,
        authenticator: TokenSource,
        endpoint: str = SECRET_MANAGER_ENDPOINT,
        timeout: float = REQUEST_TIMEOUT,
    ) -> None:
        self.authenticator = authenticator
        self.endpoint = endpoint.rstrip("/")
        self.timeout = timeout

    def access_secret_version(self, name: str) -> str:
        """Return the payload of secret version *name* decoded as UTF-8.

        Raises:
            SecretAccessError: If the request fails or the payload is missing
                or undecodable.
        """
        bearer = self.authenticator.token()
        try:
            response = httpx.get(
                f"{self.endpoint}/{name}:access",
                headers={
                    "Authorization": f"Bearer {bearer.access_token}",
                    "Accept": "application/json",
                },
                timeout=self.timeout,
            )
            response.raise_for_status()
            data: dict[str, Any] = response.json()
        except httpx.HTTPStatusError as exc:
            raise SecretAccessError(
                f"Failed to access secret version {name}: status "
                f"{exc.response.status_code}: {exc.response.text}"
            ) from exc
        except httpx.HTTPError as exc:
            raise SecretAccessError(f"Failed to access secret version {name}: {exc}") from exc
        except ValueError as exc:
            raise SecretAccessError(
                f"Failed to access secret version {name}: response is not JSON: {exc}"
            ) from exc

        payload = data.get("payload") if isinstance(data, dict) else None
        encoded = payload.get("data") if isinstance(payload, dict) else None
        if encoded is None:
            raise SecretAccessError(f"Secret version {name} has no payload")
        try:
            return base64.b64decode(encoded, validate=True).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError) as exc:
            raise SecretAccessError(f"Cannot decode the payload of {name}: {exc}") from exc
