"""Token source backed by Application Default Credentials.

Credential discovery (``GOOGLE_APPLICATION_CREDENTIALS``, the gcloud ADC
file, the GCE metadata server, ...) is delegated entirely to
:func:`google.auth.default`.  Each :meth:`~ApplicationDefaultTokenSource.fetch`
refreshes the underlying credentials and converts them to a
:class:`~gsauth.models.Token`.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Optional

import google.auth
from google.auth.exceptions import DefaultCredentialsError, GoogleAuthError
from google.auth.transport.requests import Request

from gsauth.auth.base import TokenSource
from gsauth.exceptions import (
    BackendInvocationError,
    BackendResponseError,
    BackendUnavailableError,
)
from gsauth.models import BackendKind, Token

logger = logging.getLogger(__name__)


class ApplicationDefaultTokenSource(TokenSource):
    """Fetch access tokens from Application Default Credentials.

    Args:
        scopes: OAuth2 scopes to request.
        credentials: Pre-built ``google.auth`` credentials.  When omitted,
            :func:`google.auth.default` is called with *scopes*.
        request: Transport used for refreshes; defaults to
            :class:`google.auth.transport.requests.Request`.

    Raises:
        BackendUnavailableError: If no Application Default Credentials can be
            found.
    """

    def __init__(
        self,
        scopes: Iterable[str],
        credentials: Optional[Any] = None,
        request: Optional[Any] = None,
    ) -> None:
        self.scopes = sorted(scopes)
        if credentials is None:
            try:
                credentials, project = google.auth.default(scopes=self.scopes)
            except DefaultCredentialsError as exc:
                raise BackendUnavailableError(
                    f"Cannot find the application default credentials: {exc}"
                ) from exc
            logger.debug("Using application default credentials (project %s)", project)
        self.credentials = credentials
        self._request = request

    @property
    def kind(self) -> BackendKind:
        return BackendKind.APPLICATION_DEFAULT

    def fetch(self) -> Token:
        """Refresh the credentials and return their access token.

        Raises:
            BackendInvocationError: If the refresh fails.
            BackendResponseError: If the refreshed credentials carry no token.
        """
        request = self._request or Request()
        try:
            self.credentials.refresh(request)
        except GoogleAuthError as exc:
            raise BackendInvocationError(
                f"Cannot refresh the application default credentials: {exc}"
            ) from exc
        if not self.credentials.token:
            raise BackendResponseError(
                "The application default credentials returned no access token"
            )
        return Token(access_token=self.credentials.token, expiry=self.credentials.expiry)
