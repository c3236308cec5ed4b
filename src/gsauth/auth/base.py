"""Abstract token source and the reusing, thread-safe wrapper around it.

This module defines the two foundational types of the auth subsystem:

- :class:`TokenSource` -- the abstract base class every backend extends.
  A backend implements :meth:`~TokenSource.fetch`, which always performs a
  fresh backend call.
- :class:`ReuseTokenSource` -- wraps a backend and hands out the cached
  :class:`~gsauth.models.Token` until it is about to expire.

Callers should always go through :meth:`TokenSource.token`; only the
reuse wrapper decides when :meth:`~TokenSource.fetch` runs.

See Also:
    :mod:`gsauth.auth.manager` for backend selection.
"""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from gsauth.config import TOKEN_EXPIRY_MARGIN
from gsauth.models import BackendKind, Token

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TokenSource(ABC):
    """Abstract base class for token backends.

    Every concrete backend (gcloud, Application Default Credentials, IAM
    Service Account Credentials) must subclass this and provide:

    1. A :attr:`kind` property identifying the backend.
    2. A :meth:`fetch` implementation that obtains a brand-new token.
    """

    @property
    @abstractmethod
    def kind(self) -> BackendKind:
        """Return the backend this source talks to."""
        ...

    @abstractmethod
    def fetch(self) -> Token:
        """Obtain a new token from the backend.

        Returns:
            A freshly minted :class:`~gsauth.models.Token`.

        Raises:
            GsauthError: A backend-specific subclass describing the failure.
        """
        ...

    def token(self) -> Token:
        """Return a usable token.

        The base implementation fetches on every call.  Wrap a source in
        :class:`ReuseTokenSource` to reuse tokens across calls.
        """
        return self.fetch()


class ReuseTokenSource(TokenSource):
    """Reuse a token until it expires, then fetch a new one.

    The cache slot is guarded by a lock that is held across the backend
    call: when several threads find the token stale at the same time, the
    first one fetches and the others wait and receive its result.  A token
    within *margin* of its expiry is treated as expired.

    Args:
        source: The backend to fetch tokens from.
        token: An optional initial token.
        margin: Safety margin before expiry.
        clock: Returns the current time as an aware datetime (injectable
            for tests).

    Example::

        source = ReuseTokenSource(GcloudTokenSource("/usr/bin/gcloud"))
        first = source.token()   # runs gcloud
        again = source.token()   # cached
        assert first is again
    """

    def __init__(
        self,
        source: TokenSource,
        token: Optional[Token] = None,
        margin: timedelta = TOKEN_EXPIRY_MARGIN,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._source = source
        self._token = token
        self._margin = margin
        self._clock = clock
        self._lock = threading.Lock()

    @property
    def kind(self) -> BackendKind:
        return self._source.kind

    @property
    def source(self) -> TokenSource:
        """The wrapped backend."""
        return self._source

    def fetch(self) -> Token:
        return self._source.fetch()

    def token(self) -> Token:
        with self._lock:
            cached = self._token
            if cached is not None and cached.is_valid(now=self._clock(), margin=self._margin):
                return cached
            token = self._source.fetch()
            self._token = token
            logger.debug("Fetched a new %s token expiring at %s", self.kind.value, token.expiry)
            return token
