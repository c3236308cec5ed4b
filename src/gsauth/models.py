"""Canonical Pydantic models shared across all gsauth modules.

This is the single source of truth for data shapes in the project. Every other
module imports from here rather than defining its own models.

**Resolution models** -- produced from git-config and consumed by the token
source selector:
    :class:`CredentialConfig` and :class:`BackendKind`.

**Credential models** -- produced by token sources and adapters:
    :class:`Token`, :class:`Cookie`, and :class:`GitCredential`.

All models are immutable (``frozen=True``) except :class:`GitCredential`,
a plain record of what git sent or will receive.
"""

from __future__ import annotations

import enum
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

SCOPE_CLOUD_PLATFORM = "https://www.googleapis.com/auth/cloud-platform"
"""Scope used when ``google.scopes`` is unset, and for authenticating exchange calls."""

ACCOUNT_GCLOUD = "gcloud"
"""Account sentinel selecting the active ``gcloud`` account."""

ACCOUNT_APPLICATION_DEFAULT = "application-default"
"""Account sentinel selecting Application Default Credentials."""

SERVICE_ACCOUNT_SUFFIX = ".gserviceaccount.com"

GIT_USERNAME = "git-service-account"
"""Username reported to git alongside an access-token password."""


# --- Resolution ---


class BackendKind(str, enum.Enum):
    """Token backends a :class:`CredentialConfig` can resolve to."""

    GCLOUD = "gcloud"
    APPLICATION_DEFAULT = "application-default"
    IAM_CREDENTIALS = "iam-credentials"


class CredentialConfig(BaseModel):
    """Credential settings resolved for one URL from the ``google.*`` git-config keys.

    Defaults are applied at construction time: an empty ``account`` becomes
    :data:`ACCOUNT_GCLOUD` and empty ``scopes`` become
    ``{SCOPE_CLOUD_PLATFORM}``.  Instances are frozen and hashable so that
    :class:`~gsauth.auth.manager.TokenSourceRegistry` can key token sources
    by configuration.

    Example::

        CredentialConfig(
            account="builder@proj.iam.gserviceaccount.com",
            scopes=["https://www.googleapis.com/auth/gerritcodereview"],
            delegates=["hop@proj.iam.gserviceaccount.com"],
        )
    """

    model_config = ConfigDict(frozen=True)

    account: str = Field(
        default=ACCOUNT_GCLOUD,
        description="gcloud, application-default, a Google account email, "
        "or a service account email",
    )
    scopes: frozenset[str] = Field(
        default=frozenset({SCOPE_CLOUD_PLATFORM}),
        description="OAuth2 scopes; order is irrelevant",
    )
    delegates: tuple[str, ...] = Field(
        default=(),
        description="Service account emails forming the delegation path, in order",
    )
    gcloud_path: Optional[str] = Field(
        default=None, description="Override for the gcloud executable"
    )

    @field_validator("account", mode="before")
    @classmethod
    def _default_account(cls, value: Any) -> Any:
        if value is None or value == "":
            return ACCOUNT_GCLOUD
        return value

    @field_validator("scopes", mode="before")
    @classmethod
    def _default_scopes(cls, value: Any) -> Any:
        if value is None:
            return frozenset({SCOPE_CLOUD_PLATFORM})
        scopes = frozenset(s for s in value if s)
        return scopes or frozenset({SCOPE_CLOUD_PLATFORM})

    @field_validator("delegates", mode="before")
    @classmethod
    def _drop_empty_delegates(cls, value: Any) -> Any:
        if value is None:
            return ()
        return tuple(d for d in value if d)

    @field_validator("gcloud_path", mode="before")
    @classmethod
    def _empty_path_is_unset(cls, value: Any) -> Any:
        return value or None


# --- Credentials ---


class Token(BaseModel):
    """An OAuth2 access token and its absolute expiry.

    ``expiry`` is always timezone-aware (naive values are taken as UTC).
    ``None`` means the token carries no expiry and never goes stale.
    """

    model_config = ConfigDict(frozen=True)

    access_token: str
    expiry: Optional[datetime] = None

    @field_validator("expiry")
    @classmethod
    def _aware_expiry(cls, value: Optional[datetime]) -> Optional[datetime]:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    def is_valid(
        self,
        now: Optional[datetime] = None,
        margin: timedelta = timedelta(0),
    ) -> bool:
        """Return ``True`` while *now* is strictly before ``expiry - margin``."""
        if not self.access_token:
            return False
        if self.expiry is None:
            return True
        if now is None:
            now = datetime.now(timezone.utc)
        return now < self.expiry - margin


class Cookie(BaseModel):
    """A cookie record destined for a Netscape cookie file."""

    model_config = ConfigDict(frozen=True)

    name: str
    value: str
    path: str = "/"
    domain: str
    expires: Optional[datetime] = None
    secure: bool = False

    @property
    def include_subdomains(self) -> bool:
        """Whether the domain is a ``.``-prefixed wildcard."""
        return self.domain.startswith(".")


class GitCredential(BaseModel):
    """A git credential description (see ``git help credential``, INPUT/OUTPUT FORMAT).

    Unset attributes are empty strings and are omitted when rendered.
    """

    protocol: str = ""
    host: str = ""
    path: str = ""
    username: str = ""
    password: str = ""
    url: str = ""
