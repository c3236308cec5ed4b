"""Application Default Credentials backend.

Selected by ``google.account = application-default``, and used internally to
authenticate calls to the IAM Service Account Credentials and Secret
Manager APIs.

See Also:
    :class:`~gsauth.backends.application_default.source.ApplicationDefaultTokenSource`
"""

from gsauth.backends.application_default.source import ApplicationDefaultTokenSource

__all__ = ["ApplicationDefaultTokenSource"]
