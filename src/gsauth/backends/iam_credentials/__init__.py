"""IAM Service Account Credentials backend.

Mints access tokens for a service account through the
``generateAccessToken`` method, optionally via a chain of delegate service
accounts.  The call itself is authenticated with Application Default
Credentials, whose principal needs ``iam.serviceAccounts.getAccessToken`` on
the first hop.

See Also:
    :class:`~gsauth.backends.iam_credentials.source.IAMCredentialsTokenSource`
"""

from gsauth.backends.iam_credentials.source import (
    IAMCredentialsTokenSource,
    parse_rfc3339,
    service_account_resource,
)

__all__ = ["IAMCredentialsTokenSource", "parse_rfc3339", "service_account_resource"]
