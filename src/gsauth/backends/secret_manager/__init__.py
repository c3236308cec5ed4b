"""Secret Manager client for ``git-credential-secretmanager``.

See Also:
    :class:`~gsauth.backends.secret_manager.client.SecretManagerClient`
"""

from gsauth.backends.secret_manager.client import SecretGetter, SecretManagerClient

__all__ = ["SecretGetter", "SecretManagerClient"]
