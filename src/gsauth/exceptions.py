"""Exception hierarchy for gsauth.

All exceptions inherit from :class:`GsauthError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`gsauth.exit_codes`.
Each front-end catches ``GsauthError``, prints the message to stderr and
exits with the appropriate code, while unexpected exceptions produce a crash
log and exit with :data:`EXIT_GENERIC_FAILURE`.

Subclass hierarchy::

    GsauthError (exit 1)
    +-- ConfigReadError          (exit 1)
    +-- InvalidUsageError        (exit 2)
    |   +-- UnsupportedAccountError
    |   +-- InsecureProtocolError
    +-- BackendError             (exit 3)
    |   +-- BackendUnavailableError
    |   +-- BackendInvocationError
    |   +-- BackendResponseError (exit 7)
    +-- ExchangeError            (exit 6)
    |   +-- ExchangeResponseError (exit 7)
    +-- SecretAccessError        (exit 6)
"""

from gsauth.exit_codes import (
    EXIT_BACKEND_FAILURE,
    EXIT_EXCHANGE_FAILURE,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_MALFORMED_RESPONSE,
)


class GsauthError(Exception):
    """Base exception for all gsauth errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`gsauth.exit_codes`.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class ConfigReadError(GsauthError):
    """Raised when git-config cannot be queried (git missing, process or I/O failure).

    An unset key is never an error; it resolves to the field's default.
    """

    exit_code = EXIT_GENERIC_FAILURE


class InvalidUsageError(GsauthError):
    """Raised for invalid arguments or malformed credential-helper input."""

    exit_code = EXIT_INVALID_USAGE


class UnsupportedAccountError(InvalidUsageError):
    """Raised when ``google.account`` or a delegate email is malformed."""


class InsecureProtocolError(InvalidUsageError):
    """Raised when plain HTTP is requested without ``google.allowHTTPForCredentialHelper``."""


class BackendError(GsauthError):
    """Base class for failures of a token backend."""

    exit_code = EXIT_BACKEND_FAILURE


class BackendUnavailableError(BackendError):
    """Raised when the selected backend cannot be located (e.g. no ``gcloud`` on ``PATH``)."""


class BackendInvocationError(BackendError):
    """Raised when the backend process exits non-zero, times out, or cannot be spawned."""


class BackendResponseError(BackendError):
    """Raised when backend output is not parsable or lacks the token or expiry."""

    exit_code = EXIT_MALFORMED_RESPONSE


class ExchangeError(GsauthError):
    """Raised when the IAM Service Account Credentials API call fails for any reason."""

    exit_code = EXIT_EXCHANGE_FAILURE


class ExchangeResponseError(ExchangeError):
    """Raised when the exchange response carries an unparsable ``expireTime``."""

    exit_code = EXIT_MALFORMED_RESPONSE


class SecretAccessError(GsauthError):
    """Raised when a Secret Manager secret version cannot be read."""

    exit_code = EXIT_EXCHANGE_FAILURE
