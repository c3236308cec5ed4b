"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~gsauth.exceptions.GsauthError` subclass.
git only distinguishes zero from non-zero, but wrapper scripts can inspect
the exact code to tell a missing ``gcloud`` from a rejected exchange call.

Example::

    $ echo "protocol=https\nhost=foo.googlesource.com\n" | git-credential-googlesource get
    $ echo $?
    3   # EXIT_BACKEND_FAILURE -- gcloud is not installed
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or malformed input."""

EXIT_BACKEND_FAILURE = 3
"""An identity backend could not be located or failed to produce a token."""

EXIT_EXCHANGE_FAILURE = 6
"""A remote Google API call failed (permission, principal, or network)."""

EXIT_MALFORMED_RESPONSE = 7
"""A backend or remote API returned output that could not be parsed."""
