"""Concrete token backends and Google API clients.

Each backend lives in its own sub-package and subclasses
:class:`~gsauth.auth.base.TokenSource`:

- :mod:`gsauth.backends.gcloud` -- ``gcloud auth print-access-token``.
- :mod:`gsauth.backends.application_default` -- Application Default Credentials.
- :mod:`gsauth.backends.iam_credentials` -- IAM Service Account Credentials
  ``generateAccessToken``.

:mod:`gsauth.backends.secret_manager` is not a token source; it reads a
stored secret for ``git-credential-secretmanager``.
"""
