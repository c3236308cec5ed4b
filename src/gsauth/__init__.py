"""gsauth -- OAuth2 credentials for googlesource.com and source.developers.google.com.

This package turns per-URL git configuration into short-lived access tokens
and hands them to git in the shapes git understands: a credential-helper
response, a ``GIT_ASKPASS`` answer, or a Netscape cookie file.

Tokens come from one of three backends, chosen per URL by ``google.account``:

* ``gcloud`` (default) -- ``gcloud auth print-access-token``.
* ``application-default`` -- Application Default Credentials.
* a service-account email -- the IAM Service Account Credentials API,
  authenticated with Application Default Credentials.

Typical git configuration::

    [credential "https://chromium.googlesource.com"]
        helper = googlesource
    [google "https://chromium.googlesource.com"]
        account = builder@my-project.iam.gserviceaccount.com

Modules:
    app: Console-script entry points for the four front-ends.
    models: Pydantic models shared across the package.
    gitconfig: git-config reader and the per-URL configuration resolver.
    auth: Token-source selection, reuse, and cookie adaptation.
    backends: Concrete token sources and the Secret Manager client.
    exceptions: Exception hierarchy with exit-code mapping.
    output: stdout/stderr discipline for the front-ends.
"""

__version__ = "0.3.0"
