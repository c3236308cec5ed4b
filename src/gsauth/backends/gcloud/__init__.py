"""gcloud token backend.

Runs ``gcloud --format=json auth print-access-token [ACCOUNT]`` and parses
the JSON it prints.  Used for the ``gcloud`` account sentinel and for plain
Google account emails registered with ``gcloud auth login``.

See Also:
    :class:`~gsauth.backends.gcloud.source.GcloudTokenSource`
"""

from gsauth.backends.gcloud.source import (
    GcloudTokenSource,
    find_gcloud,
    format_gcloud_timestamp,
    parse_gcloud_timestamp,
)

__all__ = [
    "GcloudTokenSource",
    "find_gcloud",
    "format_gcloud_timestamp",
    "parse_gcloud_timestamp",
]
