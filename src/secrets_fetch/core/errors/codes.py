"""Error kinds and the HTTP status ranges used for classification."""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    """Discriminant telling how a request failed.

    The classifier matches on this tag rather than on exception types.
    """

    API = "api"
    """The server answered with a non-success status code."""

    TRANSPORT = "transport"
    """The request never completed (DNS, connection, TLS, timeout)."""


STATUS_TOO_MANY_REQUESTS = 429

# Half-open range; 199 itself is not retried.
INFORMATIONAL_STATUS_RANGE = range(100, 199)

SERVER_ERROR_STATUS_RANGE = range(500, 600)
