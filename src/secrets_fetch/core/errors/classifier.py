"""Retry classification for failed Doppler API requests.

Adapted from the Doppler CLI's HTTP retry policy:

- 429 Too Many Requests is always retried.
- 1xx informational responses are unexpected here and treated as transient.
- 5xx responses are retried only when the body is not JSON. A JSON body means
  the API itself produced a deliberate error; anything else (HTML error pages,
  empty bodies) points at load balancers or other upstream infrastructure.

Transport failures and foreign exceptions are never retried.
"""

from __future__ import annotations

from secrets_fetch.core.constants import JSON_CONTENT_TYPE

from .codes import (
    INFORMATIONAL_STATUS_RANGE,
    SERVER_ERROR_STATUS_RANGE,
    STATUS_TOO_MANY_REQUESTS,
    ErrorKind,
)
from .models import DopplerApiError


def is_retriable_status(status_code: int | None, content_type: str | None) -> bool:
    """Return True if a response with this status and content type may be retried.

    Args:
        status_code: HTTP status code of the failed response.
        content_type: Value of the response's content-type header, if any.

    Returns:
        True for rate limits, informational responses and non-JSON 5xx.
    """
    if status_code is None:
        return False
    if status_code == STATUS_TOO_MANY_REQUESTS:
        return True
    if status_code in INFORMATIONAL_STATUS_RANGE:
        return True
    if status_code in SERVER_ERROR_STATUS_RANGE:
        return not (content_type or "").startswith(JSON_CONTENT_TYPE)
    return False


def should_retry(error: BaseException) -> bool:
    """Decide whether the failure behind ``error`` is worth another attempt.

    Only API errors are considered; everything else, including transport
    failures, is final.
    """
    if not isinstance(error, DopplerApiError):
        return False
    if error.kind is not ErrorKind.API:
        return False
    return is_retriable_status(error.status_code, error.content_type)
