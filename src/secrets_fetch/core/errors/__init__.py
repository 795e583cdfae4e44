"""Error types and retry classification.

Re-exports all public symbols.
"""

from secrets_fetch.core.errors.codes import (
    INFORMATIONAL_STATUS_RANGE,
    SERVER_ERROR_STATUS_RANGE,
    STATUS_TOO_MANY_REQUESTS,
    ErrorKind,
)
from secrets_fetch.core.errors.models import DopplerApiError, SecretsFetchError
from secrets_fetch.core.errors.classifier import is_retriable_status, should_retry

__all__ = [
    "INFORMATIONAL_STATUS_RANGE",
    "SERVER_ERROR_STATUS_RANGE",
    "STATUS_TOO_MANY_REQUESTS",
    "ErrorKind",
    "DopplerApiError",
    "SecretsFetchError",
    "is_retriable_status",
    "should_retry",
]
