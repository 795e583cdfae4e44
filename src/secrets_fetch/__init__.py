"""secrets-fetch - async client for the Doppler secrets API.

Fetches config secrets and exchanges OIDC identity tokens for short-lived
service tokens, retrying transient failures with exponential backoff.
"""

__version__ = "1.3.0"

from secrets_fetch.api.doppler import DopplerClient, fetch, oidc_auth  # noqa: E402
from secrets_fetch.core.errors import DopplerApiError, ErrorKind  # noqa: E402

__all__ = [
    "DopplerApiError",
    "DopplerClient",
    "ErrorKind",
    "__version__",
    "fetch",
    "oidc_auth",
]
