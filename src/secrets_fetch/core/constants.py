"""Global constants for secrets-fetch.

Centralizes API paths, header values and retry defaults so they stay
consistent between the client, the CLI and the tests.
"""

# =============================================================================
# API Endpoints
# =============================================================================

DEFAULT_API_HOST = "api.doppler.com"
"""Doppler API host used when none is configured."""

SECRETS_PATH = "/v3/configs/config/secrets"
"""Endpoint returning every secret of a config."""

OIDC_AUTH_PATH = "/v3/auth/oidc"
"""Endpoint exchanging an OIDC token for a service token."""

USER_AGENT_PRODUCT = "secrets-fetch-github-action"
"""Product token sent in the user-agent header, followed by the version."""

JSON_CONTENT_TYPE = "application/json"

ERROR_PREFIX = "Doppler API Error: "
"""Prefix carried by every error message raised by the client."""

# =============================================================================
# Retry Defaults
# =============================================================================

# Mirrors the Doppler CLI's own HTTP retry settings.
MAX_ATTEMPTS = 5
"""Total attempts (first try included) before giving up."""

BASE_DELAY_SECONDS = 0.5
"""Base delay for exponential backoff; also the upper bound of the jitter."""

# =============================================================================
# HTTP Client Defaults
# =============================================================================

DEFAULT_TIMEOUT_SECONDS = 30.0
"""Per-request timeout for the underlying httpx client."""

CONNECT_TIMEOUT_SECONDS = 10.0
"""Connection establishment timeout."""
