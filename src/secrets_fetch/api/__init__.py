"""Doppler API operations."""

from secrets_fetch.api.doppler import DopplerClient, fetch, oidc_auth
from secrets_fetch.api.models import SecretRecord

__all__ = ["DopplerClient", "SecretRecord", "fetch", "oidc_auth"]
