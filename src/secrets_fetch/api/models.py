"""Typed request/response shapes of the Doppler API."""

from __future__ import annotations

from typing import TypedDict


class SecretRecord(TypedDict, total=False):
    """A single secret as returned by the secrets endpoint.

    Only ``computed`` and ``computedVisibility`` are relied upon; any other
    keys the API sends are passed through untouched.
    """

    raw: str
    computed: str
    note: str
    rawVisibility: str
    computedVisibility: str  # "masked", "unmasked" or "restricted"


class SecretsResponse(TypedDict):
    """Body of a successful ``GET /v3/configs/config/secrets``."""

    secrets: dict[str, SecretRecord]


class OidcAuthRequest(TypedDict):
    """Body of ``POST /v3/auth/oidc``."""

    identity: str
    token: str


class OidcAuthResponse(TypedDict):
    """Body of a successful ``POST /v3/auth/oidc``."""

    token: str


class ErrorResponse(TypedDict):
    """Body of an error response."""

    messages: list[str]
