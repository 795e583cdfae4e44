"""Doppler API client: secrets fetch and OIDC token exchange.

Each operation is a single HTTP round-trip that either returns the decoded
success value or raises ``DopplerApiError``. Retries are layered on top by
``with_retry``; the single-shot methods never retry on their own.

Example usage:
    async with DopplerClient("api.doppler.com") as client:
        token = await client.oidc_auth(identity_id, oidc_token)
        secrets = await client.fetch_secrets(token, "backend", "prd")

    # Or one-off calls that manage the client themselves
    secrets = await fetch("dp.st.xxx", None, None, "api.doppler.com")
"""

from __future__ import annotations

import json
from functools import partial
from types import TracebackType

import httpx

from secrets_fetch import __version__
from secrets_fetch.api.models import OidcAuthRequest, OidcAuthResponse, SecretRecord, SecretsResponse
from secrets_fetch.core.config import ClientConfig
from secrets_fetch.core.constants import (
    BASE_DELAY_SECONDS,
    CONNECT_TIMEOUT_SECONDS,
    DEFAULT_API_HOST,
    DEFAULT_TIMEOUT_SECONDS,
    ERROR_PREFIX,
    JSON_CONTENT_TYPE,
    MAX_ATTEMPTS,
    OIDC_AUTH_PATH,
    SECRETS_PATH,
    USER_AGENT_PRODUCT,
)
from secrets_fetch.core.errors import DopplerApiError
from secrets_fetch.core.logging import OperationContext, get_logger, with_context
from secrets_fetch.execution.retry import with_retry

# Module-level logger
_logger = get_logger("api.doppler")

USER_AGENT = f"{USER_AGENT_PRODUCT}/{__version__}"


def _error_message(response: httpx.Response) -> str:
    """Extract a readable message from an error response.

    Uses the space-joined ``messages`` array when the body is JSON of the
    expected shape, otherwise falls back to the status line.
    """
    try:
        messages = response.json()["messages"]
    except (ValueError, KeyError, TypeError):
        # Upstream failures often come back as HTML or an empty body
        messages = None

    if isinstance(messages, list):
        return " ".join("" if m is None else str(m) for m in messages)
    return f"{response.status_code} {response.reason_phrase}"


def _api_error(response: httpx.Response) -> DopplerApiError:
    """Build the classified error for a non-200 response."""
    return DopplerApiError.from_response(
        f"{ERROR_PREFIX}{_error_message(response)}",
        status_code=response.status_code,
        content_type=response.headers.get("content-type"),
    )


def _transport_error(error: httpx.HTTPError) -> DopplerApiError:
    """Build the error for a request that never produced a response."""
    return DopplerApiError.transport(f"{ERROR_PREFIX}{type(error).__name__}: {error}")


class DopplerClient:
    """Async client for the Doppler API with built-in retries.

    Owns a lazily-created ``httpx.AsyncClient``; use it as an async context
    manager or call ``close()`` when done. Concurrent calls on one client are
    independent and share only the connection pool.
    """

    def __init__(
        self,
        api_host: str = DEFAULT_API_HOST,
        *,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        max_attempts: int = MAX_ATTEMPTS,
        base_delay: float = BASE_DELAY_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            api_host: Doppler API host, e.g. "api.doppler.com".
            timeout: Per-request timeout in seconds.
            max_attempts: Attempts per operation, first try included.
            base_delay: Base backoff delay in seconds.
            transport: Optional httpx transport (custom proxies, tests).
        """
        if not api_host:
            raise ValueError("api_host must not be empty")
        self.api_host = api_host
        self.timeout = timeout
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @classmethod
    def from_config(
        cls,
        config: ClientConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> DopplerClient:
        """Create a client from configuration."""
        return cls(
            config.api_host,
            timeout=config.timeout_seconds,
            max_attempts=config.retry.max_attempts,
            base_delay=config.retry.base_delay_seconds,
            transport=transport,
        )

    @property
    def base_url(self) -> str:
        return f"https://{self.api_host}"

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self.timeout, connect=CONNECT_TIMEOUT_SECONDS),
                headers={
                    "user-agent": USER_AGENT,
                    "accepts": JSON_CONTENT_TYPE,
                },
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Release HTTP client resources."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
        self._client = None

    async def __aenter__(self) -> DopplerClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # Single-attempt operations
    # ------------------------------------------------------------------

    async def _fetch_secrets_once(
        self,
        token: str,
        project: str | None = None,
        config: str | None = None,
    ) -> dict[str, SecretRecord]:
        """Fetch secrets with one request, without retrying.

        Project and config are only sent together; a lone value is dropped
        and the token's own scope applies.
        """
        params: dict[str, str] | None = None
        if project and config:
            params = {"project": project, "config": config}

        client = await self._get_client()
        try:
            response = await client.get(SECRETS_PATH, params=params, auth=(token, ""))
        except httpx.HTTPError as e:
            _logger.debug("request_transport_error", error=str(e))
            raise _transport_error(e) from e

        if response.status_code != 200:
            _logger.debug(
                "request_failed",
                status_code=response.status_code,
                content_type=response.headers.get("content-type"),
            )
            raise _api_error(response)

        data: SecretsResponse = response.json()
        return data["secrets"]

    async def _oidc_auth_once(self, identity_id: str, oidc_token: str) -> str:
        """Exchange an OIDC token with one request, without retrying."""
        payload: OidcAuthRequest = {"identity": identity_id, "token": oidc_token}
        body = json.dumps(payload, separators=(",", ":")).encode("utf-8")
        headers = {
            "Content-Type": JSON_CONTENT_TYPE,
            "Content-Length": str(len(body)),
        }

        client = await self._get_client()
        try:
            response = await client.post(OIDC_AUTH_PATH, content=body, headers=headers)
        except httpx.HTTPError as e:
            _logger.debug("request_transport_error", error=str(e))
            raise _transport_error(e) from e

        if response.status_code != 200:
            _logger.debug(
                "request_failed",
                status_code=response.status_code,
                content_type=response.headers.get("content-type"),
            )
            raise _api_error(response)

        data: OidcAuthResponse = response.json()
        return data["token"]

    # ------------------------------------------------------------------
    # Public operations (with retry)
    # ------------------------------------------------------------------

    async def fetch_secrets(
        self,
        token: str,
        project: str | None = None,
        config: str | None = None,
    ) -> dict[str, SecretRecord]:
        """Fetch all secrets of a config, retrying transient failures.

        Args:
            token: Doppler access token (service token or service account).
            project: Project slug; only used together with ``config``.
            config: Config name; only used together with ``project``.

        Returns:
            Mapping of secret name to its record.

        Raises:
            DopplerApiError: If the request fails for good.
        """
        ctx = OperationContext(operation="secrets_fetch", api_host=self.api_host)
        with with_context(ctx):
            secrets = await with_retry(
                partial(self._fetch_secrets_once, token, project, config),
                self.max_attempts,
                self.base_delay,
            )
            _logger.info("secrets_fetched", count=len(secrets))
            return secrets

    async def oidc_auth(self, identity_id: str, oidc_token: str) -> str:
        """Exchange an OIDC token for a short-lived service token.

        Args:
            identity_id: Doppler service account identity id.
            oidc_token: Identity token issued by the CI provider.

        Returns:
            The service token, unparsed.

        Raises:
            DopplerApiError: If the exchange fails for good.
        """
        ctx = OperationContext(operation="oidc_auth", api_host=self.api_host)
        with with_context(ctx):
            service_token = await with_retry(
                partial(self._oidc_auth_once, identity_id, oidc_token),
                self.max_attempts,
                self.base_delay,
            )
            _logger.info("oidc_exchange_complete")
            return service_token


async def fetch(
    doppler_token: str,
    doppler_project: str | None = None,
    doppler_config: str | None = None,
    api_domain: str = DEFAULT_API_HOST,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> dict[str, SecretRecord]:
    """Fetch secrets from the Doppler API with retry logic."""
    async with DopplerClient(api_domain, transport=transport) as client:
        return await client.fetch_secrets(doppler_token, doppler_project, doppler_config)


async def oidc_auth(
    identity_id: str,
    oidc_token: str,
    api_domain: str = DEFAULT_API_HOST,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> str:
    """Exchange an OIDC token for a short-lived Doppler service token with retry logic."""
    async with DopplerClient(api_domain, transport=transport) as client:
        return await client.oidc_auth(identity_id, oidc_token)
