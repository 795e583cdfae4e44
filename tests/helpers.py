"""Shared test helpers for secrets-fetch tests."""

import json
from typing import Any

import httpx


def json_response(
    status_code: int,
    body: Any,
    content_type: str | None = "application/json",
) -> httpx.Response:
    """Build an httpx response; string bodies are sent verbatim."""
    content = body if isinstance(body, str) else json.dumps(body)
    headers = {"content-type": content_type} if content_type else {}
    return httpx.Response(status_code, content=content.encode("utf-8"), headers=headers)


class RecordingHandler:
    """httpx MockTransport handler replaying scripted responses.

    Each call returns the next scripted response (the last one repeats) and
    records the request so tests can assert on attempts, URLs, headers and
    bodies. Scripted exceptions are raised instead of returned.
    """

    def __init__(self, *responses: httpx.Response | Exception) -> None:
        self._responses = list(responses)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        index = min(len(self.requests), len(self._responses)) - 1
        response = self._responses[index]
        if isinstance(response, Exception):
            raise response
        # Fresh copy so a repeated response is never read twice
        return httpx.Response(
            response.status_code,
            headers=response.headers,
            content=response.content,
        )

    @property
    def call_count(self) -> int:
        return len(self.requests)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)
