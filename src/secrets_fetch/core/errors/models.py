"""Exception types raised by the Doppler client."""

from __future__ import annotations

from typing import Any

from .codes import ErrorKind

_READ_ONLY_FIELDS = frozenset({"kind", "message", "status_code", "content_type"})


class SecretsFetchError(Exception):
    """Base class for all secrets-fetch errors."""


class DopplerApiError(SecretsFetchError):
    """A failed Doppler API request.

    Carries the status code and content type of the exact response that
    produced it, so the retry engine can classify the failure. Transport
    failures use ``ErrorKind.TRANSPORT`` and have neither field set.

    Instances are immutable once constructed.
    """

    kind: ErrorKind
    message: str
    status_code: int | None
    content_type: str | None

    def __init__(
        self,
        message: str,
        *,
        kind: ErrorKind = ErrorKind.API,
        status_code: int | None = None,
        content_type: str | None = None,
    ) -> None:
        super().__init__(message)
        object.__setattr__(self, "kind", kind)
        object.__setattr__(self, "message", message)
        object.__setattr__(self, "status_code", status_code)
        object.__setattr__(self, "content_type", content_type)

    def __setattr__(self, name: str, value: Any) -> None:
        # Traceback bookkeeping must stay writable for raise/except to work.
        if name in _READ_ONLY_FIELDS:
            raise AttributeError(f"{type(self).__name__}.{name} is read-only")
        super().__setattr__(name, value)

    def __reduce__(self) -> tuple[Any, ...]:
        # args holds only the message; the fields are passed back as keywords
        return (
            _rebuild_api_error,
            (type(self), self.message, self.kind, self.status_code, self.content_type),
        )

    @classmethod
    def from_response(
        cls,
        message: str,
        status_code: int,
        content_type: str | None,
    ) -> DopplerApiError:
        """Create an API error from a non-success HTTP response."""
        return cls(
            message,
            kind=ErrorKind.API,
            status_code=status_code,
            content_type=content_type,
        )

    @classmethod
    def transport(cls, message: str) -> DopplerApiError:
        """Create an error for a request that never got a response."""
        return cls(message, kind=ErrorKind.TRANSPORT)

    @property
    def is_transport(self) -> bool:
        return self.kind is ErrorKind.TRANSPORT

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(kind={self.kind.value!r}, "
            f"status_code={self.status_code!r}, content_type={self.content_type!r}, "
            f"message={self.message!r})"
        )


def _rebuild_api_error(
    cls: type[DopplerApiError],
    message: str,
    kind: ErrorKind,
    status_code: int | None,
    content_type: str | None,
) -> DopplerApiError:
    """Unpickle helper for DopplerApiError."""
    return cls(message, kind=kind, status_code=status_code, content_type=content_type)
