"""Exception hierarchy for espoclient.

All exceptions inherit from :class:`EspoClientError`. The two concrete
branches are disjoint so callers can tell whether a response is
available by checking the exception type:

Subclass hierarchy::

    EspoClientError
    +-- EspoError          local failure (bad URL, payload, transport, read)
    |   +-- EmptyBodyError
    |   +-- ConfigError
    +-- ResponseError      the API answered with a non-2xx status
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from espoclient.client.response import Response


class EspoClientError(Exception):
    """Base exception for all espoclient errors."""


class EspoError(EspoClientError):
    """A general client-side failure.

    Raised for anything that goes wrong before a complete response is
    available: malformed URLs, unsupported payloads, JSON serialisation,
    transport failures and body read failures. The underlying exception
    is kept in :attr:`cause` (and chained as ``__cause__`` by callers
    using ``raise ... from``).

    Args:
        message: Short description of what failed.
        cause: The underlying exception, if any.
    """

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        self.message = message
        self.cause = cause
        super().__init__(str(self))

    def __str__(self) -> str:
        if self.cause is not None:
            return f"espoclient: {self.message}: {self.cause}"
        return f"espoclient: {self.message}"


class EmptyBodyError(EspoError):
    """Raised when JSON decoding is requested on an empty response body."""

    def __init__(self, message: str = "response body is empty"):
        super().__init__(message)


class ConfigError(EspoError):
    """Raised for configuration problems (missing URL, bad credential sources)."""


class ResponseError(EspoClientError):
    """Raised when the API responds with a status outside ``[200, 300)``.

    The full :class:`~espoclient.client.response.Response` stays
    reachable through :attr:`response` so the caller can inspect the
    body and headers of the failed call.

    Args:
        response: The complete response returned by the server.
        reason: Value of the ``X-Status-Reason`` header, or ``""``.
    """

    def __init__(self, response: Response, reason: str = ""):
        self.response = response
        self.reason = reason
        super().__init__(str(self))

    @property
    def status_code(self) -> int:
        return self.response.status_code

    def __str__(self) -> str:
        if self.reason:
            return f"espoclient: API error (HTTP {self.response.status_code}): {self.reason}"
        return f"espoclient: API error (HTTP {self.response.status_code})"
