"""Immutable response wrapper returned by :class:`~espoclient.client.sync_client.EspoClient`.

The body is read completely before a :class:`Response` is built, so it
stays usable after the underlying connection is released. JSON decoding
happens on demand through :meth:`Response.parse_body`.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Optional, TypeVar, overload

import httpx
from pydantic import TypeAdapter, ValidationError

from espoclient.exceptions import EmptyBodyError, EspoError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Response:
    """Status, headers and raw body of a completed API call.

    Args:
        status_code: HTTP status code.
        content_type: Value of the ``Content-Type`` header (``""`` if absent).
        headers: Full response header set.
        body: Raw response body.
    """

    status_code: int
    content_type: str = ""
    headers: httpx.Headers = field(default_factory=httpx.Headers)
    body: bytes = b""

    @classmethod
    def from_httpx(cls, response: httpx.Response) -> Response:
        """Build from an :class:`httpx.Response` whose body has been read."""
        return cls(
            status_code=response.status_code,
            content_type=response.headers.get("content-type", ""),
            headers=httpx.Headers(response.headers),
            body=response.content,
        )

    @property
    def is_json(self) -> bool:
        """Whether the content type claims a JSON body."""
        return "application/json" in self.content_type.lower()

    @property
    def text(self) -> str:
        """The raw body as a string, byte for byte."""
        return self.body.decode("utf-8", errors="surrogateescape")

    @overload
    def parse_body(self) -> Any: ...

    @overload
    def parse_body(self, target: type[T]) -> T: ...

    def parse_body(self, target: Optional[Any] = None) -> Any:
        """Decode the JSON body.

        Decoding is attempted whatever the content type says; a non-JSON
        content type is only logged.

        Args:
            target: Optional type to decode into, e.g. a pydantic model,
                a dataclass or ``list[dict[str, Any]]``. Without it the
                plain decoded value is returned.

        Returns:
            The decoded body.

        Raises:
            EmptyBodyError: If the body is empty.
            EspoError: If the body is not valid JSON or does not fit
                *target*.
        """
        if not self.body:
            raise EmptyBodyError()

        if not self.is_json:
            logger.debug(
                "Decoding JSON from response with content type %r", self.content_type
            )

        try:
            if target is None:
                return json.loads(self.body)
            return TypeAdapter(target).validate_json(self.body)
        except (ValueError, ValidationError) as exc:
            raise EspoError("failed to parse JSON body", exc) from exc
