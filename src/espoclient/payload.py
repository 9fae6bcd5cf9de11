"""Request payload shapes and their encoding.

A payload is one of a closed set of shapes, each wrapping the caller's
data and stating how it goes on the wire:

* :class:`Query` -- flat ``str -> str`` query parameters (GET only).
* :class:`Form` -- multi-value key/value pairs. Merged into the query
  string on GET, sent as ``application/x-www-form-urlencoded`` otherwise.
* :class:`Stream` -- a readable binary stream or an iterator of bytes,
  streamed through unmodified.
* :class:`Raw` -- bytes sent as-is.
* :class:`Text` -- a string sent as-is (UTF-8).
* :class:`Json` -- any JSON-serialisable value, including pydantic
  models and dataclasses, sent as ``application/json``.

Bare Python values are accepted too; :func:`as_payload` maps them onto
the shapes above so ``client.post("Lead", {"firstName": "John"})`` keeps
working without wrapping.
"""

from __future__ import annotations

import dataclasses
import json
from collections.abc import Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass
from operator import itemgetter
from typing import Any, Optional, Union

import httpx
from pydantic import BaseModel

from espoclient.exceptions import EspoError

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"
JSON_CONTENT_TYPE = "application/json"

_STREAM_CHUNK_SIZE = 64 * 1024


@dataclass(frozen=True)
class Query:
    """Flat query parameters; each key overwrites any existing value."""

    params: Mapping[str, str]


@dataclass(frozen=True)
class Form:
    """Multi-value key/value collection.

    Accepts anything :class:`httpx.QueryParams` accepts: a mapping of
    keys to a value or list of values, a sequence of ``(key, value)``
    pairs, or an existing ``QueryParams``.
    """

    fields: Any

    def items(self) -> list[tuple[str, str]]:
        return httpx.QueryParams(self.fields).multi_items()

    def encode(self) -> str:
        """Return the urlencoded form, keys sorted, value order kept."""
        return str(httpx.QueryParams(sorted(self.items(), key=itemgetter(0))))


@dataclass(frozen=True)
class Stream:
    """A body read from *source* as it is sent.

    *source* is either a file-like object with ``read()`` or an iterable
    of ``bytes`` chunks.
    """

    source: Any

    def chunks(self) -> Iterable[bytes]:
        read = getattr(self.source, "read", None)
        if read is None:
            return self.source
        return iter(lambda: read(_STREAM_CHUNK_SIZE), b"")


@dataclass(frozen=True)
class Raw:
    content: bytes


@dataclass(frozen=True)
class Text:
    content: str


@dataclass(frozen=True)
class Json:
    """A value serialised to JSON for the request body."""

    value: Any

    def encode(self) -> bytes:
        try:
            text = json.dumps(
                self.value,
                default=_json_default,
                separators=(",", ":"),
                ensure_ascii=False,
            )
        except (TypeError, ValueError) as exc:
            raise EspoError("failed to marshal data to JSON", exc) from exc
        return text.encode("utf-8")


Payload = Union[Query, Form, Stream, Raw, Text, Json]

_PAYLOAD_TYPES = (Query, Form, Stream, Raw, Text, Json)


@dataclass(frozen=True)
class EncodedBody:
    """Request body ready for :mod:`httpx` plus the content type it implies."""

    content: Union[bytes, Iterable[bytes], None] = None
    content_type: Optional[str] = None


def _json_default(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _is_pair_sequence(value: Any) -> bool:
    if isinstance(value, (str, bytes)) or not isinstance(value, Sequence):
        return False
    return all(
        isinstance(item, (tuple, list)) and len(item) == 2 and isinstance(item[0], str)
        for item in value
    )


def _unsupported_get(data: Any) -> EspoError:
    return EspoError(
        f"unsupported data type for GET query parameters: {type(data).__name__}"
    )


def as_payload(method: str, data: Any) -> Optional[Payload]:
    """Map *data* onto a payload shape for a *method* request.

    Explicit payload instances are returned unchanged. For bare values:

    * GET -- a ``str -> str`` mapping becomes :class:`Query`; a mapping
      with list values, a sequence of pairs, or ``httpx.QueryParams``
      becomes :class:`Form`. Anything else is rejected.
    * Other methods, first match wins -- readable objects and byte
      iterators become :class:`Stream`, bytes :class:`Raw`, ``str``
      :class:`Text`, ``httpx.QueryParams`` :class:`Form`, and everything
      else :class:`Json`.

    Raises:
        EspoError: If a GET payload is not a query-parameter shape.
    """
    if data is None or isinstance(data, _PAYLOAD_TYPES):
        return data

    if method == "GET":
        if isinstance(data, httpx.QueryParams) or _is_pair_sequence(data):
            return Form(data)
        if isinstance(data, Mapping) and all(isinstance(k, str) for k in data):
            values = list(data.values())
            if all(isinstance(v, str) for v in values):
                return Query(data)
            if all(
                isinstance(v, str)
                or (isinstance(v, Sequence) and all(isinstance(i, str) for i in v))
                for v in values
            ):
                return Form(data)
        raise _unsupported_get(data)

    if hasattr(data, "read") or isinstance(data, Iterator):
        return Stream(data)
    if isinstance(data, (bytes, bytearray, memoryview)):
        return Raw(bytes(data))
    if isinstance(data, str):
        return Text(data)
    if isinstance(data, httpx.QueryParams):
        return Form(data)
    return Json(data)


def merge_query(url: httpx.URL, payload: Payload) -> httpx.URL:
    """Merge a GET payload into the query string of *url*.

    :class:`Query` values replace existing values for the same key,
    :class:`Form` values are appended. The resulting query string is
    sorted by key so the same parameters always encode the same way.

    Raises:
        EspoError: If *payload* is not :class:`Query` or :class:`Form`.
    """
    params = url.params
    if isinstance(payload, Query):
        for key, value in payload.params.items():
            params = params.set(key, value)
    elif isinstance(payload, Form):
        for key, value in payload.items():
            params = params.add(key, value)
    else:
        raise _unsupported_get(payload)

    ordered = httpx.QueryParams(sorted(params.multi_items(), key=itemgetter(0)))
    return url.copy_with(params=ordered)


def encode_body(payload: Payload) -> EncodedBody:
    """Encode a non-GET payload into a request body.

    Raises:
        EspoError: For :class:`Query` payloads, which only apply to GET,
            or when JSON serialisation fails.
    """
    if isinstance(payload, Stream):
        return EncodedBody(content=payload.chunks())
    if isinstance(payload, Raw):
        return EncodedBody(content=payload.content)
    if isinstance(payload, Text):
        return EncodedBody(content=payload.content.encode("utf-8"))
    if isinstance(payload, Form):
        return EncodedBody(
            content=payload.encode().encode("ascii"), content_type=FORM_CONTENT_TYPE
        )
    if isinstance(payload, Json):
        return EncodedBody(content=payload.encode(), content_type=JSON_CONTENT_TYPE)
    raise EspoError("query parameters are only supported for GET requests")
