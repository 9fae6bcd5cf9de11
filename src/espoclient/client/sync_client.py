"""Synchronous EspoCRM API client.

This module provides :class:`EspoClient`, a thin blocking client that
wraps :class:`httpx.Client` and layers on:

- **URL composition** -- endpoint paths are resolved against the base
  URL under the API path prefix (``/api/v1/`` by default).
- **Auth injection** -- one :data:`~espoclient.models.Auth` variant
  (none, Basic, API key or HMAC) produces the auth header of every
  request.
- **Payload encoding** -- query parameters for GET, a body for other
  methods, see :mod:`espoclient.payload`.
- **Error mapping** -- transport problems raise
  :class:`~espoclient.exceptions.EspoError`, non-2xx answers raise
  :class:`~espoclient.exceptions.ResponseError` carrying the response.

Each call is a single attempt: there is no retry, caching or rate
limiting. A configured client can be shared between threads as long as
its configuration is not changed while requests are in flight.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Optional

import httpx

from espoclient.auth.base import authenticate
from espoclient.client.response import Response
from espoclient.exceptions import EspoError, ResponseError
from espoclient.models import (
    DEFAULT_API_PATH,
    DEFAULT_TIMEOUT,
    ApiKeyAuth,
    Auth,
    BasicAuth,
    ClientSettings,
    HmacAuth,
    NoAuth,
)
from espoclient.payload import as_payload, encode_body, merge_query

logger = logging.getLogger(__name__)

STATUS_REASON_HEADER = "X-Status-Reason"


def _strip_slash(value: str) -> str:
    return value[1:] if value.startswith("/") else value


class EspoClient:
    """Client for the EspoCRM REST API.

    Args:
        base_url: Base URL of the instance, e.g. ``"https://crm.example.com"``.
            A trailing slash is added when missing.
        port: Optional port overriding the one in *base_url*.
        api_path: Prefix prepended to every endpoint path.
        timeout: Timeout in seconds for the default HTTP client.
        verify_ssl: Verify TLS certificates in the default HTTP client.
        auth: Initial auth variant; defaults to no authentication.
        http_client: Use this :class:`httpx.Client` instead of building
            one. *timeout* and *verify_ssl* are then ignored.

    Raises:
        EspoError: If *base_url* cannot be parsed or lacks a scheme or host.

    Example::

        client = EspoClient("https://crm.example.com").set_api_key("...")
        with client:
            lead = client.post("Lead", {"firstName": "John"}).parse_body()
    """

    def __init__(
        self,
        base_url: str,
        port: Optional[int] = None,
        *,
        api_path: str = DEFAULT_API_PATH,
        timeout: float = DEFAULT_TIMEOUT,
        verify_ssl: bool = True,
        auth: Optional[Auth] = None,
        http_client: Optional[httpx.Client] = None,
    ) -> None:
        if not base_url.endswith("/"):
            base_url += "/"
        try:
            url = httpx.URL(base_url)
            if port is not None:
                url = url.copy_with(port=port)
        except (httpx.InvalidURL, TypeError, ValueError) as exc:
            raise EspoError("invalid base URL", exc) from exc
        if not url.scheme or not url.host:
            raise EspoError(f"invalid base URL: {base_url!r} needs a scheme and host")

        self._base_url = url
        self._api_path = api_path
        self._auth: Auth = auth if auth is not None else NoAuth()
        # Secret set before any API key; applied by the next set_api_key().
        self._pending_secret: Optional[str] = None
        self._http = http_client or httpx.Client(
            timeout=timeout,
            verify=verify_ssl,
            follow_redirects=True,
        )

    @classmethod
    def from_settings(cls, settings: ClientSettings) -> EspoClient:
        """Build a client from :class:`~espoclient.models.ClientSettings`."""
        return cls(
            settings.base_url,
            settings.port,
            api_path=settings.api_path,
            timeout=settings.timeout,
            verify_ssl=settings.verify_ssl,
            auth=settings.auth,
        )

    @classmethod
    def from_env(cls, prefix: str = "ESPO_") -> EspoClient:
        """Build a client from ``ESPO_*`` environment variables.

        See :func:`espoclient.config.load_settings` for the variables read.
        """
        from espoclient.config import load_settings

        return cls.from_settings(load_settings(prefix=prefix))

    # ------------------------------------------------------------------ #
    # Context manager
    # ------------------------------------------------------------------ #

    def __enter__(self) -> EspoClient:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def close(self) -> None:
        """Close the underlying HTTP client and its pooled connections."""
        self._http.close()

    # ------------------------------------------------------------------ #
    # Configuration
    # ------------------------------------------------------------------ #

    @property
    def base_url(self) -> httpx.URL:
        return self._base_url

    @property
    def api_path(self) -> str:
        return self._api_path

    @property
    def auth(self) -> Auth:
        """The auth variant applied to every request."""
        return self._auth

    @property
    def http_client(self) -> httpx.Client:
        return self._http

    def set_http_client(self, http_client: httpx.Client) -> EspoClient:
        """Replace the underlying :class:`httpx.Client`.

        Use this for custom timeouts, proxies, TLS settings or a mock
        transport. The previous client is not closed.
        """
        self._http = http_client
        return self

    def set_auth(self, auth: Auth) -> EspoClient:
        """Install *auth* as the only active authentication."""
        self._auth = auth
        self._pending_secret = None
        return self

    def set_basic_auth(self, username: str, password: str) -> EspoClient:
        """Use HTTP Basic auth; any API key or secret key is dropped."""
        return self.set_auth(BasicAuth(username=username, password=password))

    def set_api_key(self, api_key: str) -> EspoClient:
        """Use API key auth; upgrades to HMAC if a secret key is already set.

        Username and password are dropped, a stored secret key is kept.
        """
        secret = self._pending_secret
        if isinstance(self._auth, HmacAuth):
            secret = self._auth.secret_key.get_secret_value()

        if secret is not None:
            self._auth = HmacAuth(api_key=api_key, secret_key=secret)
        else:
            self._auth = ApiKeyAuth(api_key=api_key)
        self._pending_secret = None
        return self

    def set_secret_key(self, secret_key: str) -> EspoClient:
        """Set the HMAC secret; upgrades an API key to HMAC auth.

        Username and password are dropped, a stored API key is kept.
        Without an API key the secret waits for :meth:`set_api_key` and
        requests are sent unauthenticated meanwhile.
        """
        if isinstance(self._auth, (ApiKeyAuth, HmacAuth)):
            self._auth = HmacAuth(api_key=self._auth.api_key, secret_key=secret_key)
            self._pending_secret = None
        else:
            self._auth = NoAuth()
            self._pending_secret = secret_key
        return self

    # ------------------------------------------------------------------ #
    # Public request methods
    # ------------------------------------------------------------------ #

    def request(
        self,
        method: str,
        path: str,
        data: Any = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> Response:
        """Send a request to the EspoCRM API.

        Args:
            method: HTTP method, e.g. ``"GET"`` or ``"POST"``.
            path: Endpoint path relative to the API prefix, e.g.
                ``"Lead"`` or ``"Account/some-id"``. May carry a query string.
            data: Request payload. A :mod:`espoclient.payload` shape, or
                a bare value: for GET a mapping of query parameters; for
                other methods a stream, bytes, ``str``,
                ``httpx.QueryParams`` (form) or anything JSON-serialisable.
            headers: Extra headers. They override headers of the same
                name set by the client, including the auth header and
                the inferred ``Content-Type``.

        Returns:
            The :class:`~espoclient.client.response.Response` of a 2xx answer.

        Raises:
            EspoError: On an invalid path or payload, a JSON encoding
                failure, a transport failure, or a body read failure.
            ResponseError: When the status code is outside ``[200, 300)``.
        """
        method = method.upper()

        # 1. Compose URL
        url = self._compose_url(path)

        # 2. Encode payload
        payload = as_payload(method, data)
        content: Any = None
        content_type: Optional[str] = None
        if payload is not None:
            if method == "GET":
                url = merge_query(url, payload)
            else:
                body = encode_body(payload)
                content, content_type = body.content, body.content_type

        # 3. Headers: auth first so caller headers can override it
        merged_headers = httpx.Headers(authenticate(self._auth, method, path).headers)
        for name, value in (headers or {}).items():
            merged_headers[name] = value
        if content_type is not None and "Content-Type" not in merged_headers:
            merged_headers["Content-Type"] = content_type

        # 4. Execute
        logger.debug("%s %s", method, url)
        response = self._send(method, url, merged_headers, content)
        logger.debug("%s %s -> HTTP %d", method, url, response.status_code)

        # 5. Classify
        if not 200 <= response.status_code < 300:
            raise ResponseError(
                response, reason=response.headers.get(STATUS_REASON_HEADER, "")
            )
        return response

    def get(self, path: str, params: Any = None, **kwargs: Any) -> Response:
        """Send a GET request with optional query parameters."""
        return self.request("GET", path, params, **kwargs)

    def post(self, path: str, data: Any = None, **kwargs: Any) -> Response:
        """Send a POST request."""
        return self.request("POST", path, data, **kwargs)

    def put(self, path: str, data: Any = None, **kwargs: Any) -> Response:
        """Send a PUT request."""
        return self.request("PUT", path, data, **kwargs)

    def patch(self, path: str, data: Any = None, **kwargs: Any) -> Response:
        """Send a PATCH request."""
        return self.request("PATCH", path, data, **kwargs)

    def delete(self, path: str, data: Any = None, **kwargs: Any) -> Response:
        """Send a DELETE request."""
        return self.request("DELETE", path, data, **kwargs)

    def options(self, path: str, data: Any = None, **kwargs: Any) -> Response:
        """Send an OPTIONS request."""
        return self.request("OPTIONS", path, data, **kwargs)

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _compose_url(self, path: str) -> httpx.URL:
        """Resolve *path* under the API prefix against the base URL."""
        relative = _strip_slash(self._api_path) + _strip_slash(path)
        try:
            reference = httpx.URL(relative)
        except httpx.InvalidURL as exc:
            raise EspoError("invalid API path", exc) from exc
        if reference.scheme or reference.host:
            raise EspoError(f"invalid API path: {relative!r} is not a relative reference")
        return self._base_url.join(reference)

    def _send(
        self,
        method: str,
        url: httpx.URL,
        headers: httpx.Headers,
        content: Any,
    ) -> Response:
        """Send the request and read the whole body before returning."""
        request = self._http.build_request(method, url, headers=headers, content=content)
        try:
            raw = self._http.send(request, stream=True)
        except httpx.HTTPError as exc:
            raise EspoError("HTTP request execution failed", exc) from exc

        try:
            raw.read()
        except (httpx.HTTPError, httpx.StreamError) as exc:
            raise EspoError("failed to read response body", exc) from exc
        finally:
            raw.close()

        return Response.from_httpx(raw)
