"""espoclient -- HTTP client for the EspoCRM REST API.

The client composes request URLs under the API path prefix, signs or
authenticates each request (Basic, API key or HMAC), encodes the payload
according to its shape and wraps the answer in an immutable response
with JSON decoding helpers.

Typical usage::

    from espoclient import EspoClient, ResponseError

    client = EspoClient("https://crm.example.com").set_api_key("...")
    try:
        lead = client.post("Lead", {"firstName": "John"}).parse_body()
    except ResponseError as exc:
        print(exc.status_code, exc.reason, exc.response.text)

Modules:
    client: :class:`EspoClient` and :class:`Response`.
    auth: Auth header production, HMAC signing, variant precedence.
    payload: Request payload shapes and encoding.
    models: Pydantic models for auth variants and client settings.
    config: ``ESPO_*`` environment configuration.
    exceptions: Exception hierarchy.
"""

from espoclient.client import EspoClient, Response
from espoclient.exceptions import (
    ConfigError,
    EmptyBodyError,
    EspoClientError,
    EspoError,
    ResponseError,
)
from espoclient.models import (
    ApiKeyAuth,
    Auth,
    BasicAuth,
    ClientSettings,
    HmacAuth,
    NoAuth,
)
from espoclient.payload import Form, Json, Query, Raw, Stream, Text

__version__ = "0.1.0"

__all__ = [
    "ApiKeyAuth",
    "Auth",
    "BasicAuth",
    "ClientSettings",
    "ConfigError",
    "EmptyBodyError",
    "EspoClient",
    "EspoClientError",
    "EspoError",
    "Form",
    "HmacAuth",
    "Json",
    "NoAuth",
    "Query",
    "Raw",
    "Response",
    "ResponseError",
    "Stream",
    "Text",
]
