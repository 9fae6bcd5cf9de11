"""Canonical Pydantic models shared across espoclient modules.

**Authentication variants** -- exactly one is active on a client at a
time: :class:`NoAuth`, :class:`BasicAuth`, :class:`ApiKeyAuth` and
:class:`HmacAuth`. They are frozen and discriminated by ``type`` so a
plain dict (e.g. loaded from JSON) validates into the right variant
through :data:`Auth`.

**Settings** -- :class:`ClientSettings` gathers everything needed to
build an :class:`~espoclient.client.sync_client.EspoClient`.
"""

from __future__ import annotations

from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, SecretStr

DEFAULT_API_PATH = "/api/v1/"
"""Path prefix prepended to every relative endpoint path."""

DEFAULT_TIMEOUT = 30.0
"""Default network timeout in seconds for the underlying HTTP client."""


# --- Auth variants ---


class NoAuth(BaseModel):
    """No credentials; requests are sent without an auth header."""

    model_config = ConfigDict(frozen=True)

    type: Literal["none"] = "none"


class BasicAuth(BaseModel):
    """HTTP Basic authentication with a username and password."""

    model_config = ConfigDict(frozen=True)

    type: Literal["basic"] = "basic"
    username: str
    password: SecretStr


class ApiKeyAuth(BaseModel):
    """API key sent verbatim in the ``X-Api-Key`` header."""

    model_config = ConfigDict(frozen=True)

    type: Literal["api_key"] = "api_key"
    api_key: str


class HmacAuth(BaseModel):
    """API key plus a secret used to sign each request with HMAC-SHA256.

    The secret itself never leaves the process; only the signature is
    sent, in the ``X-Hmac-Authorization`` header.
    """

    model_config = ConfigDict(frozen=True)

    type: Literal["hmac"] = "hmac"
    api_key: str
    secret_key: SecretStr


Auth = Annotated[
    Union[NoAuth, BasicAuth, ApiKeyAuth, HmacAuth],
    Field(discriminator="type"),
]


# --- Client settings ---


class ClientSettings(BaseModel):
    """Connection settings for an EspoCRM instance.

    Example::

        ClientSettings(
            base_url="https://crm.example.com",
            auth=ApiKeyAuth(api_key="..."),
        )
    """

    base_url: str = Field(description="Base URL of the EspoCRM instance")
    port: Optional[int] = Field(
        default=None, ge=1, le=65535, description="Override for the URL port"
    )
    api_path: str = Field(
        default=DEFAULT_API_PATH, description="Prefix prepended to endpoint paths"
    )
    timeout: float = Field(
        default=DEFAULT_TIMEOUT, gt=0, description="Request timeout in seconds"
    )
    verify_ssl: bool = Field(default=True, description="Verify TLS certificates")
    auth: Auth = Field(default_factory=NoAuth)
