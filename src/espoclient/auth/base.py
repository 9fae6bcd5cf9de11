"""Authentication header production and variant selection.

This module turns an :data:`~espoclient.models.Auth` variant into the
headers that must accompany a request:

- :class:`~espoclient.models.HmacAuth` -- ``X-Hmac-Authorization``
  signed over the method and path.
- :class:`~espoclient.models.ApiKeyAuth` -- ``X-Api-Key``.
- :class:`~espoclient.models.BasicAuth` -- ``Authorization: Basic ...``.
- :class:`~espoclient.models.NoAuth` -- nothing.

:func:`select_auth` resolves a set of loose credential fields into one
variant using the fixed precedence HMAC > API key > Basic.
"""

from __future__ import annotations

import base64
from typing import Optional

from espoclient.auth.signing import HMAC_HEADER, hmac_authorization
from espoclient.models import ApiKeyAuth, Auth, BasicAuth, HmacAuth, NoAuth

API_KEY_HEADER = "X-Api-Key"


class AuthResult:
    """Container for the headers an auth variant adds to a request.

    Args:
        headers: HTTP headers to add (e.g. ``{"X-Api-Key": "..."}``).
    """

    def __init__(self, headers: dict[str, str] | None = None):
        self.headers = headers or {}


def authenticate(auth: Auth, method: str, path: str) -> AuthResult:
    """Return the auth headers for a request.

    Args:
        auth: The active auth variant.
        method: Upper-case HTTP method, part of the HMAC canonical string.
        path: Caller-supplied endpoint path (without the API prefix).
    """
    if isinstance(auth, HmacAuth):
        value = hmac_authorization(
            auth.api_key, auth.secret_key.get_secret_value(), method, path
        )
        return AuthResult(headers={HMAC_HEADER: value})

    if isinstance(auth, ApiKeyAuth):
        return AuthResult(headers={API_KEY_HEADER: auth.api_key})

    if isinstance(auth, BasicAuth):
        raw = f"{auth.username}:{auth.password.get_secret_value()}"
        encoded = base64.b64encode(raw.encode("utf-8")).decode("ascii")
        return AuthResult(headers={"Authorization": f"Basic {encoded}"})

    return AuthResult()


def select_auth(
    username: Optional[str] = None,
    password: Optional[str] = None,
    api_key: Optional[str] = None,
    secret_key: Optional[str] = None,
) -> Auth:
    """Pick the auth variant implied by the populated credential fields.

    HMAC wins when both an API key and a secret are present, then a
    plain API key, then Basic (which needs both username and password).
    A secret without an API key, or a username without a password,
    yields :class:`~espoclient.models.NoAuth`.
    """
    if api_key is not None and secret_key is not None:
        return HmacAuth(api_key=api_key, secret_key=secret_key)
    if api_key is not None:
        return ApiKeyAuth(api_key=api_key)
    if username is not None and password is not None:
        return BasicAuth(username=username, password=password)
    return NoAuth()
