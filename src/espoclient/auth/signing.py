"""HMAC request signing for the ``X-Hmac-Authorization`` header.

The server recomputes the signature over the same canonical string, so
the format below must match byte for byte::

    "<METHOD> /<path without its leading slash>"

The header value is base64 of ``"<api_key>:<base64 signature>"``.
"""

from __future__ import annotations

import base64
import hashlib
import hmac

HMAC_HEADER = "X-Hmac-Authorization"


def canonical_string(method: str, path: str) -> str:
    """Return the string that gets signed for *method* and *path*."""
    return f"{method} /{path.removeprefix('/')}"


def sign(secret_key: str, message: str) -> str:
    """Return the base64-encoded HMAC-SHA256 of *message* keyed by *secret_key*."""
    digest = hmac.new(
        secret_key.encode("utf-8"), message.encode("utf-8"), hashlib.sha256
    ).digest()
    return base64.b64encode(digest).decode("ascii")


def hmac_authorization(api_key: str, secret_key: str, method: str, path: str) -> str:
    """Build the ``X-Hmac-Authorization`` header value.

    Example::

        >>> hmac_authorization("K", "S", "GET", "Lead/123")  # doctest: +SKIP
        'SzpG...'
    """
    signature = sign(secret_key, canonical_string(method, path))
    return base64.b64encode(f"{api_key}:{signature}".encode("utf-8")).decode("ascii")
