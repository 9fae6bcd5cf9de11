"""Authentication for EspoCRM requests.

See :mod:`espoclient.auth.base` for header production and precedence,
and :mod:`espoclient.auth.signing` for the HMAC scheme.
"""

from espoclient.auth.base import API_KEY_HEADER, AuthResult, authenticate, select_auth
from espoclient.auth.signing import HMAC_HEADER, hmac_authorization

__all__ = [
    "API_KEY_HEADER",
    "HMAC_HEADER",
    "AuthResult",
    "authenticate",
    "hmac_authorization",
    "select_auth",
]
