"""HTTP client module for espoclient.

Classes:
    :class:`EspoClient` -- blocking client backed by :class:`httpx.Client`.
    :class:`Response` -- immutable, fully-read response.

Example::

    from espoclient.client import EspoClient

    with EspoClient("https://crm.example.com").set_api_key("...") as client:
        resp = client.get("Lead", {"maxSize": "10"})
"""

from espoclient.client.response import Response
from espoclient.client.sync_client import EspoClient

__all__ = ["EspoClient", "Response"]
