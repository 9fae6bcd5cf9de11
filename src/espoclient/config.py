"""Environment-driven configuration for :class:`~espoclient.client.sync_client.EspoClient`.

:func:`load_settings` reads ``ESPO_*`` variables into a
:class:`~espoclient.models.ClientSettings`:

=====================  ==============================================
Variable               Meaning
=====================  ==============================================
``ESPO_URL``           Base URL of the instance (required)
``ESPO_PORT``          Port override
``ESPO_API_PATH``      API path prefix (default ``/api/v1/``)
``ESPO_TIMEOUT``       Timeout in seconds (default 30)
``ESPO_VERIFY_SSL``    ``true``/``false`` (default ``true``)
``ESPO_USERNAME``      Basic auth username
``ESPO_PASSWORD``      Basic auth password
``ESPO_API_KEY``       API key
``ESPO_SECRET_KEY``    HMAC secret key
=====================  ==============================================

Credential variables may hold the value itself or a source descriptor
understood by :func:`resolve_credential` (``env:OTHER_VAR``,
``file:/path/to/secret``).
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from espoclient.auth.base import select_auth
from espoclient.exceptions import ConfigError
from espoclient.models import ClientSettings

DEFAULT_PREFIX = "ESPO_"

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off"})

# Variable suffix -> ClientSettings field, validated by pydantic.
_OPTIONAL_FIELDS = {"PORT": "port", "API_PATH": "api_path", "TIMEOUT": "timeout"}


def resolve_credential(source: str, environ: Optional[Mapping[str, str]] = None) -> str:
    """Resolve a credential from its source descriptor.

    Supported formats:
        - ``"env:VAR_NAME"`` -- reads ``VAR_NAME`` from the environment
        - ``"file:/path/to/file"`` -- reads file content, stripped of whitespace
        - anything else is returned unchanged

    Raises:
        ConfigError: If the variable is unset or the file can't be read.
    """
    env = os.environ if environ is None else environ

    if source.startswith("env:"):
        var_name = source[4:]
        value = env.get(var_name)
        if value is None:
            raise ConfigError(
                f"Environment variable '{var_name}' is not set (source: {source})"
            )
        return value

    if source.startswith("file:"):
        path = Path(source[5:]).expanduser()
        if not path.is_file():
            raise ConfigError(f"Credential file not found: {path} (source: {source})")
        try:
            return path.read_text(encoding="utf-8").strip()
        except OSError as exc:
            raise ConfigError(f"Cannot read credential file {path}", exc) from exc

    return source


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ConfigError(f"{name} must be a boolean, got {raw!r}")


def load_settings(
    environ: Optional[Mapping[str, str]] = None,
    prefix: str = DEFAULT_PREFIX,
) -> ClientSettings:
    """Build :class:`~espoclient.models.ClientSettings` from the environment.

    When several credentials are present the auth variant is chosen by
    :func:`~espoclient.auth.base.select_auth` (HMAC, then API key, then
    Basic).

    Args:
        environ: Mapping to read from; defaults to ``os.environ``.
        prefix: Variable name prefix.

    Raises:
        ConfigError: If the URL is missing or a value is invalid.
    """
    env = os.environ if environ is None else environ

    def get(name: str) -> Optional[str]:
        value = env.get(prefix + name)
        return value if value else None

    def credential(name: str) -> Optional[str]:
        value = get(name)
        return resolve_credential(value, env) if value is not None else None

    base_url = get("URL")
    if base_url is None:
        raise ConfigError(f"{prefix}URL is not set")

    fields: dict[str, object] = {
        "base_url": base_url,
        "auth": select_auth(
            username=credential("USERNAME"),
            password=credential("PASSWORD"),
            api_key=credential("API_KEY"),
            secret_key=credential("SECRET_KEY"),
        ),
    }
    for var_name, field_name in _OPTIONAL_FIELDS.items():
        value = get(var_name)
        if value is not None:
            fields[field_name] = value

    verify = get("VERIFY_SSL")
    if verify is not None:
        fields["verify_ssl"] = _parse_bool(prefix + "VERIFY_SSL", verify)

    try:
        return ClientSettings.model_validate(fields)
    except ValidationError as exc:
        raise ConfigError("invalid client settings", exc) from exc
