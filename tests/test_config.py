"""Tests for espoclient.config — credential sources and ESPO_* settings."""

from __future__ import annotations

from pathlib import Path

import pytest

from espoclient.config import load_settings, resolve_credential
from espoclient.exceptions import ConfigError, EspoError
from espoclient.models import ApiKeyAuth, BasicAuth, ClientSettings, HmacAuth, NoAuth


# ---------------------------------------------------------------------------
# resolve_credential
# ---------------------------------------------------------------------------


class TestResolveCredential:
    def test_literal(self) -> None:
        assert resolve_credential("plain-value", {}) == "plain-value"

    def test_env(self) -> None:
        assert resolve_credential("env:MY_KEY", {"MY_KEY": "abc"}) == "abc"

    def test_env_missing(self) -> None:
        with pytest.raises(ConfigError, match="MY_KEY"):
            resolve_credential("env:MY_KEY", {})

    def test_env_defaults_to_os_environ(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ESPO_TEST_CREDENTIAL", "from-os")
        assert resolve_credential("env:ESPO_TEST_CREDENTIAL") == "from-os"

    def test_file(self, tmp_path: Path) -> None:
        secret = tmp_path / "secret.txt"
        secret.write_text("  s3cret\n", encoding="utf-8")
        assert resolve_credential(f"file:{secret}") == "s3cret"

    def test_file_missing(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="not found"):
            resolve_credential(f"file:{tmp_path / 'nope.txt'}")

    def test_config_error_is_espo_error(self) -> None:
        with pytest.raises(EspoError):
            resolve_credential("env:MISSING", {})


# ---------------------------------------------------------------------------
# load_settings
# ---------------------------------------------------------------------------


class TestLoadSettings:
    def test_minimal(self) -> None:
        settings = load_settings({"ESPO_URL": "https://crm.example.com"})
        assert settings == ClientSettings(base_url="https://crm.example.com")
        assert settings.api_path == "/api/v1/"
        assert settings.timeout == 30
        assert settings.verify_ssl is True
        assert settings.auth == NoAuth()

    def test_missing_url(self) -> None:
        with pytest.raises(ConfigError, match="ESPO_URL is not set"):
            load_settings({"ESPO_API_KEY": "k"})

    def test_empty_url_treated_as_missing(self) -> None:
        with pytest.raises(ConfigError):
            load_settings({"ESPO_URL": ""})

    def test_all_fields(self) -> None:
        settings = load_settings(
            {
                "ESPO_URL": "https://crm.example.com",
                "ESPO_PORT": "8443",
                "ESPO_API_PATH": "/api/v2/",
                "ESPO_TIMEOUT": "2.5",
                "ESPO_VERIFY_SSL": "false",
            }
        )
        assert settings.port == 8443
        assert settings.api_path == "/api/v2/"
        assert settings.timeout == 2.5
        assert settings.verify_ssl is False

    @pytest.mark.parametrize("name, value", [("ESPO_PORT", "abc"), ("ESPO_PORT", "70000"), ("ESPO_TIMEOUT", "-1")])
    def test_invalid_values(self, name: str, value: str) -> None:
        with pytest.raises(ConfigError, match="invalid client settings"):
            load_settings({"ESPO_URL": "https://crm.example.com", name: value})

    def test_invalid_bool(self) -> None:
        with pytest.raises(ConfigError, match="ESPO_VERIFY_SSL"):
            load_settings({"ESPO_URL": "https://crm.example.com", "ESPO_VERIFY_SSL": "maybe"})

    def test_basic_auth(self) -> None:
        settings = load_settings(
            {
                "ESPO_URL": "https://crm.example.com",
                "ESPO_USERNAME": "admin",
                "ESPO_PASSWORD": "pw",
            }
        )
        assert isinstance(settings.auth, BasicAuth)
        assert settings.auth.username == "admin"

    def test_api_key_beats_basic(self) -> None:
        settings = load_settings(
            {
                "ESPO_URL": "https://crm.example.com",
                "ESPO_USERNAME": "admin",
                "ESPO_PASSWORD": "pw",
                "ESPO_API_KEY": "k",
            }
        )
        assert settings.auth == ApiKeyAuth(api_key="k")

    def test_hmac_from_sources(self, tmp_path: Path) -> None:
        secret = tmp_path / "secret"
        secret.write_text("S\n", encoding="utf-8")
        settings = load_settings(
            {
                "ESPO_URL": "https://crm.example.com",
                "ESPO_API_KEY": "env:VAULT_KEY",
                "ESPO_SECRET_KEY": f"file:{secret}",
                "VAULT_KEY": "K",
            }
        )
        assert isinstance(settings.auth, HmacAuth)
        assert settings.auth.api_key == "K"
        assert settings.auth.secret_key.get_secret_value() == "S"

    def test_custom_prefix(self) -> None:
        settings = load_settings(
            {"CRM_URL": "https://crm.example.com", "CRM_API_KEY": "k"}, prefix="CRM_"
        )
        assert settings.auth == ApiKeyAuth(api_key="k")
