"""Tests for configuration loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from sharepoint_docid.config import DEFAULT_CACHE_DIR, Settings
from sharepoint_docid.models import AuthMode


class TestSettingsFromEnv:
    """Tests for Settings.from_env."""

    def test_defaults(self) -> None:
        """Test the defaults when nothing is set."""
        settings = Settings.from_env()

        assert settings.client_id is None
        assert settings.tenant_id == "organizations"
        assert settings.auth_mode is AuthMode.INTERACTIVE
        assert settings.cache_dir == DEFAULT_CACHE_DIR
        assert settings.timeout == 30.0

    def test_values_from_environment(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        """Test that every variable is read."""
        monkeypatch.setenv("SP_DOCID_CLIENT_ID", "client-id")
        monkeypatch.setenv("SP_DOCID_TENANT_ID", "contoso.onmicrosoft.com")
        monkeypatch.setenv("SP_DOCID_AUTH_MODE", "Web-Login")
        monkeypatch.setenv("SP_DOCID_CACHE_DIR", str(tmp_path))
        monkeypatch.setenv("SP_DOCID_TIMEOUT", "12.5")

        settings = Settings.from_env()

        assert settings.client_id == "client-id"
        assert settings.tenant_id == "contoso.onmicrosoft.com"
        assert settings.auth_mode is AuthMode.WEB_LOGIN
        assert settings.cache_dir == tmp_path
        assert settings.timeout == 12.5

    def test_invalid_auth_mode(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that an unknown auth mode raises ValueError."""
        monkeypatch.setenv("SP_DOCID_AUTH_MODE", "password")

        with pytest.raises(ValueError, match="SP_DOCID_AUTH_MODE"):
            Settings.from_env()

    def test_invalid_timeout(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that a non-numeric timeout raises ValueError."""
        monkeypatch.setenv("SP_DOCID_TIMEOUT", "soon")

        with pytest.raises(ValueError, match="SP_DOCID_TIMEOUT"):
            Settings.from_env()
